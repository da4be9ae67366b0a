"""内存验证记录存储"""

import copy
import threading
from datetime import datetime
from typing import Dict, Optional

from domain.common.exceptions import VerificationNotFoundException
from domain.verification.entities.pending_verification import PendingVerification
from domain.verification.repositories.verification_store import VerificationStore


class InMemoryVerificationStore(VerificationStore):
    """
    内存验证记录存储

    单进程部署和测试使用。所有操作在同一把锁内完成，彼此原子。
    读取返回副本，调用方修改实体不会影响存储内容。
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: Dict[str, PendingVerification] = {}

    def put(self, record: PendingVerification) -> None:
        with self._lock:
            self._records[record.destination] = copy.copy(record)

    def get(self, destination: str, now: datetime) -> Optional[PendingVerification]:
        with self._lock:
            record = self._records.get(destination)
            if record is None or record.is_expired(now):
                return None
            return copy.copy(record)

    def increment_attempts(self, destination: str, now: datetime) -> int:
        with self._lock:
            record = self._records.get(destination)
            if record is None or record.is_expired(now) or record.is_exhausted:
                raise VerificationNotFoundException(destination)
            return record.register_failed_attempt()

    def delete(self, destination: str) -> bool:
        with self._lock:
            return self._records.pop(destination, None) is not None

    def purge_expired(self, now: datetime) -> int:
        with self._lock:
            expired = [key for key, record in self._records.items() if record.is_expired(now)]
            for key in expired:
                del self._records[key]
            return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
