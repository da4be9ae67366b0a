"""内存用户目录"""

import threading
from datetime import datetime, timezone
from typing import Dict

from domain.verification.services.user_directory import UserDirectory


class InMemoryUserDirectory(UserDirectory):
    """内存用户目录，记录号码与验证时间"""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._verified: Dict[str, datetime] = {}

    def mark_verified(self, destination: str) -> None:
        with self._lock:
            self._verified[destination] = datetime.now(timezone.utc)
