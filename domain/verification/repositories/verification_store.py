"""验证记录存储接口"""

from datetime import datetime
from typing import Optional, Protocol

from domain.verification.entities.pending_verification import PendingVerification


class VerificationStore(Protocol):
    """验证记录存储接口

    以目标号码为键保存待验证记录。
    同一目标号码上的各操作彼此线性一致（不丢失更新）。
    存储无法访问时抛出 StoreUnavailableException。
    """

    def put(self, record: PendingVerification) -> None:
        """保存记录，覆盖该目标号码已有的记录

        Args:
            record: 待验证记录
        """
        ...

    def get(self, destination: str, now: datetime) -> Optional[PendingVerification]:
        """获取有效记录

        Args:
            destination: 目标号码
            now: 当前时间（用于惰性过期判断）

        Returns:
            有效记录；不存在或已过期返回 None
        """
        ...

    def increment_attempts(self, destination: str, now: datetime) -> int:
        """失败次数加一

        Args:
            destination: 目标号码
            now: 当前时间

        Returns:
            递增后的失败次数

        Raises:
            VerificationNotFoundException: 没有有效记录
        """
        ...

    def delete(self, destination: str) -> bool:
        """删除记录（幂等）

        Args:
            destination: 目标号码

        Returns:
            如果确实删除了记录返回 True，否则返回 False
        """
        ...

    def purge_expired(self, now: datetime) -> int:
        """清理所有已过期的记录

        Args:
            now: 当前时间

        Returns:
            删除的记录数
        """
        ...
