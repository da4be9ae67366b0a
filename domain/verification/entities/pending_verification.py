"""待验证记录实体"""

import hmac
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional

from domain.common.base_entity import BaseEntity
from domain.common.exceptions import InvalidOperationException
from domain.verification.value_objects.delivery_channel import DeliveryChannel
from domain.verification.value_objects.verification_policy import VerificationPolicy


@dataclass(eq=False)
class PendingVerification(BaseEntity):
    """待验证记录实体

    表示某个目标号码当前有效的一次性验证码。
    每个目标号码同一时间最多只有一条有效记录，由 VerificationStore 独占管理。

    Attributes:
        destination: 目标号码（唯一键）
        code_hash: 验证码的 HMAC 摘要，不保存明文
        channel: 投递渠道
        issued_at: 签发时间
        expires_at: 过期时间（issued_at + TTL）
        attempts: 已失败的校验次数
        max_attempts: 最大失败次数
    """

    destination: str = field(default="")
    code_hash: str = field(default="")
    channel: DeliveryChannel = field(default=DeliveryChannel.SMS)
    issued_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    expires_at: Optional[datetime] = field(default=None)
    attempts: int = field(default=0)
    max_attempts: int = field(default=5)

    def __post_init__(self) -> None:
        if self.expires_at is None:
            self.expires_at = self.issued_at + VerificationPolicy().ttl

    @classmethod
    def issue(
        cls,
        destination: str,
        code_hash: str,
        channel: DeliveryChannel,
        policy: VerificationPolicy,
        now: datetime,
    ) -> "PendingVerification":
        """工厂方法：签发新的待验证记录

        Args:
            destination: 目标号码
            code_hash: 验证码摘要
            channel: 投递渠道
            policy: 验证策略（TTL、最大次数）
            now: 当前时间

        Returns:
            attempts=0 的新记录
        """
        return cls(
            destination=destination,
            code_hash=code_hash,
            channel=channel,
            issued_at=now,
            expires_at=now + policy.ttl,
            attempts=0,
            max_attempts=policy.max_attempts,
            created_at=now,
        )

    def is_expired(self, now: datetime) -> bool:
        """是否已过期（过期记录视为不存在）"""
        return now > self.expires_at

    @property
    def is_exhausted(self) -> bool:
        """失败次数是否已达上限"""
        return self.attempts >= self.max_attempts

    @property
    def attempts_remaining(self) -> int:
        return max(self.max_attempts - self.attempts, 0)

    def matches(self, candidate_hash: str) -> bool:
        """常量时间比较验证码摘要"""
        return hmac.compare_digest(self.code_hash, candidate_hash)

    def register_failed_attempt(self) -> int:
        """记录一次失败校验

        Returns:
            递增后的失败次数

        Raises:
            InvalidOperationException: 已达到最大次数
        """
        if self.is_exhausted:
            raise InvalidOperationException(
                operation="register_failed_attempt",
                reason="Maximum attempts already reached",
            )
        self.attempts += 1
        self.update_timestamp()
        return self.attempts

    def retry_after(self, now: datetime, reissue_interval: timedelta) -> float:
        """距离允许重发还需等待的秒数，0 表示可以重发"""
        remaining = (self.issued_at + reissue_interval - now).total_seconds()
        return max(remaining, 0.0)
