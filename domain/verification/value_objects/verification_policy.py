"""验证策略值对象"""

from dataclasses import dataclass
from datetime import timedelta

from domain.common.base_value_object import BaseValueObject
from domain.common.exceptions import InvalidValueObjectException


@dataclass(frozen=True)
class VerificationPolicy(BaseValueObject):
    """
    验证策略配置

    构造时显式传入 VerificationService，不依赖全局配置。

    Attributes:
        code_length: 验证码位数
        ttl_seconds: 验证码有效期（秒）
        max_attempts: 最大错误次数
        reissue_interval_seconds: 最短重发间隔（秒）
        delivery_timeout_seconds: 投递超时（秒）
    """

    code_length: int = 6
    ttl_seconds: int = 600
    max_attempts: int = 5
    reissue_interval_seconds: int = 60
    delivery_timeout_seconds: float = 10.0

    def validate(self) -> None:
        """验证策略参数"""
        if not 4 <= self.code_length <= 10:
            raise InvalidValueObjectException(
                value_object_type="VerificationPolicy",
                value=self.code_length,
                reason="code_length must be between 4 and 10",
            )
        if self.ttl_seconds <= 0:
            raise InvalidValueObjectException(
                value_object_type="VerificationPolicy",
                value=self.ttl_seconds,
                reason="ttl_seconds must be positive",
            )
        if self.max_attempts < 1:
            raise InvalidValueObjectException(
                value_object_type="VerificationPolicy",
                value=self.max_attempts,
                reason="max_attempts must be at least 1",
            )
        if self.reissue_interval_seconds < 0:
            raise InvalidValueObjectException(
                value_object_type="VerificationPolicy",
                value=self.reissue_interval_seconds,
                reason="reissue_interval_seconds cannot be negative",
            )
        if self.delivery_timeout_seconds <= 0:
            raise InvalidValueObjectException(
                value_object_type="VerificationPolicy",
                value=self.delivery_timeout_seconds,
                reason="delivery_timeout_seconds must be positive",
            )

    @property
    def ttl(self) -> timedelta:
        return timedelta(seconds=self.ttl_seconds)

    @property
    def reissue_interval(self) -> timedelta:
        return timedelta(seconds=self.reissue_interval_seconds)
