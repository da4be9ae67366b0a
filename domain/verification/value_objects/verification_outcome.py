"""验证结果值对象"""

from enum import Enum


class VerificationOutcome(str, Enum):
    """签发/校验的结果

    所有结果都以返回值的形式交给调用方，核心服务不抛出这些情况。

    Attributes:
        ISSUED: 验证码已生成并投递
        VERIFIED: 校验通过（验证码已作废）
        VALIDATION_ERROR: 目标或验证码格式错误
        TOO_MANY_REQUESTS: 重发间隔内再次请求
        DELIVERY_FAILED: 投递网关失败或超时
        EXPIRED: 记录不存在或已过期
        INVALID: 验证码错误，仍可重试
        EXHAUSTED: 错误次数达到上限，记录已作废
        STORE_UNAVAILABLE: 底层存储不可用
    """

    ISSUED = "issued"
    VERIFIED = "verified"
    VALIDATION_ERROR = "validation_error"
    TOO_MANY_REQUESTS = "too_many_requests"
    DELIVERY_FAILED = "delivery_failed"
    EXPIRED = "expired"
    INVALID = "invalid"
    EXHAUSTED = "exhausted"
    STORE_UNAVAILABLE = "store_unavailable"

    @property
    def is_success(self) -> bool:
        """是否为成功结果"""
        return self in (VerificationOutcome.ISSUED, VerificationOutcome.VERIFIED)

    @property
    def error_code(self) -> str:
        """对外错误码（大写形式）"""
        return self.value.upper()
