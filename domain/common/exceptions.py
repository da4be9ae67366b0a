"""领域异常"""

from typing import Any, Optional

from domain.common.masking import mask_destination


class DomainException(Exception):
    """领域异常基类"""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidValueObjectException(DomainException):
    """值对象无效"""

    def __init__(self, value_object_type: str, value: Any, reason: str):
        self.value_object_type = value_object_type
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {value_object_type}: {reason}")


class InvalidOperationException(DomainException):
    """非法操作"""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Invalid operation '{operation}': {reason}")


class VerificationNotFoundException(DomainException):
    """目标号码没有有效的待验证记录"""

    def __init__(self, destination: str):
        self.destination = destination
        super().__init__(f"No active verification for {mask_destination(destination)}")


class StoreUnavailableException(DomainException):
    """验证存储不可用（底层存储无法访问）"""

    def __init__(self, reason: str, cause: Optional[BaseException] = None):
        self.reason = reason
        self.cause = cause
        super().__init__(f"Verification store unavailable: {reason}")


class DeliveryFailedException(DomainException):
    """验证码投递失败"""

    def __init__(self, channel: str, reason: str):
        self.channel = channel
        self.reason = reason
        super().__init__(f"Delivery via {channel} failed: {reason}")
