"""验证码投递网关接口"""

from dataclasses import dataclass
from typing import Optional, Protocol

from domain.verification.value_objects.delivery_channel import DeliveryChannel


@dataclass
class DeliveryResult:
    """投递结果

    Attributes:
        success: 供应商是否已受理
        message_id: 供应商返回的消息 ID
        error_message: 错误信息（失败时）
    """

    success: bool
    message_id: Optional[str] = None
    error_message: str = ""


class DeliveryGateway(Protocol):
    """验证码投递网关接口

    任意短信/语音/邮件供应商都实现此接口。
    失败必须通过返回值或异常显式暴露，不能静默吞掉。
    """

    def deliver(
        self, destination: str, code: str, channel: DeliveryChannel
    ) -> DeliveryResult:
        """投递验证码

        Args:
            destination: 目标号码或地址
            code: 明文验证码
            channel: 投递渠道

        Returns:
            DeliveryResult 投递结果
        """
        ...
