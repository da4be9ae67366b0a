"""投递渠道值对象"""

from enum import Enum


class DeliveryChannel(str, Enum):
    """验证码投递渠道

    Attributes:
        SMS: 短信
        CALL: 语音电话
        EMAIL: 电子邮件
    """

    SMS = "sms"
    CALL = "call"
    EMAIL = "email"

    @property
    def is_phone(self) -> bool:
        """是否为电话号码类渠道"""
        return self in (DeliveryChannel.SMS, DeliveryChannel.CALL)
