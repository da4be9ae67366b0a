"""验证目标值对象"""

import re
from dataclasses import dataclass

from domain.common.base_value_object import BaseValueObject
from domain.common.exceptions import InvalidValueObjectException
from domain.verification.value_objects.delivery_channel import DeliveryChannel

# E.164：+ 号后 8-15 位 ASCII 数字，首位非 0
_PHONE_PATTERN = re.compile(r"^\+[1-9][0-9]{7,14}$")
_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass(frozen=True)
class Destination(BaseValueObject):
    """
    验证目标（手机号或邮箱地址）

    只做基本格式检查，不校验号码是否真实存在。

    Attributes:
        value: 规范化后的目标字符串
        channel: 投递渠道，决定格式规则
    """

    value: str
    channel: DeliveryChannel = DeliveryChannel.SMS

    def validate(self) -> None:
        """验证目标格式"""
        if not self.value:
            raise InvalidValueObjectException(
                value_object_type="Destination",
                value=self.value,
                reason="Destination cannot be empty",
            )

        if self.channel.is_phone:
            if not _PHONE_PATTERN.match(self.value):
                raise InvalidValueObjectException(
                    value_object_type="Destination",
                    value=self.value,
                    reason="Phone number must be in E.164 format (e.g. +15551234567)",
                )
        elif not _EMAIL_PATTERN.match(self.value):
            raise InvalidValueObjectException(
                value_object_type="Destination",
                value=self.value,
                reason="Invalid email address",
            )

    @classmethod
    def parse(cls, raw: str, channel: DeliveryChannel = DeliveryChannel.SMS) -> "Destination":
        """解析并规范化用户输入

        电话号码去掉空格、横线和括号；邮箱地址转小写。

        Args:
            raw: 原始输入
            channel: 投递渠道

        Returns:
            Destination 实例

        Raises:
            InvalidValueObjectException: 格式无效
        """
        value = (raw or "").strip()
        if channel.is_phone:
            value = re.sub(r"[\s\-().]", "", value)
        else:
            value = value.lower()
        return cls(value=value, channel=channel)

    def __str__(self) -> str:
        return self.value
