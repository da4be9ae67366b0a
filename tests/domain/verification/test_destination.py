"""Destination 值对象测试"""

import pytest

from domain.common.exceptions import InvalidValueObjectException
from domain.verification.value_objects.delivery_channel import DeliveryChannel
from domain.verification.value_objects.destination import Destination


class TestDestinationPhone:
    """电话号码格式测试"""

    @pytest.mark.parametrize(
        "raw",
        ["+15551234567", "+447911123456", "+8613800138000"],
    )
    def test_valid_e164(self, raw):
        """测试合法 E.164 号码"""
        destination = Destination.parse(raw)

        assert destination.value == raw
        assert destination.channel == DeliveryChannel.SMS

    def test_parse_strips_formatting(self):
        """测试去掉空格、横线和括号"""
        destination = Destination.parse(" +1 (555) 123-4567 ")

        assert destination.value == "+15551234567"

    @pytest.mark.parametrize(
        "raw",
        [
            "",
            "15551234567",
            "+0123456789",
            "+1555",
            "+1555123456789012",
            "+1555abc4567",
            # 非 ASCII 数字
            "+1555123456\u0667",
            "+\uff11\uff15\uff15\uff15\uff11\uff12\uff13\uff14\uff15\uff16\uff17",
        ],
    )
    def test_invalid_phone(self, raw):
        """测试非法号码"""
        with pytest.raises(InvalidValueObjectException):
            Destination.parse(raw)

    def test_call_channel_uses_phone_rules(self):
        """测试语音渠道同样要求 E.164"""
        with pytest.raises(InvalidValueObjectException):
            Destination.parse("user@example.com", DeliveryChannel.CALL)

    def test_str_returns_value(self):
        assert str(Destination.parse("+15551234567")) == "+15551234567"


class TestDestinationEmail:
    """邮箱地址格式测试"""

    def test_valid_email_lowercased(self):
        """测试邮箱转小写"""
        destination = Destination.parse(" User@Example.COM ", DeliveryChannel.EMAIL)

        assert destination.value == "user@example.com"

    def test_invalid_email(self):
        with pytest.raises(InvalidValueObjectException):
            Destination.parse("not-an-email", DeliveryChannel.EMAIL)

    def test_is_frozen(self):
        """测试值对象不可变"""
        destination = Destination.parse("+15551234567")

        with pytest.raises(Exception):
            destination.value = "+15550000000"
