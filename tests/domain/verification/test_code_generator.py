"""NumericCodeGenerator / CodeHasher 测试"""

import pytest

from domain.common.exceptions import InvalidValueObjectException
from domain.verification.services.code_generator import CodeHasher, NumericCodeGenerator


class TestNumericCodeGenerator:
    """验证码生成测试"""

    def test_default_length_is_six(self):
        code = NumericCodeGenerator().generate()

        assert len(code) == 6
        assert code.isdigit()

    @pytest.mark.parametrize("length", [4, 8, 10])
    def test_custom_length(self, length):
        code = NumericCodeGenerator(length).generate()

        assert len(code) == length
        assert code.isdigit()

    @pytest.mark.parametrize("length", [0, 3, 11])
    def test_invalid_length(self, length):
        with pytest.raises(InvalidValueObjectException):
            NumericCodeGenerator(length)

    def test_codes_are_not_constant(self):
        """测试多次生成结果不全相同"""
        generator = NumericCodeGenerator()
        codes = {generator.generate() for _ in range(50)}

        assert len(codes) > 1

    def test_leading_zeros_preserved(self, monkeypatch):
        """测试前导零不会丢失"""
        monkeypatch.setattr(
            "domain.verification.services.code_generator.secrets.choice",
            lambda _: "0",
        )

        assert NumericCodeGenerator().generate() == "000000"


class TestCodeHasher:
    """验证码摘要测试"""

    def test_same_input_same_hash(self):
        hasher = CodeHasher("secret")

        assert hasher.hash("+15551234567", "482913") == hasher.hash("+15551234567", "482913")

    def test_hash_is_not_plaintext(self):
        digest = CodeHasher("secret").hash("+15551234567", "482913")

        assert "482913" not in digest
        assert len(digest) == 64

    def test_destination_changes_hash(self):
        hasher = CodeHasher("secret")

        assert hasher.hash("+15551234567", "482913") != hasher.hash("+15557654321", "482913")

    def test_secret_changes_hash(self):
        assert CodeHasher("a").hash("+15551234567", "482913") != CodeHasher("b").hash(
            "+15551234567", "482913"
        )

    def test_empty_secret_rejected(self):
        with pytest.raises(InvalidValueObjectException):
            CodeHasher("")
