"""验证码生成与摘要"""

import hashlib
import hmac
import secrets

from domain.common.exceptions import InvalidValueObjectException

DIGITS = "0123456789"


class NumericCodeGenerator:
    """数字验证码生成器

    使用 secrets 模块（CSPRNG），输出不可由历史结果推断。
    """

    def __init__(self, length: int = 6):
        if not 4 <= length <= 10:
            raise InvalidValueObjectException(
                value_object_type="CodeLength",
                value=length,
                reason="Code length must be between 4 and 10",
            )
        self._length = length

    @property
    def length(self) -> int:
        return self._length

    def generate(self) -> str:
        """生成定长数字验证码"""
        return "".join(secrets.choice(DIGITS) for _ in range(self._length))


class CodeHasher:
    """验证码摘要

    存储层只保存 HMAC-SHA256 摘要，校验时对候选码做同样的摘要再比较。
    """

    def __init__(self, secret: str):
        if not secret:
            raise InvalidValueObjectException(
                value_object_type="CodeHashSecret",
                value="",
                reason="Secret cannot be empty",
            )
        self._key = secret.encode("utf-8")

    def hash(self, destination: str, code: str) -> str:
        """计算摘要（目标号码参与运算，不同号码的相同验证码摘要不同）"""
        message = f"{destination}:{code}".encode("utf-8")
        return hmac.new(self._key, message, hashlib.sha256).hexdigest()
