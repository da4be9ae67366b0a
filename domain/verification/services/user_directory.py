"""用户目录接口"""

from typing import Protocol


class UserDirectory(Protocol):
    """用户目录接口

    只在校验通过后由边界层调用，核心服务不直接修改用户数据。
    """

    def mark_verified(self, destination: str) -> None:
        """将该号码对应的用户标记为已验证

        Args:
            destination: 已验证的目标号码
        """
        ...
