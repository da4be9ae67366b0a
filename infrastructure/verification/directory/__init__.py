"""用户目录实现"""

from infrastructure.verification.directory.in_memory_user_directory import InMemoryUserDirectory

__all__ = ["InMemoryUserDirectory"]
