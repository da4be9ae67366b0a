"""
数据库基础设施模块
"""

from .base import Base
from .database_factory import DatabaseFactory

__all__ = [
    "Base",
    "DatabaseFactory",
]
