"""Verification 基础设施模块

提供验证记录存储、投递网关和用户目录的实现。
"""

from infrastructure.verification.models.pending_verification_model import PendingVerificationModel
from infrastructure.verification.repositories.in_memory_verification_store import (
    InMemoryVerificationStore,
)
from infrastructure.verification.repositories.sqlalchemy_verification_store import (
    SqlAlchemyVerificationStore,
)

__all__ = [
    "PendingVerificationModel",
    "InMemoryVerificationStore",
    "SqlAlchemyVerificationStore",
]
