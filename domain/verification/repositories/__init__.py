"""Verification 仓储接口模块"""

from domain.verification.repositories.verification_store import VerificationStore

__all__ = ["VerificationStore"]
