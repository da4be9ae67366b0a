"""Verification 实体模块"""

from domain.verification.entities.pending_verification import PendingVerification

__all__ = ["PendingVerification"]
