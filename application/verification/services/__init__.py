"""Verification 应用服务"""

from application.verification.services.destination_locks import DestinationLocks
from application.verification.services.expiry_sweep_service import ExpirySweepService
from application.verification.services.verification_service import (
    CheckOutcome,
    IssueOutcome,
    VerificationService,
)

__all__ = [
    "DestinationLocks",
    "ExpirySweepService",
    "CheckOutcome",
    "IssueOutcome",
    "VerificationService",
]
