"""手机号验证应用层模块"""

from application.verification.services import (
    CheckOutcome,
    IssueOutcome,
    VerificationService,
)

__all__ = [
    "CheckOutcome",
    "IssueOutcome",
    "VerificationService",
]
