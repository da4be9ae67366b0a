"""Verification 命令模块"""

from application.commands.verification.issue_verification import (
    IssueVerificationCommand,
    IssueVerificationResult,
    IssueVerificationHandler,
)
from application.commands.verification.check_verification import (
    CheckVerificationCommand,
    CheckVerificationResult,
    CheckVerificationHandler,
)

__all__ = [
    "IssueVerificationCommand",
    "IssueVerificationResult",
    "IssueVerificationHandler",
    "CheckVerificationCommand",
    "CheckVerificationResult",
    "CheckVerificationHandler",
]
