"""签发验证码命令"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from application.verification.services.verification_service import VerificationService
from domain.verification.value_objects.verification_outcome import VerificationOutcome


@dataclass
class IssueVerificationCommand:
    """签发验证码命令

    Attributes:
        destination: 目标号码（E.164）或邮箱地址
        channel: 投递渠道（"sms", "call", "email"）
    """

    destination: str
    channel: str = "sms"


@dataclass
class IssueVerificationResult:
    """命令执行结果

    Attributes:
        success: 是否成功
        outcome: 结果类型
        message: 面向用户的消息
        error_code: 错误代码（失败时有值）:
            "VALIDATION_ERROR", "TOO_MANY_REQUESTS", "DELIVERY_FAILED", "STORE_UNAVAILABLE"
        destination: 规范化后的目标号码
        expires_at: 验证码过期时间
        retry_after_seconds: 距离允许重发的秒数
    """

    success: bool
    outcome: VerificationOutcome
    message: str = ""
    error_code: Optional[str] = None
    destination: Optional[str] = None
    expires_at: Optional[datetime] = None
    retry_after_seconds: Optional[int] = None


ISSUE_MESSAGES = {
    VerificationOutcome.ISSUED: "Verification code sent",
    VerificationOutcome.VALIDATION_ERROR: "Please enter a valid phone number",
    VerificationOutcome.TOO_MANY_REQUESTS: "A code was sent recently. Please wait before requesting another one",
    VerificationOutcome.DELIVERY_FAILED: "We could not deliver the verification code. Please try again",
    VerificationOutcome.STORE_UNAVAILABLE: "Verification is temporarily unavailable",
}


class IssueVerificationHandler:
    """签发验证码处理器

    处理签发命令：
    1. 调用 VerificationService.issue
    2. 将结果映射为面向用户的消息
    """

    def __init__(
        self,
        verification_service: VerificationService,
        logger: Optional[logging.Logger] = None,
    ):
        """初始化处理器

        Args:
            verification_service: 验证服务
            logger: 日志记录器
        """
        self._service = verification_service
        self._logger = logger or logging.getLogger(__name__)

    def handle(self, command: IssueVerificationCommand) -> IssueVerificationResult:
        """处理签发命令

        Args:
            command: 签发验证码命令

        Returns:
            命令执行结果
        """
        self._logger.debug(f"Processing issue verification: channel={command.channel}")

        issued = self._service.issue(command.destination, command.channel)
        outcome = issued.outcome
        message = ISSUE_MESSAGES.get(outcome, outcome.value)
        if outcome == VerificationOutcome.TOO_MANY_REQUESTS and issued.retry_after_seconds:
            message = f"{message} ({issued.retry_after_seconds}s)"

        return IssueVerificationResult(
            success=outcome.is_success,
            outcome=outcome,
            message=message,
            error_code=None if outcome.is_success else outcome.error_code,
            destination=issued.destination,
            expires_at=issued.expires_at,
            retry_after_seconds=issued.retry_after_seconds,
        )
