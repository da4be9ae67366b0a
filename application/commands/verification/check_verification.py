"""校验验证码命令"""

import logging
from dataclasses import dataclass
from typing import Optional

from application.verification.services.verification_service import VerificationService
from domain.common.masking import mask_destination
from domain.verification.services.user_directory import UserDirectory
from domain.verification.value_objects.verification_outcome import VerificationOutcome


@dataclass
class CheckVerificationCommand:
    """校验验证码命令

    Attributes:
        destination: 目标号码
        code: 用户提交的验证码
    """

    destination: str
    code: str


@dataclass
class CheckVerificationResult:
    """命令执行结果

    Attributes:
        success: 是否校验通过
        outcome: 结果类型
        message: 面向用户的消息
        error_code: 错误代码（失败时有值）:
            "VALIDATION_ERROR", "EXPIRED", "INVALID", "EXHAUSTED", "STORE_UNAVAILABLE"
        attempts_remaining: 剩余尝试次数（INVALID 时有值）
        user_marked: 用户目录是否已标记为已验证
    """

    success: bool
    outcome: VerificationOutcome
    message: str = ""
    error_code: Optional[str] = None
    attempts_remaining: Optional[int] = None
    user_marked: bool = False


CHECK_MESSAGES = {
    VerificationOutcome.VERIFIED: "Phone number verified",
    VerificationOutcome.VALIDATION_ERROR: "Please enter the code you received",
    VerificationOutcome.EXPIRED: "The verification code has expired. Please request a new one",
    VerificationOutcome.INVALID: "Invalid verification code",
    VerificationOutcome.EXHAUSTED: "Too many incorrect attempts. Please request a new code",
    VerificationOutcome.STORE_UNAVAILABLE: "Verification is temporarily unavailable",
}


class CheckVerificationHandler:
    """校验验证码处理器

    处理校验命令：
    1. 调用 VerificationService.check
    2. 校验通过后通知用户目录标记已验证
    3. 将结果映射为面向用户的消息
    """

    def __init__(
        self,
        verification_service: VerificationService,
        user_directory: UserDirectory,
        logger: Optional[logging.Logger] = None,
    ):
        """初始化处理器

        Args:
            verification_service: 验证服务
            user_directory: 用户目录
            logger: 日志记录器
        """
        self._service = verification_service
        self._user_directory = user_directory
        self._logger = logger or logging.getLogger(__name__)

    def handle(self, command: CheckVerificationCommand) -> CheckVerificationResult:
        """处理校验命令

        Args:
            command: 校验验证码命令

        Returns:
            命令执行结果
        """
        checked = self._service.check(command.destination, command.code)
        outcome = checked.outcome
        message = CHECK_MESSAGES.get(outcome, outcome.value)

        if outcome != VerificationOutcome.VERIFIED:
            if outcome == VerificationOutcome.INVALID and checked.attempts_remaining is not None:
                message = f"{message}. {checked.attempts_remaining} attempts remaining"
            return CheckVerificationResult(
                success=False,
                outcome=outcome,
                message=message,
                error_code=outcome.error_code,
                attempts_remaining=checked.attempts_remaining,
            )

        user_marked = self._mark_verified(checked.destination)
        return CheckVerificationResult(
            success=True,
            outcome=outcome,
            message=message,
            user_marked=user_marked,
        )

    def _mark_verified(self, destination: str) -> bool:
        """通知用户目录（失败不影响校验结果，验证码已被消费）

        Args:
            destination: 已验证的号码

        Returns:
            是否标记成功
        """
        try:
            self._user_directory.mark_verified(destination)
        except Exception as e:
            self._logger.error(
                f"Failed to mark {mask_destination(destination)} as verified: {e}"
            )
            return False

        self._logger.info(f"User directory marked {mask_destination(destination)} verified")
        return True
