"""手机号验证 API 路由"""

from datetime import datetime, timezone
from typing import Callable, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from application.commands.verification.check_verification import (
    CheckVerificationCommand,
    CheckVerificationHandler,
    CheckVerificationResult,
)
from application.commands.verification.issue_verification import (
    IssueVerificationCommand,
    IssueVerificationHandler,
    IssueVerificationResult,
)


router = APIRouter(tags=["Verification"])


# ============ Handler 依赖注入 ============

_issue_handler_getter: Optional[Callable[[], IssueVerificationHandler]] = None


def set_issue_handler_getter(getter: Callable[[], IssueVerificationHandler]) -> None:
    """设置 issue handler 获取器（由 DI 容器调用）"""
    global _issue_handler_getter
    _issue_handler_getter = getter


def get_issue_handler() -> Optional[IssueVerificationHandler]:
    """获取 IssueVerificationHandler 实例"""
    if _issue_handler_getter is None:
        return None
    return _issue_handler_getter()


_check_handler_getter: Optional[Callable[[], CheckVerificationHandler]] = None


def set_check_handler_getter(getter: Callable[[], CheckVerificationHandler]) -> None:
    """设置 check handler 获取器（由 DI 容器调用）"""
    global _check_handler_getter
    _check_handler_getter = getter


def get_check_handler() -> Optional[CheckVerificationHandler]:
    """获取 CheckVerificationHandler 实例"""
    if _check_handler_getter is None:
        return None
    return _check_handler_getter()


# ============ Request/Response DTOs ============


class IssueVerificationDTO(BaseModel):
    """签发验证码请求 DTO

    Attributes:
        destination: 手机号（E.164）或邮箱地址
        channel: 投递渠道
    """

    destination: str = Field(
        ...,
        description="手机号（E.164 格式）",
        min_length=1,
        max_length=320,
        examples=["+15551234567"],
    )
    channel: Literal["sms", "call", "email"] = Field(
        default="sms",
        description="投递渠道",
    )


class IssueVerificationResponseDTO(BaseModel):
    """签发验证码响应 DTO"""

    destination: str = Field(..., description="规范化后的目标号码")
    message: str = Field(..., description="结果消息")
    expires_in_seconds: int = Field(..., description="验证码剩余有效秒数")


class CheckVerificationDTO(BaseModel):
    """校验验证码请求 DTO"""

    destination: str = Field(
        ...,
        description="手机号（E.164 格式）",
        min_length=1,
        max_length=320,
        examples=["+15551234567"],
    )
    code: str = Field(
        ...,
        description="收到的验证码",
        min_length=1,
        max_length=10,
        examples=["482913"],
    )


class CheckVerificationResponseDTO(BaseModel):
    """校验验证码响应 DTO"""

    verified: bool = Field(..., description="是否校验通过")
    message: str = Field(..., description="结果消息")


class ErrorResponseDTO(BaseModel):
    """错误响应 DTO"""

    detail: str = Field(..., description="错误详情")


# ============ 错误码映射 ============

ISSUE_ERROR_CODE_TO_STATUS = {
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "TOO_MANY_REQUESTS": status.HTTP_429_TOO_MANY_REQUESTS,
    "DELIVERY_FAILED": status.HTTP_502_BAD_GATEWAY,
    "STORE_UNAVAILABLE": status.HTTP_503_SERVICE_UNAVAILABLE,
}

CHECK_ERROR_CODE_TO_STATUS = {
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "INVALID": status.HTTP_400_BAD_REQUEST,
    "EXPIRED": status.HTTP_410_GONE,
    "EXHAUSTED": status.HTTP_410_GONE,
    "STORE_UNAVAILABLE": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _handler_not_configured() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Handler not configured. Please configure dependency injection.",
    )


# ============ API Endpoints ============


@router.post(
    "/verifications",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=IssueVerificationResponseDTO,
    responses={
        400: {"model": ErrorResponseDTO, "description": "号码格式错误"},
        429: {"model": ErrorResponseDTO, "description": "重发过于频繁"},
        502: {"model": ErrorResponseDTO, "description": "验证码投递失败"},
        503: {"model": ErrorResponseDTO, "description": "存储不可用"},
    },
    summary="发送验证码",
    description="""
    为手机号生成一次性验证码并通过指定渠道投递。

    **流程：**
    1. 检查号码格式
    2. 重发间隔内已发送过则返回 429
    3. 生成新验证码，旧验证码立即失效
    4. 调用投递网关
    """,
)
def issue_verification(
    request: IssueVerificationDTO,
    handler: Optional[IssueVerificationHandler] = Depends(get_issue_handler),
) -> IssueVerificationResponseDTO:
    """发送验证码"""
    if handler is None:
        raise _handler_not_configured()

    result: IssueVerificationResult = handler.handle(
        IssueVerificationCommand(destination=request.destination, channel=request.channel)
    )

    if not result.success:
        status_code = ISSUE_ERROR_CODE_TO_STATUS.get(
            result.error_code,
            status.HTTP_400_BAD_REQUEST,
        )
        headers = None
        if result.retry_after_seconds:
            headers = {"Retry-After": str(result.retry_after_seconds)}
        raise HTTPException(status_code=status_code, detail=result.message, headers=headers)

    expires_in = _expires_in(result)
    return IssueVerificationResponseDTO(
        destination=result.destination,
        message=result.message,
        expires_in_seconds=expires_in,
    )


def _expires_in(result: IssueVerificationResult) -> int:
    """计算剩余有效秒数"""
    if result.expires_at is None:
        return 0
    remaining = (result.expires_at - datetime.now(timezone.utc)).total_seconds()
    return max(int(remaining), 0)


@router.post(
    "/verifications/check",
    status_code=status.HTTP_200_OK,
    response_model=CheckVerificationResponseDTO,
    responses={
        400: {"model": ErrorResponseDTO, "description": "验证码错误或格式错误"},
        410: {"model": ErrorResponseDTO, "description": "验证码已过期或次数用尽"},
        503: {"model": ErrorResponseDTO, "description": "存储不可用"},
    },
    summary="校验验证码",
    description="""
    校验用户提交的验证码。

    **注意：**
    - 验证码只能使用一次
    - 错误次数达到上限后需要重新发送
    """,
)
def check_verification(
    request: CheckVerificationDTO,
    handler: Optional[CheckVerificationHandler] = Depends(get_check_handler),
) -> CheckVerificationResponseDTO:
    """校验验证码"""
    if handler is None:
        raise _handler_not_configured()

    result: CheckVerificationResult = handler.handle(
        CheckVerificationCommand(destination=request.destination, code=request.code)
    )

    if not result.success:
        status_code = CHECK_ERROR_CODE_TO_STATUS.get(
            result.error_code,
            status.HTTP_400_BAD_REQUEST,
        )
        raise HTTPException(status_code=status_code, detail=result.message)

    return CheckVerificationResponseDTO(verified=True, message=result.message)
