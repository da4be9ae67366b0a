"""验证服务 - 签发与校验的编排核心"""

import logging
import math
import threading
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Union

from domain.common.exceptions import (
    DeliveryFailedException,
    InvalidValueObjectException,
    StoreUnavailableException,
    VerificationNotFoundException,
)
from domain.common.masking import mask_destination
from domain.verification.entities.pending_verification import PendingVerification
from domain.verification.repositories.verification_store import VerificationStore
from domain.verification.services.code_generator import CodeHasher, NumericCodeGenerator
from domain.verification.services.delivery_gateway import DeliveryGateway
from domain.verification.value_objects.delivery_channel import DeliveryChannel
from domain.verification.value_objects.destination import Destination
from domain.verification.value_objects.verification_outcome import VerificationOutcome
from domain.verification.value_objects.verification_policy import VerificationPolicy
from application.verification.services.destination_locks import DestinationLocks


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class IssueOutcome:
    """签发结果

    Attributes:
        outcome: ISSUED / VALIDATION_ERROR / TOO_MANY_REQUESTS / DELIVERY_FAILED / STORE_UNAVAILABLE
        destination: 规范化后的目标号码
        expires_at: 验证码过期时间（记录已写入时有值）
        retry_after_seconds: 距离允许重发的秒数（TOO_MANY_REQUESTS 时有值）
        detail: 诊断信息（不面向终端用户）
    """

    outcome: VerificationOutcome
    destination: Optional[str] = None
    expires_at: Optional[datetime] = None
    retry_after_seconds: Optional[int] = None
    detail: str = ""


@dataclass
class CheckOutcome:
    """校验结果

    Attributes:
        outcome: VERIFIED / VALIDATION_ERROR / EXPIRED / INVALID / EXHAUSTED / STORE_UNAVAILABLE
        destination: 规范化后的目标号码
        attempts_remaining: 剩余可尝试次数（INVALID 时有值）
        detail: 诊断信息
    """

    outcome: VerificationOutcome
    destination: Optional[str] = None
    attempts_remaining: Optional[int] = None
    detail: str = ""


class VerificationService:
    """
    验证服务

    每个目标号码的状态机：NoRecord -> Pending -> {Verified, Expired, Exhausted}

    签发流程（先存储后投递）：
    1. 校验目标格式
    2. 重发间隔内已有有效记录 -> TOO_MANY_REQUESTS
    3. 生成验证码，写入新记录（旧验证码立即失效）
    4. 在锁外调用投递网关，受 delivery_timeout_seconds 限制；
       投递失败时记录保留，返回 DELIVERY_FAILED

    校验流程：
    1. 记录不存在/已过期 -> EXPIRED
    2. 次数已满 -> 删除记录，EXHAUSTED
    3. 常量时间比较；不匹配则次数加一，达到上限删除记录并返回 EXHAUSTED，否则 INVALID
    4. 匹配 -> 删除记录（一次性），VERIFIED

    同一号码的操作通过 DestinationLocks 串行化。
    服务本身不访问用户数据，也不生成面向用户的文案。
    """

    def __init__(
        self,
        store: VerificationStore,
        gateway: DeliveryGateway,
        policy: VerificationPolicy,
        code_hasher: CodeHasher,
        code_generator: Optional[NumericCodeGenerator] = None,
        clock: Callable[[], datetime] = utc_now,
        locks: Optional[DestinationLocks] = None,
        max_concurrent_deliveries: int = 8,
        logger: Optional[logging.Logger] = None,
    ):
        """
        初始化验证服务

        Args:
            store: 验证记录存储
            gateway: 投递网关
            policy: 验证策略
            code_hasher: 验证码摘要
            code_generator: 验证码生成器，默认按 policy.code_length 创建
            clock: 当前时间函数（测试可注入）
            locks: 按号码加锁器
            max_concurrent_deliveries: 投递线程池大小
            logger: 日志记录器
        """
        self._store = store
        self._gateway = gateway
        self._policy = policy
        self._hasher = code_hasher
        self._generator = code_generator or NumericCodeGenerator(policy.code_length)
        self._clock = clock
        self._locks = locks or DestinationLocks()
        self._max_concurrent_deliveries = max_concurrent_deliveries
        self._executor: Optional[ThreadPoolExecutor] = None
        self._executor_lock = threading.Lock()
        self._logger = logger or logging.getLogger(__name__)

    @property
    def policy(self) -> VerificationPolicy:
        return self._policy

    # ============ 签发 ============

    def issue(
        self,
        destination: str,
        channel: Union[DeliveryChannel, str] = DeliveryChannel.SMS,
    ) -> IssueOutcome:
        """签发并投递验证码

        Args:
            destination: 目标号码
            channel: 投递渠道

        Returns:
            IssueOutcome
        """
        try:
            channel = DeliveryChannel(channel)
            target = Destination.parse(destination, channel)
        except (ValueError, InvalidValueObjectException) as e:
            self._logger.info(f"Rejected issue request: {e}")
            return IssueOutcome(
                outcome=VerificationOutcome.VALIDATION_ERROR,
                detail=str(e),
            )

        key = target.value
        masked = mask_destination(key)

        try:
            with self._locks.hold(key):
                now = self._clock()
                existing = self._store.get(key, now)
                if existing is not None:
                    wait = existing.retry_after(now, self._policy.reissue_interval)
                    if wait > 0:
                        self._logger.warning(
                            f"Reissue too soon for {masked}, retry after {wait:.0f}s"
                        )
                        return IssueOutcome(
                            outcome=VerificationOutcome.TOO_MANY_REQUESTS,
                            destination=key,
                            retry_after_seconds=max(1, math.ceil(wait)),
                        )

                code = self._generator.generate()
                record = PendingVerification.issue(
                    destination=key,
                    code_hash=self._hasher.hash(key, code),
                    channel=channel,
                    policy=self._policy,
                    now=now,
                )
                self._store.put(record)
        except StoreUnavailableException as e:
            self._logger.error(f"Store unavailable while issuing for {masked}: {e}")
            return IssueOutcome(
                outcome=VerificationOutcome.STORE_UNAVAILABLE,
                destination=key,
                detail=str(e),
            )

        self._logger.info(
            f"Verification issued for {masked} via {channel.value}, "
            f"expires at {record.expires_at.isoformat()}"
        )

        # 投递在锁外进行，避免慢网关阻塞同号码的校验
        error = self._deliver(key, code, channel)
        if error:
            return IssueOutcome(
                outcome=VerificationOutcome.DELIVERY_FAILED,
                destination=key,
                expires_at=record.expires_at,
                detail=error,
            )

        return IssueOutcome(
            outcome=VerificationOutcome.ISSUED,
            destination=key,
            expires_at=record.expires_at,
        )

    def _deliver(self, destination: str, code: str, channel: DeliveryChannel) -> str:
        """调用网关投递，返回错误信息；成功返回空字符串"""
        masked = mask_destination(destination)
        timeout = self._policy.delivery_timeout_seconds
        try:
            future = self._get_executor().submit(
                self._gateway.deliver, destination, code, channel
            )
        except RuntimeError as e:
            # 线程池在提交前被 close() 关闭
            self._logger.error(f"Delivery to {masked} not scheduled: {e}")
            return f"Delivery not scheduled: {e}"

        try:
            result = future.result(timeout=timeout)
        except FutureTimeoutError:
            future.cancel()
            self._logger.error(f"Delivery to {masked} timed out after {timeout}s")
            return f"Delivery timed out after {timeout}s"
        except DeliveryFailedException as e:
            self._logger.error(f"Delivery to {masked} failed: {e.reason}")
            return e.reason
        except Exception as e:
            self._logger.error(f"Delivery to {masked} raised: {e}")
            return f"Delivery error: {e}"

        if not result.success:
            self._logger.error(f"Delivery to {masked} failed: {result.error_message}")
            return result.error_message or "Delivery rejected by gateway"

        self._logger.debug(f"Delivered code to {masked} (message_id={result.message_id})")
        return ""

    # ============ 校验 ============

    def check(self, destination: str, candidate_code: str) -> CheckOutcome:
        """校验候选验证码

        Args:
            destination: 目标号码
            candidate_code: 用户提交的验证码

        Returns:
            CheckOutcome
        """
        raw = (destination or "").strip()
        channel = DeliveryChannel.EMAIL if "@" in raw else DeliveryChannel.SMS
        try:
            target = Destination.parse(raw, channel)
        except InvalidValueObjectException as e:
            return CheckOutcome(
                outcome=VerificationOutcome.VALIDATION_ERROR,
                detail=str(e),
            )

        key = target.value
        code = (candidate_code or "").strip()
        if not (code.isascii() and code.isdigit()) or len(code) != self._policy.code_length:
            return CheckOutcome(
                outcome=VerificationOutcome.VALIDATION_ERROR,
                destination=key,
                detail=f"Code must be {self._policy.code_length} digits",
            )

        try:
            with self._locks.hold(key):
                return self._check_locked(key, code)
        except StoreUnavailableException as e:
            self._logger.error(
                f"Store unavailable while checking {mask_destination(key)}: {e}"
            )
            return CheckOutcome(
                outcome=VerificationOutcome.STORE_UNAVAILABLE,
                destination=key,
                detail=str(e),
            )

    def _check_locked(self, key: str, code: str) -> CheckOutcome:
        masked = mask_destination(key)
        now = self._clock()

        record = self._store.get(key, now)
        if record is None:
            self._logger.info(f"No active verification for {masked}")
            return CheckOutcome(outcome=VerificationOutcome.EXPIRED, destination=key)

        if record.is_exhausted:
            self._store.delete(key)
            self._logger.warning(f"Verification for {masked} already exhausted")
            return CheckOutcome(outcome=VerificationOutcome.EXHAUSTED, destination=key)

        if record.matches(self._hasher.hash(key, code)):
            if not self._store.delete(key):
                # 记录在读取后被清理（例如过期清扫）
                return CheckOutcome(outcome=VerificationOutcome.EXPIRED, destination=key)
            self._logger.info(f"Verification succeeded for {masked}")
            return CheckOutcome(outcome=VerificationOutcome.VERIFIED, destination=key)

        try:
            attempts = self._store.increment_attempts(key, now)
        except VerificationNotFoundException:
            return CheckOutcome(outcome=VerificationOutcome.EXPIRED, destination=key)

        record.attempts = attempts
        if record.is_exhausted:
            self._store.delete(key)
            self._logger.warning(
                f"Verification for {masked} exhausted after {attempts} attempts"
            )
            return CheckOutcome(outcome=VerificationOutcome.EXHAUSTED, destination=key)

        remaining = record.attempts_remaining
        self._logger.info(f"Invalid code for {masked} ({remaining} attempts remaining)")
        return CheckOutcome(
            outcome=VerificationOutcome.INVALID,
            destination=key,
            attempts_remaining=remaining,
        )

    def _get_executor(self) -> ThreadPoolExecutor:
        """按需创建投递线程池，close() 之后再次签发会重新创建"""
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._max_concurrent_deliveries,
                    thread_name_prefix="otp-delivery-",
                )
            return self._executor

    def close(self) -> None:
        """关闭投递线程池"""
        with self._executor_lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=False, cancel_futures=True)
