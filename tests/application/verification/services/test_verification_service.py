"""VerificationService 单元测试"""

import threading
import time
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from application.verification.services.verification_service import VerificationService
from domain.common.exceptions import (
    DeliveryFailedException,
    StoreUnavailableException,
    VerificationNotFoundException,
)
from domain.verification.services.code_generator import CodeHasher
from domain.verification.services.delivery_gateway import DeliveryResult
from domain.verification.value_objects.delivery_channel import DeliveryChannel
from domain.verification.value_objects.verification_outcome import VerificationOutcome
from domain.verification.value_objects.verification_policy import VerificationPolicy
from infrastructure.verification.repositories.in_memory_verification_store import (
    InMemoryVerificationStore,
)


PHONE = "+15551234567"


class FakeClock:
    """可手动推进的时钟"""

    def __init__(self):
        self.now = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


class RecordingGateway:
    """记录投递内容的网关"""

    def __init__(self):
        self.sent = []

    def deliver(self, destination, code, channel):
        self.sent.append((destination, code, channel))
        return DeliveryResult(success=True, message_id=f"msg-{len(self.sent)}")

    @property
    def last_code(self):
        return self.sent[-1][1]


class FixedCodeGenerator:
    """返回固定验证码的生成器"""

    def __init__(self, code="482913"):
        self.code = code
        self.length = len(code)

    def generate(self):
        return self.code


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemoryVerificationStore()


@pytest.fixture
def gateway():
    return RecordingGateway()


@pytest.fixture
def policy():
    return VerificationPolicy()


@pytest.fixture
def service(store, gateway, policy, clock):
    """创建验证服务实例"""
    service = VerificationService(
        store=store,
        gateway=gateway,
        policy=policy,
        code_hasher=CodeHasher("test-secret"),
        clock=clock,
    )
    yield service
    service.close()


class TestIssue:
    """签发测试"""

    def test_issue_delivers_code(self, service, gateway, store, clock):
        """测试签发后投递验证码并保存记录"""
        result = service.issue(PHONE)

        assert result.outcome == VerificationOutcome.ISSUED
        assert result.destination == PHONE
        assert result.expires_at == clock.now + timedelta(seconds=600)
        assert len(gateway.sent) == 1
        destination, code, channel = gateway.sent[0]
        assert destination == PHONE
        assert len(code) == 6 and code.isdigit()
        assert channel == DeliveryChannel.SMS
        assert store.get(PHONE, clock.now) is not None

    def test_issue_does_not_store_plaintext(self, service, gateway, store, clock):
        """测试存储中没有明文验证码"""
        service.issue(PHONE)

        record = store.get(PHONE, clock.now)
        assert gateway.last_code not in record.code_hash

    def test_issue_normalizes_destination(self, service, gateway):
        """测试号码规范化"""
        result = service.issue("+1 555-123-4567")

        assert result.destination == PHONE
        assert gateway.sent[0][0] == PHONE

    def test_issue_with_call_channel_string(self, service, gateway):
        """测试字符串渠道参数"""
        result = service.issue(PHONE, "call")

        assert result.outcome == VerificationOutcome.ISSUED
        assert gateway.sent[0][2] == DeliveryChannel.CALL

    @pytest.mark.parametrize("destination", ["", "5551234567", "+12"])
    def test_issue_invalid_destination(self, service, gateway, destination):
        """测试非法号码返回 VALIDATION_ERROR"""
        result = service.issue(destination)

        assert result.outcome == VerificationOutcome.VALIDATION_ERROR
        assert gateway.sent == []

    def test_issue_unknown_channel(self, service, gateway):
        """测试未知渠道返回 VALIDATION_ERROR"""
        result = service.issue(PHONE, "pigeon")

        assert result.outcome == VerificationOutcome.VALIDATION_ERROR
        assert gateway.sent == []

    def test_reissue_within_interval_is_rejected(self, service, gateway, clock):
        """测试重发间隔内再次签发返回 TOO_MANY_REQUESTS"""
        service.issue(PHONE)
        clock.advance(10)

        result = service.issue(PHONE)

        assert result.outcome == VerificationOutcome.TOO_MANY_REQUESTS
        assert result.retry_after_seconds == 50
        assert len(gateway.sent) == 1

    def test_retry_after_rounds_up_to_one_second(self, service, clock):
        """测试剩余不足 1 秒时 retry_after_seconds 至少为 1"""
        service.issue(PHONE)
        clock.now += timedelta(seconds=59, microseconds=999500)

        result = service.issue(PHONE)

        assert result.outcome == VerificationOutcome.TOO_MANY_REQUESTS
        assert result.retry_after_seconds == 1

    def test_issue_rejects_non_ascii_digits(self, service, gateway, store, clock):
        """测试非 ASCII 数字的号码不能绕过同号码唯一记录"""
        service.issue(PHONE)

        result = service.issue("+1555123456\u0667")

        assert result.outcome == VerificationOutcome.VALIDATION_ERROR
        assert [sent[0] for sent in gateway.sent] == [PHONE]

    def test_issue_after_close_recreates_executor(self, service, gateway):
        """测试 close() 之后再次签发仍可投递"""
        service.close()

        result = service.issue(PHONE)

        assert result.outcome == VerificationOutcome.ISSUED
        assert len(gateway.sent) == 1

    def test_issue_when_executor_rejects_submit(self, service, gateway, store, clock):
        """测试线程池拒绝提交时返回 DELIVERY_FAILED"""
        executor = Mock()
        executor.submit.side_effect = RuntimeError("cannot schedule new futures after shutdown")
        service._executor = executor

        result = service.issue(PHONE)

        assert result.outcome == VerificationOutcome.DELIVERY_FAILED
        assert "cannot schedule" in result.detail
        assert store.get(PHONE, clock.now) is not None
        service._executor = None

    def test_reissue_after_interval_supersedes_old_code(self, service, gateway, clock):
        """测试间隔过后重发，旧验证码立即失效"""
        service.issue(PHONE)
        first_code = gateway.last_code
        clock.advance(61)

        result = service.issue(PHONE)
        second_code = gateway.last_code

        assert result.outcome == VerificationOutcome.ISSUED
        if first_code != second_code:
            assert service.check(PHONE, first_code).outcome == VerificationOutcome.INVALID
        assert service.check(PHONE, second_code).outcome == VerificationOutcome.VERIFIED

    def test_reissue_after_expiry_is_allowed(self, store, gateway, clock):
        """测试记录过期后可立即重发（即使仍在重发间隔内）"""
        policy = VerificationPolicy(ttl_seconds=30, reissue_interval_seconds=60)
        service = VerificationService(
            store=store,
            gateway=gateway,
            policy=policy,
            code_hasher=CodeHasher("test-secret"),
            clock=clock,
        )
        service.issue(PHONE)
        clock.advance(31)

        result = service.issue(PHONE)

        assert result.outcome == VerificationOutcome.ISSUED
        service.close()

    def test_different_destinations_are_independent(self, service):
        """测试不同号码互不影响"""
        assert service.issue(PHONE).outcome == VerificationOutcome.ISSUED
        assert service.issue("+15557654321").outcome == VerificationOutcome.ISSUED


class TestIssueDeliveryFailure:
    """投递失败测试"""

    def _service(self, store, gateway, clock, **policy_kwargs):
        return VerificationService(
            store=store,
            gateway=gateway,
            policy=VerificationPolicy(**policy_kwargs),
            code_hasher=CodeHasher("test-secret"),
            code_generator=FixedCodeGenerator(),
            clock=clock,
        )

    def test_unsuccessful_result_is_reported(self, store, clock):
        """测试网关返回失败"""
        gateway = Mock()
        gateway.deliver.return_value = DeliveryResult(success=False, error_message="HTTP 400")
        service = self._service(store, gateway, clock)

        result = service.issue(PHONE)

        assert result.outcome == VerificationOutcome.DELIVERY_FAILED
        assert "HTTP 400" in result.detail
        service.close()

    def test_gateway_exception_is_reported(self, store, clock):
        """测试网关抛出异常"""
        gateway = Mock()
        gateway.deliver.side_effect = RuntimeError("connection reset")
        service = self._service(store, gateway, clock)

        result = service.issue(PHONE)

        assert result.outcome == VerificationOutcome.DELIVERY_FAILED
        assert "connection reset" in result.detail
        service.close()

    def test_delivery_failed_exception_is_reported(self, store, clock):
        """测试网关抛出 DeliveryFailedException"""
        gateway = Mock()
        gateway.deliver.side_effect = DeliveryFailedException("email", "channel not supported")
        service = self._service(store, gateway, clock)

        result = service.issue(PHONE)

        assert result.outcome == VerificationOutcome.DELIVERY_FAILED
        assert result.detail == "channel not supported"
        service.close()

    def test_record_is_kept_after_delivery_failure(self, store, clock):
        """测试先存储后投递：投递失败时记录保留"""
        gateway = Mock()
        gateway.deliver.return_value = DeliveryResult(success=False, error_message="down")
        service = self._service(store, gateway, clock)

        service.issue(PHONE)

        assert store.get(PHONE, clock.now) is not None
        assert service.check(PHONE, "482913").outcome == VerificationOutcome.VERIFIED
        service.close()

    def test_slow_gateway_times_out(self, store, clock):
        """测试网关超时返回 DELIVERY_FAILED 而不是一直等待"""
        release = threading.Event()

        class SlowGateway:
            def deliver(self, destination, code, channel):
                release.wait(5)
                return DeliveryResult(success=True)

        service = self._service(store, SlowGateway(), clock, delivery_timeout_seconds=0.1)

        started = time.monotonic()
        result = service.issue(PHONE)
        elapsed = time.monotonic() - started
        release.set()

        assert result.outcome == VerificationOutcome.DELIVERY_FAILED
        assert "timed out" in result.detail
        assert elapsed < 2
        service.close()


class TestCheck:
    """校验测试"""

    @pytest.fixture
    def fixed_service(self, store, gateway, policy, clock):
        service = VerificationService(
            store=store,
            gateway=gateway,
            policy=policy,
            code_hasher=CodeHasher("test-secret"),
            code_generator=FixedCodeGenerator("482913"),
            clock=clock,
        )
        yield service
        service.close()

    def test_example_scenario(self, fixed_service, gateway, store, clock):
        """测试示例流程：错误一次后正确，记录被删除"""
        fixed_service.issue(PHONE)
        assert gateway.last_code == "482913"

        invalid = fixed_service.check(PHONE, "000000")
        assert invalid.outcome == VerificationOutcome.INVALID
        assert invalid.attempts_remaining == 4
        assert store.get(PHONE, clock.now).attempts == 1

        verified = fixed_service.check(PHONE, "482913")
        assert verified.outcome == VerificationOutcome.VERIFIED
        assert store.get(PHONE, clock.now) is None

    def test_code_is_single_use(self, fixed_service):
        """测试验证码只能使用一次"""
        fixed_service.issue(PHONE)

        assert fixed_service.check(PHONE, "482913").outcome == VerificationOutcome.VERIFIED
        assert fixed_service.check(PHONE, "482913").outcome == VerificationOutcome.EXPIRED

    def test_never_issued_is_expired(self, fixed_service):
        """测试未签发的号码返回 EXPIRED"""
        assert fixed_service.check(PHONE, "482913").outcome == VerificationOutcome.EXPIRED

    def test_expired_record_never_matches(self, fixed_service, clock):
        """测试过期后即使验证码正确也不匹配"""
        fixed_service.issue(PHONE)
        clock.advance(601)

        assert fixed_service.check(PHONE, "482913").outcome == VerificationOutcome.EXPIRED

    def test_exhausted_after_max_attempts(self, fixed_service, store, clock):
        """测试连续错误 max_attempts 次后 EXHAUSTED，之后 EXPIRED"""
        fixed_service.issue(PHONE)

        outcomes = [fixed_service.check(PHONE, "000000").outcome for _ in range(5)]

        assert outcomes[:4] == [VerificationOutcome.INVALID] * 4
        assert outcomes[4] == VerificationOutcome.EXHAUSTED
        assert store.get(PHONE, clock.now) is None
        assert fixed_service.check(PHONE, "482913").outcome == VerificationOutcome.EXPIRED

    def test_attempts_remaining_counts_down(self, fixed_service):
        fixed_service.issue(PHONE)

        remaining = [fixed_service.check(PHONE, "111111").attempts_remaining for _ in range(4)]

        assert remaining == [4, 3, 2, 1]

    def test_check_normalizes_destination(self, fixed_service):
        fixed_service.issue(PHONE)

        result = fixed_service.check("+1 (555) 123-4567", "482913")

        assert result.outcome == VerificationOutcome.VERIFIED

    @pytest.mark.parametrize(
        "code",
        [
            "",
            "48291",
            "4829130",
            "48291a",
            # 阿拉伯-印度数字
            "\u0664\u0668\u0662\u0669\u0661\u0663",
            # 全角数字
            "\uff14\uff18\uff12\uff19\uff11\uff13",
        ],
    )
    def test_malformed_code_does_not_consume_attempt(self, fixed_service, store, clock, code):
        """测试格式错误的验证码不计入失败次数"""
        fixed_service.issue(PHONE)

        result = fixed_service.check(PHONE, code)

        assert result.outcome == VerificationOutcome.VALIDATION_ERROR
        assert store.get(PHONE, clock.now).attempts == 0

    def test_malformed_destination(self, fixed_service):
        assert fixed_service.check("nope", "482913").outcome == VerificationOutcome.VALIDATION_ERROR

    def test_already_exhausted_record_is_deleted(self, fixed_service, store, clock):
        """测试读取到已耗尽的记录时删除并返回 EXHAUSTED"""
        fixed_service.issue(PHONE)
        record = store.get(PHONE, clock.now)
        record.attempts = record.max_attempts
        store.put(record)

        result = fixed_service.check(PHONE, "482913")

        assert result.outcome == VerificationOutcome.EXHAUSTED
        assert store.get(PHONE, clock.now) is None

    def test_concurrent_correct_checks_verify_once(self, fixed_service):
        """测试并发提交同一正确验证码只有一次 VERIFIED"""
        fixed_service.issue(PHONE)
        barrier = threading.Barrier(2)
        outcomes = []
        lock = threading.Lock()

        def worker():
            barrier.wait()
            outcome = fixed_service.check(PHONE, "482913").outcome
            with lock:
                outcomes.append(outcome)

        threads = [threading.Thread(target=worker) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(o.value for o in outcomes) == ["expired", "verified"]

    def test_concurrent_wrong_checks_do_not_lose_updates(self, fixed_service, store, clock):
        """测试并发错误提交的次数不会丢失"""
        fixed_service.issue(PHONE)
        barrier = threading.Barrier(3)

        def worker():
            barrier.wait()
            fixed_service.check(PHONE, "000000")

        threads = [threading.Thread(target=worker) for _ in range(3)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert store.get(PHONE, clock.now).attempts == 3


class TestStoreFailures:
    """存储异常测试"""

    @pytest.fixture
    def broken_store(self):
        store = Mock()
        store.get.side_effect = StoreUnavailableException("db down")
        return store

    def test_issue_store_unavailable(self, broken_store, gateway, policy, clock):
        service = VerificationService(
            store=broken_store,
            gateway=gateway,
            policy=policy,
            code_hasher=CodeHasher("test-secret"),
            clock=clock,
        )

        result = service.issue(PHONE)

        assert result.outcome == VerificationOutcome.STORE_UNAVAILABLE
        assert gateway.sent == []
        service.close()

    def test_check_store_unavailable(self, broken_store, gateway, policy, clock):
        service = VerificationService(
            store=broken_store,
            gateway=gateway,
            policy=policy,
            code_hasher=CodeHasher("test-secret"),
            clock=clock,
        )

        result = service.check(PHONE, "482913")

        assert result.outcome == VerificationOutcome.STORE_UNAVAILABLE
        service.close()

    def test_record_vanishing_is_reported_as_expired(self, gateway, policy, clock):
        """测试记录在读取后消失时报告 EXPIRED 而不是 NOT_FOUND"""
        hasher = CodeHasher("test-secret")
        real_store = InMemoryVerificationStore()
        service = VerificationService(
            store=real_store,
            gateway=gateway,
            policy=policy,
            code_hasher=hasher,
            code_generator=FixedCodeGenerator(),
            clock=clock,
        )
        service.issue(PHONE)

        store = Mock(wraps=real_store)
        store.increment_attempts.side_effect = VerificationNotFoundException(PHONE)
        service._store = store

        result = service.check(PHONE, "000000")

        assert result.outcome == VerificationOutcome.EXPIRED
        service.close()
