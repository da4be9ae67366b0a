"""Verification 领域模块

手机号验证的领域层，包含待验证记录实体、值对象、存储接口和外部协作方接口。
"""

from domain.verification.entities.pending_verification import PendingVerification
from domain.verification.repositories.verification_store import VerificationStore
from domain.verification.value_objects.delivery_channel import DeliveryChannel
from domain.verification.value_objects.verification_outcome import VerificationOutcome
from domain.verification.value_objects.verification_policy import VerificationPolicy

__all__ = [
    "PendingVerification",
    "VerificationStore",
    "DeliveryChannel",
    "VerificationOutcome",
    "VerificationPolicy",
]
