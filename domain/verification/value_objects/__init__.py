"""Verification 领域值对象模块"""

from domain.verification.value_objects.delivery_channel import DeliveryChannel
from domain.verification.value_objects.destination import Destination
from domain.verification.value_objects.verification_outcome import VerificationOutcome
from domain.verification.value_objects.verification_policy import VerificationPolicy

__all__ = [
    "DeliveryChannel",
    "Destination",
    "VerificationOutcome",
    "VerificationPolicy",
]
