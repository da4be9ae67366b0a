"""Verification 领域服务模块"""

from domain.verification.services.code_generator import CodeHasher, NumericCodeGenerator
from domain.verification.services.delivery_gateway import DeliveryGateway, DeliveryResult
from domain.verification.services.user_directory import UserDirectory

__all__ = [
    "CodeHasher",
    "NumericCodeGenerator",
    "DeliveryGateway",
    "DeliveryResult",
    "UserDirectory",
]
