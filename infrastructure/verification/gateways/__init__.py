"""投递网关实现"""

from infrastructure.verification.gateways.logging_delivery_gateway import LoggingDeliveryGateway
from infrastructure.verification.gateways.twilio_delivery_gateway import TwilioDeliveryGateway

__all__ = ["LoggingDeliveryGateway", "TwilioDeliveryGateway"]
