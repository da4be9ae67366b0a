"""日志投递网关（开发环境）"""

import logging
from typing import Optional
from uuid import uuid4

from domain.common.masking import mask_destination
from domain.verification.services.delivery_gateway import DeliveryGateway, DeliveryResult
from domain.verification.value_objects.delivery_channel import DeliveryChannel


class LoggingDeliveryGateway(DeliveryGateway):
    """把验证码写入日志而不真正发送，仅用于开发环境"""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger(__name__)

    def deliver(
        self, destination: str, code: str, channel: DeliveryChannel
    ) -> DeliveryResult:
        self._logger.warning(
            f"[DEV] {channel.value} code for {mask_destination(destination)}: {code}"
        )
        return DeliveryResult(success=True, message_id=f"dev-{uuid4()}")
