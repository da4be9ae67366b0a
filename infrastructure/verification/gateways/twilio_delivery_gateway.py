"""Twilio 投递网关实现"""

import logging
from typing import Optional
from xml.sax.saxutils import escape

import httpx

from domain.common.exceptions import DeliveryFailedException
from domain.common.masking import mask_destination
from domain.verification.services.delivery_gateway import DeliveryGateway, DeliveryResult
from domain.verification.value_objects.delivery_channel import DeliveryChannel


class TwilioDeliveryGateway(DeliveryGateway):
    """Twilio 投递网关

    通过 Twilio REST API 发送验证码：
    - SMS: POST /Accounts/{sid}/Messages.json
    - CALL: POST /Accounts/{sid}/Calls.json（内联 TwiML 朗读验证码）
    不支持 EMAIL 渠道（抛出 DeliveryFailedException）。

    凭证通过构造函数传入，不读取环境变量。
    """

    MESSAGE_TEMPLATE = "Your {app_name} verification code is: {code}"

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        app_name: str = "PhoneVerify",
        api_base: str = "https://api.twilio.com/2010-04-01",
        timeout: float = 10.0,
        logger: Optional[logging.Logger] = None,
    ):
        """初始化网关

        Args:
            account_sid: Twilio Account SID
            auth_token: Twilio Auth Token
            from_number: 发送方号码（E.164）
            app_name: 短信中显示的应用名
            api_base: API 基础地址
            timeout: 请求超时（秒）
            logger: 日志记录器
        """
        self._account_sid = account_sid
        self._auth_token = auth_token
        self._from_number = from_number
        self._app_name = app_name
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout
        self._logger = logger or logging.getLogger(__name__)

    def deliver(
        self, destination: str, code: str, channel: DeliveryChannel
    ) -> DeliveryResult:
        """投递验证码"""
        if not (self._account_sid and self._auth_token and self._from_number):
            self._logger.error("Twilio credentials not configured")
            return DeliveryResult(success=False, error_message="SMS service not configured")

        message = self.MESSAGE_TEMPLATE.format(app_name=self._app_name, code=code)

        if channel == DeliveryChannel.SMS:
            resource = "Messages.json"
            data = {"To": destination, "From": self._from_number, "Body": message}
        elif channel == DeliveryChannel.CALL:
            # 逐位朗读验证码
            spoken = ", ".join(code)
            twiml = (
                f"<Response><Say>Your {escape(self._app_name)} verification code is "
                f"{spoken}.</Say></Response>"
            )
            resource = "Calls.json"
            data = {"To": destination, "From": self._from_number, "Twiml": twiml}
        else:
            raise DeliveryFailedException(channel.value, "channel not supported by Twilio gateway")

        url = f"{self._api_base}/Accounts/{self._account_sid}/{resource}"
        masked = mask_destination(destination)

        try:
            response = httpx.post(
                url,
                data=data,
                auth=(self._account_sid, self._auth_token),
                timeout=self._timeout,
            )
        except httpx.TimeoutException:
            self._logger.warning(f"Twilio request timed out for {masked}")
            return DeliveryResult(success=False, error_message="Request timeout")
        except httpx.RequestError as e:
            self._logger.warning(f"Twilio request error for {masked}: {e}")
            return DeliveryResult(success=False, error_message=f"Request error: {e}")

        if 200 <= response.status_code < 300:
            message_id = response.json().get("sid")
            self._logger.info(
                f"Twilio accepted {channel.value} to {masked} (sid={message_id})"
            )
            return DeliveryResult(success=True, message_id=message_id)

        error_message = f"HTTP {response.status_code}"
        try:
            error_message = f"{error_message}: {response.json().get('message', '')}"
        except ValueError:
            pass
        self._logger.error(f"Twilio rejected {channel.value} to {masked} - {error_message}")
        return DeliveryResult(success=False, error_message=error_message)
