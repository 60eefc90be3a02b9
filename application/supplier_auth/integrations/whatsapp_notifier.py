import httpx
from httpx_retry import AsyncRetryTransport, RetryPolicy
from typing import Optional
from pydantic import BaseModel

# Logger
from supplier_auth.logging.utils import get_app_logger
logger = get_app_logger("supplier_auth.whatsapp_notifier")

# Settings
from supplier_auth.config.settings import AuthConfigs
configs = AuthConfigs()


class DeliveryResult(BaseModel):
    ok: bool
    detail: str = ""


class Notifier:
    """Delivers a text message to a destination. Implementations never raise."""

    async def send(self, destination: str, message: str) -> DeliveryResult:
        raise NotImplementedError

    async def close(self):
        return None


class WhatsAppNotifier(Notifier):
    """Sends plain text messages through the WhatsApp Cloud API"""

    def __init__(self, api_url: Optional[str] = None, access_token: Optional[str] = None,
                 phone_number_id: Optional[str] = None, timeout: Optional[int] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_url = (api_url or configs.WHATSAPP_API_URL).rstrip("/")
        self.access_token = access_token if access_token is not None else configs.WHATSAPP_ACCESS_TOKEN
        self.phone_number_id = phone_number_id if phone_number_id is not None else configs.WHATSAPP_PHONE_NUMBER_ID
        self.timeout = timeout or configs.WHATSAPP_TIMEOUT

        if transport is None:
            # Gateway hiccups only; a 500 may already have queued the message
            retry_policy = RetryPolicy(
                max_retries=2,
                initial_delay=0.5,
                multiplier=2.0,
                retry_on=[429, 502, 503, 504]
            )
            transport = AsyncRetryTransport(policy=retry_policy)

        self.client = httpx.AsyncClient(transport=transport, timeout=self.timeout)

    @property
    def configured(self) -> bool:
        return bool(self.access_token and self.phone_number_id)

    async def close(self):
        """Explicitly close the HTTP client to free resources."""
        await self.client.aclose()

    def _messages_url(self) -> str:
        return f"{self.api_url}/{self.phone_number_id}/messages"

    async def send(self, destination: str, message: str) -> DeliveryResult:
        if not self.configured:
            logger.warning(f"whatsapp_not_configured | to={destination}")
            return DeliveryResult(ok=False, detail="WhatsApp credentials not configured")

        payload = {
            "messaging_product": "whatsapp",
            "to": destination.lstrip("+"),
            "type": "text",
            "text": {"body": message},
        }
        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }

        try:
            response = await self.client.post(self._messages_url(), json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"whatsapp_send_transport_error | to={destination} error={e}")
            return DeliveryResult(ok=False, detail=f"transport error: {e}")

        if 200 <= response.status_code < 300:
            logger.info(f"whatsapp_sent | to={destination} status={response.status_code}")
            return DeliveryResult(ok=True, detail="sent")

        logger.warning(f"whatsapp_send_failed | to={destination} status={response.status_code} body={response.text[:200]}")
        return DeliveryResult(ok=False, detail=f"HTTP {response.status_code}")
