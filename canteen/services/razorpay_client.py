import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional

import httpx

from canteen.core import config
from canteen.core.errors import ConfigurationError, PaymentGatewayError, PaymentGatewayTimeout

log = logging.getLogger(__name__)


def to_paise(amount: Decimal) -> int:
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class RazorpayClient:
    """Thin async client for the two Razorpay REST calls the app needs."""

    def __init__(
        self,
        key_id: Optional[str] = None,
        key_secret: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.key_id = config.RAZORPAY_KEY_ID if key_id is None else key_id
        self.key_secret = config.RAZORPAY_KEY_SECRET if key_secret is None else key_secret
        self.base_url = base_url or config.RAZORPAY_API_BASE
        self.timeout = config.PAYMENT_GATEWAY_TIMEOUT if timeout is None else timeout
        self.transport = transport

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        if not self.key_id or not self.key_secret:
            raise ConfigurationError("Razorpay credentials are not set")
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                auth=(self.key_id, self.key_secret),
                timeout=self.timeout,
                transport=self.transport,
            ) as client:
                response = await client.request(method, path, **kwargs)
                response.raise_for_status()
                return response.json()
        except httpx.TimeoutException as e:
            log.error(f"Razorpay {method} {path} timed out after {self.timeout}s")
            raise PaymentGatewayTimeout(f"Razorpay {method} {path} timed out") from e
        except httpx.HTTPStatusError as e:
            log.error(f"Razorpay {method} {path} returned {e.response.status_code}")
            raise PaymentGatewayError(f"Razorpay returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            log.error(f"Razorpay {method} {path} failed: {e}")
            raise PaymentGatewayError(str(e)) from e

    async def create_order(self, amount: Decimal, currency: str, receipt: str) -> Dict[str, Any]:
        payload = {
            "amount": to_paise(amount),
            "currency": currency,
            "receipt": receipt,
            "payment_capture": 1,
            "notes": {
                "order_id": receipt,
                "payment_for": "Cafeteria Food Order",
            },
        }
        return await self._request("POST", "/orders", json=payload)

    async def fetch_payment(self, payment_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/payments/{payment_id}")


def get_razorpay_client() -> RazorpayClient:
    """FastAPI dependency; tests override it with a client on a mock transport."""
    return RazorpayClient()
