"""
Razorpay payment signatures.

Razorpay signs `<razorpay_order_id>|<razorpay_payment_id>` with the account's
key secret (HMAC-SHA256, hex). Only a constant-time exact match of the
recomputed value counts as authentic. The secret is read from configuration at
call time and never logged.
"""
import hashlib
import hmac
from typing import Optional

from canteen.core import config
from canteen.core.errors import ConfigurationError


def compute_signature(provider_order_id: str, provider_payment_id: str, secret: Optional[str] = None) -> str:
    secret = config.RAZORPAY_KEY_SECRET if secret is None else secret
    if not secret:
        raise ConfigurationError("RAZORPAY_KEY_SECRET is not set")
    body = f"{provider_order_id}|{provider_payment_id}"
    return hmac.new(secret.encode(), body.encode(), hashlib.sha256).hexdigest()


def is_authentic_signature(
    provider_order_id: str,
    provider_payment_id: str,
    signature: str,
    secret: Optional[str] = None,
) -> bool:
    expected = compute_signature(provider_order_id, provider_payment_id, secret)
    return hmac.compare_digest(expected.encode(), (signature or "").encode())
