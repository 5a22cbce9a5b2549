"""
Razorpay payment confirmation.

Checks the gateway signature for a payment and records the outcome on the
internal order, if one is stored.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from canteen.core.errors import NotFound
from canteen.models.order import PaymentStatus
from canteen.schemas.order import OrderView
from canteen.services.order_service import record_payment
from canteen.services.signatures import compute_signature, is_authentic_signature

log = logging.getLogger(__name__)

__all__ = ["PaymentVerification", "compute_signature", "is_authentic_signature", "verify_payment"]


@dataclass
class PaymentVerification:
    authentic: bool
    order: Optional[OrderView] = None


async def _record_if_present(order_id: Optional[str], status: PaymentStatus, correlation: dict) -> Optional[OrderView]:
    if not order_id:
        return None
    try:
        return await record_payment(order_id, status, correlation)
    except NotFound:
        # The order is usually persisted only after this check succeeds
        log.info(f"Payment result for {order_id} not recorded: order not stored yet")
        return None


async def verify_payment(
    razorpay_order_id: str,
    razorpay_payment_id: str,
    razorpay_signature: str,
    order_id: Optional[str] = None,
) -> PaymentVerification:
    """
    Checks the gateway signature and records the outcome on the internal order.
    Authentic: order becomes paid with the three gateway ids.
    Not authentic: order becomes failed and keeps the attempted signature.
    """
    authentic = is_authentic_signature(razorpay_order_id, razorpay_payment_id, razorpay_signature)

    if authentic:
        order = await _record_if_present(order_id, PaymentStatus.PAID, {
            "razorpay_order_id": razorpay_order_id,
            "razorpay_payment_id": razorpay_payment_id,
            "razorpay_signature": razorpay_signature,
        })
        log.info(f"Payment {razorpay_payment_id} verified for order {order_id}")
        return PaymentVerification(authentic=True, order=order)

    order = await _record_if_present(order_id, PaymentStatus.FAILED, {"razorpay_signature": razorpay_signature})
    log.warning(f"Payment signature mismatch for gateway order {razorpay_order_id} (order {order_id})")
    return PaymentVerification(authentic=False, order=order)
