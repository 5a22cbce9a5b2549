from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class PaymentOrderRequest(BaseModel):
    """Amount is in rupees; the gateway receives paise."""
    amount: Decimal = Field(..., gt=0)
    currency: str = "INR"
    receipt: str = Field(..., min_length=1)


class PaymentVerifyRequest(BaseModel):
    razorpay_order_id: str = Field(..., min_length=1)
    razorpay_payment_id: str = Field(..., min_length=1)
    razorpay_signature: str = Field(..., min_length=1)
    order_id: Optional[str] = None  # internal ORDxxx id
