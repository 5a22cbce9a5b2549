from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from canteen.schemas.base import CamelModel, Money


class OrderRequest(CamelModel):
    """Schema for the cart submitted at checkout."""
    branch_id: int
    cafeteria_id: int
    cart: List[Dict[str, Any]] = Field(..., min_length=1)
    item_amount: Money = Field(..., ge=0)
    cgst_amount: Money = Field(..., ge=0)
    sgst_amount: Money = Field(..., ge=0)
    total: Money = Field(..., ge=0)
    qr_value: Optional[str] = None
    user_email: Optional[str] = None
    user_name: Optional[str] = None


class PlacedOrder(OrderRequest):
    """A checked-out cart carrying its allocated order id."""
    order_id: str


class OrderConfirmRequest(BaseModel):
    """
    Schema for persisting an order once the gateway reports success.
    The three Razorpay fields are the ones returned by checkout; the signature
    is checked before anything is stored.
    """
    order: PlacedOrder
    razorpay_order_id: str = Field(..., min_length=1)
    razorpay_payment_id: str = Field(..., min_length=1)
    razorpay_signature: str = Field(..., min_length=1)


class OrderStatusUpdate(BaseModel):
    """Schema for updating an order status. Checked against the allowed values by the ledger."""
    order_status: str


class OrderView(CamelModel):
    """Read model for a persisted order."""
    id: int
    order_id: str
    employee_id: str
    branch_id: int
    branch_name: Optional[str] = None
    cafeteria_id: int
    cafeteria_name: Optional[str] = None
    cart: List[Any]
    item_amount: Money
    cgst_amount: Money
    sgst_amount: Money
    total: Money
    qr_value: Optional[str] = None
    user_email: Optional[str] = None
    user_name: Optional[str] = None
    payment_status: str
    order_status: str
    order_time: datetime


class OrderReceipt(CamelModel):
    """Public receipt for the QR lookup: no employee id or email."""
    order_id: str
    branch_name: Optional[str] = None
    cafeteria_name: Optional[str] = None
    cart: List[Any]
    item_amount: Money
    cgst_amount: Money
    sgst_amount: Money
    total: Money
    qr_value: Optional[str] = None
    user_name: Optional[str] = None
    payment_status: str
    order_status: str
    order_time: datetime
