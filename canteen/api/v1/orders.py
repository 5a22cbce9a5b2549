import logging
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from canteen.core.security import Identity, get_current_identity, require_admin
from canteen.schemas.order import OrderConfirmRequest, OrderRequest, OrderStatusUpdate
from canteen.schemas.response import SuccessResponse
from canteen.services.order_service import (
    advance_status,
    confirm_order_after_payment,
    get_order_receipt,
    list_all_orders,
    list_orders_for_employee,
    place_order,
)

router = APIRouter()
log = logging.getLogger(__name__)


@router.post("", response_model=SuccessResponse)
async def place_order_endpoint(request_data: OrderRequest, identity: Identity = Depends(get_current_identity)):
    """
    Checkout: validates the cart and allocates an order id for payment initiation.
    The order is stored only once the payment is confirmed.
    """
    placed = await place_order(request_data)
    log.info(f"Order id {placed.order_id} allocated for employee {identity.employee_id}")
    return SuccessResponse(data=placed.to_api())


@router.post("/confirm", response_model=SuccessResponse)
async def confirm_order_endpoint(payload: OrderConfirmRequest, identity: Identity = Depends(get_current_identity)):
    """
    Stores the order as paid once the Razorpay signature checks out.
    Replays return the stored order with 200.
    """
    order, created = await confirm_order_after_payment(
        identity.employee_id,
        payload.order,
        payload.razorpay_order_id,
        payload.razorpay_payment_id,
        payload.razorpay_signature,
    )
    body = SuccessResponse(message="Order confirmed after payment.", data=order.to_api())
    if created:
        return JSONResponse(status_code=status.HTTP_201_CREATED, content=body.model_dump(mode="json"))
    return body


@router.get("/mine", response_model=SuccessResponse)
async def my_orders_endpoint(identity: Identity = Depends(get_current_identity)):
    """Orders placed by the caller, newest first."""
    orders = await list_orders_for_employee(identity.employee_id)
    return SuccessResponse(data=[o.to_api() for o in orders])


@router.get("/all", response_model=SuccessResponse)
async def all_orders_endpoint(admin: Identity = Depends(require_admin)):
    """Every order, newest first. Administrators only."""
    orders = await list_all_orders()
    return SuccessResponse(data=[o.to_api() for o in orders])


@router.get("/public/{order_id}", response_model=SuccessResponse)
async def public_order_endpoint(order_id: str):
    """Receipt lookup used by the QR code; no login required."""
    receipt = await get_order_receipt(order_id)
    return SuccessResponse(data=receipt.to_api())


@router.patch("/{order_id}/status", response_model=SuccessResponse)
async def update_status_endpoint(order_id: str, payload: OrderStatusUpdate, admin: Identity = Depends(require_admin)):
    """
    Updates status ('pending', 'preparing', 'ready', 'delivered').
    """
    order = await advance_status(order_id, payload.order_status)
    log.info(f"Order {order_id} status set to {order.order_status} by {admin.employee_id}")
    return SuccessResponse(message=f"Order status successfully updated to {order.order_status}", data=order.to_api())
