import logging
from fastapi import APIRouter, Depends, status

from canteen.core.errors import AuthenticationFailed
from canteen.core.security import Identity, get_current_identity
from canteen.schemas.payment import PaymentOrderRequest, PaymentVerifyRequest
from canteen.schemas.response import SuccessResponse
from canteen.services.payment_service import verify_payment
from canteen.services.razorpay_client import RazorpayClient, get_razorpay_client

router = APIRouter()
log = logging.getLogger(__name__)


@router.post("/create-order", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_payment_order_endpoint(
    payload: PaymentOrderRequest,
    identity: Identity = Depends(get_current_identity),
    razorpay: RazorpayClient = Depends(get_razorpay_client),
):
    """Opens a Razorpay order for the given receipt (our order id)."""
    gateway_order = await razorpay.create_order(payload.amount, payload.currency, payload.receipt)
    log.info(f"Razorpay order {gateway_order.get('id')} created for receipt {payload.receipt}")
    return SuccessResponse(data=gateway_order)


@router.post("/verify", response_model=SuccessResponse)
async def verify_payment_endpoint(payload: PaymentVerifyRequest, identity: Identity = Depends(get_current_identity)):
    """Checks the Razorpay signature and records the result on the order."""
    result = await verify_payment(
        payload.razorpay_order_id,
        payload.razorpay_payment_id,
        payload.razorpay_signature,
        payload.order_id,
    )
    if not result.authentic:
        raise AuthenticationFailed(f"Signature mismatch reported by {identity.employee_id}")
    return SuccessResponse(
        message="Payment verified successfully",
        data={
            "payment_id": payload.razorpay_payment_id,
            "order": result.order.to_api() if result.order else None,
        },
    )


@router.get("/details/{payment_id}", response_model=SuccessResponse)
async def payment_details_endpoint(
    payment_id: str,
    identity: Identity = Depends(get_current_identity),
    razorpay: RazorpayClient = Depends(get_razorpay_client),
):
    payment = await razorpay.fetch_payment(payment_id)
    return SuccessResponse(data=payment)
