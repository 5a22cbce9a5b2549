import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from tortoise.exceptions import IntegrityError
from tortoise.transactions import in_transaction

from canteen.core.db import storage_bound
from canteen.core.errors import (
    AuthenticationFailed,
    Conflict,
    InvalidStatus,
    InvalidStatusTransition,
    NotFound,
    ReferenceNotFound,
    ValidationError,
)
from canteen.models.catalog import Branch, Cafeteria
from canteen.models.order import (
    EXTERNAL_TO_ORDER_STATUS,
    ORDER_STATUS_RANK,
    ORDER_STATUS_TO_EXTERNAL,
    Order,
    PaymentStatus,
)
from canteen.schemas.order import OrderReceipt, OrderRequest, OrderView, PlacedOrder
from canteen.services.order_ids import allocate_order_id, is_allocated
from canteen.services.signatures import is_authentic_signature

log = logging.getLogger(__name__)

# Payment correlation fields the ledger accepts from the gateway
CORRELATION_FIELDS = ("razorpay_order_id", "razorpay_payment_id", "razorpay_signature")


# ----------- Read model -----------

def decode_cart(order: Order) -> List[Any]:
    """Decodes the stored cart. A corrupt blob reads as an empty cart."""
    if not order.items:
        return []
    try:
        cart = json.loads(order.items)
    except (TypeError, ValueError):
        log.warning(f"Malformed cart stored for order {order.order_id}; returning empty cart")
        return []
    if not isinstance(cart, list):
        log.warning(f"Cart for order {order.order_id} is not a list; returning empty cart")
        return []
    return cart


def to_order_view(order: Order) -> OrderView:
    return OrderView(
        id=order.id,
        order_id=order.order_id,
        employee_id=order.employee_id,
        branch_id=order.branch_id,
        branch_name=order.branch_name,
        cafeteria_id=order.cafeteria_id,
        cafeteria_name=order.cafeteria_name,
        cart=decode_cart(order),
        item_amount=order.item_amount,
        cgst_amount=order.cgst_amount,
        sgst_amount=order.sgst_amount,
        total=order.total_amount,
        qr_value=order.qr_value,
        user_email=order.user_email,
        user_name=order.user_name,
        payment_status=order.payment_status.value,
        order_status=ORDER_STATUS_TO_EXTERNAL[order.order_status],
        order_time=order.created_at,
    )


# ----------- Validation helpers -----------

def check_amounts(order: OrderRequest) -> None:
    """Client-supplied amounts must add up; the cart itself is not repriced."""
    if order.item_amount + order.cgst_amount + order.sgst_amount != order.total:
        raise ValidationError("total must equal itemAmount + cgstAmount + sgstAmount")


async def resolve_catalog_refs(branch_id: int, cafeteria_id: int, conn: Any = None) -> Tuple[Branch, Cafeteria]:
    branch = await Branch.get_or_none(id=branch_id).using_db(conn)
    if not branch:
        raise ReferenceNotFound(f"Branch {branch_id} not found")
    cafeteria = await Cafeteria.get_or_none(id=cafeteria_id).using_db(conn)
    if not cafeteria:
        raise ReferenceNotFound(f"Cafeteria {cafeteria_id} not found")
    if cafeteria.branch_id != branch.id:
        raise ValidationError(f"Cafeteria {cafeteria_id} does not belong to branch {branch_id}")
    return branch, cafeteria


# ----------- Writes -----------

@storage_bound
async def place_order(order: OrderRequest) -> PlacedOrder:
    """
    Checkout step: validates the cart and allocates an order id.
    Nothing is persisted until the payment is confirmed.
    """
    check_amounts(order)
    await resolve_catalog_refs(order.branch_id, order.cafeteria_id)
    order_id = await allocate_order_id()
    return PlacedOrder(**order.model_dump(), order_id=order_id)


async def _insert_order(
    employee_id: str,
    order: PlacedOrder,
    payment_status: PaymentStatus,
    conn: Any,
) -> Order:
    check_amounts(order)
    branch, cafeteria = await resolve_catalog_refs(order.branch_id, order.cafeteria_id, conn)
    try:
        return await Order.create(
            order_id=order.order_id,
            employee_id=employee_id,
            branch_id=branch.id,
            branch_name=branch.name,
            cafeteria_id=cafeteria.id,
            cafeteria_name=cafeteria.name,
            items=json.dumps(order.cart, default=str),
            item_amount=order.item_amount,
            cgst_amount=order.cgst_amount,
            sgst_amount=order.sgst_amount,
            total_amount=order.total,
            qr_value=order.qr_value,
            user_email=order.user_email,
            user_name=order.user_name,
            payment_status=payment_status,
            using_db=conn,
        )
    except IntegrityError as e:
        raise Conflict(f"Order {order.order_id} already exists") from e


async def _apply_payment(
    order_id: str,
    status: PaymentStatus,
    correlation: Dict[str, Optional[str]],
    conn: Any,
) -> Order:
    unknown = set(correlation) - set(CORRELATION_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown payment fields: {', '.join(sorted(unknown))}")

    order = await Order.filter(order_id=order_id).using_db(conn).select_for_update().first()
    if not order:
        raise NotFound(f"Order {order_id} not found")

    updates = {"payment_status": status}
    updates.update({k: v for k, v in correlation.items() if v is not None})
    changed = [name for name, value in updates.items() if getattr(order, name) != value]
    if changed:
        for name in changed:
            setattr(order, name, updates[name])
        await order.save(update_fields=changed + ["updated_at"], using_db=conn)
    return order


@storage_bound
async def create_order(
    employee_id: str,
    order: PlacedOrder,
    payment_status: PaymentStatus = PaymentStatus.PENDING,
) -> OrderView:
    """Persists an order, snapshotting the branch and cafeteria names."""
    async with in_transaction() as conn:
        stored = await _insert_order(employee_id, order, payment_status, conn)
    log.info(f"Order {stored.order_id} stored for employee {employee_id}")
    return to_order_view(stored)


@storage_bound
async def record_payment(
    order_id: str,
    status: PaymentStatus,
    correlation: Optional[Dict[str, Optional[str]]] = None,
) -> OrderView:
    """Sets the payment status and gateway correlation ids. Re-applying the same values is a no-op."""
    async with in_transaction() as conn:
        order = await _apply_payment(order_id, status, correlation or {}, conn)
    return to_order_view(order)


@storage_bound
async def confirm_order_after_payment(
    employee_id: str,
    order: PlacedOrder,
    razorpay_order_id: str,
    razorpay_payment_id: str,
    razorpay_signature: str,
) -> Tuple[OrderView, bool]:
    """
    Persists a paid order in one transaction. Returns (order, created).

    Nothing is written unless the Razorpay signature for the payment is
    authentic. Replaying an identical confirmation returns the stored order
    untouched; an order whose payment was marked failed is never re-marked paid
    here.
    """
    if not is_authentic_signature(razorpay_order_id, razorpay_payment_id, razorpay_signature):
        log.warning(f"Confirmation for order {order.order_id} rejected: signature mismatch")
        raise AuthenticationFailed(f"Signature mismatch confirming order {order.order_id}")
    if not await is_allocated(order.order_id):
        raise ValidationError(f"Order id {order.order_id} was not issued by this service")

    correlation = {
        "razorpay_order_id": razorpay_order_id,
        "razorpay_payment_id": razorpay_payment_id,
        "razorpay_signature": razorpay_signature,
    }
    async with in_transaction() as conn:
        existing = await Order.filter(order_id=order.order_id).using_db(conn).select_for_update().first()
        if existing:
            if existing.employee_id != employee_id:
                raise Conflict(f"Order {order.order_id} belongs to another employee")
            if existing.payment_status == PaymentStatus.FAILED:
                raise Conflict(f"Payment for order {order.order_id} failed verification")
            if existing.razorpay_payment_id and existing.razorpay_payment_id != razorpay_payment_id:
                raise Conflict(f"Order {order.order_id} was already confirmed with a different payment")
            created = False
        else:
            await _insert_order(employee_id, order, PaymentStatus.PAID, conn)
            created = True
        stored = await _apply_payment(order.order_id, PaymentStatus.PAID, correlation, conn)

    if created:
        log.info(f"Order {stored.order_id} confirmed after payment {razorpay_payment_id}")
    else:
        log.info(f"Order {stored.order_id} confirmation replayed")
    return to_order_view(stored), created


@storage_bound
async def advance_status(order_id: str, new_status: str) -> OrderView:
    """
    Moves an order forward through pending -> preparing -> ready -> delivered.
    Re-applying the current status is accepted; moving backwards is not.
    """
    target = EXTERNAL_TO_ORDER_STATUS.get(new_status)
    if target is None:
        raise InvalidStatus(f"Invalid order status: {new_status}")

    async with in_transaction() as conn:
        order = await Order.filter(order_id=order_id).using_db(conn).select_for_update().first()
        if not order:
            raise NotFound("Order not found")

        current = order.order_status
        if ORDER_STATUS_RANK[target] < ORDER_STATUS_RANK[current]:
            raise InvalidStatusTransition(
                f"Order {order_id} is {ORDER_STATUS_TO_EXTERNAL[current]}; cannot move back to {new_status}"
            )
        if target != current:
            order.order_status = target
            await order.save(update_fields=["order_status", "updated_at"], using_db=conn)
            log.info(f"Order {order_id} moved from {ORDER_STATUS_TO_EXTERNAL[current]} to {new_status}")

    return to_order_view(order)


# ----------- Reads -----------

@storage_bound
async def get_order_by_order_id(order_id: str) -> OrderView:
    order = await Order.get_or_none(order_id=order_id)
    if not order:
        raise NotFound("Order not found")
    return to_order_view(order)


@storage_bound
async def list_orders_for_employee(employee_id: str) -> List[OrderView]:
    orders = await Order.filter(employee_id=employee_id).order_by("-id")
    return [to_order_view(o) for o in orders]


@storage_bound
async def list_all_orders() -> List[OrderView]:
    orders = await Order.all().order_by("-id")
    return [to_order_view(o) for o in orders]


@storage_bound
async def get_order_receipt(order_id: str) -> OrderReceipt:
    """Receipt shown to whoever scans the order's QR code; carries no owner details."""
    order = await Order.get_or_none(order_id=order_id)
    if not order:
        raise NotFound("Order not found")
    view = to_order_view(order)
    return OrderReceipt(**view.model_dump(include=set(OrderReceipt.model_fields)))
