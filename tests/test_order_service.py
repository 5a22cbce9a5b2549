from decimal import Decimal

import pytest

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
from canteen.models.order import Order, OrderStatus, PaymentStatus
from canteen.schemas.order import PlacedOrder
from canteen.services.order_service import (
    advance_status,
    confirm_order_after_payment,
    create_order,
    get_order_by_order_id,
    get_order_receipt,
    list_all_orders,
    list_orders_for_employee,
    place_order,
    record_payment,
)
from conftest import make_cart_request, make_placed_order, signed_payment


# --- placement ---

@pytest.mark.asyncio
async def test_place_order_allocates_id_without_persisting(catalog):
    placed = await place_order(make_cart_request(catalog))

    assert placed.order_id == "ORD001"
    assert placed.total == Decimal("105")
    assert await Order.all().count() == 0


@pytest.mark.asyncio
async def test_place_order_rejects_inconsistent_total(catalog):
    with pytest.raises(ValidationError):
        await place_order(make_cart_request(catalog, total="110"))


@pytest.mark.asyncio
async def test_place_order_requires_existing_references(catalog):
    with pytest.raises(ReferenceNotFound):
        await place_order(make_cart_request(catalog, cafeteriaId=9999))
    with pytest.raises(ReferenceNotFound):
        await place_order(make_cart_request(catalog, branchId=9999))


@pytest.mark.asyncio
async def test_cafeteria_must_belong_to_branch(catalog):
    other_branch = await Branch.create(name="Annex")
    with pytest.raises(ValidationError):
        await place_order(make_cart_request(catalog, branchId=other_branch.id))


# --- ledger ---

@pytest.mark.asyncio
async def test_round_trip_preserves_cart_and_amounts(catalog):
    placed = await make_placed_order(catalog)
    await create_order("EMP001", placed)

    order = await get_order_by_order_id(placed.order_id)

    assert order.cart == [{"itemId": 1, "qty": 2, "price": 50}]
    assert order.item_amount == Decimal("100")
    assert order.cgst_amount == Decimal("2.5")
    assert order.sgst_amount == Decimal("2.5")
    assert order.total == Decimal("105")
    assert order.order_status == "pending"
    assert order.payment_status == "pending"
    assert order.branch_name == "Head Office"
    assert order.cafeteria_name == "Main Cafeteria"


@pytest.mark.asyncio
async def test_view_uses_camel_case_keys(catalog):
    placed = await make_placed_order(catalog)
    view = await create_order("EMP001", placed)

    data = view.to_api()
    for key in ("orderId", "branchName", "cafeteriaName", "itemAmount", "qrValue", "orderStatus", "orderTime"):
        assert key in data


@pytest.mark.asyncio
async def test_name_snapshot_survives_catalog_rename(catalog):
    placed = await make_placed_order(catalog)
    await create_order("EMP001", placed)

    await Cafeteria.filter(id=catalog.cafeteria.id).update(name="Renamed Cafeteria")

    order = await get_order_by_order_id(placed.order_id)
    assert order.cafeteria_name == "Main Cafeteria"


@pytest.mark.asyncio
async def test_create_duplicate_order_id_conflicts(catalog):
    placed = await make_placed_order(catalog)
    await create_order("EMP001", placed)

    with pytest.raises(Conflict):
        await create_order("EMP001", placed)


@pytest.mark.asyncio
async def test_malformed_cart_reads_as_empty(catalog):
    placed = await make_placed_order(catalog)
    await create_order("EMP001", placed)
    await Order.filter(order_id=placed.order_id).update(items="{not json")

    order = await get_order_by_order_id(placed.order_id)

    assert order.cart == []
    assert order.total == Decimal("105")


@pytest.mark.asyncio
async def test_get_unknown_order_raises_not_found(db):
    with pytest.raises(NotFound):
        await get_order_by_order_id("ORD404")


@pytest.mark.asyncio
async def test_receipt_leaves_out_owner_details(catalog):
    placed = await make_placed_order(catalog)
    await create_order("EMP001", placed)

    data = (await get_order_receipt(placed.order_id)).to_api()

    assert data["orderId"] == placed.order_id
    assert data["userName"] == "Asha"
    assert data["total"] == 105
    assert "employeeId" not in data
    assert "userEmail" not in data
    with pytest.raises(NotFound):
        await get_order_receipt("ORD404")


@pytest.mark.asyncio
async def test_record_payment_is_idempotent(catalog):
    placed = await make_placed_order(catalog)
    await create_order("EMP001", placed)
    correlation = {
        "razorpay_order_id": "order_abc",
        "razorpay_payment_id": "pay_abc",
        "razorpay_signature": "sig",
    }

    first = await record_payment(placed.order_id, PaymentStatus.PAID, correlation)
    second = await record_payment(placed.order_id, PaymentStatus.PAID, correlation)

    assert first.to_api() == second.to_api()
    assert second.payment_status == "paid"
    assert await Order.all().count() == 1
    stored = await Order.get(order_id=placed.order_id)
    assert stored.razorpay_payment_id == "pay_abc"
    assert stored.total_amount == Decimal("105")


@pytest.mark.asyncio
async def test_record_payment_rejects_unknown_fields(catalog):
    placed = await make_placed_order(catalog)
    await create_order("EMP001", placed)

    with pytest.raises(ValidationError):
        await record_payment(placed.order_id, PaymentStatus.PAID, {"amount": "0"})


@pytest.mark.asyncio
async def test_record_payment_unknown_order(db):
    with pytest.raises(NotFound):
        await record_payment("ORD999", PaymentStatus.PAID, {})


# --- confirmation ---

@pytest.mark.asyncio
async def test_confirm_persists_paid_order(catalog):
    placed = await make_placed_order(catalog)
    payment = signed_payment("pay_001")

    order, created = await confirm_order_after_payment("EMP001", placed, **payment)

    assert created is True
    assert order.payment_status == "paid"
    assert order.employee_id == "EMP001"
    stored = await Order.get(order_id=placed.order_id)
    assert stored.razorpay_order_id == "order_rzp1"
    assert stored.razorpay_payment_id == "pay_001"
    assert stored.razorpay_signature == payment["razorpay_signature"]


@pytest.mark.asyncio
async def test_confirm_requires_authentic_signature(catalog):
    placed = await make_placed_order(catalog)
    forged = {**signed_payment("pay_001"), "razorpay_signature": "0" * 64}

    with pytest.raises(AuthenticationFailed):
        await confirm_order_after_payment("EMP001", placed, **forged)
    with pytest.raises(AuthenticationFailed):
        await confirm_order_after_payment("EMP001", placed, "order_rzp1", "pay_001", "")
    # signature made for another payment does not carry over
    other = signed_payment("pay_002")
    with pytest.raises(AuthenticationFailed):
        await confirm_order_after_payment(
            "EMP001", placed, "order_rzp1", "pay_001", other["razorpay_signature"]
        )
    assert await Order.all().count() == 0


@pytest.mark.asyncio
async def test_confirm_replay_does_not_duplicate(catalog):
    placed = await make_placed_order(catalog)

    first, created_first = await confirm_order_after_payment("EMP001", placed, **signed_payment("pay_001"))
    second, created_second = await confirm_order_after_payment("EMP001", placed, **signed_payment("pay_001"))

    assert created_first is True
    assert created_second is False
    assert first.to_api() == second.to_api()
    assert await Order.filter(order_id=placed.order_id).count() == 1


@pytest.mark.asyncio
async def test_confirm_with_different_payment_conflicts(catalog):
    placed = await make_placed_order(catalog)
    await confirm_order_after_payment("EMP001", placed, **signed_payment("pay_001"))

    with pytest.raises(Conflict):
        await confirm_order_after_payment("EMP001", placed, **signed_payment("pay_002"))
    with pytest.raises(Conflict):
        await confirm_order_after_payment("EMP002", placed, **signed_payment("pay_001"))


@pytest.mark.asyncio
async def test_confirm_does_not_revive_failed_payment(catalog):
    placed = await make_placed_order(catalog)
    await confirm_order_after_payment("EMP001", placed, **signed_payment("pay_001"))
    await record_payment(placed.order_id, PaymentStatus.FAILED, {"razorpay_signature": "f" * 64})

    with pytest.raises(Conflict):
        await confirm_order_after_payment("EMP001", placed, **signed_payment("pay_001"))

    stored = await Order.get(order_id=placed.order_id)
    assert stored.payment_status == PaymentStatus.FAILED
    assert stored.razorpay_signature == "f" * 64


@pytest.mark.asyncio
async def test_confirm_rejects_ids_never_allocated(catalog):
    request = make_cart_request(catalog)
    forged = PlacedOrder(**request.model_dump(), order_id="ORD777")

    with pytest.raises(ValidationError):
        await confirm_order_after_payment("EMP001", forged, **signed_payment("pay_001"))
    assert await Order.all().count() == 0


@pytest.mark.asyncio
async def test_confirm_rejects_padded_spelling_of_issued_id(catalog):
    issued = await make_placed_order(catalog)
    await confirm_order_after_payment("EMP001", issued, **signed_payment("pay_001"))
    padded = PlacedOrder(**make_cart_request(catalog).model_dump(), order_id="ORD0001")

    with pytest.raises(ValidationError):
        await confirm_order_after_payment("EMP002", padded, **signed_payment("pay_002"))
    assert await Order.filter(order_id="ORD0001").count() == 0


@pytest.mark.asyncio
async def test_confirm_rolls_back_on_missing_reference(catalog):
    placed = await make_placed_order(catalog, cafeteriaId=9999)

    with pytest.raises(ReferenceNotFound):
        await confirm_order_after_payment("EMP001", placed, **signed_payment("pay_001"))
    assert await Order.all().count() == 0


# --- status progression ---

@pytest.mark.asyncio
async def test_delivered_is_stored_as_completed(catalog):
    placed = await make_placed_order(catalog)
    await create_order("EMP001", placed)

    for step in ("preparing", "ready", "delivered"):
        order = await advance_status(placed.order_id, step)
        assert order.order_status == step

    stored = await Order.get(order_id=placed.order_id)
    assert stored.order_status == OrderStatus.DELIVERED
    assert stored.order_status.value == "completed"


@pytest.mark.asyncio
@pytest.mark.parametrize("bad_status", ["completed", "cancelled", "DELIVERED", ""])
async def test_advance_status_rejects_unknown_values(catalog, bad_status):
    placed = await make_placed_order(catalog)
    await create_order("EMP001", placed)

    with pytest.raises(InvalidStatus):
        await advance_status(placed.order_id, bad_status)


@pytest.mark.asyncio
async def test_advance_status_unknown_order(db):
    with pytest.raises(NotFound):
        await advance_status("ORD404", "ready")


@pytest.mark.asyncio
async def test_status_never_moves_backwards(catalog):
    placed = await make_placed_order(catalog)
    await create_order("EMP001", placed)
    await advance_status(placed.order_id, "ready")

    with pytest.raises(InvalidStatusTransition):
        await advance_status(placed.order_id, "preparing")

    # re-applying the current status is accepted
    order = await advance_status(placed.order_id, "ready")
    assert order.order_status == "ready"


# --- listings ---

@pytest.mark.asyncio
async def test_listings_are_scoped_and_newest_first(catalog):
    first = await make_placed_order(catalog)
    second = await make_placed_order(catalog)
    other = await make_placed_order(catalog)
    await create_order("EMP001", first)
    await create_order("EMP001", second)
    await create_order("EMP002", other)

    mine = await list_orders_for_employee("EMP001")
    everything = await list_all_orders()

    assert [o.order_id for o in mine] == [second.order_id, first.order_id]
    assert [o.order_id for o in everything] == [other.order_id, second.order_id, first.order_id]
