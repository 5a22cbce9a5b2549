"""
Order id allocation.

Ids look like ORD001, ORD002, ... and come from a single counter row in
`order_sequences`. The counter is read and bumped inside one transaction that
locks the row, and allocations within this process are additionally queued
behind an asyncio.Lock, so two checkouts never receive the same id.
"""
import asyncio
import logging
import re
import weakref
from typing import Any, Optional

from tortoise.exceptions import IntegrityError
from tortoise.transactions import in_transaction

from canteen.core.db import storage_bound
from canteen.models.order import Order, OrderSequence

log = logging.getLogger(__name__)

ORDER_ID_PREFIX = "ORD"
SEQUENCE_NAME = "orders"
# Only well-formed ids count when seeding the counter from existing orders
ORDER_ID_PATTERN = re.compile(r"^ORD(\d{3})$")
# Ids handed out after ORD999 keep growing (ORD1000, ...)
ALLOCATED_ID_PATTERN = re.compile(r"^ORD(\d{3,})$")

_locks: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, asyncio.Lock]" = weakref.WeakKeyDictionary()


def _allocation_lock() -> asyncio.Lock:
    loop = asyncio.get_running_loop()
    lock = _locks.get(loop)
    if lock is None:
        lock = _locks[loop] = asyncio.Lock()
    return lock


def format_order_id(number: int) -> str:
    return f"{ORDER_ID_PREFIX}{number:03d}"


def parse_order_number(order_id: Optional[str]) -> Optional[int]:
    """Returns the sequence number of a well-formed 3-digit id, else None."""
    match = ORDER_ID_PATTERN.match(order_id or "")
    return int(match.group(1)) if match else None


async def _highest_persisted_number(conn: Any) -> int:
    order_ids = await Order.filter(order_id__startswith=ORDER_ID_PREFIX).using_db(conn).values_list("order_id", flat=True)
    numbers = [n for n in map(parse_order_number, order_ids) if n is not None]
    return max(numbers, default=0)


async def _ensure_sequence() -> None:
    """Creates the counter row on first use, seeded from existing orders."""
    if await OrderSequence.exists(name=SEQUENCE_NAME):
        return
    try:
        async with in_transaction() as conn:
            start = await _highest_persisted_number(conn)
            await OrderSequence.create(name=SEQUENCE_NAME, last_value=start, using_db=conn)
            log.info(f"Order id counter seeded at {start}")
    except IntegrityError:
        # Another worker created the row between the check and the insert
        log.info("Order id counter already seeded by another worker")


@storage_bound
async def allocate_order_id() -> str:
    """Reserves and returns the next order id."""
    async with _allocation_lock():
        await _ensure_sequence()
        async with in_transaction() as conn:
            # CRITICAL: lock the counter row so concurrent workers serialize here
            sequence = await OrderSequence.filter(name=SEQUENCE_NAME).using_db(conn).select_for_update().first()
            sequence.last_value += 1
            await sequence.save(update_fields=["last_value"], using_db=conn)
            number = sequence.last_value

    order_id = format_order_id(number)
    log.info(f"Allocated order id {order_id}")
    return order_id


async def is_allocated(order_id: str, conn: Any = None) -> bool:
    """True if the id is exactly as the allocator formats it and has already been handed out."""
    match = ALLOCATED_ID_PATTERN.match(order_id or "")
    if not match:
        return False
    number = int(match.group(1))
    # ORD0001 and ORD001 would share a number; only the canonical spelling counts
    if order_id != format_order_id(number):
        return False
    sequence = await OrderSequence.get_or_none(name=SEQUENCE_NAME).using_db(conn)
    return sequence is not None and 0 < number <= sequence.last_value
