from enum import Enum
from tortoise import fields, models


class OrderStatus(str, Enum):
    """Stored order status. DELIVERED is kept as "completed" in the table."""
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "completed"


# External (API) name <-> stored status. Only the API boundary uses this table.
EXTERNAL_TO_ORDER_STATUS = {
    "pending": OrderStatus.PENDING,
    "preparing": OrderStatus.PREPARING,
    "ready": OrderStatus.READY,
    "delivered": OrderStatus.DELIVERED,
}
ORDER_STATUS_TO_EXTERNAL = {status: name for name, status in EXTERNAL_TO_ORDER_STATUS.items()}

# Forward-only progression
ORDER_STATUS_RANK = {
    OrderStatus.PENDING: 0,
    OrderStatus.PREPARING: 1,
    OrderStatus.READY: 2,
    OrderStatus.DELIVERED: 3,
}


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class Order(models.Model):
    id = fields.IntField(primary_key=True)
    order_id = fields.CharField(max_length=16, unique=True)
    employee_id = fields.CharField(max_length=64)
    # Plain ids plus name snapshots: the order outlives catalog edits
    branch_id = fields.IntField()
    branch_name = fields.CharField(max_length=255, null=True)
    cafeteria_id = fields.IntField()
    cafeteria_name = fields.CharField(max_length=255, null=True)
    items = fields.TextField()  # JSON-serialized cart
    item_amount = fields.DecimalField(max_digits=14, decimal_places=2)
    cgst_amount = fields.DecimalField(max_digits=14, decimal_places=2)
    sgst_amount = fields.DecimalField(max_digits=14, decimal_places=2)
    total_amount = fields.DecimalField(max_digits=14, decimal_places=2)
    qr_value = fields.TextField(null=True)
    user_email = fields.CharField(max_length=255, null=True)
    user_name = fields.CharField(max_length=255, null=True)
    payment_status = fields.CharEnumField(PaymentStatus, default=PaymentStatus.PENDING)
    order_status = fields.CharEnumField(OrderStatus, default=OrderStatus.PENDING)
    razorpay_order_id = fields.CharField(max_length=64, null=True)
    razorpay_payment_id = fields.CharField(max_length=64, null=True)
    razorpay_signature = fields.CharField(max_length=256, null=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "orders"
        indexes = [
            ("employee_id",),            # Employee order history
            ("order_status",),           # Kitchen queue filtering
            ("created_at",),             # Time-based queries
        ]


class OrderSequence(models.Model):
    """Named counter row; locked while an order id is being allocated."""
    name = fields.CharField(max_length=32, primary_key=True)
    last_value = fields.IntField(default=0)

    class Meta:
        table = "order_sequences"
