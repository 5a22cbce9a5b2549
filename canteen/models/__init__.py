# canteen/models/__init__.py
from .catalog import Branch, Cafeteria, MenuCategory, MenuItem
from .employee import Employee, Role
from .order import Order, OrderSequence, OrderStatus, PaymentStatus

# Export all models
__all__ = [
    "Branch",
    "Cafeteria",
    "Employee",
    "MenuCategory",
    "MenuItem",
    "Order",
    "OrderSequence",
    "OrderStatus",
    "PaymentStatus",
    "Role",
]
