# scripts/seed_data.py
import asyncio
import logging
import os
from decimal import Decimal
from canteen.core.db import init_db, close_db
from canteen.core.logging_config import setup_logging
from canteen.core.security import hash_password
from canteen.models.catalog import Branch, Cafeteria, MenuCategory, MenuItem
from canteen.models.employee import Employee, Role

log = logging.getLogger("seed_data")

ADMIN_EMPLOYEE_ID = os.getenv("SEED_ADMIN_EMPLOYEE_ID", "ADMIN001")
ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD")


async def seed():
    # One branch with one cafeteria
    branch, _ = await Branch.get_or_create(name="Head Office")
    cafeteria, _ = await Cafeteria.get_or_create(branch=branch, name="Main Cafeteria")
    log.info(f"Branch {branch.id}, cafeteria {cafeteria.id}")

    # Menu categories
    snacks, _ = await MenuCategory.get_or_create(cafeteria=cafeteria, key="snacks", defaults={"name": "Snacks"})
    drinks, _ = await MenuCategory.get_or_create(cafeteria=cafeteria, key="beverages", defaults={"name": "Beverages"})

    # Menu items
    await MenuItem.get_or_create(
        cafeteria=cafeteria, category=snacks, name="Paneer Wrap",
        defaults={"price": Decimal("149.00"), "cgst": Decimal("2.5"), "sgst": Decimal("2.5")},
    )
    await MenuItem.get_or_create(
        cafeteria=cafeteria, category=snacks, name="Veg Sandwich",
        defaults={"price": Decimal("99.00"), "cgst": Decimal("2.5"), "sgst": Decimal("2.5")},
    )
    await MenuItem.get_or_create(
        cafeteria=cafeteria, category=drinks, name="Filter Coffee",
        defaults={"price": Decimal("30.00"), "cgst": Decimal("2.5"), "sgst": Decimal("2.5")},
    )
    log.info("Menu seeded.")

    if ADMIN_PASSWORD:
        _, created = await Employee.get_or_create(
            employee_id=ADMIN_EMPLOYEE_ID,
            defaults={
                "full_name": "Cafeteria Admin",
                "email": f"{ADMIN_EMPLOYEE_ID.lower()}@example.com",
                "phone": "0000000000",
                "branch": branch.name,
                "password_hash": await hash_password(ADMIN_PASSWORD),
                "role": Role.ADMIN,
            },
        )
        log.info(f"Admin {ADMIN_EMPLOYEE_ID} {'created' if created else 'already present'}.")
    else:
        log.info("SEED_ADMIN_PASSWORD not set; skipping admin account.")


async def main():
    setup_logging()
    await init_db()
    await seed()
    await close_db()

if __name__ == "__main__":
    asyncio.run(main())
