from decimal import Decimal
from types import SimpleNamespace

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

from canteen.core import config
from canteen.core.db import MODELS_MODULES
from canteen.core.security import create_access_token
from canteen.models.catalog import Branch, Cafeteria, MenuCategory, MenuItem
from canteen.models.employee import Role
from canteen.schemas.order import OrderRequest, PlacedOrder
from canteen.services.order_ids import allocate_order_id
from canteen.services.signatures import compute_signature

TEST_JWT_SECRET = "test-jwt-secret-0123456789-abcdefghijklmnop"
TEST_RAZORPAY_SECRET = "rzp_test_secret_key"


@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    """Secrets are injected per test; nothing is read from the environment."""
    monkeypatch.setattr(config, "JWT_SECRET", TEST_JWT_SECRET)
    monkeypatch.setattr(config, "RAZORPAY_KEY_ID", "rzp_test_key_id")
    monkeypatch.setattr(config, "RAZORPAY_KEY_SECRET", TEST_RAZORPAY_SECRET)


@pytest_asyncio.fixture
async def db():
    """Fresh in-memory SQLite database per test."""
    await Tortoise.init(db_url="sqlite://:memory:", modules={"models": MODELS_MODULES})
    await Tortoise.generate_schemas()
    yield
    await Tortoise._drop_databases()


@pytest_asyncio.fixture
async def catalog(db):
    branch = await Branch.create(name="Head Office")
    cafeteria = await Cafeteria.create(branch=branch, name="Main Cafeteria")
    category = await MenuCategory.create(cafeteria=cafeteria, name="Snacks", key="snacks")
    item = await MenuItem.create(
        cafeteria=cafeteria, category=category, name="Paneer Wrap", price=Decimal("50.00")
    )
    return SimpleNamespace(branch=branch, cafeteria=cafeteria, category=category, item=item)


@pytest_asyncio.fixture
async def client(db):
    from canteen.main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


def auth_headers(employee_id: str = "EMP001", role: Role = Role.EMPLOYEE) -> dict:
    return {"Authorization": f"Bearer {create_access_token(employee_id, role)}"}


def make_cart_request(catalog, **overrides) -> OrderRequest:
    data = {
        "branchId": catalog.branch.id,
        "cafeteriaId": catalog.cafeteria.id,
        "cart": [{"itemId": 1, "qty": 2, "price": 50}],
        "itemAmount": "100",
        "cgstAmount": "2.5",
        "sgstAmount": "2.5",
        "total": "105",
        "qrValue": "qr-payload",
        "userEmail": "asha@example.com",
        "userName": "Asha",
    }
    data.update(overrides)
    return OrderRequest(**data)


async def make_placed_order(catalog, **overrides) -> PlacedOrder:
    request = make_cart_request(catalog, **overrides)
    return PlacedOrder(**request.model_dump(), order_id=await allocate_order_id())


@pytest.fixture
def employee_headers():
    """Tokens are minted after test_settings has installed the signing secret."""
    return auth_headers("EMP001")


@pytest.fixture
def admin_headers():
    return auth_headers("ADM001", Role.ADMIN)


def signed_payment(payment_id: str = "pay_001", gateway_order_id: str = "order_rzp1") -> dict:
    """Razorpay checkout fields with a signature made from the test key secret."""
    return {
        "razorpay_order_id": gateway_order_id,
        "razorpay_payment_id": payment_id,
        "razorpay_signature": compute_signature(gateway_order_id, payment_id, secret=TEST_RAZORPAY_SECRET),
    }
