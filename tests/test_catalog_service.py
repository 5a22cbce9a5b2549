from decimal import Decimal

import pytest

from canteen.core.errors import NotFound, ReferenceNotFound, ValidationError
from canteen.models.catalog import Cafeteria, MenuCategory, MenuItem
from canteen.schemas.catalog import CafeteriaRequest, MenuCategoryRequest, MenuItemRequest
from canteen.services import catalog_service


@pytest.mark.asyncio
async def test_branch_and_cafeteria_crud(db):
    branch = await catalog_service.add_branch("Head Office")
    cafeteria = await catalog_service.add_cafeteria(CafeteriaRequest(branchId=branch.id, name="Main"))

    updated = await catalog_service.update_cafeteria(
        cafeteria.id, CafeteriaRequest(branchId=branch.id, name="Main Hall", image_url="https://img/1.png")
    )

    assert [b.name for b in await catalog_service.list_branches()] == ["Head Office"]
    assert updated.name == "Main Hall"
    assert updated.image_url == "https://img/1.png"
    assert [c.id for c in await catalog_service.list_cafeterias(branch.id)] == [cafeteria.id]


@pytest.mark.asyncio
async def test_cafeteria_requires_existing_branch(db):
    with pytest.raises(ReferenceNotFound):
        await catalog_service.add_cafeteria(CafeteriaRequest(branchId=42, name="Ghost"))


@pytest.mark.asyncio
async def test_menu_item_lifecycle(catalog):
    request = MenuItemRequest(
        cafeteriaId=catalog.cafeteria.id,
        categoryId=catalog.category.id,
        name="Masala Dosa",
        price=Decimal("80"),
        cgst=Decimal("2.5"),
        sgst=Decimal("2.5"),
    )
    item = await catalog_service.add_menu_item(request)
    assert item.category_key == "snacks"

    listed = await catalog_service.list_menu_items(catalog.cafeteria.id)
    assert {i.name for i in listed} == {"Paneer Wrap", "Masala Dosa"}

    updated = await catalog_service.update_menu_item(item.id, request.model_copy(update={"price": Decimal("85")}))
    assert updated.price == Decimal("85")

    await catalog_service.delete_menu_item(item.id)
    with pytest.raises(NotFound):
        await catalog_service.get_menu_item(item.id)
    with pytest.raises(NotFound):
        await catalog_service.delete_menu_item(item.id)


@pytest.mark.asyncio
async def test_menu_item_category_must_belong_to_cafeteria(catalog):
    other = await Cafeteria.create(branch=catalog.branch, name="Annex")
    foreign_category = await MenuCategory.create(cafeteria=other, name="Drinks", key="drinks")

    with pytest.raises(ValidationError):
        await catalog_service.add_menu_item(MenuItemRequest(
            cafeteriaId=catalog.cafeteria.id,
            categoryId=foreign_category.id,
            name="Lassi",
            price=Decimal("40"),
        ))


@pytest.mark.asyncio
async def test_menu_category_requires_cafeteria(db):
    with pytest.raises(ReferenceNotFound):
        await catalog_service.add_menu_category(MenuCategoryRequest(cafeteriaId=7, name="Snacks", key="snacks"))


@pytest.mark.asyncio
async def test_delete_cafeteria_cascades_to_menu(catalog):
    second_item = await MenuItem.create(
        cafeteria=catalog.cafeteria, category=catalog.category, name="Samosa", price=Decimal("20")
    )
    survivor = await Cafeteria.create(branch=catalog.branch, name="Annex")
    survivor_category = await MenuCategory.create(cafeteria=survivor, name="Drinks", key="drinks")

    removed = await catalog_service.delete_cafeteria(catalog.cafeteria.id)

    assert removed == {"menu_items": 2, "menu_categories": 1}
    for item_id in (catalog.item.id, second_item.id):
        with pytest.raises(NotFound):
            await catalog_service.get_menu_item(item_id)
    with pytest.raises(NotFound):
        await catalog_service.get_cafeteria(catalog.cafeteria.id)
    assert await catalog_service.list_menu_categories(catalog.cafeteria.id) == []
    assert await MenuCategory.exists(id=survivor_category.id)


@pytest.mark.asyncio
async def test_delete_unknown_cafeteria(db):
    with pytest.raises(NotFound):
        await catalog_service.delete_cafeteria(404)
