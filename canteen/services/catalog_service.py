import logging
from typing import Dict, List, Optional

from tortoise.transactions import in_transaction

from canteen.core.db import storage_bound
from canteen.core.errors import NotFound, ReferenceNotFound, ValidationError
from canteen.models.catalog import Branch, Cafeteria, MenuCategory, MenuItem
from canteen.schemas.catalog import (
    BranchView,
    CafeteriaRequest,
    CafeteriaView,
    MenuCategoryRequest,
    MenuCategoryView,
    MenuItemRequest,
    MenuItemView,
)

log = logging.getLogger(__name__)


def _cafeteria_view(c: Cafeteria) -> CafeteriaView:
    return CafeteriaView(id=c.id, branch_id=c.branch_id, name=c.name, image_url=c.image_url)


def _category_view(c: MenuCategory) -> MenuCategoryView:
    return MenuCategoryView(id=c.id, cafeteria_id=c.cafeteria_id, name=c.name, key=c.key, image=c.image)


def _menu_item_view(m: MenuItem, category_key: Optional[str] = None) -> MenuItemView:
    return MenuItemView(
        id=m.id,
        cafeteria_id=m.cafeteria_id,
        category_id=m.category_id,
        category_key=category_key,
        name=m.name,
        description=m.description,
        price=m.price,
        image_url=m.image_url,
        cgst=m.cgst,
        sgst=m.sgst,
    )


async def _require(model, object_id: int, label: str, error=NotFound):
    obj = await model.get_or_none(id=object_id)
    if not obj:
        raise error(f"{label} {object_id} not found")
    return obj


# ----------- Branches -----------

@storage_bound
async def list_branches() -> List[BranchView]:
    return [BranchView(id=b.id, name=b.name) for b in await Branch.all().order_by("id")]


@storage_bound
async def add_branch(name: str) -> BranchView:
    branch = await Branch.create(name=name)
    log.info(f"Branch '{branch.name}' created with id {branch.id}")
    return BranchView(id=branch.id, name=branch.name)


# ----------- Cafeterias -----------

@storage_bound
async def list_cafeterias(branch_id: Optional[int] = None) -> List[CafeteriaView]:
    query = Cafeteria.all() if branch_id is None else Cafeteria.filter(branch_id=branch_id)
    return [_cafeteria_view(c) for c in await query.order_by("id")]


@storage_bound
async def get_cafeteria(cafeteria_id: int) -> CafeteriaView:
    return _cafeteria_view(await _require(Cafeteria, cafeteria_id, "Cafeteria"))


@storage_bound
async def add_cafeteria(data: CafeteriaRequest) -> CafeteriaView:
    await _require(Branch, data.branch_id, "Branch", ReferenceNotFound)
    cafeteria = await Cafeteria.create(branch_id=data.branch_id, name=data.name, image_url=data.image_url)
    log.info(f"Cafeteria '{cafeteria.name}' created with id {cafeteria.id}")
    return _cafeteria_view(cafeteria)


@storage_bound
async def update_cafeteria(cafeteria_id: int, data: CafeteriaRequest) -> CafeteriaView:
    cafeteria = await _require(Cafeteria, cafeteria_id, "Cafeteria")
    await _require(Branch, data.branch_id, "Branch", ReferenceNotFound)
    cafeteria.branch_id = data.branch_id
    cafeteria.name = data.name
    cafeteria.image_url = data.image_url
    await cafeteria.save()
    return _cafeteria_view(cafeteria)


@storage_bound
async def delete_cafeteria(cafeteria_id: int) -> Dict[str, int]:
    """Deletes the cafeteria's menu items, then its categories, then the cafeteria itself."""
    async with in_transaction() as conn:
        cafeteria = await Cafeteria.get_or_none(id=cafeteria_id).using_db(conn)
        if not cafeteria:
            raise NotFound(f"Cafeteria {cafeteria_id} not found")
        items = await MenuItem.filter(cafeteria_id=cafeteria_id).using_db(conn).delete()
        categories = await MenuCategory.filter(cafeteria_id=cafeteria_id).using_db(conn).delete()
        await cafeteria.delete(using_db=conn)

    log.info(f"Cafeteria {cafeteria_id} deleted with {items} menu items and {categories} categories")
    return {"menu_items": items, "menu_categories": categories}


# ----------- Menu categories -----------

@storage_bound
async def list_menu_categories(cafeteria_id: int) -> List[MenuCategoryView]:
    categories = await MenuCategory.filter(cafeteria_id=cafeteria_id).order_by("id")
    return [_category_view(c) for c in categories]


@storage_bound
async def add_menu_category(data: MenuCategoryRequest) -> MenuCategoryView:
    await _require(Cafeteria, data.cafeteria_id, "Cafeteria", ReferenceNotFound)
    category = await MenuCategory.create(
        cafeteria_id=data.cafeteria_id, name=data.name, key=data.key, image=data.image
    )
    return _category_view(category)


# ----------- Menu items -----------

async def _check_item_refs(data: MenuItemRequest) -> MenuCategory:
    await _require(Cafeteria, data.cafeteria_id, "Cafeteria", ReferenceNotFound)
    category = await _require(MenuCategory, data.category_id, "Menu category", ReferenceNotFound)
    if category.cafeteria_id != data.cafeteria_id:
        raise ValidationError(f"Menu category {data.category_id} does not belong to cafeteria {data.cafeteria_id}")
    return category


def _item_fields(data: MenuItemRequest) -> dict:
    return {
        "cafeteria_id": data.cafeteria_id,
        "category_id": data.category_id,
        "name": data.name,
        "description": data.description,
        "price": data.price,
        "image_url": data.image_url,
        "cgst": data.cgst,
        "sgst": data.sgst,
    }


@storage_bound
async def list_menu_items(cafeteria_id: int) -> List[MenuItemView]:
    items = await MenuItem.filter(cafeteria_id=cafeteria_id).select_related("category").order_by("id")
    return [_menu_item_view(m, m.category.key) for m in items]


@storage_bound
async def get_menu_item(item_id: int) -> MenuItemView:
    item = await MenuItem.filter(id=item_id).select_related("category").first()
    if not item:
        raise NotFound(f"Menu item {item_id} not found")
    return _menu_item_view(item, item.category.key)


@storage_bound
async def add_menu_item(data: MenuItemRequest) -> MenuItemView:
    category = await _check_item_refs(data)
    item = await MenuItem.create(**_item_fields(data))
    log.info(f"Menu item '{item.name}' added to cafeteria {data.cafeteria_id}")
    return _menu_item_view(item, category.key)


@storage_bound
async def update_menu_item(item_id: int, data: MenuItemRequest) -> MenuItemView:
    item = await _require(MenuItem, item_id, "Menu item")
    category = await _check_item_refs(data)
    for name, value in _item_fields(data).items():
        setattr(item, name, value)
    await item.save()
    return _menu_item_view(item, category.key)


@storage_bound
async def delete_menu_item(item_id: int) -> None:
    deleted = await MenuItem.filter(id=item_id).delete()
    if not deleted:
        raise NotFound(f"Menu item {item_id} not found")
