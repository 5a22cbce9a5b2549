import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from canteen.core.security import Identity, require_admin
from canteen.schemas.catalog import BranchRequest, CafeteriaRequest, MenuCategoryRequest, MenuItemRequest
from canteen.schemas.response import SuccessResponse
from canteen.services import catalog_service

router = APIRouter()
log = logging.getLogger(__name__)


# ----------- Branches -----------

@router.get("/branches", response_model=SuccessResponse)
async def list_branches_endpoint():
    branches = await catalog_service.list_branches()
    return SuccessResponse(data=[b.to_api() for b in branches])


@router.post("/branches", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def add_branch_endpoint(payload: BranchRequest, admin: Identity = Depends(require_admin)):
    branch = await catalog_service.add_branch(payload.name)
    return SuccessResponse(data=branch.to_api())


# ----------- Cafeterias -----------

@router.get("/cafeterias", response_model=SuccessResponse)
async def list_cafeterias_endpoint(branch_id: Optional[int] = Query(None, alias="branchId")):
    cafeterias = await catalog_service.list_cafeterias(branch_id)
    return SuccessResponse(data=[c.to_api() for c in cafeterias])


@router.get("/cafeterias/{cafeteria_id}", response_model=SuccessResponse)
async def get_cafeteria_endpoint(cafeteria_id: int):
    cafeteria = await catalog_service.get_cafeteria(cafeteria_id)
    return SuccessResponse(data=cafeteria.to_api())


@router.post("/cafeterias", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def add_cafeteria_endpoint(payload: CafeteriaRequest, admin: Identity = Depends(require_admin)):
    cafeteria = await catalog_service.add_cafeteria(payload)
    return SuccessResponse(data=cafeteria.to_api())


@router.put("/cafeterias/{cafeteria_id}", response_model=SuccessResponse)
async def update_cafeteria_endpoint(cafeteria_id: int, payload: CafeteriaRequest, admin: Identity = Depends(require_admin)):
    cafeteria = await catalog_service.update_cafeteria(cafeteria_id, payload)
    return SuccessResponse(message="Cafeteria updated successfully", data=cafeteria.to_api())


@router.delete("/cafeterias/{cafeteria_id}", response_model=SuccessResponse)
async def delete_cafeteria_endpoint(cafeteria_id: int, admin: Identity = Depends(require_admin)):
    """Deletes the cafeteria along with all of its menu items and categories."""
    removed = await catalog_service.delete_cafeteria(cafeteria_id)
    log.info(f"Cafeteria {cafeteria_id} deleted by {admin.employee_id}")
    return SuccessResponse(message="Cafeteria and all associated items deleted successfully", data=removed)


# ----------- Menu categories -----------

@router.get("/menu-categories", response_model=SuccessResponse)
async def list_menu_categories_endpoint(cafeteria_id: int = Query(..., alias="cafeteriaId")):
    categories = await catalog_service.list_menu_categories(cafeteria_id)
    return SuccessResponse(data=[c.to_api() for c in categories])


@router.post("/menu-categories", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def add_menu_category_endpoint(payload: MenuCategoryRequest, admin: Identity = Depends(require_admin)):
    category = await catalog_service.add_menu_category(payload)
    return SuccessResponse(data=category.to_api())


# ----------- Menu items -----------

@router.get("/menu-items", response_model=SuccessResponse)
async def list_menu_items_endpoint(cafeteria_id: int = Query(..., alias="cafeteriaId")):
    items = await catalog_service.list_menu_items(cafeteria_id)
    return SuccessResponse(data=[i.to_api() for i in items])


@router.get("/menu-items/{item_id}", response_model=SuccessResponse)
async def get_menu_item_endpoint(item_id: int):
    item = await catalog_service.get_menu_item(item_id)
    return SuccessResponse(data=item.to_api())


@router.post("/menu-items", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def add_menu_item_endpoint(payload: MenuItemRequest, admin: Identity = Depends(require_admin)):
    item = await catalog_service.add_menu_item(payload)
    return SuccessResponse(data=item.to_api())


@router.put("/menu-items/{item_id}", response_model=SuccessResponse)
async def update_menu_item_endpoint(item_id: int, payload: MenuItemRequest, admin: Identity = Depends(require_admin)):
    item = await catalog_service.update_menu_item(item_id, payload)
    return SuccessResponse(message="Menu item updated successfully", data=item.to_api())


@router.delete("/menu-items/{item_id}", response_model=SuccessResponse)
async def delete_menu_item_endpoint(item_id: int, admin: Identity = Depends(require_admin)):
    await catalog_service.delete_menu_item(item_id)
    return SuccessResponse(message="Menu item deleted successfully")
