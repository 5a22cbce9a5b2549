from decimal import Decimal
from typing import Optional

from pydantic import Field

from canteen.schemas.base import CamelModel, Money


class BranchRequest(CamelModel):
    name: str = Field(..., min_length=1)


class BranchView(CamelModel):
    id: int
    name: str


class CafeteriaRequest(CamelModel):
    branch_id: int
    name: str = Field(..., min_length=1)
    image_url: Optional[str] = None


class CafeteriaView(CamelModel):
    id: int
    branch_id: int
    name: str
    image_url: Optional[str] = None


class MenuCategoryRequest(CamelModel):
    cafeteria_id: int
    name: str = Field(..., min_length=1)
    key: str = Field(..., min_length=1)
    image: Optional[str] = None


class MenuCategoryView(CamelModel):
    id: int
    cafeteria_id: int
    name: str
    key: str
    image: Optional[str] = None


class MenuItemRequest(CamelModel):
    cafeteria_id: int
    category_id: int
    name: str = Field(..., min_length=1)
    description: str = ""
    price: Money = Field(..., gt=0)
    image_url: Optional[str] = None
    cgst: Money = Field(Decimal("0"), ge=0)
    sgst: Money = Field(Decimal("0"), ge=0)


class MenuItemView(CamelModel):
    id: int
    cafeteria_id: int
    category_id: int
    category_key: Optional[str] = None
    name: str
    description: str
    price: Money
    image_url: Optional[str] = None
    cgst: Money
    sgst: Money
