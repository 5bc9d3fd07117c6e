from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProductRead(BaseModel):
    id: int
    store_id: int
    name_en: Optional[str] = None
    name_ar: Optional[str] = None
    sku: Optional[str] = None
    image_url: Optional[str] = None
    price: Optional[float] = None
    is_available: bool
    is_active: bool
    status: str
    track_inventory: bool
    low_stock_threshold: Optional[int] = None
    selling_method: str
    selling_unit: Optional[str] = None
    created_at: datetime
    deleted_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ProductUpdate(BaseModel):
    name_en: Optional[str] = None
    name_ar: Optional[str] = None
    sku: Optional[str] = None
    image_url: Optional[str] = None
    price: Optional[float] = None
    is_available: Optional[bool] = None
    status: Optional[Literal["active", "draft", "archived"]] = None
    low_stock_threshold: Optional[int] = Field(default=None, ge=0)
    track_inventory: Optional[bool] = None
    allow_backorder: Optional[bool] = None
    selling_method: Optional[Literal["unit", "weight", "length", "time", "subscription"]] = None
    selling_unit: Optional[str] = None


class ProductActionResult(BaseModel):
    success: bool = True
    product: Optional[ProductRead] = None
    soft_delete: Optional[bool] = None
