from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ItemCreate(BaseModel):
    name: Optional[str] = None
    barcode: Optional[str] = None
    category_id: Optional[int] = None
    user_id: Optional[int] = None
    price: Optional[Decimal] = None


class ItemRead(BaseModel):
    id: int
    name: str
    barcode: str
    category_id: int
    user_id: int
    price: float
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ItemDetailsCreate(BaseModel):
    item_id: Optional[int] = None
    package_type: Optional[str] = None
    measure: Optional[str] = None
    package_weight: Optional[Decimal] = None
    storage_location: Optional[str] = None
    stock_on_hand: Optional[Decimal] = None


class ItemDetailsRead(BaseModel):
    id: int
    item_id: int
    package_type: str
    measure: str
    package_weight: Optional[float] = None
    storage_location: str
    stock_on_hand: float

    model_config = ConfigDict(from_attributes=True)


class ItemWithDetails(ItemRead):
    package_type: Optional[str] = None
    measure: Optional[str] = None
    package_weight: Optional[float] = None
    storage_location: Optional[str] = None
    stock_on_hand: Optional[float] = None


class ItemPriceUpdate(BaseModel):
    price: Optional[Decimal] = None


class BarcodeLookup(BaseModel):
    user_id: Optional[int] = None
    barcode: Optional[str] = None
