from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class StockBatchCreate(BaseModel):
    item_id: Optional[int] = None
    user_id: Optional[int] = None
    quantity: Optional[Decimal] = None
    price: Optional[Decimal] = None


class StockBatchCreated(BaseModel):
    message: str = "Stock batch created successfully"
    batch_id: int
    quantity: float
    price: float
    package_type: str
    isFirstTransaction: bool


class StockOutCreate(BaseModel):
    item_id: Optional[int] = None
    user_id: Optional[int] = None
    quantity: Optional[Decimal] = None


class WithdrawalRead(BaseModel):
    batch_id: int
    quantity_taken: float
    unit_price: float

    model_config = ConfigDict(from_attributes=True)


class StockOutResult(BaseModel):
    message: str = "Stock out successful"
    withdrawals: List[WithdrawalRead]
    blended_unit_cost: float


class StockBatchRead(BaseModel):
    id: int
    item_id: int
    user_id: int
    original_quantity: float
    remaining_quantity: float
    unit_price: float
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
