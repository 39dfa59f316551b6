from typing import Optional

from pydantic import BaseModel, ConfigDict


class CategoryCreate(BaseModel):
    user_id: Optional[int] = None
    name: Optional[str] = None
    color: Optional[str] = None


class CategoryRead(BaseModel):
    id: int
    user_id: int
    name: str
    color: str
    is_default: bool

    model_config = ConfigDict(from_attributes=True)
