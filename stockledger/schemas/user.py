from datetime import date
from typing import Optional

from pydantic import BaseModel


class UserProfile(BaseModel):
    id: int
    business_name: Optional[str] = None
    email: str
    plan: str
    plan_end_date: Optional[date] = None


class UserSummary(BaseModel):
    id: str
    name: str
    email: str
    permit: int
    plan_end_date: Optional[str] = None


class PlanEndDateUpdate(BaseModel):
    plan_end_date: Optional[str] = None
