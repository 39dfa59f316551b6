from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from stockledger.dependencies import get_db
from stockledger.schemas.user import PlanEndDateUpdate, UserProfile, UserSummary
from stockledger.services.user_service import (
    get_user_profile,
    list_users,
    update_plan_end_date,
    update_user_permission,
)

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/profile", response_model=UserProfile)
def user_profile(user_id: int = Query(None, alias="userId"), db: Session = Depends(get_db)):
    return get_user_profile(db, user_id=user_id)


@router.get("")
def all_users(db: Session = Depends(get_db)):
    users = [UserSummary.model_validate(row) for row in list_users(db)]
    return {"success": True, "users": users, "count": len(users)}


@router.put("/{user_id}/permit/{permit}")
def set_permission(user_id: int, permit: str, db: Session = Depends(get_db)):
    user = update_user_permission(db, user_id=user_id, permit=permit)
    return {
        "success": True,
        "message": "Permission {} successfully".format("granted" if user.permitted else "revoked"),
        "userId": user.id,
        "permit": 1 if user.permitted else 0,
    }


@router.put("/{user_id}/plan-end-date")
def set_plan_end_date(user_id: int, payload: PlanEndDateUpdate, db: Session = Depends(get_db)):
    user = update_plan_end_date(db, user_id=user_id, plan_end_date=payload.plan_end_date)
    return {
        "success": True,
        "message": "Plan end date updated successfully",
        "userId": user.id,
        "plan_end_date": user.plan_end_date.isoformat(),
    }
