from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from stockledger.dependencies import get_db
from stockledger.schemas.category import CategoryCreate, CategoryRead
from stockledger.services.category_service import (
    create_category,
    delete_category,
    get_category_name,
    list_categories,
)

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("", response_model=List[CategoryRead])
def get_categories(user_id: int = Query(None, alias="userId"), db: Session = Depends(get_db)):
    return list_categories(db, user_id=user_id)


@router.post("", response_model=CategoryRead, status_code=201)
def post_category(payload: CategoryCreate, db: Session = Depends(get_db)):
    return create_category(db, user_id=payload.user_id, name=payload.name, color=payload.color)


@router.delete("/{category_id}")
def remove_category(
    category_id: int,
    user_id: int = Query(None, alias="userId"),
    db: Session = Depends(get_db),
):
    delete_category(db, user_id=user_id, category_id=category_id)
    return {"message": "Category deleted successfully"}


@router.get("/{category_id}/name")
def category_name(category_id: int, db: Session = Depends(get_db)):
    return {"name": get_category_name(db, category_id=category_id)}
