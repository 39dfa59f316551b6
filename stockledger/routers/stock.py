from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from stockledger.dependencies import get_db
from stockledger.schemas.stock import (
    StockBatchCreate,
    StockBatchCreated,
    StockBatchRead,
    StockOutCreate,
    StockOutResult,
    WithdrawalRead,
)
from stockledger.services.batch_service import create_batch, list_batches
from stockledger.services.fifo_allocator import allocate_stock_out

router = APIRouter(prefix="/stock", tags=["Stock"])


@router.post("/batches", response_model=StockBatchCreated, status_code=201)
def stock_in(payload: StockBatchCreate, db: Session = Depends(get_db)):
    receipt = create_batch(
        db,
        item_id=payload.item_id,
        user_id=payload.user_id,
        quantity=payload.quantity,
        unit_price=payload.price,
    )
    return StockBatchCreated(
        batch_id=receipt.batch.id,
        quantity=receipt.quantity,
        price=receipt.price,
        package_type=receipt.package_type,
        isFirstTransaction=receipt.is_first_transaction,
    )


@router.post("/out", response_model=StockOutResult, status_code=201)
def stock_out(payload: StockOutCreate, db: Session = Depends(get_db)):
    plan = allocate_stock_out(
        db,
        item_id=payload.item_id,
        user_id=payload.user_id,
        quantity=payload.quantity,
    )
    return StockOutResult(
        withdrawals=[WithdrawalRead.model_validate(w) for w in plan.withdrawals],
        blended_unit_cost=plan.blended_unit_cost,
    )


@router.get("/batches/{item_id}", response_model=List[StockBatchRead])
def item_batches(
    item_id: int,
    user_id: int = Query(None, alias="userId"),
    db: Session = Depends(get_db),
):
    return list_batches(db, item_id=item_id, user_id=user_id)
