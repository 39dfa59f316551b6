from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockledger.core.constants import ZERO
from stockledger.core.dates import as_utc, utc_now
from stockledger.core.errors import (
    InsufficientStockError,
    NotFoundError,
    OutOfStockError,
    StockLedgerError,
    StorageError,
    ValidationError,
)
from stockledger.core.numbers import to_decimal
from stockledger.models.item import Item
from stockledger.models.stock_batch import StockBatch
from stockledger.models.stock_out import StockOutTransaction
from stockledger.services.item_locks import item_locks

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Withdrawal:
    batch_id: int
    quantity_taken: Decimal
    unit_price: Decimal

    @property
    def cost(self) -> Decimal:
        return self.quantity_taken * self.unit_price


@dataclass(frozen=True)
class AllocationPlan:
    item_id: int
    requested_quantity: Decimal
    withdrawals: tuple[Withdrawal, ...]
    total_cost: Decimal

    @property
    def blended_unit_cost(self) -> Decimal:
        if self.requested_quantity == 0:
            return ZERO
        return self.total_cost / self.requested_quantity


def plan_allocation(item_id: int, batches: Iterable, requested_quantity: Decimal) -> AllocationPlan:
    """Split a withdrawal across batches, oldest first.

    ``batches`` must already be in FIFO order and expose ``id``,
    ``remaining_quantity`` and ``unit_price``. Nothing is mutated here.
    """
    open_batches = [batch for batch in batches if batch.remaining_quantity > 0]
    available = sum((batch.remaining_quantity for batch in open_batches), ZERO)
    if available == 0:
        raise OutOfStockError(item_id)
    if available < requested_quantity:
        raise InsufficientStockError(item_id, requested_quantity, available)

    remaining_to_deduct = requested_quantity
    total_cost = ZERO
    withdrawals = []
    for batch in open_batches:
        if remaining_to_deduct <= 0:
            break
        taken = min(remaining_to_deduct, batch.remaining_quantity)
        withdrawal = Withdrawal(
            batch_id=batch.id,
            quantity_taken=taken,
            unit_price=batch.unit_price,
        )
        withdrawals.append(withdrawal)
        total_cost += withdrawal.cost
        remaining_to_deduct -= taken

    return AllocationPlan(
        item_id=item_id,
        requested_quantity=requested_quantity,
        withdrawals=tuple(withdrawals),
        total_cost=total_cost,
    )


def load_open_batches(db: Session, item_id: int, user_id: int) -> list[StockBatch]:
    stmt = (
        select(StockBatch)
        .where(
            StockBatch.item_id == item_id,
            StockBatch.user_id == user_id,
            StockBatch.remaining_quantity > 0,
        )
        .order_by(StockBatch.created_at.asc(), StockBatch.id.asc())
        .with_for_update()
    )
    return list(db.execute(stmt).scalars().all())


def allocate_stock_out(
    db: Session,
    *,
    item_id: Optional[int],
    user_id: Optional[int],
    quantity,
    occurred_at: Optional[datetime] = None,
) -> AllocationPlan:
    """Consume ``quantity`` of an item FIFO and persist the withdrawal atomically.

    Every batch decrement and every consumption row commit together or not at
    all. Concurrent calls for the same item are serialized by the item lock
    for the whole read-modify-write.
    """
    missing = [
        name
        for name, value in (("item_id", item_id), ("user_id", user_id), ("quantity", quantity))
        if value is None or value == ""
    ]
    if missing:
        raise ValidationError.missing(*missing)

    requested = to_decimal(quantity, "quantity")
    if requested <= 0:
        raise ValidationError("quantity must be greater than zero", detail={"field": "quantity"})

    timestamp = as_utc(occurred_at) if occurred_at is not None else utc_now()
    context = {"item_id": item_id, "user_id": user_id, "quantity": str(requested)}

    with item_locks.hold(item_id):
        try:
            owned = db.execute(
                select(Item.id).where(Item.id == item_id, Item.user_id == user_id)
            ).first()
            if owned is None:
                raise NotFoundError(
                    "Item not found or does not belong to user",
                    detail={"item_id": item_id, "user_id": user_id},
                )

            batches = load_open_batches(db, item_id, user_id)
            plan = plan_allocation(item_id, batches, requested)

            by_id = {batch.id: batch for batch in batches}
            for withdrawal in plan.withdrawals:
                batch = by_id[withdrawal.batch_id]
                batch.remaining_quantity = batch.remaining_quantity - withdrawal.quantity_taken
                db.add(
                    StockOutTransaction(
                        item_id=item_id,
                        user_id=user_id,
                        batch_id=withdrawal.batch_id,
                        quantity=withdrawal.quantity_taken,
                        created_at=timestamp,
                    )
                )
            db.commit()
        except StockLedgerError as exc:
            db.rollback()
            logger.warning("Stock out rejected: %s", exc.message, extra={"context": context})
            raise
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Stock out failed", extra={"context": context})
            raise StorageError("Error processing stock out") from exc

    logger.info(
        "Stock out recorded across %d batch(es)",
        len(plan.withdrawals),
        extra={"context": dict(context, blended_unit_cost=str(plan.blended_unit_cost))},
    )
    return plan


__all__ = [
    "AllocationPlan",
    "Withdrawal",
    "allocate_stock_out",
    "load_open_batches",
    "plan_allocation",
]
