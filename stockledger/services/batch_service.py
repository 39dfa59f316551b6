from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockledger.core.dates import as_utc, utc_now
from stockledger.core.errors import NotFoundError, StockLedgerError, StorageError, ValidationError
from stockledger.core.numbers import to_decimal
from stockledger.models.item import Item, ItemDetails
from stockledger.models.stock_batch import StockBatch
from stockledger.services.item_locks import item_locks

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchReceipt:
    batch: StockBatch
    quantity: Decimal
    price: Decimal
    package_type: str
    is_first_transaction: bool


def create_batch(
    db: Session,
    *,
    item_id: Optional[int],
    user_id: Optional[int],
    quantity,
    unit_price,
    created_at: Optional[datetime] = None,
) -> BatchReceipt:
    """Record a stock-in as a new batch.

    The very first batch of an item also carries the ``stock_on_hand``
    baseline captured with the item details.
    """
    missing = [
        name
        for name, value in (
            ("item_id", item_id),
            ("user_id", user_id),
            ("quantity", quantity),
            ("price", unit_price),
        )
        if value is None or value == ""
    ]
    if missing:
        raise ValidationError.missing(*missing)

    requested = to_decimal(quantity, "quantity")
    price = to_decimal(unit_price, "price")
    if requested <= 0:
        raise ValidationError("quantity must be greater than zero", detail={"field": "quantity"})
    if price < 0:
        raise ValidationError("price must be non-negative", detail={"field": "price"})

    context = {"item_id": item_id, "user_id": user_id}

    with item_locks.hold(item_id):
        try:
            item = db.execute(
                select(ItemDetails.package_type, ItemDetails.stock_on_hand)
                .join(Item, Item.id == ItemDetails.item_id)
                .where(Item.id == item_id, Item.user_id == user_id)
            ).first()
            if item is None:
                raise NotFoundError(
                    "Item not found or does not belong to user",
                    detail=context,
                )

            existing = db.execute(
                select(func.count(StockBatch.id)).where(
                    StockBatch.item_id == item_id,
                    StockBatch.user_id == user_id,
                )
            ).scalar_one()
            is_first = existing == 0

            final_quantity = requested
            if is_first:
                final_quantity += item.stock_on_hand or Decimal("0")

            batch = StockBatch(
                item_id=item_id,
                user_id=user_id,
                original_quantity=final_quantity,
                remaining_quantity=final_quantity,
                unit_price=price,
                created_at=as_utc(created_at) if created_at is not None else utc_now(),
            )
            db.add(batch)
            db.commit()
            db.refresh(batch)
        except StockLedgerError:
            db.rollback()
            raise
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Error creating stock batch", extra={"context": context})
            raise StorageError("Error creating stock batch") from exc

    logger.info(
        "Stock batch created",
        extra={
            "context": dict(
                context,
                batch_id=batch.id,
                quantity=str(final_quantity),
                first_transaction=is_first,
            )
        },
    )
    return BatchReceipt(
        batch=batch,
        quantity=final_quantity,
        price=price,
        package_type=item.package_type,
        is_first_transaction=is_first,
    )


def list_batches(db: Session, *, item_id: int, user_id: Optional[int]) -> list[StockBatch]:
    if user_id is None or user_id == "":
        raise ValidationError("User ID is required", detail={"fields": ["userId"]})
    try:
        rows = db.execute(
            select(StockBatch)
            .where(StockBatch.item_id == item_id, StockBatch.user_id == user_id)
            .order_by(StockBatch.created_at.desc(), StockBatch.id.desc())
        ).scalars().all()
    except SQLAlchemyError as exc:
        logger.exception(
            "Error fetching stock batches",
            extra={"context": {"item_id": item_id, "user_id": user_id}},
        )
        raise StorageError("Error fetching stock batches") from exc
    return list(rows)


__all__ = ["BatchReceipt", "create_batch", "list_batches"]
