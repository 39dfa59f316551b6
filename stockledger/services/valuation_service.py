import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockledger.config import get_settings
from stockledger.core.constants import FLOW_IN, FLOW_OPEN, FLOW_OUT
from stockledger.core.dates import report_window
from stockledger.core.errors import NotFoundError, StorageError, ValidationError
from stockledger.core.numbers import (
    format_currency,
    format_signed_quantity,
    round_money,
    round_quantity,
)
from stockledger.models.item import Item, ItemDetails
from stockledger.models.stock_batch import StockBatch
from stockledger.models.stock_out import StockOutTransaction
from stockledger.models.user import User
from stockledger.services.ledger_replay import LedgerEvent, replay_ledger

logger = logging.getLogger(__name__)


def load_ledger_events(db: Session, item_id: int, user_id: int) -> list[LedgerEvent]:
    batches = db.execute(
        select(
            StockBatch.id,
            StockBatch.created_at,
            StockBatch.original_quantity,
            StockBatch.unit_price,
        ).where(StockBatch.item_id == item_id, StockBatch.user_id == user_id)
    ).all()
    stock_outs = db.execute(
        select(
            StockOutTransaction.id,
            StockOutTransaction.created_at,
            StockOutTransaction.quantity,
        ).where(
            StockOutTransaction.item_id == item_id,
            StockOutTransaction.user_id == user_id,
        )
    ).all()

    events = [
        LedgerEvent(
            time=row.created_at,
            flow=FLOW_IN,
            quantity=row.original_quantity,
            unit_price=row.unit_price,
            sequence=row.id,
        )
        for row in batches
    ]
    events.extend(
        LedgerEvent(
            time=row.created_at,
            flow=FLOW_OUT,
            quantity=row.quantity,
            sequence=row.id,
        )
        for row in stock_outs
    )
    return events


def build_report(result, *, window_start, measure, currency_prefix="RM", date_format="%d/%m/%Y"):
    transactions = [
        {
            "time": window_start.strftime(date_format),
            "flow": FLOW_OPEN,
            "qty": round_quantity(result.opening_quantity),
            "value": format_currency(result.opening_average, currency_prefix),
        }
    ]
    for line in result.lines:
        transactions.append(
            {
                "time": line.time.isoformat(),
                "flow": line.flow,
                "qty": format_signed_quantity(line.quantity, negative=line.flow == FLOW_OUT),
                "value": format_currency(line.unit_value, currency_prefix),
            }
        )

    return {
        "summary": {
            "opening": round_quantity(result.opening_quantity),
            "in": round_quantity(result.total_in),
            "out": round_quantity(result.total_out),
            "closing": round_quantity(result.closing_quantity),
            "closingValue": float(round_money(result.closing_average)),
        },
        "transactions": transactions,
        "usage": {
            "total": round_quantity(result.usage_quantity),
            "value": float(round_money(result.usage_value)),
            "measure": measure,
        },
    }


def _resolve_item(db: Session, item_id: int, user_id: int):
    return db.execute(
        select(Item.id, ItemDetails.package_type, ItemDetails.measure)
        .join(User, User.id == Item.user_id)
        .join(ItemDetails, ItemDetails.item_id == Item.id)
        .where(User.id == user_id, Item.id == item_id)
    ).first()


def valuate(db: Session, *, item_id, user_id, from_date, to_date) -> dict:
    """Replay an item's history and report its valuation for ``[from_date, to_date]``."""
    missing = [
        name
        for name, value in (
            ("itemId", item_id),
            ("userId", user_id),
            ("fromDate", from_date),
            ("toDate", to_date),
        )
        if value is None or value == ""
    ]
    if missing:
        raise ValidationError(
            "Missing required parameters: {}".format(", ".join(missing)),
            detail={"fields": missing},
        )

    window_start, window_end = report_window(from_date, to_date)
    if window_start is None:
        raise ValidationError(
            "fromDate and toDate must be ISO dates",
            detail={"fromDate": str(from_date), "toDate": str(to_date)},
        )
    if window_start > window_end:
        raise ValidationError(
            "fromDate must not be after toDate",
            detail={"fromDate": str(from_date), "toDate": str(to_date)},
        )

    settings = get_settings()
    try:
        item = _resolve_item(db, item_id, user_id)
        if item is None:
            raise NotFoundError(
                "Item or user not found",
                detail={"item_id": item_id, "user_id": user_id},
            )
        events = load_ledger_events(db, item_id, user_id)
    except SQLAlchemyError as exc:
        logger.exception(
            "Error fetching transactions",
            extra={"context": {"item_id": item_id, "user_id": user_id}},
        )
        raise StorageError("Error fetching transactions") from exc

    result = replay_ledger(events, window_start, window_end)
    return build_report(
        result,
        window_start=window_start,
        measure=item.measure,
        currency_prefix=settings.CURRENCY_PREFIX,
        date_format=settings.REPORT_DATE_FORMAT,
    )


__all__ = ["build_report", "load_ledger_events", "valuate"]
