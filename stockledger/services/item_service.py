import logging
from decimal import Decimal

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockledger.core.constants import PACKAGE_TYPES, WEIGHED_PACKAGE_TYPES
from stockledger.core.errors import (
    ConflictError,
    NotFoundError,
    StockLedgerError,
    StorageError,
    ValidationError,
)
from stockledger.core.numbers import to_decimal
from stockledger.models.category import Category
from stockledger.models.item import Item, ItemDetails
from stockledger.models.stock_batch import StockBatch
from stockledger.models.stock_out import StockOutTransaction
from stockledger.services.item_locks import item_locks

logger = logging.getLogger(__name__)


def _blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def _storage_failure(db: Session, message: str, context: dict):
    db.rollback()
    logger.exception(message, extra={"context": context})
    return StorageError(message)


def create_item(db: Session, *, user_id, name, barcode, category_id, price=None) -> Item:
    missing = [
        field
        for field, value in (
            ("name", name),
            ("barcode", barcode),
            ("category_id", category_id),
            ("user_id", user_id),
        )
        if _blank(value)
    ]
    if missing:
        logger.warning(
            "Create item failed - missing required fields",
            extra={"context": {"missing": missing, "user_id": user_id}},
        )
        raise ValidationError.missing(*missing)

    item_price = to_decimal(price, "price") if not _blank(price) else Decimal("0")
    context = {"user_id": user_id, "barcode": barcode, "category_id": category_id}

    try:
        existing = db.execute(
            select(Item).where(Item.barcode == barcode, Item.user_id == user_id)
        ).scalars().first()
        if existing is not None:
            logger.warning(
                "Create item failed - barcode already exists",
                extra={"context": dict(context, existing_item_id=existing.id)},
            )
            raise ConflictError(
                "Item with this barcode already exists",
                detail={"existing_item_id": existing.id},
            )

        category = db.execute(
            select(Category.id).where(Category.id == category_id, Category.user_id == user_id)
        ).first()
        if category is None:
            logger.warning(
                "Create item failed - category not found or does not belong to user",
                extra={"context": context},
            )
            raise NotFoundError(
                "Category not found or does not belong to user",
                detail={"category_id": category_id},
            )

        item = Item(
            user_id=user_id,
            category_id=category_id,
            name=name.strip(),
            barcode=barcode.strip(),
            price=item_price,
        )
        db.add(item)
        db.commit()
        db.refresh(item)
    except StockLedgerError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        raise _storage_failure(db, "Error creating item", context) from exc

    logger.info("Item created", extra={"context": dict(context, item_id=item.id)})
    return item


def create_item_details(
    db: Session,
    *,
    item_id,
    package_type,
    measure,
    storage_location,
    package_weight=None,
    stock_on_hand=None,
) -> ItemDetails:
    missing = [
        field
        for field, value in (
            ("item_id", item_id),
            ("package_type", package_type),
            ("measure", measure),
            ("storage_location", storage_location),
        )
        if _blank(value)
    ]
    if missing:
        raise ValidationError.missing(*missing)

    if package_type not in PACKAGE_TYPES:
        raise ValidationError(
            "package_type must be one of: {}".format(", ".join(PACKAGE_TYPES)),
            detail={"field": "package_type", "value": package_type},
        )
    if package_type == "loose" and _blank(stock_on_hand):
        raise ValidationError(
            "Stock on hand is required for loose items",
            detail={"field": "stock_on_hand"},
        )
    if package_type in WEIGHED_PACKAGE_TYPES and _blank(package_weight):
        raise ValidationError(
            "Package weight is required for carton and bag items",
            detail={"field": "package_weight"},
        )

    baseline = to_decimal(stock_on_hand, "stock_on_hand") if not _blank(stock_on_hand) else Decimal("0")
    if baseline < 0:
        raise ValidationError("stock_on_hand must be non-negative", detail={"field": "stock_on_hand"})
    weight = to_decimal(package_weight, "package_weight") if not _blank(package_weight) else None

    context = {"item_id": item_id, "package_type": package_type}
    try:
        if db.get(Item, item_id) is None:
            raise NotFoundError("Item not found", detail={"item_id": item_id})
        if db.execute(select(ItemDetails.id).where(ItemDetails.item_id == item_id)).first():
            raise ConflictError("Item details already exist", detail={"item_id": item_id})

        details = ItemDetails(
            item_id=item_id,
            package_type=package_type,
            measure=measure,
            package_weight=weight,
            storage_location=storage_location,
            stock_on_hand=baseline,
        )
        db.add(details)
        db.commit()
        db.refresh(details)
    except StockLedgerError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        raise _storage_failure(db, "Error creating item details", context) from exc

    logger.info("Item details created", extra={"context": dict(context, details_id=details.id)})
    return details


def _item_row(item, details):
    row = {
        "id": item.id,
        "name": item.name,
        "barcode": item.barcode,
        "category_id": item.category_id,
        "user_id": item.user_id,
        "price": item.price,
        "created_at": item.created_at,
        "package_type": None,
        "measure": None,
        "package_weight": None,
        "storage_location": None,
        "stock_on_hand": None,
    }
    if details is not None:
        row.update(
            package_type=details.package_type,
            measure=details.measure,
            package_weight=details.package_weight,
            storage_location=details.storage_location,
            stock_on_hand=details.stock_on_hand,
        )
    return row


def list_category_items(db: Session, *, user_id, category_id) -> list[dict]:
    if _blank(user_id):
        raise ValidationError("User ID is required", detail={"fields": ["userId"]})
    rows = db.execute(
        select(Item, ItemDetails)
        .outerjoin(ItemDetails, ItemDetails.item_id == Item.id)
        .where(Item.category_id == category_id, Item.user_id == user_id)
        .order_by(Item.id)
    ).all()
    return [_item_row(item, details) for item, details in rows]


def get_item_details(db: Session, *, user_id, item_id) -> dict:
    row = db.execute(
        select(Item, ItemDetails)
        .join(ItemDetails, ItemDetails.item_id == Item.id)
        .where(Item.user_id == user_id, Item.id == item_id)
    ).first()
    if row is None:
        raise NotFoundError("Item not found", detail={"item_id": item_id, "user_id": user_id})
    return _item_row(row.Item, row.ItemDetails)


def lookup_barcode(db: Session, *, user_id, barcode) -> dict:
    if _blank(barcode):
        raise ValidationError("Barcode is required.", detail={"fields": ["barcode"]})
    row = db.execute(
        select(Item, ItemDetails)
        .join(ItemDetails, ItemDetails.item_id == Item.id)
        .where(Item.barcode == barcode, Item.user_id == user_id)
    ).first()
    if row is None:
        raise NotFoundError("Product not found", detail={"barcode": barcode})
    return _item_row(row.Item, row.ItemDetails)


def update_item_price(db: Session, *, item_id, price) -> Item:
    if _blank(item_id) or _blank(price):
        raise ValidationError.missing("itemId", "newPrice")
    new_price = to_decimal(price, "newPrice")
    if new_price < 0:
        raise ValidationError("price must be non-negative", detail={"field": "newPrice"})

    context = {"item_id": item_id, "new_price": str(new_price)}
    try:
        item = db.get(Item, item_id)
        if item is None:
            logger.warning("Update item price failed - item not found", extra={"context": context})
            raise NotFoundError("Item not found", detail={"item_id": item_id})
        item.price = new_price
        db.commit()
        db.refresh(item)
    except StockLedgerError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        raise _storage_failure(db, "Error updating item price", context) from exc

    logger.info("Item price updated", extra={"context": context})
    return item


def get_last_item_id(db: Session):
    return db.execute(select(func.max(Item.id))).scalar()


def delete_item(db: Session, *, item_id, user_id) -> None:
    """Delete an item with its details, batches and stock-out history in one transaction."""
    if _blank(item_id) or _blank(user_id):
        raise ValidationError.missing("itemId", "userId")

    context = {"item_id": item_id, "user_id": user_id}
    with item_locks.hold(item_id):
        try:
            item = db.execute(
                select(Item).where(Item.id == item_id, Item.user_id == user_id)
            ).scalars().first()
            if item is None:
                logger.warning(
                    "Delete item failed - item not found or does not belong to user",
                    extra={"context": context},
                )
                raise NotFoundError(
                    "Item not found or does not belong to user",
                    detail=context,
                )

            db.execute(delete(StockOutTransaction).where(StockOutTransaction.item_id == item_id))
            db.execute(delete(StockBatch).where(StockBatch.item_id == item_id))
            db.execute(delete(ItemDetails).where(ItemDetails.item_id == item_id))
            db.delete(item)
            db.commit()
        except StockLedgerError:
            db.rollback()
            raise
        except SQLAlchemyError as exc:
            raise _storage_failure(db, "Error during item deletion transaction", context) from exc

    item_locks.discard(item_id)
    logger.info("Item and all related data deleted", extra={"context": context})


__all__ = [
    "create_item",
    "create_item_details",
    "delete_item",
    "get_item_details",
    "get_last_item_id",
    "list_category_items",
    "lookup_barcode",
    "update_item_price",
]
