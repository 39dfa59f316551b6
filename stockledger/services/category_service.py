import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from stockledger.config import get_settings
from stockledger.core.constants import CATEGORY_COLORS, DEFAULT_CATEGORIES
from stockledger.core.errors import (
    ConflictError,
    NotFoundError,
    StockLedgerError,
    StorageError,
    ValidationError,
)
from stockledger.models.category import Category

logger = logging.getLogger(__name__)

_DEFAULT_NAMES = frozenset(name for name, _color in DEFAULT_CATEGORIES)


def ensure_default_categories(db: Session, user_id: int) -> int:
    count = db.execute(
        select(func.count(Category.id)).where(Category.user_id == user_id)
    ).scalar_one()
    if count:
        return 0
    db.add_all(
        [
            Category(user_id=user_id, name=name, color=color, is_default=True)
            for name, color in DEFAULT_CATEGORIES
        ]
    )
    return len(DEFAULT_CATEGORIES)


def list_categories(db: Session, *, user_id) -> list[Category]:
    if user_id is None or user_id == "":
        raise ValidationError("User ID is required", detail={"fields": ["userId"]})

    try:
        if get_settings().DEFAULT_CATEGORIES_ENABLED:
            created = ensure_default_categories(db, user_id)
            if created:
                db.commit()
                logger.info(
                    "Default categories created",
                    extra={"context": {"user_id": user_id, "count": created}},
                )
        rows = db.execute(
            select(Category)
            .where(Category.user_id == user_id)
            .order_by(Category.name.asc())
        ).scalars().all()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Error fetching categories", extra={"context": {"user_id": user_id}})
        raise StorageError("Error fetching categories") from exc
    return list(rows)


def create_category(db: Session, *, user_id, name, color) -> Category:
    missing = [
        field
        for field, value in (("user_id", user_id), ("name", name), ("color", color))
        if value is None or value == ""
    ]
    if missing:
        raise ValidationError.missing(*missing)
    if color not in CATEGORY_COLORS:
        raise ValidationError(
            "color must be one of: {}".format(", ".join(CATEGORY_COLORS)),
            detail={"field": "color", "value": color},
        )

    context = {"user_id": user_id, "name": name}
    try:
        existing = db.execute(
            select(Category.id).where(Category.user_id == user_id, Category.name == name)
        ).first()
        if existing is not None:
            raise ConflictError("Category with this name already exists", detail=context)

        category = Category(user_id=user_id, name=name, color=color)
        db.add(category)
        db.commit()
        db.refresh(category)
    except StockLedgerError:
        db.rollback()
        raise
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("Category with this name already exists", detail=context) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Error creating category", extra={"context": context})
        raise StorageError("Error creating category") from exc

    logger.info("Category created", extra={"context": dict(context, category_id=category.id)})
    return category


def delete_category(db: Session, *, user_id, category_id) -> None:
    if user_id is None or user_id == "":
        raise ValidationError("User ID is required", detail={"fields": ["userId"]})

    context = {"user_id": user_id, "category_id": category_id}
    try:
        category = db.execute(
            select(Category).where(Category.id == category_id, Category.user_id == user_id)
        ).scalars().first()
        if category is None:
            raise NotFoundError("Category not found", detail=context)
        if category.is_default or category.name in _DEFAULT_NAMES:
            raise ValidationError("Cannot delete default categories", detail=context)

        db.delete(category)
        db.commit()
    except StockLedgerError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Error deleting category", extra={"context": context})
        raise StorageError("Error deleting category") from exc

    logger.info("Category deleted", extra={"context": context})


def get_category_name(db: Session, *, category_id) -> str:
    name = db.execute(select(Category.name).where(Category.id == category_id)).scalar()
    if name is None:
        raise NotFoundError("Category not found", detail={"category_id": category_id})
    return name


__all__ = [
    "create_category",
    "delete_category",
    "ensure_default_categories",
    "get_category_name",
    "list_categories",
]
