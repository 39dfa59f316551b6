import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from stockledger.core.constants import USER_PLANS
from stockledger.core.dates import parse_iso_date
from stockledger.core.errors import (
    ConflictError,
    NotFoundError,
    StockLedgerError,
    StorageError,
    ValidationError,
)
from stockledger.models.user import User

logger = logging.getLogger(__name__)


def create_user(
    db: Session,
    *,
    email,
    business_name=None,
    business_type=None,
    country=None,
    address=None,
    whatsapp=None,
    plan="stock",
    printer=False,
    permitted=False,
) -> User:
    if not email:
        raise ValidationError.missing("email")
    plan = (plan or "stock").strip().lower()
    if plan not in USER_PLANS:
        raise ValidationError(
            "plan must be one of: {}".format(", ".join(USER_PLANS)),
            detail={"field": "plan", "value": plan},
        )

    user = User(
        email=email.strip().lower(),
        business_name=business_name,
        business_type=business_type.strip().lower() if business_type else None,
        country=country.lower() if country else None,
        address=address,
        whatsapp=whatsapp,
        plan=plan,
        printer=bool(printer),
        permitted=bool(permitted),
    )
    try:
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("Email already registered", detail={"email": email}) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Error creating user", extra={"context": {"email": email}})
        raise StorageError("Error creating user") from exc

    logger.info("User created", extra={"context": {"user_id": user.id}})
    return user


def get_user_profile(db: Session, *, user_id) -> dict:
    if user_id is None or user_id == "":
        raise ValidationError("User ID is required", detail={"fields": ["userId"]})
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found", detail={"user_id": user_id})
    return {
        "id": user.id,
        "business_name": user.business_name,
        "email": user.email,
        "plan": user.plan,
        "plan_end_date": user.plan_end_date,
    }


def list_users(db: Session) -> list[dict]:
    rows = db.execute(select(User).order_by(User.business_name.asc(), User.id.asc())).scalars().all()
    return [
        {
            "id": str(user.id),
            "name": user.business_name or user.email.split("@")[0],
            "email": user.email,
            "permit": 1 if user.permitted else 0,
            "plan_end_date": user.plan_end_date.isoformat() if user.plan_end_date else None,
        }
        for user in rows
    ]


def _update_user(db: Session, user_id, message: str, **values) -> User:
    context = dict(values, user_id=user_id)
    try:
        user = db.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found", detail={"user_id": user_id})
        for key, value in values.items():
            setattr(user, key, value)
        db.commit()
        db.refresh(user)
    except StockLedgerError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception(message, extra={"context": context})
        raise StorageError(message) from exc
    return user


def update_user_permission(db: Session, *, user_id, permit) -> User:
    try:
        permit_value = int(permit)
    except (TypeError, ValueError):
        permit_value = None
    if permit_value not in (0, 1):
        raise ValidationError("Permit value must be 0 or 1", detail={"field": "permit"})

    user = _update_user(
        db,
        user_id,
        "Failed to update user permission",
        permitted=bool(permit_value),
    )
    logger.info(
        "Permission %s",
        "granted" if permit_value else "revoked",
        extra={"context": {"user_id": user_id}},
    )
    return user


def update_plan_end_date(db: Session, *, user_id, plan_end_date) -> User:
    if not plan_end_date:
        raise ValidationError("Plan end date is required", detail={"field": "plan_end_date"})
    parsed = parse_iso_date(plan_end_date)
    if parsed is None:
        raise ValidationError(
            "Invalid date format. Expected YYYY-MM-DD",
            detail={"field": "plan_end_date", "value": str(plan_end_date)},
        )
    user = _update_user(
        db,
        user_id,
        "Failed to update plan end date",
        plan_end_date=parsed,
    )
    logger.info(
        "Plan end date updated",
        extra={"context": {"user_id": user_id, "plan_end_date": parsed.isoformat()}},
    )
    return user


__all__ = [
    "create_user",
    "get_user_profile",
    "list_users",
    "update_plan_end_date",
    "update_user_permission",
]
