from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from stockledger.core.constants import MONEY_STEP, QUANTITY_STEP, STORAGE_STEP
from stockledger.core.errors import ValidationError


def to_decimal(value, field: str) -> Decimal:
    """Coerce ``value`` to a Decimal that the ``Numeric(14, 4)`` columns hold exactly."""
    if isinstance(value, bool):
        raise ValidationError("{} must be a number".format(field), detail={"field": field})
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValidationError(
                "{} must be a number".format(field),
                detail={"field": field, "value": str(value)},
            ) from None
    if not result.is_finite():
        raise ValidationError("{} must be a finite number".format(field), detail={"field": field})
    try:
        stored = result.quantize(STORAGE_STEP)
    except InvalidOperation:
        stored = None
    if stored is None or stored != result:
        raise ValidationError(
            "{} must have at most 4 decimal places".format(field),
            detail={"field": field, "value": str(value)},
        )
    return result


def round_quantity(value: Decimal) -> int:
    return int(value.quantize(QUANTITY_STEP, rounding=ROUND_HALF_UP))


def round_money(value: Decimal) -> Decimal:
    return value.quantize(MONEY_STEP, rounding=ROUND_HALF_UP)


def format_currency(value: Decimal, prefix: str) -> str:
    return "{}{}".format(prefix, round_money(value))


def format_signed_quantity(value: Decimal, negative: bool) -> str:
    return "{}{}".format("-" if negative else "+", round_quantity(value))
