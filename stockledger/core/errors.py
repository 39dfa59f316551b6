from __future__ import annotations

from typing import Any, Optional


class StockLedgerError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500
    error = "error"

    def __init__(self, message: str, *, detail: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail or {}

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.error, "message": self.message}
        if self.detail:
            payload["detail"] = self.detail
        return payload


class ValidationError(StockLedgerError):
    status_code = 400
    error = "validation_error"

    @classmethod
    def missing(cls, *fields: str) -> "ValidationError":
        return cls(
            "Missing required fields: {}".format(", ".join(fields)),
            detail={"fields": list(fields)},
        )


class NotFoundError(StockLedgerError):
    status_code = 404
    error = "not_found"


class ConflictError(StockLedgerError):
    status_code = 409
    error = "conflict"


class OutOfStockError(StockLedgerError):
    status_code = 400
    error = "out_of_stock"

    def __init__(self, item_id: int) -> None:
        super().__init__("No stock available", detail={"item_id": item_id})
        self.item_id = item_id


class InsufficientStockError(StockLedgerError):
    status_code = 400
    error = "insufficient_stock"

    def __init__(self, item_id: int, requested, available) -> None:
        super().__init__(
            "Insufficient stock available",
            detail={
                "item_id": item_id,
                "requested": str(requested),
                "available": str(available),
            },
        )
        self.item_id = item_id
        self.requested = requested
        self.available = available


class StorageError(StockLedgerError):
    status_code = 500
    error = "storage_error"

    def __init__(self, message: str = "Storage operation failed") -> None:
        super().__init__(message)


__all__ = [
    "ConflictError",
    "InsufficientStockError",
    "NotFoundError",
    "OutOfStockError",
    "StockLedgerError",
    "StorageError",
    "ValidationError",
]
