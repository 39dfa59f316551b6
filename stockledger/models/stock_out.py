from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, Numeric

from stockledger.database.base import Base


class StockOutTransaction(Base):
    """One withdrawal from one batch; a stock-out touching N batches writes N rows."""

    __tablename__ = "stock_out_transactions"

    id = Column(Integer, primary_key=True)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    batch_id = Column(Integer, ForeignKey("stock_batches.id"), nullable=False)

    quantity = Column(Numeric(14, 4), nullable=False)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_stock_out_quantity_positive"),
        Index("idx_stock_out_item_time", "item_id", "created_at", "id"),
    )


__all__ = ["StockOutTransaction"]
