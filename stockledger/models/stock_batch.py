from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, Numeric

from stockledger.database.base import Base


class StockBatch(Base):
    __tablename__ = "stock_batches"

    id = Column(Integer, primary_key=True)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    original_quantity = Column(Numeric(14, 4), nullable=False)
    remaining_quantity = Column(Numeric(14, 4), nullable=False)
    unit_price = Column(Numeric(14, 4), nullable=False)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        CheckConstraint("original_quantity > 0", name="ck_batches_original_positive"),
        CheckConstraint(
            "remaining_quantity >= 0 AND remaining_quantity <= original_quantity",
            name="ck_batches_remaining_bounds",
        ),
        CheckConstraint("unit_price >= 0", name="ck_batches_price_non_negative"),
        Index("idx_batches_item_fifo", "item_id", "created_at", "id"),
    )


__all__ = ["StockBatch"]
