from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, Numeric, String, UniqueConstraint

from stockledger.database.base import Base


class Item(Base):
    __tablename__ = "items"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)

    name = Column(String(255), nullable=False)
    barcode = Column(String(64), nullable=False)
    price = Column(Numeric(14, 4), nullable=False, default=0)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        UniqueConstraint("user_id", "barcode", name="uq_items_user_barcode"),
        Index("idx_items_category_user", "category_id", "user_id"),
    )


class ItemDetails(Base):
    __tablename__ = "item_details"

    id = Column(Integer, primary_key=True)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=False, unique=True)

    package_type = Column(String(20), nullable=False)
    measure = Column(String(50), nullable=False)
    package_weight = Column(Numeric(14, 4))
    storage_location = Column(String(255), nullable=False)
    stock_on_hand = Column(Numeric(14, 4), nullable=False, default=0)


__all__ = ["Item", "ItemDetails"]
