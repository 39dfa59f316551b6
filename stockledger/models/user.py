from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, Date, DateTime, Integer, String

from stockledger.database.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    business_name = Column(String(255))
    business_type = Column(String(100))
    country = Column(String(100))
    address = Column(String(255))

    email = Column(String(255), nullable=False, unique=True)
    whatsapp = Column(String(50))

    plan = Column(String(20), nullable=False, default="stock")
    printer = Column(Boolean, nullable=False, default=False)
    permitted = Column(Boolean, nullable=False, default=False)
    plan_end_date = Column(Date)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )


__all__ = ["User"]
