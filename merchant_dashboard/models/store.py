from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String

from merchant_dashboard.database.base import Base


class Store(Base):
    __tablename__ = "stores"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    name_ar = Column(String)
    currency = Column(String(3), nullable=False, default="SAR")

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def display_name(self, locale: str = "en") -> str:
        if locale == "ar" and self.name_ar:
            return self.name_ar
        return self.name or "Store"


__all__ = ["Store"]
