from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Index, Integer, String

from merchant_dashboard.database.base import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    store_id = Column(Integer, ForeignKey("stores.id"), nullable=False)

    name_en = Column(String)
    name_ar = Column(String)
    sku = Column(String)
    image_url = Column(String)
    price = Column(Float)

    is_available = Column(Boolean, nullable=False, default=True)
    is_active = Column(Boolean, nullable=False, default=True)
    status = Column(String(20), nullable=False, default="active")

    track_inventory = Column(Boolean, nullable=False, default=True)
    allow_backorder = Column(Boolean, nullable=False, default=False)
    low_stock_threshold = Column(Integer)

    selling_method = Column(String(20), nullable=False, default="unit")
    selling_unit = Column(String)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    deleted_at = Column(DateTime(timezone=True))

    __table_args__ = (
        Index("idx_products_store", "store_id"),
        Index("idx_products_sku", "sku"),
    )


__all__ = ["Product"]
