from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String

from merchant_dashboard.database.base import Base


class InventoryTransaction(Base):
    __tablename__ = "inventory_transactions"

    id = Column(Integer, primary_key=True)

    inventory_id = Column(Integer, ForeignKey("inventory.id", ondelete="SET NULL"))
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    branch_id = Column(Integer, ForeignKey("store_branches.id", ondelete="SET NULL"))
    store_id = Column(Integer, ForeignKey("stores.id"), nullable=False)

    transaction_type = Column(String(20), nullable=False)
    quantity_change = Column(Integer, nullable=False)
    quantity_before = Column(Integer, nullable=False)
    quantity_after = Column(Integer, nullable=False)
    notes = Column(String)
    performed_by = Column(String)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_inventory_tx_store_created", "store_id", "created_at"),
        Index("idx_inventory_tx_product", "product_id"),
    )


__all__ = ["InventoryTransaction"]
