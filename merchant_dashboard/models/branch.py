from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String

from merchant_dashboard.database.base import Base


class StoreBranch(Base):
    __tablename__ = "store_branches"

    id = Column(Integer, primary_key=True)
    store_id = Column(Integer, ForeignKey("stores.id"), nullable=False)

    name = Column(String, nullable=False)
    name_ar = Column(String)
    code = Column(String)
    address = Column(String)
    city = Column(String)

    is_main_branch = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_branches_store_main", "store_id", "is_main_branch"),
    )


__all__ = ["StoreBranch"]
