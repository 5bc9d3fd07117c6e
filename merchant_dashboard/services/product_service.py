import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from merchant_dashboard.models.product import Product

logger = logging.getLogger(__name__)


class ProductNotFoundError(LookupError):
    pass


class ProductStateError(ValueError):
    pass


_UPDATABLE_FIELDS = (
    "name_en",
    "name_ar",
    "sku",
    "image_url",
    "price",
    "is_available",
    "status",
    "low_stock_threshold",
    "track_inventory",
    "allow_backorder",
    "selling_method",
    "selling_unit",
)

_NULLABLE_TEXT_FIELDS = {"name_en", "name_ar", "sku", "image_url", "selling_unit"}


def get_product(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if product is None:
        raise ProductNotFoundError("Product not found")
    return product


def list_active_products(db: Session, store_id: int) -> list[Product]:
    return list(
        db.execute(
            select(Product)
            .where(Product.store_id == store_id)
            .where(Product.is_active.is_(True))
            .where(Product.deleted_at.is_(None))
            .order_by(Product.name_en)
        )
        .scalars()
        .all()
    )


def list_trash(db: Session, store_id: int) -> list[Product]:
    return list(
        db.execute(
            select(Product)
            .where(Product.store_id == store_id)
            .where(Product.deleted_at.is_not(None))
            .order_by(Product.deleted_at.desc())
        )
        .scalars()
        .all()
    )


def update_product(db: Session, product_id: int, changes: dict) -> Product:
    product = get_product(db, product_id)

    if changes.get("price") is not None and changes["price"] <= 0:
        raise ProductStateError("Price must be greater than 0")

    for field_name in _UPDATABLE_FIELDS:
        if field_name not in changes:
            continue
        value = changes[field_name]
        if field_name in _NULLABLE_TEXT_FIELDS:
            value = value or None
        setattr(product, field_name, value)

    db.commit()
    db.refresh(product)
    return product


def soft_delete_product(db: Session, product_id: int, *, now: Optional[datetime] = None) -> Product:
    product = get_product(db, product_id)
    product.deleted_at = now or datetime.now(timezone.utc)
    product.is_active = False
    db.commit()
    db.refresh(product)
    logger.info("Moved product %s to trash", product_id)
    return product


def restore_product(db: Session, product_id: int) -> Product:
    product = get_product(db, product_id)
    if product.deleted_at is None:
        raise ProductStateError("Product is not in trash")

    product.deleted_at = None
    product.status = "archived"
    product.is_active = True
    db.commit()
    db.refresh(product)
    logger.info("Restored product %s from trash", product_id)
    return product


def delete_product_permanently(db: Session, product_id: int) -> None:
    get_product(db, product_id)
    # Inventory rows and transaction history cascade at the database level.
    db.execute(delete(Product).where(Product.id == product_id))
    db.commit()
    db.expunge_all()
    logger.info("Permanently deleted product %s", product_id)


__all__ = [
    "ProductNotFoundError",
    "ProductStateError",
    "delete_product_permanently",
    "get_product",
    "list_active_products",
    "list_trash",
    "restore_product",
    "soft_delete_product",
    "update_product",
]
