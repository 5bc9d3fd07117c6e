"""Loads the store snapshot every inventory view renders from.

The snapshot is a read-only copy of the backend rows; views derive their
numbers from it and reload it after every write instead of patching it.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from merchant_dashboard.core.view_state import SortState, StockFilters
from merchant_dashboard.models.inventory import Inventory
from merchant_dashboard.models.store import Store
from merchant_dashboard.services.adjustment_service import SET, AdjustmentRequest, parse_quantity
from merchant_dashboard.services.branch_service import list_branches
from merchant_dashboard.services.inventory_service import (
    available_quantity_for,
    filter_products,
    inventory_stats,
    on_hand_quantity_for,
    sort_products,
    stock_rows,
)
from merchant_dashboard.services.product_service import list_active_products
from merchant_dashboard.services.transaction_service import list_transactions

logger = logging.getLogger(__name__)


class StoreNotFoundError(LookupError):
    pass


@dataclass
class InventorySnapshot:
    store_id: int
    store_name: str
    products: list = field(default_factory=list)
    branches: list = field(default_factory=list)
    inventory: list = field(default_factory=list)
    transactions: list = field(default_factory=list)

    def product(self, product_id: int) -> Optional[Any]:
        for product in self.products:
            if product.id == product_id:
                return product
        return None

    def branch(self, branch_id: Optional[int]) -> Optional[Any]:
        for branch in self.branches:
            if branch.id == branch_id:
                return branch
        return None


def _load_optional(db: Session, label: str, loader, default):
    # Branch, inventory and transaction tables ship in a later migration.
    try:
        return loader()
    except SQLAlchemyError as exc:
        logger.warning("Could not load %s: %s", label, exc)
        db.rollback()
        return default


def load_snapshot(
    db: Session,
    store_id: int,
    *,
    transactions_limit: int = 50,
    locale: str = "en",
) -> InventorySnapshot:
    store = db.get(Store, store_id)
    if store is None:
        raise StoreNotFoundError("Store not found")

    products = list_active_products(db, store_id)
    branches = _load_optional(db, "store_branches", lambda: list_branches(db, store_id), [])
    inventory = _load_optional(
        db,
        "inventory",
        lambda: list(
            db.execute(select(Inventory).where(Inventory.store_id == store_id))
            .unique()
            .scalars()
            .all()
        ),
        [],
    )
    transactions = _load_optional(
        db,
        "inventory_transactions",
        lambda: list_transactions(db, store_id, limit=transactions_limit, locale=locale),
        [],
    )

    return InventorySnapshot(
        store_id=store_id,
        store_name=store.display_name(locale),
        products=products,
        branches=branches,
        inventory=inventory,
        transactions=transactions,
    )


def stock_view(
    snapshot: InventorySnapshot,
    filters: StockFilters,
    sort_state: SortState,
    *,
    locale: str = "en",
) -> dict:
    products = filter_products(
        snapshot.products,
        snapshot.inventory,
        snapshot.branches,
        status=filters.status,
        branch=filters.branch,
    )
    products = sort_products(
        products,
        snapshot.inventory,
        snapshot.branches,
        sort_state,
        locale=locale,
    )
    return {
        "store_id": snapshot.store_id,
        "store_name": snapshot.store_name,
        "stats": inventory_stats(snapshot.products, snapshot.inventory, snapshot.branches),
        "filters": {
            "status": filters.status,
            "branch": filters.branch,
            "active_count": filters.active_count,
        },
        "sort": {"column": sort_state.column, "direction": sort_state.direction},
        "branches": [
            {
                "id": branch.id,
                "name": branch.name,
                "name_ar": branch.name_ar,
                "code": branch.code,
                "city": branch.city,
                "is_main_branch": branch.is_main_branch,
            }
            for branch in snapshot.branches
        ],
        "results": stock_rows(products, snapshot.inventory, snapshot.branches, locale=locale),
    }


def require_branch(snapshot: InventorySnapshot, branch_id: Optional[int]) -> None:
    """Stock may only move into the unscoped row or one of this store's branches."""
    if branch_id is not None and snapshot.branch(branch_id) is None:
        raise LookupError("Branch not found")


def adjustment_request_from_snapshot(
    snapshot: InventorySnapshot,
    product_id: int,
    branch_id: Optional[int],
    adjustment_type: str,
    raw_quantity,
    notes: Optional[str] = None,
) -> AdjustmentRequest:
    product = snapshot.product(product_id)
    if product is None:
        raise LookupError("Product not found")
    require_branch(snapshot, branch_id)

    return AdjustmentRequest(
        product_id=product_id,
        branch_id=branch_id,
        adjustment_type=adjustment_type,
        quantity=parse_quantity(raw_quantity, allow_zero=adjustment_type == SET),
        notes=(notes or "").strip() or None,
        available_quantity=available_quantity_for(product_id, branch_id, snapshot.inventory),
        on_hand_quantity=on_hand_quantity_for(product_id, branch_id, snapshot.inventory),
        is_available=bool(product.is_available),
    )


__all__ = [
    "InventorySnapshot",
    "StoreNotFoundError",
    "adjustment_request_from_snapshot",
    "load_snapshot",
    "require_branch",
    "stock_view",
]
