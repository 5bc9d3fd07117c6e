from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from merchant_dashboard.core.view_state import SortState
from merchant_dashboard.models.branch import StoreBranch
from merchant_dashboard.models.inventory_transaction import InventoryTransaction
from merchant_dashboard.models.product import Product
from merchant_dashboard.services.inventory_service import display_branch_name, display_product_name


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def list_transactions(db: Session, store_id: int, *, limit: int = 50, locale: str = "en") -> list[dict]:
    transactions = (
        db.execute(
            select(InventoryTransaction)
            .where(InventoryTransaction.store_id == store_id)
            .order_by(InventoryTransaction.created_at.desc(), InventoryTransaction.id.desc())
            .limit(limit)
        )
        .scalars()
        .all()
    )
    if not transactions:
        return []

    product_ids = {tx.product_id for tx in transactions}
    branch_ids = {tx.branch_id for tx in transactions if tx.branch_id is not None}

    products = {
        product.id: product
        for product in db.execute(select(Product).where(Product.id.in_(product_ids))).scalars()
    }
    branches = {}
    if branch_ids:
        branches = {
            branch.id: branch
            for branch in db.execute(
                select(StoreBranch).where(StoreBranch.id.in_(branch_ids))
            ).scalars()
        }

    results = []
    for tx in transactions:
        branch = branches.get(tx.branch_id)
        results.append(
            {
                "id": tx.id,
                "product_id": tx.product_id,
                "branch_id": tx.branch_id,
                "product_name": display_product_name(products.get(tx.product_id), locale),
                "branch_name": display_branch_name(branch, locale),
                "transaction_type": tx.transaction_type,
                "quantity_change": tx.quantity_change,
                "quantity_before": tx.quantity_before,
                "quantity_after": tx.quantity_after,
                "notes": tx.notes,
                "performed_by": tx.performed_by,
                "created_at": _as_utc(tx.created_at),
            }
        )
    return results


def filter_transactions(
    transactions,
    *,
    transaction_type: str = "all",
    date_range: str = "all",
    now: Optional[datetime] = None,
):
    now = _as_utc(now or datetime.now(timezone.utc))
    filtered = list(transactions)

    if transaction_type and transaction_type != "all":
        filtered = [tx for tx in filtered if tx["transaction_type"] == transaction_type]

    if date_range == "today":
        filtered = [tx for tx in filtered if tx["created_at"].date() == now.date()]
    elif date_range == "week":
        week_ago = now - timedelta(days=7)
        filtered = [tx for tx in filtered if tx["created_at"] >= week_ago]
    elif date_range == "month":
        filtered = [
            tx
            for tx in filtered
            if tx["created_at"].month == now.month and tx["created_at"].year == now.year
        ]
    return filtered


_TX_SORT_KEYS = {
    "date": lambda tx: tx["created_at"],
    "product": lambda tx: (tx["product_name"] or "").casefold(),
    "branch": lambda tx: (tx["branch_name"] or "").casefold(),
    "type": lambda tx: tx["transaction_type"],
    "change": lambda tx: tx["quantity_change"],
    "notes": lambda tx: (tx["notes"] or "").casefold(),
}


def sort_transactions(transactions, sort_state: SortState):
    key = _TX_SORT_KEYS.get(sort_state.column or "")
    if key is None:
        return list(transactions)
    return sorted(transactions, key=key, reverse=sort_state.reverse)


__all__ = ["filter_transactions", "list_transactions", "sort_transactions"]
