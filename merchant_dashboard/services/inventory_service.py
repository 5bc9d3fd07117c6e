from dataclasses import dataclass, field
from typing import Any, Optional

from merchant_dashboard.core.constants import MAIN_BRANCH_FILTER, MAIN_BRANCH_LABEL
from merchant_dashboard.core.stock_rules import (
    classify_stock,
    normalize_status_filter,
    resolve_threshold,
    status_rank,
)
from merchant_dashboard.core.view_state import SortState


@dataclass
class BranchStock:
    product_id: int
    branch_id: Optional[int]
    quantity: int = 0
    reserved_quantity: int = 0
    available_quantity: int = 0
    branch: Any = None
    inventory_id: Optional[int] = None
    placeholder: bool = False


@dataclass
class ProductInventory:
    total_quantity: int = 0
    total_reserved: int = 0
    total_available: int = 0
    items: list[BranchStock] = field(default_factory=list)


def display_product_name(product, locale: str = "en") -> str:
    if product is None:
        return "Unknown Product"
    if locale == "ar" and getattr(product, "name_ar", None):
        return product.name_ar
    return getattr(product, "name_en", None) or "Unnamed Product"


def display_branch_name(branch, locale: str = "en") -> str:
    if branch is None or getattr(branch, "is_main_branch", False):
        return MAIN_BRANCH_LABEL
    if locale == "ar" and getattr(branch, "name_ar", None):
        return branch.name_ar
    return getattr(branch, "name", None) or "Unknown Branch"


def default_branch(branches):
    """Main branch, else the first one; preselected in the adjustment dialog."""
    for branch in branches:
        if branch.is_main_branch:
            return branch
    return branches[0] if branches else None


def _rows_for_product(product_id, inventory_rows):
    return [row for row in inventory_rows if row.product_id == product_id]


def aggregate_product_inventory(product_id, inventory_rows, branches) -> ProductInventory:
    """Per-branch stock breakdown for one product.

    ``items`` has one entry per branch, in branch order. Branches without a
    record get a zero placeholder, and an unscoped record (no branch) is
    counted against the default branch. Totals are summed over ``items`` so
    the breakdown always adds up to the headline numbers.
    """
    rows = _rows_for_product(product_id, inventory_rows)
    by_branch = {row.branch_id: row for row in rows if row.branch_id is not None}
    unscoped = [row for row in rows if row.branch_id is None]
    fallback = default_branch(branches)

    items = []
    for branch in branches:
        row = by_branch.get(branch.id)
        extra = unscoped if fallback is not None and branch.id == fallback.id else []
        if row is None and not extra:
            items.append(
                BranchStock(
                    product_id=product_id,
                    branch_id=branch.id,
                    branch=branch,
                    placeholder=True,
                )
            )
            continue

        sources = ([row] if row is not None else []) + extra
        items.append(
            BranchStock(
                product_id=product_id,
                branch_id=branch.id,
                quantity=sum(source.quantity or 0 for source in sources),
                reserved_quantity=sum(source.reserved_quantity or 0 for source in sources),
                available_quantity=sum(source.available_quantity or 0 for source in sources),
                branch=branch,
                inventory_id=sources[0].id,
            )
        )

    return ProductInventory(
        total_quantity=sum(item.quantity for item in items),
        total_reserved=sum(item.reserved_quantity for item in items),
        total_available=sum(item.available_quantity for item in items),
        items=items,
    )


def product_stock_status(product, summary: ProductInventory) -> str:
    return classify_stock(summary.total_available, product.low_stock_threshold)


def available_quantity_for(product_id, branch_id, inventory_rows) -> int:
    for row in _rows_for_product(product_id, inventory_rows):
        if row.branch_id == branch_id:
            return row.available_quantity or 0
    return 0


def on_hand_quantity_for(product_id, branch_id, inventory_rows) -> int:
    for row in _rows_for_product(product_id, inventory_rows):
        if row.branch_id == branch_id:
            return row.quantity or 0
    return 0


def inventory_stats(products, inventory_rows, branches) -> dict:
    tracked = [product for product in products if product.track_inventory is not False]
    counts = {"out_of_stock": 0, "low_stock": 0, "in_stock": 0}
    for product in tracked:
        summary = aggregate_product_inventory(product.id, inventory_rows, branches)
        counts[product_stock_status(product, summary)] += 1
    return {
        "total": len(products),
        "with_inventory": counts["low_stock"] + counts["in_stock"],
        "low_stock": counts["low_stock"],
        "out_of_stock": counts["out_of_stock"],
    }


def _matches_branch(product_id, branch_filter, inventory_rows) -> bool:
    rows = _rows_for_product(product_id, inventory_rows)
    if branch_filter == MAIN_BRANCH_FILTER:
        return any(row.branch_id is None for row in rows)
    try:
        branch_id = int(branch_filter)
    except (TypeError, ValueError):
        return False
    return any(row.branch_id == branch_id for row in rows)


def filter_products(products, inventory_rows, branches, *, status="all", branch="all"):
    filtered = list(products)
    if branch and branch != "all":
        filtered = [
            product
            for product in filtered
            if _matches_branch(product.id, branch, inventory_rows)
        ]

    wanted_status = normalize_status_filter(status)
    if wanted_status:
        filtered = [
            product
            for product in filtered
            if product_stock_status(
                product, aggregate_product_inventory(product.id, inventory_rows, branches)
            )
            == wanted_status
        ]
    return filtered


def sort_products(products, inventory_rows, branches, sort_state: SortState, *, locale="en"):
    if not sort_state.column:
        return list(products)

    summaries = {
        product.id: aggregate_product_inventory(product.id, inventory_rows, branches)
        for product in products
    }

    def sort_key(product):
        summary = summaries[product.id]
        column = sort_state.column
        if column == "product":
            return display_product_name(product, locale).casefold()
        if column == "onHand":
            return summary.total_quantity
        if column == "reserved":
            return summary.total_reserved
        if column == "available":
            return summary.total_available
        if column == "status":
            return status_rank(product_stock_status(product, summary))
        return 0

    return sorted(products, key=sort_key, reverse=sort_state.reverse)


def stock_rows(products, inventory_rows, branches, *, locale="en"):
    """Serializable stock table rows, one per product."""
    rows = []
    for product in products:
        summary = aggregate_product_inventory(product.id, inventory_rows, branches)
        threshold = resolve_threshold(product.low_stock_threshold)
        rows.append(
            {
                "product_id": product.id,
                "name": display_product_name(product, locale),
                "sku": product.sku,
                "image_url": product.image_url,
                "selling_method": product.selling_method,
                "selling_unit": product.selling_unit,
                "track_inventory": product.track_inventory,
                "low_stock_threshold": threshold,
                "total_quantity": summary.total_quantity,
                "total_reserved": summary.total_reserved,
                "total_available": summary.total_available,
                "total_quantity_display": format_quantity(summary.total_quantity, product),
                "total_available_display": format_quantity(summary.total_available, product),
                "status": product_stock_status(product, summary),
                "items": [
                    {
                        "branch_id": item.branch_id,
                        "branch_name": display_branch_name(item.branch, locale),
                        "quantity": item.quantity,
                        "reserved_quantity": item.reserved_quantity,
                        "available_quantity": item.available_quantity,
                        "status": classify_stock(item.available_quantity, threshold),
                        "placeholder": item.placeholder,
                    }
                    for item in summary.items
                ],
            }
        )
    return rows


def format_quantity(quantity: int, product) -> str:
    if not product.selling_method or product.selling_method == "unit":
        return "{:,}".format(quantity)
    return "{:,} {}".format(quantity, product.selling_unit or "").rstrip()


def branch_preview(branch, products, inventory_rows, *, locale="en") -> dict:
    entries = []
    for product in products:
        row = next(
            (
                item
                for item in inventory_rows
                if item.product_id == product.id and item.branch_id == branch.id
            ),
            None,
        )
        available = (row.available_quantity or 0) if row is not None else 0
        entries.append(
            {
                "product_id": product.id,
                "name": display_product_name(product, locale),
                "quantity": (row.quantity or 0) if row is not None else 0,
                "reserved": (row.reserved_quantity or 0) if row is not None else 0,
                "available": available,
                "status": classify_stock(available, product.low_stock_threshold),
            }
        )
    entries.sort(key=lambda entry: entry["available"], reverse=True)

    return {
        "branch_id": branch.id,
        "branch_name": display_branch_name(branch, locale),
        "products": entries,
        "stats": {
            "total": len(entries),
            "in_stock": sum(1 for entry in entries if entry["status"] == "in_stock"),
            "low_stock": sum(1 for entry in entries if entry["status"] == "low_stock"),
            "out_of_stock": sum(1 for entry in entries if entry["status"] == "out_of_stock"),
            "total_quantity": sum(entry["quantity"] for entry in entries),
        },
    }


__all__ = [
    "BranchStock",
    "ProductInventory",
    "aggregate_product_inventory",
    "available_quantity_for",
    "branch_preview",
    "default_branch",
    "display_branch_name",
    "display_product_name",
    "filter_products",
    "format_quantity",
    "inventory_stats",
    "on_hand_quantity_for",
    "product_stock_status",
    "sort_products",
    "stock_rows",
]
