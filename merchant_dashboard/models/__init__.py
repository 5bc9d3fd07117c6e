import importlib

from merchant_dashboard.models.branch import StoreBranch
from merchant_dashboard.models.inventory import Inventory
from merchant_dashboard.models.inventory_transaction import InventoryTransaction
from merchant_dashboard.models.product import Product
from merchant_dashboard.models.store import Store


def import_all_models() -> None:
    for module_name in (
        "merchant_dashboard.models.branch",
        "merchant_dashboard.models.inventory",
        "merchant_dashboard.models.inventory_transaction",
        "merchant_dashboard.models.product",
        "merchant_dashboard.models.store",
    ):
        importlib.import_module(module_name)


__all__ = [
    "Inventory",
    "InventoryTransaction",
    "Product",
    "Store",
    "StoreBranch",
    "import_all_models",
]
