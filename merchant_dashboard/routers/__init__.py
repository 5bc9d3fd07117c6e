from merchant_dashboard.routers.auth import router as auth_router
from merchant_dashboard.routers.branches import router as branches_router
from merchant_dashboard.routers.health import router as health_router
from merchant_dashboard.routers.inventory import router as inventory_router
from merchant_dashboard.routers.products import router as products_router

__all__ = [
    "auth_router",
    "branches_router",
    "health_router",
    "inventory_router",
    "products_router",
]
