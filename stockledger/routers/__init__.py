from stockledger.routers.categories import router as categories_router
from stockledger.routers.health import router as health_router
from stockledger.routers.items import router as items_router
from stockledger.routers.stock import router as stock_router
from stockledger.routers.transactions import router as transactions_router
from stockledger.routers.users import router as users_router

__all__ = [
    "categories_router",
    "health_router",
    "items_router",
    "stock_router",
    "transactions_router",
    "users_router",
]
