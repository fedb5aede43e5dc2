from app.routers.auth import auth_router
from app.routers.categories import categories_router
from app.routers.transactions import transactions_router

__all__ = ["auth_router", "categories_router", "transactions_router"]
