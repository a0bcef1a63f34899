# API Routes
from app.api.health import router as health_router
from app.api.auth import router as auth_router
from app.api.users import router as users_router
from app.api.customers import router as customers_router
from app.api.businesses import router as businesses_router
from app.api.bundles import router as bundles_router
from app.api.qr_codes import router as qr_codes_router
from app.api.transactions import router as transactions_router
from app.api.ratings import router as ratings_router
from app.api.analytics import router as analytics_router
from app.api.notifications import router as notifications_router

__all__ = [
    "health_router",
    "auth_router",
    "users_router",
    "customers_router",
    "businesses_router",
    "bundles_router",
    "qr_codes_router",
    "transactions_router",
    "ratings_router",
    "analytics_router",
    "notifications_router",
]
