from fastapi import APIRouter

from app.storecare.core.config import settings
from app.storecare.routers.assignments import router as assignments_router
from app.storecare.routers.auth import router as auth_router
from app.storecare.routers.categories import router as categories_router
from app.storecare.routers.health import router as health_router
from app.storecare.routers.metrics import router as metrics_router
from app.storecare.routers.products import router as products_router
from app.storecare.routers.stores import router as stores_router
from app.storecare.routers.users import router as users_router

api_router = APIRouter()
api_router.include_router(health_router, tags=["ops"])
api_router.include_router(auth_router, prefix="/api/auth", tags=["auth"])
api_router.include_router(categories_router, prefix="/api/categories", tags=["categories"])
api_router.include_router(products_router, prefix="/api/products", tags=["products"])
api_router.include_router(assignments_router, prefix="/api/assignments", tags=["assignments"])
api_router.include_router(stores_router, prefix="/api/stores", tags=["stores"])
api_router.include_router(users_router, prefix="/api/users", tags=["users"])
if settings.METRICS_ENABLED:
    api_router.include_router(metrics_router, tags=["ops"])
