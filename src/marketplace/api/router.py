# src/marketplace/api/router.py

from fastapi import APIRouter
from marketplace.core.config import settings
from marketplace.api.v1 import identity
from marketplace.api.v1 import user
from marketplace.api.v1 import product

router = APIRouter(prefix=settings.API_PREFIX)

router.include_router(
    identity.router,
    prefix="/auth",
    tags=["Identity - Authentication"]
)
router.include_router(
    user.router,
    prefix="/users",
    tags=["Identity - Profiles"]
)
router.include_router(
    product.router,
    prefix="/products",
    tags=["Marketplace - Products"]
)
