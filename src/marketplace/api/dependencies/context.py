# src/marketplace/api/dependencies/context.py

import logging
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.context import AppContext
from marketplace.db.session import get_db
from marketplace.api.dependencies.authentication import get_auth
from marketplace.services.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


async def get_base_context(
    request: Request,
    db: AsyncSession = Depends(get_db)
) -> AppContext:
    """
    Builds the non-authenticated AppContext from the session and the
    process-wide services stored on app.state. `auth` is always None here.
    """
    asset_manager = getattr(request.app.state, "asset_manager", None)
    if asset_manager is None:
        logger.critical("Asset manager is not available on app.state!")
        raise RuntimeError("Asset storage is not initialized.")
    return AppContext(db=db, auth=None, assets=asset_manager)


async def get_public_context(
    request: Request,
    context: AppContext = Depends(get_base_context),
) -> AppContext:
    """Optional authentication: a bad or missing token leaves auth as None."""
    try:
        context.auth = await get_auth(request, context.db)
    except AuthenticationError:
        context.auth = None
    return context


async def require_auth_context(
    request: Request,
    context: AppContext = Depends(get_base_context),
) -> AppContext:
    """Mandatory authentication: AuthenticationError propagates and becomes a 401."""
    context.auth = await get_auth(request, context.db)
    return context


# Public routes, authentication optional
PublicContextDep = Depends(get_public_context)
# Private routes, authentication required
AuthContextDep = Depends(require_auth_context)
