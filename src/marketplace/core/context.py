# src/marketplace/core/context.py

from pydantic import BaseModel, ConfigDict
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.api.dependencies.authentication import AuthContext
from marketplace.services.asset.asset_manager import AssetManager
from marketplace.services.exceptions import AuthenticationError


class AppContext(BaseModel):
    """
    Typed context handed to every service call.
    Carries the request session, the optional authentication result and the
    process-wide asset manager built at startup.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    db: AsyncSession

    # None on public routes, an AuthContext once a bearer token was resolved
    auth: Optional[AuthContext] = None

    assets: AssetManager

    @property
    def actor(self):
        if not self.auth or not self.auth.user:
            raise AuthenticationError("An authenticated user is required for this operation.")
        return self.auth.user
