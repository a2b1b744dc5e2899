# src/marketplace/api/dependencies/authentication.py

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from pydantic import BaseModel, ConfigDict

from marketplace.models.identity import User
from marketplace.db.session import get_db
from marketplace.services.permission.authorization_gate import AuthorizationGate


class AuthContext(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)
    user: User
    token: Optional[str] = None


async def get_auth_context_from_token(token: Optional[str], db: AsyncSession) -> AuthContext:
    """
    Resolves a bearer token into an AuthContext.
    Does not depend on the request object, so it also serves non-HTTP callers.
    """
    user = await AuthorizationGate(db).resolve_caller(token)
    return AuthContext(user=user, token=token)


async def get_auth(
    request: Request,
    db: AsyncSession = Depends(get_db)
) -> AuthContext:
    """
    The single entry point for authentication.
    Reads the token the middleware placed in request.state; raises AuthenticationError when absent or invalid.
    """
    token = getattr(request.state, "token", None)
    return await get_auth_context_from_token(token, db)
