# src/marketplace/services/permission/authorization_gate.py

import logging
from typing import Optional, Union
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.security import decode_token
from marketplace.dao.identity.user_dao import UserDao
from marketplace.models import Product, User
from marketplace.services.exceptions import AuthenticationError, PermissionDeniedError

logger = logging.getLogger(__name__)


class AuthorizationGate:
    """
    Resolves bearer tokens to users and checks record ownership.
    Stateless apart from the session it reads identities through.
    """

    def __init__(self, db: AsyncSession):
        self.user_dao = UserDao(db)

    async def resolve_caller(self, token: Optional[str]) -> User:
        """
        Decode a signed access token and load the user it names.

        :raises AuthenticationError: token absent, malformed, expired, or user unknown.
        """
        if not token:
            raise AuthenticationError("Authentication credentials were not provided.")
        try:
            payload = decode_token(token)
        except JWTError as e:
            logger.debug(f"Rejected access token: {e}")
            raise AuthenticationError("Could not validate credentials.")

        user_uuid = payload.get("sub")
        if not user_uuid:
            raise AuthenticationError("Invalid token payload.")

        user = await self.user_dao.get_by_uuid(user_uuid)
        if user is None:
            raise AuthenticationError("User for this token no longer exists.")
        return user

    @staticmethod
    def assert_owner(resource: Union[Product, User], caller: User) -> None:
        """Products are owned through creator_id, identities own themselves."""
        if isinstance(resource, User):
            owner_id = resource.id
        else:
            owner_id = resource.creator_id
        if owner_id is None or owner_id != caller.id:
            noun = "profile" if isinstance(resource, User) else "product"
            raise PermissionDeniedError(f"Not authorized to modify this {noun}.")
