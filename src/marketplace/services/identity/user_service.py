# src/marketplace/services/identity/user_service.py

import logging
from typing import Optional
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from marketplace.core.context import AppContext
from marketplace.core.security import create_access_token, get_password_hash, verify_password
from marketplace.dao.identity.user_dao import UserDao
from marketplace.models.identity import User
from marketplace.schemas.identity.user_schemas import (
    UserCreate, LoginRequest, UserProfileUpdate, UserRead, AuthSession,
)
from marketplace.services.asset.asset_manager import UploadPayload
from marketplace.services.base_service import BaseService
from marketplace.services.permission.authorization_gate import AuthorizationGate
from marketplace.services.exceptions import (
    ServiceException,
    EmailAlreadyExistsError,
    InvalidCredentialsError,
    UserNotFound,
    ValidationFailure,
)

logger = logging.getLogger(__name__)


class UserService(BaseService):
    def __init__(self, context: AppContext):
        super().__init__(context)
        self.user_dao = UserDao(context.db)

    # --- Public DTO-returning "Wrapper" Methods ---

    async def register_user(self, user_create: UserCreate) -> AuthSession:
        new_user = await self._register_user(user_create)
        return self._session_for(new_user)

    async def login(self, login_request: LoginRequest) -> AuthSession:
        user = await self._authenticate_with_password(login_request.email, login_request.password)
        return self._session_for(user)

    async def get_me(self) -> UserRead:
        return UserRead.model_validate(self.context.actor)

    async def get_profile(self, user_uuid: str) -> UserRead:
        user = await self.user_dao.get_by_uuid(user_uuid)
        if not user:
            raise UserNotFound("User not found.")
        return UserRead.model_validate(user)

    async def update_profile(self, fields: dict, profile_image: Optional[UploadPayload] = None) -> UserRead:
        user = await self._update_profile(fields, profile_image)
        return UserRead.model_validate(user)

    # --- Internal ORM-returning "Workhorse" Methods ---

    def _session_for(self, user: User) -> AuthSession:
        # the public uuid is the token subject, never the sequential id
        access_token = create_access_token(subject=user.uuid)
        return AuthSession(access_token=access_token, user=UserRead.model_validate(user))

    async def _register_user(self, user_create: UserCreate) -> User:
        email = user_create.email.lower()
        if await self.user_dao.get_by_email(email):
            raise EmailAlreadyExistsError("Email already registered.")

        new_user = User(
            name=user_create.name,
            email=email,
            password_hash=get_password_hash(user_create.password),
        )
        try:
            await self.user_dao.add(new_user)
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            # lost a race against a concurrent registration
            raise EmailAlreadyExistsError("Email already registered.")
        except Exception:
            await self.db.rollback()
            logger.exception("Unexpected database error during registration")
            raise ServiceException("Failed to create user due to a database error.")

        logger.info(f"Registered user {new_user.uuid}")
        return new_user

    async def _authenticate_with_password(self, email: str, password: str) -> User:
        """Same error for an unknown email and a wrong password."""
        user = await self.user_dao.get_by_email(email.strip().lower())
        if not user or not user.password_hash or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError("Invalid email or password.")
        return user

    async def _update_profile(self, fields: dict, profile_image: Optional[UploadPayload]) -> User:
        caller = self.context.actor
        user = await self.user_dao.get_by_pk(caller.id)
        if not user:
            raise UserNotFound("User not found.")
        AuthorizationGate.assert_owner(user, caller)

        try:
            update = UserProfileUpdate.model_validate(fields)
        except ValidationError as e:
            raise ValidationFailure.from_pydantic(e, "Invalid profile data.")
        changes = update.changes()

        if "email" in changes:
            changes["email"] = changes["email"].lower()
            if changes["email"] != user.email:
                existing = await self.user_dao.get_by_email(changes["email"])
                if existing and existing.id != user.id:
                    raise EmailAlreadyExistsError("Email already in use by another account.")

        async with self.context.assets.staging() as staged:
            if profile_image is not None:
                changes["profile_image"] = await staged.store(profile_image)
                staged.retire(user.profile_image)

            if not changes:
                return user

            try:
                await self.user_dao.update(user, changes)
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                raise EmailAlreadyExistsError("Email already in use by another account.")
            except Exception:
                await self.db.rollback()
                raise
            staged.commit()

        logger.info(f"Updated profile of user {user.uuid}: {sorted(changes)}")
        return user
