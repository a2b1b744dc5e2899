# tests/conftest.py

import uuid
from pathlib import Path
from dataclasses import dataclass
from typing import AsyncGenerator, Optional
import pytest
from httpx import AsyncClient, ASGITransport
from fastapi import status
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
)
from sqlalchemy.pool import NullPool

from marketplace.main import app
from marketplace.core.config import settings
from marketplace.core.context import AppContext
from marketplace.core.storage.local import LocalStorageProvider
from marketplace.core.security import create_access_token, get_password_hash
from marketplace.api.dependencies.authentication import AuthContext
from marketplace.db.base import Base
from marketplace.db.session import get_db
from marketplace.dao.identity.user_dao import UserDao
from marketplace.models import User
from marketplace.services.asset.asset_manager import AssetManager, UploadPayload

# Small enough to exercise the size check without large fixtures
TEST_MAX_UPLOAD_SIZE = 64 * 1024

# ==============================================================================
# 1. Database Fixtures
# ==============================================================================

@pytest.fixture(scope="function")
async def db_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """A fresh SQLite database file per test, schema built from metadata."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture(scope="function")
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """
    Services commit explicitly; expire_on_commit=False keeps ORM objects
    usable in assertions after those commits.
    """
    TestSessionLocal = async_sessionmaker(
        autoflush=False, expire_on_commit=False, bind=db_engine, class_=AsyncSession
    )
    async with TestSessionLocal() as session:
        yield session

# ==============================================================================
# 2. Asset Storage Fixtures
# ==============================================================================

@pytest.fixture(scope="function")
def upload_dir(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture(scope="function")
def storage(upload_dir: Path) -> LocalStorageProvider:
    return LocalStorageProvider(root=upload_dir, public_prefix="/uploads")


@pytest.fixture(scope="function")
def asset_manager(storage: LocalStorageProvider) -> AssetManager:
    return AssetManager(
        storage=storage,
        placeholder=settings.PLACEHOLDER_IMAGE,
        max_upload_size=TEST_MAX_UPLOAD_SIZE,
    )


def stored_files(upload_dir: Path) -> list:
    """Names of every object currently on disk."""
    if not upload_dir.exists():
        return []
    return sorted(p.name for p in upload_dir.iterdir() if p.is_file())


def file_for(upload_dir: Path, reference: str) -> Path:
    return upload_dir / reference.rsplit("/", 1)[-1]


@pytest.fixture
def payload_factory():
    def _factory(filename: str = "cover.png", content: bytes = b"\x89PNG fake image", field: str = "file") -> UploadPayload:
        return UploadPayload(filename=filename, content=content, content_type="application/octet-stream", field=field)
    return _factory

# ==============================================================================
# 3. Core AppContext and Client Fixtures
# ==============================================================================

@pytest.fixture(scope="function")
async def client(
    db_session: AsyncSession,
    asset_manager: AssetManager,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Overrides only the lowest-level dependency (get_db) and sets the
    app.state the lifespan would have built; DI builds everything above it.
    """
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.state.asset_manager = asset_manager

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
    if hasattr(app.state, "asset_manager"):
        del app.state.asset_manager


@pytest.fixture
def context_factory(db_session: AsyncSession, asset_manager: AssetManager):
    """Builds an AppContext for calling services directly, optionally as a given user."""
    def _factory(user: Optional[User] = None) -> AppContext:
        auth = AuthContext(user=user) if user is not None else None
        return AppContext(db=db_session, auth=auth, assets=asset_manager)
    return _factory

# ==============================================================================
# 4. Reusable Factory Fixtures (User, Auth)
# ==============================================================================

@dataclass
class UserContext:
    """An ORM user together with what tests need to act as it."""
    user: User
    password: str
    token: str

    @property
    def headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"}


@pytest.fixture(scope="function")
def user_data_factory():
    """Generates unique registration payloads."""
    def _user_data_factory(email: str = None, password: str = None, **kwargs):
        return {
            "name": "Test User",
            "email": email or f"test_{uuid.uuid4().hex[:12]}@example.com",
            "password": password or f"a-secure-password-{uuid.uuid4().hex[:8]}",
            **kwargs
        }
    return _user_data_factory


@pytest.fixture(scope="function")
async def registered_user_factory(client: AsyncClient, db_session: AsyncSession, user_data_factory):
    """Registers a user through the API and returns its UserContext."""
    async def _factory(email: str = None, password: str = None, **kwargs) -> UserContext:
        user_data = user_data_factory(email=email, password=password, **kwargs)
        response = await client.post("/api/auth/register", json=user_data)
        assert response.status_code == status.HTTP_201_CREATED, f"User registration failed: {response.text}"
        token = response.json()["data"]["access_token"]

        user = await UserDao(db_session).get_by_email(user_data["email"].lower())
        assert user is not None
        return UserContext(user=user, password=user_data["password"], token=token)

    return _factory


@pytest.fixture(scope="function")
async def user_factory(db_session: AsyncSession):
    """Inserts a user directly, for service-level tests that do not go through HTTP."""
    async def _factory(name: str = "Creator", email: str = None, password: str = "secret-password") -> UserContext:
        user = User(
            name=name,
            email=email or f"creator_{uuid.uuid4().hex[:12]}@example.com",
            password_hash=get_password_hash(password),
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return UserContext(user=user, password=password, token=create_access_token(subject=user.uuid))
    return _factory


@pytest.fixture(scope="function")
async def auth_headers_factory(client: AsyncClient):
    """Logs a UserContext in through the API and returns bearer headers."""
    async def _factory(test_context: UserContext) -> dict:
        login_data = {"email": test_context.user.email, "password": test_context.password}
        response = await client.post("/api/auth/login", json=login_data)
        assert response.status_code == 200, f"Failed to log in user {test_context.user.email}: {response.text}"
        token = response.json()["data"]["access_token"]
        return {"Authorization": f"Bearer {token}"}
    return _factory

# ==============================================================================
# 5. Common Entity Fixtures
# ==============================================================================

@pytest.fixture
async def creator(registered_user_factory) -> UserContext:
    """The user who owns the products under test."""
    return await registered_user_factory(name="Product Creator")


@pytest.fixture
async def other_user(registered_user_factory) -> UserContext:
    """A second, unrelated user."""
    return await registered_user_factory(name="Someone Else")
