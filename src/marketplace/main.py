# src/marketplace/main.py

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from marketplace.core.config import settings
from marketplace.core.storage.factory import get_storage_provider
from marketplace.db.session import engine, init_db
from marketplace.api.router import router
from marketplace.middleware import AuthenticationMiddleware
from marketplace.services.asset.asset_manager import AssetManager
from marketplace.services.exceptions import (
    ServiceException,
    NotFoundError,
    PermissionDeniedError,
    AuthenticationError,
    InvalidCredentialsError,
    EmailAlreadyExistsError,
    ValidationFailure,
    AssetStorageError,
)

logger = logging.getLogger(__name__)


def build_asset_manager() -> AssetManager:
    return AssetManager(
        storage=get_storage_provider(),
        placeholder=settings.PLACEHOLDER_IMAGE,
        max_upload_size=settings.STORAGE_MAX_UPLOAD_SIZE_BYTES,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    if settings.APP_ENV != "production":
        # migrations own the schema in production
        await init_db()

    app.state.asset_manager = build_asset_manager()
    logger.info(f"Asset storage ready: provider={settings.STORAGE_PROVIDER} dir={settings.UPLOAD_DIR}")

    yield

    logger.info("Disposing database engine...")
    await engine.dispose()


app = FastAPI(
    title="Digital Marketplace API",
    lifespan=lifespan
)

settings.UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
app.mount(settings.UPLOAD_URL_PREFIX, StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

app.add_middleware(AuthenticationMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"])

app.include_router(router)


def _envelope(status_code: int, msg: str, data=None, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": status_code, "msg": msg, "data": data},
        headers=headers,
    )


@app.exception_handler(NotFoundError)
async def not_found_exception_handler(request: Request, exc: NotFoundError):
    return _envelope(status.HTTP_404_NOT_FOUND, exc.message)


@app.exception_handler(PermissionDeniedError)
async def permission_denied_exception_handler(request: Request, exc: PermissionDeniedError):
    """Caller is authenticated but does not own the record."""
    return _envelope(status.HTTP_403_FORBIDDEN, exc.message)


@app.exception_handler(AuthenticationError)
async def authentication_exception_handler(request: Request, exc: AuthenticationError):
    return _envelope(status.HTTP_401_UNAUTHORIZED, exc.message, headers={"WWW-Authenticate": "Bearer"})


@app.exception_handler(InvalidCredentialsError)
async def invalid_credentials_exception_handler(request: Request, exc: InvalidCredentialsError):
    return _envelope(status.HTTP_401_UNAUTHORIZED, exc.message, headers={"WWW-Authenticate": "Bearer"})


@app.exception_handler(EmailAlreadyExistsError)
async def email_exists_exception_handler(request: Request, exc: EmailAlreadyExistsError):
    return _envelope(status.HTTP_409_CONFLICT, exc.message)


@app.exception_handler(ValidationFailure)
async def validation_failure_exception_handler(request: Request, exc: ValidationFailure):
    return _envelope(status.HTTP_400_BAD_REQUEST, exc.message, data={"errors": exc.errors})


@app.exception_handler(AssetStorageError)
async def asset_storage_exception_handler(request: Request, exc: AssetStorageError):
    logger.error(f"Asset storage failure on {request.method} {request.url.path}: {exc.message}")
    return _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message)


@app.exception_handler(ServiceException)
async def service_exception_handler(request: Request, exc: ServiceException):
    # remaining expected business errors
    logger.warning(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    return _envelope(status.HTTP_400_BAD_REQUEST, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    return _envelope(
        422,
        "Invalid request.",
        data={"errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # keep FastAPI's HTTPException status, in our envelope
    return _envelope(exc.status_code, exc.detail, headers=exc.headers)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")
