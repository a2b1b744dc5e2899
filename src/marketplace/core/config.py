# src/marketplace/core/config.py
from dotenv import load_dotenv
load_dotenv(".env")
from pathlib import Path
from typing import List, Literal, Optional
from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # model_config loads the .env file automatically
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

    # Application (types are coerced automatically)
    APP_ENV: str = "development"
    APP_HOST: str = "127.0.0.1"
    APP_PORT: int = 8000
    LOG_LEVEL: str = "INFO"
    API_PREFIX: str = "/api"
    CORS_ORIGINS: List[str] = ["*"]

    # --- Database ---
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = "postgres"
    DB_NAME: str = "marketplace"

    # Full URL for non-postgres engines (e.g. sqlite+aiosqlite:///./marketplace.db)
    DATABASE_URL_OVERRIDE: Optional[str] = None

    @computed_field
    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    # --- Test database ---
    DATABASE_URL_TEST: str = "sqlite+aiosqlite:///./test_marketplace.db"

    # --- Storage Infrastructure ---
    STORAGE_PROVIDER: Literal["local"] = "local"
    UPLOAD_DIR: Path = Field(Path("uploads"), description="Directory the local provider writes into")
    UPLOAD_URL_PREFIX: str = Field("/uploads", description="Public URL prefix for stored assets")
    # 100MB
    STORAGE_MAX_UPLOAD_SIZE_BYTES: int = 104857600
    # Well-known default image reference; never stored, never deleted
    PLACEHOLDER_IMAGE: str = "/placeholder.svg"

    # JWT
    SECRET_KEY: str = Field("change-me-in-production", min_length=8)
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 30


settings = Settings()
