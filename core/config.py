# app/core/config.py
from typing import *

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    APP_NAME: str = "Church Fundraising Platform"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./church_funds.db"

    # Record store
    STORE_READ_RETRIES: int = 2
    STORE_RETRY_BACKOFF: float = 0.1  # seconds, doubled per attempt

    # restrict | cascade
    PROJECT_DELETE_POLICY: Literal["restrict", "cascade"] = "restrict"

    # Identity provider tokens
    AUTH_JWT_SECRET: str = "change-me"
    AUTH_JWT_AUDIENCE: str = "authenticated"
    ALGORITHM: str = "HS256"

    # Blob storage
    FILE_STORAGE_PATH: str = "./uploads"
    PUBLIC_STORAGE_URL: str = "/storage"
    MAX_FILE_SIZE: int = 10 * 1024 * 1024  # 10MB
    ALLOWED_FILE_TYPES: List[str] = [
        "image/jpeg", "image/png", "image/gif", "image/webp",
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "text/plain",
    ]

    CORS_ALLOW_ORIGINS: List[str] = ["*"]


settings = Settings()
