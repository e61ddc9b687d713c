# File: stopmotion/core/config.py

import os
from functools import lru_cache
from typing import List, Tuple

from pydantic import BaseModel, Field, field_validator


def env(name: str, default):
    """Field whose default is read from STOPMOTION_<name> when the model is built."""
    return Field(
        default_factory=lambda: os.getenv(f"STOPMOTION_{name}", default),
        validate_default=True,
    )


class Settings(BaseModel):
    # Basic app info
    PROJECT_NAME: str = env("PROJECT_NAME", "Stop Motion Editor Store")
    VERSION: str = "0.1.0"

    api_v1_prefix: str = env("API_V1_PREFIX", "/api/v1")
    debug: bool = env("DEBUG", "false")
    log_level: str = env("LOG_LEVEL", "INFO")

    # CORS
    backend_cors_origins: List[str] = env("BACKEND_CORS_ORIGINS", "")

    # Database (same file name the desktop build has always used)
    database_url: str = env("DATABASE_URL", "sqlite:///./db.db")
    sqlite_timeout: float = env("SQLITE_TIMEOUT", "30")

    # Ingestion
    image_extensions: Tuple[str, ...] = env("IMAGE_EXTENSIONS", "jpg,jpeg,png")
    ingest_workers: int = env("INGEST_WORKERS", "1")

    # Passwords are never stored in plaintext
    password_schemes: List[str] = env("PASSWORD_SCHEMES", "pbkdf2_sha256")

    @field_validator("backend_cors_origins", "password_schemes", mode="before")
    @classmethod
    def split_comma_list(cls, v):
        if isinstance(v, str):
            return [i.strip() for i in v.split(",") if i.strip()]
        if isinstance(v, list):
            return v
        return []

    @field_validator("image_extensions", mode="before")
    @classmethod
    def normalize_extensions(cls, v):
        if isinstance(v, str):
            v = v.split(",")
        return tuple(ext.strip().lower().lstrip(".") for ext in v if ext.strip())

    @field_validator("ingest_workers")
    @classmethod
    def at_least_one_worker(cls, v: int) -> int:
        return max(1, v)


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
