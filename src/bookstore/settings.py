"""
bookstore.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (JWT secret, identity and storage API keys).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="BOOKSTORE_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "bookstore-api"
    log_level: str = "INFO"
    log_json: bool = True

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Identity provider
    identity_provider: Literal["jwt", "remote"] = "jwt"
    jwt_alg: str = "HS256"
    jwt_issuer: str = "bookstore-auth"
    jwt_audience: str = "authenticated"
    jwt_secret: str = Field(default="dev-secret-change-me", repr=False)
    identity_url: str = "http://localhost:54321"
    identity_api_key: str = Field(default="", repr=False)
    identity_timeout_seconds: float = 10.0

    # Operator-controlled admin allow-list. Env accepts "a@x.com,b@y.com" or a JSON list.
    admin_emails: Annotated[list[str], NoDecode] = Field(default_factory=list)

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./bookstore.db"

    # Object storage. "local" keeps files on disk for dev/test; "remote" talks to the hosted store.
    storage_provider: Literal["local", "remote"] = "local"
    storage_root: str = "./storage"
    storage_public_url: str = "http://localhost:8080/storage"
    storage_url: str = "http://localhost:54321"
    storage_api_key: str = Field(default="", repr=False)
    storage_timeout_seconds: float = 30.0
    cover_bucket: str = "book-covers"
    pdf_bucket: str = "book-pdfs"
    author_image_bucket: str = "author-images"
    max_pdf_bytes: int = 50 * 1024 * 1024
    max_image_bytes: int = 5 * 1024 * 1024

    @field_validator("admin_emails", mode="before")
    @classmethod
    def _split_admin_emails(cls, value: object) -> object:
        if isinstance(value, str):
            raw = value.strip()
            if raw.startswith("["):
                return json.loads(raw)
            return [part for part in raw.split(",") if part.strip()]
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# The admin allow-list is read here once; `auth.access.init_access_control` normalizes it
# and hands it to the access control service. No other module should consult it.
