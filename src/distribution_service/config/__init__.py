"""Application configuration loading helpers."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal

from pydantic import BaseModel, Field, PrivateAttr
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseModel):
    url: str
    prefix: str = "tm_"
    enabled: bool = True
    quota_bytes: int = 5 * 1024 * 1024
    schema_version: str = "1.0"


class LatencySettings(BaseModel):
    read_ms: int = 300
    write_ms: int = 500
    update_ms: int = 300


class AuthSettings(BaseModel):
    token_prefix: str = "mock-jwt-token-"
    default_user_password: str = "password123"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    app_name: str = Field(default="Tres Marias Distribution", alias="APP_NAME")
    environment: Literal["development", "staging", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    timezone: str = Field(default="Asia/Manila", alias="TZ")

    storage_url: str = Field(default="sqlite:///./distribution_data.db", alias="STORAGE_URL")
    storage_prefix: str = Field(default="tm_", alias="STORAGE_PREFIX")
    storage_enabled: bool = Field(default=True, alias="STORAGE_ENABLED")
    storage_quota_bytes: int = Field(default=5 * 1024 * 1024, alias="STORAGE_QUOTA_BYTES")
    schema_version: str = Field(default="1.0", alias="SCHEMA_VERSION")

    read_latency_ms: int = Field(default=300, alias="READ_LATENCY_MS")
    write_latency_ms: int = Field(default=500, alias="WRITE_LATENCY_MS")
    update_latency_ms: int = Field(default=300, alias="UPDATE_LATENCY_MS")

    auth_token_prefix: str = Field(default="mock-jwt-token-", alias="AUTH_TOKEN_PREFIX")
    default_user_password: str = Field(default="password123", alias="DEFAULT_USER_PASSWORD")

    _storage: StorageSettings = PrivateAttr()
    _latency: LatencySettings = PrivateAttr()
    _auth: AuthSettings = PrivateAttr()

    def model_post_init(self, __context: Any) -> None:  # pragma: no cover - simple data wiring
        object.__setattr__(
            self,
            "_storage",
            StorageSettings(
                url=self.storage_url,
                prefix=self.storage_prefix,
                enabled=self.storage_enabled,
                quota_bytes=self.storage_quota_bytes,
                schema_version=self.schema_version,
            ),
        )
        object.__setattr__(
            self,
            "_latency",
            LatencySettings(
                read_ms=self.read_latency_ms,
                write_ms=self.write_latency_ms,
                update_ms=self.update_latency_ms,
            ),
        )
        object.__setattr__(
            self,
            "_auth",
            AuthSettings(
                token_prefix=self.auth_token_prefix,
                default_user_password=self.default_user_password,
            ),
        )

    @property
    def storage(self) -> StorageSettings:
        return self._storage

    @property
    def latency(self) -> LatencySettings:
        return self._latency

    @property
    def auth(self) -> AuthSettings:
        return self._auth


@lru_cache
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings", "StorageSettings", "LatencySettings", "AuthSettings"]
