from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from core.exceptions import ConfigurationError

# Load .env file from project root
_env_path = Path(__file__).parent.parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path)


def _env_value(name: str | None) -> str | None:
    if not name:
        return None
    value = os.getenv(name, "").strip()
    return value or None


class StorageSettings(BaseModel):
    backend: Literal["local", "s3"] = "local"
    local_root: Path = Path("data/objects")
    local_public_base_url: str | None = None
    endpoint_env: str = "MINIO_ENDPOINT"
    access_key_env: str = "MINIO_ACCESS_KEY"
    secret_key_env: str = "MINIO_SECRET_KEY"
    bucket_env: str = "MINIO_BUCKET"
    region_env: str = "MINIO_REGION"
    public_base_url_env: str = "MINIO_PUBLIC_BASE_URL"
    region_default: str = "us-east-1"

    def _required(self, env_name: str) -> str:
        value = _env_value(env_name)
        if not value:
            raise ConfigurationError(
                f"{env_name} is not configured",
                details={"env": env_name},
            )
        return value

    @property
    def endpoint(self) -> str:
        return self._required(self.endpoint_env)

    @property
    def access_key(self) -> str:
        return self._required(self.access_key_env)

    @property
    def secret_key(self) -> str:
        return self._required(self.secret_key_env)

    @property
    def bucket(self) -> str:
        return self._required(self.bucket_env)

    @property
    def region(self) -> str:
        return _env_value(self.region_env) or self.region_default

    @property
    def public_base_url(self) -> str | None:
        return _env_value(self.public_base_url_env)


class UploadSettings(BaseModel):
    namespace: str = "silaturahim/"
    max_file_size_bytes: int = Field(2 * 1024 * 1024, gt=0)
    allowed_content_types: frozenset[str] = frozenset({"image/jpeg", "image/png", "image/webp"})
    proof_cache_control: str = "private, max-age=300"
    object_cache_control: str = "public, max-age=31536000, immutable"
    presign_expiry_seconds: int = Field(60 * 60, gt=0, le=7 * 24 * 60 * 60)
    stream_chunk_size: int = Field(64 * 1024, gt=0)

    model_config = {"frozen": True}

    @field_validator("namespace")
    @classmethod
    def _normalize_namespace(cls, value: str) -> str:
        cleaned = value.strip().strip("/")
        if not cleaned:
            raise ValueError("namespace must not be empty")
        return f"{cleaned}/"

    @field_validator("allowed_content_types", mode="before")
    @classmethod
    def _normalize_types(cls, value: Any) -> frozenset[str]:
        if value is None:
            return frozenset({"image/jpeg", "image/png", "image/webp"})
        if isinstance(value, str):
            value = [value]
        return frozenset(str(item).strip().lower() for item in value if str(item).strip())


class AuthSettings(BaseModel):
    secret_env: str = "AUTH_SECRET"
    algorithm: str = "HS256"
    cookie_name: str = "majelis_session"
    token_ttl_minutes: int = Field(60 * 24 * 30, gt=0)

    @property
    def secret(self) -> str:
        value = _env_value(self.secret_env)
        if not value:
            raise ConfigurationError(
                f"Environment variable '{self.secret_env}' is required for session verification",
                details={"env": self.secret_env},
            )
        return value


class Settings(BaseModel):
    storage: StorageSettings = Field(default_factory=StorageSettings)
    uploads: UploadSettings = Field(default_factory=UploadSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)

    @classmethod
    def load(cls, path: Path | None = None) -> "Settings":
        """Load settings from YAML configuration file.

        Args:
            path: Optional path to configuration file. If not provided, uses
                MAJELIS_CONFIG environment variable or defaults to config/default.yaml.

        Returns:
            Settings instance with loaded configuration.

        Raises:
            FileNotFoundError: If configuration file does not exist.
            ValueError: If configuration is invalid.
        """
        config_path = path or Path(os.getenv("MAJELIS_CONFIG", "config/default.yaml"))
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        with config_path.open("r", encoding="utf-8") as fp:
            payload = yaml.safe_load(fp) or {}
        try:
            return cls(**payload)
        except Exception as exc:
            raise ValueError(f"Invalid configuration: {exc}") from exc


@lru_cache(maxsize=1)
def get_settings(path: str | None = None) -> Settings:
    return Settings.load(Path(path) if path else None)


__all__ = [
    "Settings",
    "StorageSettings",
    "UploadSettings",
    "AuthSettings",
    "get_settings",
]
