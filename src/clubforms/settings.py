"""Runtime settings loaded from `.env` and environment variables."""

from __future__ import annotations

import logging
import ssl
from functools import lru_cache
from pathlib import Path
from typing import Any

import httpx
from pydantic import Field, PrivateAttr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from clubforms.exceptions import SettingsError

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Package settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    project_name: str = "clubforms"
    app_env: str = Field(
        default="dev",
        validation_alias="APP_ENV",
        description="Application environment, e.g. 'dev', 'prod'.",
    )
    site_name: str = Field(
        default="Club",
        validation_alias="SITE_NAME",
        description="Club name shown on rendered forms.",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level, e.g. 'INFO', 'DEBUG'.",
    )
    log_json: bool = Field(
        default=True,
        validation_alias="LOG_JSON",
        description="Enable JSON formatted logs.",
    )
    log_file: str | None = Field(
        default=None,
        validation_alias="LOG_FILE",
        description="File path for log output.",
    )

    http_proxy: str | None = Field(default=None, validation_alias="HTTP_PROXY", description="HTTP proxy URL.")
    https_proxy: str | None = Field(
        default=None,
        validation_alias="HTTPS_PROXY",
        description="HTTPS proxy URL.",
    )
    cert_path: str | None = Field(
        default=None,
        validation_alias="CERT_PATH",
        description="Path to SSL certificate bundle.",
    )
    timeout: float = Field(
        default=30.0,
        validation_alias="TIMEOUT",
        description="Request timeout in seconds.",
    )

    cloudinary_cloud_name: str | None = Field(
        default=None,
        validation_alias="CLOUDINARY_CLOUD_NAME",
        description="Cloudinary cloud name.",
    )
    cloudinary_upload_preset: str | None = Field(
        default=None,
        validation_alias="CLOUDINARY_UPLOAD_PRESET",
        description="Unsigned upload preset used for browser-style uploads.",
    )
    cloudinary_api_key: str | None = Field(
        default=None,
        validation_alias="CLOUDINARY_API_KEY",
        description="Cloudinary API key for search and delete.",
    )
    cloudinary_api_secret: str | None = Field(
        default=None,
        validation_alias="CLOUDINARY_API_SECRET",
        description="Cloudinary API secret for search and delete.",
    )
    cloudinary_api_base_url: str = Field(
        default="https://api.cloudinary.com/v1_1",
        validation_alias="CLOUDINARY_API_BASE_URL",
        description="Cloudinary REST API base URL.",
    )
    media_root_folder: str = Field(
        default="club",
        validation_alias="MEDIA_ROOT_FOLDER",
        description="Top-level storage folder holding every logical media folder.",
    )
    media_search_max_results: int = Field(
        default=100,
        validation_alias="MEDIA_SEARCH_MAX_RESULTS",
        ge=1,
        le=500,
        description="Maximum number of assets returned by one media search.",
    )

    supabase_url: str | None = Field(
        default=None,
        validation_alias="SUPABASE_URL",
        description="Supabase project URL.",
    )
    supabase_key: str | None = Field(
        default=None,
        validation_alias="SUPABASE_KEY",
        description="Supabase API key.",
    )
    activities_table: str = Field(
        default="upcoming_activities",
        validation_alias="ACTIVITIES_TABLE",
        description="Table holding activity documents.",
    )
    registrations_table: str = Field(
        default="registrations",
        validation_alias="REGISTRATIONS_TABLE",
        description="Table holding registrations scoped to an activity.",
    )
    all_registrations_table: str = Field(
        default="all_registrations",
        validation_alias="ALL_REGISTRATIONS_TABLE",
        description="Flat table duplicating every registration for admin queries.",
    )

    _http_client: httpx.Client | None = PrivateAttr(default=None)

    @field_validator("media_root_folder")
    @classmethod
    def _validate_media_root_folder(cls, value: str) -> str:
        """Strip slashes around the media root folder.

        Args:
            value (str): Raw folder name.

        Raises:
            ValueError: If the folder is empty.

        Returns:
            str: Normalized folder name.
        """
        normalized = value.strip().strip("/")
        if not normalized:
            raise ValueError("MEDIA_ROOT_FOLDER must not be empty")  # noqa: TRY003
        return normalized

    @property
    def http_client(self) -> httpx.Client:
        """Return the shared HTTPX client, creating it on first use."""
        if self._http_client is None:
            self._http_client = httpx.Client(**build_httpx_client_kwargs(self))
        return self._http_client

    def close_http_client(self) -> None:
        """Close the shared HTTPX client if it was created."""
        if self._http_client is None:
            return
        try:
            self._http_client.close()
        except Exception:
            logger.warning("Failed to close HTTPX client")
        self._http_client = None


def build_ssl_context(settings: Settings) -> ssl.SSLContext:
    """Build a strict SSL context from settings.

    Args:
        settings (Settings): Runtime settings.

    Returns:
        ssl.SSLContext: Configured TLS context.
    """
    ssl_context = ssl.create_default_context(cafile=settings.cert_path)
    ssl_context.verify_mode = ssl.CERT_REQUIRED
    ssl_context.minimum_version = ssl.TLSVersion.TLSv1_2
    return ssl_context


def build_httpx_client_kwargs(settings: Settings) -> dict[str, Any]:
    """Build kwargs used for `httpx.Client`.

    Args:
        settings (Settings): Runtime settings.

    Returns:
        dict[str, Any]: Arguments for the client constructor.
    """
    kwargs: dict[str, Any] = {
        "verify": build_ssl_context(settings),
        "timeout": settings.timeout,
    }
    proxy_url = settings.https_proxy or settings.http_proxy
    if proxy_url:
        kwargs["proxy"] = proxy_url
    return kwargs


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance.

    Raises:
        SettingsError: If settings cannot be loaded or validated.

    Returns:
        Settings: The loaded settings instance.
    """
    try:
        return Settings()
    except Exception as exc:
        if _is_missing_settings_error(exc):
            ensure_env_file_exists()
            try:
                return Settings()
            except Exception as retry_exc:
                raise SettingsError(exc=retry_exc) from retry_exc
        raise SettingsError(exc=exc) from exc


def ensure_env_file_exists(
    *,
    env_path: Path = Path(".env"),
    template_path: Path = Path(".env.template"),
) -> None:
    """Create `.env` from template when missing.

    Args:
        env_path (Path): Target environment file path.
        template_path (Path): Template file path.
    """
    if env_path.exists() or not template_path.exists():
        return
    env_path.write_text(template_path.read_text(encoding="utf-8"), encoding="utf-8")
    logger.info(
        "Created environment file from template",
        extra={"env_path": str(env_path), "template_path": str(template_path)},
    )


def _is_missing_settings_error(exc: Exception) -> bool:
    """Return whether the settings failure is due to missing values.

    Args:
        exc (Exception): Caught settings initialization error.

    Returns:
        bool: True when the error represents missing settings values.
    """
    if not isinstance(exc, ValidationError):
        return False
    return any(error.get("type") == "missing" for error in exc.errors())
