"""Runtime configuration read from ``LTV_*`` environment variables."""

from __future__ import annotations

import os
from typing import Literal, Mapping

from pydantic import BaseModel, Field, field_validator

from ltv_report.query.pagination import PAGE_SIZES

ENV_PREFIX = "LTV_"


class Settings(BaseModel):
    """Settings shared by the session, the upload client and the CLI."""

    api_url: str = Field(
        default="http://localhost:8000",
        description="Base URL of the service exposing POST /upload",
    )
    currency: str = Field(default="CAD", description="ISO currency code for display")
    default_page_size: int = Field(
        default=10, description="Initial rows per page; one of PAGE_SIZES"
    )
    view_cache_size: int = Field(
        default=32, ge=0, description="Derived views memoised per session (0 disables)"
    )
    upload_timeout: float = Field(
        default=60.0, gt=0, description="Upload request timeout in seconds"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_json: bool = False

    @field_validator("api_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, value: str) -> str:
        value = value.strip().upper()
        if len(value) != 3 or not value.isalpha():
            raise ValueError(f"currency must be a 3-letter ISO code, got {value!r}")
        return value

    @field_validator("default_page_size")
    @classmethod
    def _allowed_page_size(cls, value: int) -> int:
        if value not in PAGE_SIZES:
            raise ValueError(f"default_page_size must be one of {PAGE_SIZES}")
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build :class:`Settings` from the environment.

    Only variables that are present override the defaults, so an empty
    environment yields the default settings.
    """
    env = os.environ if environ is None else environ
    overrides: dict[str, object] = {}
    for name in Settings.model_fields:
        raw = env.get(f"{ENV_PREFIX}{name.upper()}")
        if raw is not None and raw != "":
            overrides[name] = raw
    return Settings(**overrides)
