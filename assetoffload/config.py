"""Offload configuration: env-driven, loaded once at startup.

Reads from a .env file and ASSETOFFLOAD_* environment variables. List values
(``include``) are given as JSON, e.g. ``ASSETOFFLOAD_INCLUDE='[".png"]'``.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from assetoffload.core.hasher import normalize_extension

DEFAULT_EXTENSIONS: tuple[str, ...] = (
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".svg",
    ".webp",
)


class OffloadSettings(BaseSettings):
    """Settings for one offload run.

    Examples
    --------
    Override via environment::

        export ASSETOFFLOAD_BUCKET=static-assets
        export ASSETOFFLOAD_CDN_BASE_URL=https://cdn.example.com/
        export ASSETOFFLOAD_SECRET_KEY=...

    Or via .env file::

        ASSETOFFLOAD_ACCESS_KEY=...
        ASSETOFFLOAD_MAX_CONCURRENT_UPLOADS=8
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="ASSETOFFLOAD_",
        env_file_encoding="utf-8",
    )

    # Remote store credentials
    access_key: str = ""
    secret_key: SecretStr = SecretStr("")
    bucket: str = ""
    upload_token_ttl: int = Field(default=3600, ge=1)

    # Delivery
    cdn_base_url: str = ""
    include: list[str] = Field(default_factory=lambda: list(DEFAULT_EXTENSIONS))

    # Output
    out_dir: Path = Path("dist")
    entry_document: str = "index.html"
    patch_all_html: bool = False

    max_concurrent_uploads: int = Field(default=4, ge=1)
    log_level: str = "INFO"

    @field_validator("cdn_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.strip().rstrip("/")

    @field_validator("include")
    @classmethod
    def _normalize_extensions(cls, value: list[str]) -> list[str]:
        normalized: list[str] = []
        for raw in value:
            ext = normalize_extension(raw)
            if ext and ext not in normalized:
                normalized.append(ext)
        if not normalized:
            raise ValueError("include must name at least one file extension")
        return normalized

    @property
    def qualifying_extensions(self) -> tuple[str, ...]:
        """The normalized Qualifying Extension Set, in configured order."""
        return tuple(self.include)
