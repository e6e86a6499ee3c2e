"""Application settings (env/.env)."""

from __future__ import annotations

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings for the MCP server and the OneNote API."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    onenote_api_base_url: AnyHttpUrl = Field(
        default="https://graph.microsoft.com/v1.0/me/onenote",
        alias="ONENOTE_API_BASE_URL",
    )
    # Used by the host application for the authorization-code exchange.
    onenote_client_id: str = Field(default="", alias="ONENOTE_CLIENT_ID")
    onenote_client_secret: str = Field(default="", alias="ONENOTE_CLIENT_SECRET")
    onenote_redirect_url: AnyHttpUrl | None = Field(default=None, alias="ONENOTE_REDIRECT_URL")

    notebook_title: str = Field(
        default="Moodle Notebook",
        alias="ONENOTE_NOTEBOOK_TITLE",
        min_length=1,
    )
    notebook_sync_attempts: int = Field(default=2, alias="ONENOTE_NOTEBOOK_SYNC_ATTEMPTS", ge=1)
    max_redirects: int = Field(default=3, alias="ONENOTE_MAX_REDIRECTS", ge=0)
    name_cache_ttl_seconds: float = Field(
        default=3600.0,
        alias="ONENOTE_NAME_CACHE_TTL_SECONDS",
        gt=0,
    )
    download_dir: str = Field(default="downloads", alias="ONENOTE_DOWNLOAD_DIR")

    mcp_api_key: str = Field(alias="MCP_API_KEY", min_length=1)
    mcp_host: str = Field(default="127.0.0.1", alias="MCP_HOST")
    mcp_port: int = Field(default=5005, alias="MCP_PORT", ge=1, le=65535)

    http_timeout_seconds: float = Field(
        default=15.0,
        alias="HTTP_TIMEOUT_SECONDS",
        gt=0,
    )
