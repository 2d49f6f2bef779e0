"""Configuration loading for the Livebox CLI."""

from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "http://livebox.home"


class Settings(BaseSettings):
    """Connection settings loaded from environment variables or .env files."""

    model_config = SettingsConfigDict(
        env_prefix="LIVEBOX_CLI_",
        extra="ignore",
    )

    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        validation_alias=AliasChoices("LIVEBOX_API_BASEURL", "LIVEBOX_CLI_BASE_URL"),
    )
    username: str = "admin"
    password: str | None = None
    verify_ssl: bool = True
    timeout: float = Field(default=10.0, gt=0)

    @classmethod
    def from_env_file(cls, env_file: Path | None = None) -> Settings:
        kwargs: dict[str, Path] = {}
        if env_file is not None:
            kwargs["_env_file"] = env_file
        return cls(**kwargs)
