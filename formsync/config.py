"""Client configuration loaded from environment variables."""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from typing import Literal
from urllib.parse import urlparse

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOCALHOST_HOSTS = {"localhost", "127.0.0.1", "::1"}


class FormUpdateMode(StrEnum):
    """How the device keeps its blank forms up to date."""

    MANUAL = "manual"
    PREVIOUSLY_DOWNLOADED_ONLY = "previously_downloaded_only"
    MATCH_EXACTLY = "match_exactly"


def validate_server_url(server_url: str, allow_insecure_http: bool = False) -> str:
    """Return ``server_url`` normalized for joining with the form list path.

    The URL must be absolute http(s) with a host and no query or fragment,
    since the form list path is appended to it. Plain http is accepted only for
    this machine unless ``allow_insecure_http`` is set.
    """
    normalized = server_url.strip().rstrip("/")
    parsed = urlparse(normalized)
    if parsed.scheme not in {"http", "https"} or not parsed.hostname:
        raise ValueError(
            f"Server URL {normalized!r} must include scheme and host "
            "(e.g. https://central.example.org/v1/key/abc)"
        )
    if parsed.query or parsed.fragment:
        raise ValueError(f"Server URL {normalized!r} must not carry a query string or fragment")
    if parsed.scheme == "http" and not allow_insecure_http:
        if parsed.hostname not in _LOCALHOST_HOSTS:
            raise ValueError(
                f"HTTPS is required for {parsed.hostname}; "
                "use --allow-insecure-http only on trusted networks."
            )
    return normalized


class Settings(BaseSettings):
    """formsync client settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="FORMSYNC_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug: bool = False

    # Server
    server_url: str = ""
    form_list_path: str = "/formList"
    allow_insecure_http: bool = False
    request_timeout_seconds: float = Field(default=30.0, gt=0)

    # Credentials
    username: str = ""
    password: str = ""
    auth_scheme: Literal["basic", "digest"] = "digest"

    # Sync
    form_update_mode: FormUpdateMode = FormUpdateMode.MANUAL
    sync_interval_minutes: int = Field(default=15, ge=1)
    sync_workers: int = Field(default=2, ge=1)

    # Storage
    database_url: str = "sqlite:///data/formsync.db"
    forms_dir: Path = Path("./forms")

    @field_validator("server_url", mode="before")
    @classmethod
    def strip_server_url(cls, v: str) -> str:
        return v.strip().rstrip("/") if isinstance(v, str) else v

    @property
    def match_exactly(self) -> bool:
        return self.form_update_mode == FormUpdateMode.MATCH_EXACTLY

    def validate_runtime_settings(self) -> None:
        """Validate settings required to talk to the server, normalizing ``server_url``."""
        violations: list[str] = []
        if not self.server_url:
            violations.append("FORMSYNC_SERVER_URL must be configured")
        else:
            try:
                self.server_url = validate_server_url(self.server_url, self.allow_insecure_http)
            except ValueError as exc:
                violations.append(str(exc))
        if self.password and not self.username:
            violations.append("FORMSYNC_USERNAME must be set when FORMSYNC_PASSWORD is set")

        if violations:
            joined = "; ".join(violations)
            raise ValueError(f"Invalid sync configuration: {joined}")
