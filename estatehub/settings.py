from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    App settings.

    Notes:
    - Defaults are local and deterministic so the service boots without setup.
    - Every field can be overridden via `ESTATEHUB_*` environment variables.
    - `jwt_secret` must be overridden outside of local development.
    """

    model_config = SettingsConfigDict(env_prefix="ESTATEHUB_", extra="ignore")

    db_url: str | None = None
    policy_path: str | None = None
    log_level: str = "INFO"
    debug: bool = False

    # Token service
    jwt_secret: SecretStr = SecretStr("dev-only-secret-change-me-0123456789abcdef")
    jwt_algorithm: str = "HS256"
    jwt_issuer: str = "estatehub"
    jwt_audience: str = "estatehub-api"
    token_ttl_minutes: int = 180

    # Pagination guard; 100 is a hard ceiling, configuration can only lower it
    default_page_size: int = Field(default=20, ge=1, le=100)
    max_page_size: int = Field(default=100, ge=1, le=100)

    # Registration
    allow_admin_self_registration: bool = False
    bootstrap_admin_email: str | None = None
    bootstrap_admin_password: SecretStr | None = None

    def resolved_db_url(self) -> str:
        if self.db_url:
            return self.db_url

        repo_root = Path(__file__).resolve().parents[1]
        db_path = repo_root / "estatehub.db"
        return f"sqlite:///{db_path}"

    def resolved_policy_path(self) -> Path:
        if self.policy_path:
            return Path(self.policy_path)

        repo_root = Path(__file__).resolve().parents[1]
        return repo_root / "config" / "scoping_policy.yaml"


@lru_cache
def get_settings() -> Settings:
    return Settings()
