"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - Every setting has a default: an API can be served with no environment at all
    - get_settings() is cached (lru_cache): single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - APIFRAME_ prefix keeps our variables apart from the host application's
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings from APIFRAME_* environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="APIFRAME_", case_sensitive=False, extra="ignore",
    )

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    # Schema document
    schema_host: str | None = None  # overrides the request host when set
    schema_namespace: str = "v1"
    schema_path: str = "/schema"
    expose_schema: bool = True

    # Error bodies
    include_backtraces: bool = False

    @field_validator("schema_path")
    @classmethod
    def ensure_leading_slash(cls, v: str) -> str:
        return v if v.startswith("/") else f"/{v}"

    @field_validator("log_format")
    @classmethod
    def check_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("json", "text"):
            raise ValueError("log_format must be 'json' or 'text'")
        return v


@lru_cache
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()
