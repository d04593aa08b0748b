"""Library Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - get_settings() is cached (lru_cache) — single instance per process
    - Settings only supply defaults; explicit constructor arguments always win

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - DEFERRED_ env prefix: the library is embedded in host applications that own the bare names
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Library settings from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DEFERRED_", env_file=".env", case_sensitive=False, extra="ignore",
    )

    # FiniteStateMachine defaults
    fsm_initial_state: str = "initial"
    fsm_once: bool = True
    fsm_memory: bool = True
    fsm_final_state: bool = False

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator("log_format")
    @classmethod
    def check_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("json", "text"):
            raise ValueError("log_format must be 'json' or 'text'")
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
