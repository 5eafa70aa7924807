"""Application configuration loaded from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All configuration is loaded from environment variables (or .env file).

    Scoring constants are not here; they live in engine/energy_config.yaml.
    """

    # --- App ---
    app_name: str = "Cyclewise"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    environment: str = "development"  # development | staging | production

    # --- Database ---
    # asyncpg DSN; without it only the stateless /energy routes are served
    database_url: str | None = None
    db_pool_min_size: int = 2
    db_pool_max_size: int = 20

    # --- Coefficient estimator ---
    anthropic_api_key: str | None = None  # unset → offline fuzzy matching only
    anthropic_model: str = "claude-haiku-4-5-20251001"
    estimator_timeout_seconds: float = 10.0

    # --- Rate Limiting ---
    rate_limit_per_minute: int = 60
    rate_limit_exempt_paths: list[str] = ["/health"]

    # --- CORS ---
    cors_origins: list[str] = ["http://localhost:3000"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
