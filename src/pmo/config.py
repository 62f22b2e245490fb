"""PMO service configuration via environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Global application settings loaded from environment / .env file."""

    # General
    pmo_env: str = "development"
    pmo_debug: bool = True
    pmo_api_key: str = "changeme-generate-a-real-key"

    # Where the CLI sends its requests
    pmo_api_url: str = "http://localhost:8000"

    # PostgreSQL
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "pmo"
    postgres_password: str = "pmo_dev_password"
    postgres_db: str = "pmo"
    db_pool_size: int = 10
    db_max_overflow: int = 20
    # Create missing tables on startup instead of running migrations
    db_create_tables: bool = False

    @property
    def database_url(self) -> str:
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # Analytics thresholds
    scope_creep_threshold: float = 30.0   # percent over baseline effort
    hours_per_day: int = 8                # effort hours per task day
    high_risk_threshold: int = 15         # heatmap "high risk" cut-off

    # Background jobs
    score_sync_hour: int = 5              # daily portfolio re-rank, UTC
    scope_check_interval_hours: int = 6

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
