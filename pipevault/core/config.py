
from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "PipeVault Admin API"
    app_env: str = "development"
    app_port: int = 8000
    frontend_url: str = "http://localhost:5173"

    # Database (PostgreSQL via asyncpg in production, SQLite for local dev)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./pipevault_dev.db",
        alias="DATABASE_URL",
    )
    database_echo: bool = Field(default=False, alias="DATABASE_ECHO")
    database_busy_timeout: float = Field(
        default=15.0, alias="DATABASE_BUSY_TIMEOUT",
    )  # seconds a SQLite writer waits for a competing transaction

    # Notification queue (consumed by the external delivery worker)
    notification_batch_size: int = Field(default=50, alias="NOTIFICATION_BATCH_SIZE")
    notification_max_attempts: int = Field(default=3, alias="NOTIFICATION_MAX_ATTEMPTS")

    # Manual rack adjustments must carry a descriptive reason
    rack_adjustment_min_reason_length: int = Field(
        default=10, alias="RACK_ADJUSTMENT_MIN_REASON_LENGTH",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
    }

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

settings = Settings()
