"""Application configuration via environment variables."""

from pathlib import Path
from pydantic_settings import BaseSettings

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    database_url: str = f"sqlite:///{PROJECT_ROOT / 'trade_journal.db'}"  # postgresql://... needs the postgres extra
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:3000"]

    # Auth
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440  # 24 hours

    # Analytics
    recent_activity_days: int = 7

    model_config = {"env_prefix": "TJ_", "env_file": ".env"}


settings = Settings()
