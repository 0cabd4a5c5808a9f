from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./rota.db"

    # Scheduler
    SCHEDULER_JITTER_MAX: int = 3  # 0 disables the scoring tiebreaker
    SCHEDULER_SEED: Optional[int] = None  # fixed seed for reproducible rosters

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )


settings = Settings()
