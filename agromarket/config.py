# agromarket/config.py
from pathlib import Path
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve to the project root (one level up from agromarket/)
BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="AGROMARKET_", extra="ignore")

    DATABASE_URL: str = f"sqlite:///{(BASE_DIR / 'marketplace.db').as_posix()}"

    # Logging
    LOG_LEVEL: str = "info"

    # Allowed drift between client total and quantity * price_per_unit
    PRICE_TOLERANCE: float = 0.01


@lru_cache()
def get_settings() -> Settings:
    return Settings()
