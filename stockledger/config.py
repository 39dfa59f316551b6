from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ==============================
    # Application
    # ==============================
    APP_NAME: str = "Stock Ledger"
    ENVIRONMENT: str = "local"

    # ==============================
    # Database
    # ==============================
    DATABASE_URL: str = "sqlite:///./stockledger.db"
    SLOW_QUERY_MS: int = 1000

    # ==============================
    # Logging
    # ==============================
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False
    LOG_REQUESTS: bool = True

    # ==============================
    # Reporting
    # ==============================
    CURRENCY_PREFIX: str = "RM"
    REPORT_DATE_FORMAT: str = "%d/%m/%Y"

    # ==============================
    # Categories
    # ==============================
    DEFAULT_CATEGORIES_ENABLED: bool = True


@lru_cache
def get_settings() -> Settings:
    """Cached settings loader (once per process)."""
    return Settings()


__all__ = ["Settings", "get_settings"]
