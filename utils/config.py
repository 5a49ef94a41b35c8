"""Configuration management for the transaction dashboard API.

AppConfig holds the application settings read from environment variables.
"""

import os
from pathlib import Path
from typing import Any, Dict

from utils.months import resolve_month
from utils.seeding import DEFAULT_SOURCE_URL


class AppConfig:
    """Application-level configuration loaded from environment variables.

    All env vars have sensible defaults so the application works out of the
    box without any configuration.

    Environment variables:
        APP_DB_PATH: Path to the SQLite database file (default: transactions.sqlite)
        APP_PORT: API server port (default: 8000)
        APP_HOST: API server bind address (default: 127.0.0.1)
        APP_LOG_FORMAT: Logging format, "text" or "json" (default: text)
        APP_CORS_ORIGINS: Comma-separated allowed origins (default: *)
        APP_DEFAULT_MONTH: Month used when a request omits one (default: January)
        SEED_SOURCE_URL: JSON feed used by /initialize and seed_transactions.py
        SEED_TIMEOUT: Seconds to wait for the seed feed (default: 30)
    """

    def __init__(self) -> None:
        self.db_path = Path(os.getenv("APP_DB_PATH", "transactions.sqlite"))
        self.api_port = int(os.getenv("APP_PORT", "8000"))
        self.api_host = os.getenv("APP_HOST", "127.0.0.1")
        self.log_format = os.getenv("APP_LOG_FORMAT", "text")
        raw_origins = os.getenv("APP_CORS_ORIGINS", "*")
        self.cors_origins: list[str] = (
            ["*"] if raw_origins == "*"
            else [o.strip() for o in raw_origins.split(",") if o.strip()]
        )
        self.default_month = os.getenv("APP_DEFAULT_MONTH", "January")
        # Fail at startup rather than on the first request
        resolve_month(self.default_month)
        self.seed_source_url = os.getenv("SEED_SOURCE_URL", DEFAULT_SOURCE_URL)
        self.seed_timeout = float(os.getenv("SEED_TIMEOUT", "30"))

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create an AppConfig instance populated from environment variables."""
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary.

        Returns:
            Dictionary of all config attributes
        """
        return {k: v for k, v in self.__dict__.items() if not k.startswith("_")}
