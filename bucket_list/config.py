"""
Configuration management for the Bucket List Tracker.
Loads environment variables and provides app-wide settings.
Supports both local .env files and Streamlit Cloud secrets.
"""

import logging
import os
from pathlib import Path
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load .env file from project root (for local development)
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

STORAGE_BACKENDS = ("sqlite", "json", "memory")
OBSERVABILITY_MODES = ("none", "logging", "tracing", "all")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def get_secret(key: str, default: str = "") -> str:
    """
    Get a setting, checking Streamlit secrets first, then environment variables.
    This allows the app to work both locally (with .env) and on Streamlit Cloud.
    """
    try:
        import streamlit as st
        if key in st.secrets:
            return str(st.secrets[key])
    except Exception:
        pass  # No secrets file or not running in Streamlit context

    return os.getenv(key, default)


class Config:
    """Application configuration loaded from environment variables or Streamlit secrets."""

    APP_NAME: str = "Bucket List"
    APP_ENV: str = get_secret("APP_ENV", "production")

    # Logging
    LOG_LEVEL: str = get_secret("LOG_LEVEL", "DEBUG" if APP_ENV == "development" else "INFO").upper()

    # Storage
    STORAGE_BACKEND: str = get_secret("STORAGE_BACKEND", "sqlite").lower()
    DATABASE_PATH: str = get_secret("DATABASE_PATH", "data/bucket_list.db")
    SNAPSHOT_PATH: str = get_secret("SNAPSHOT_PATH", "data/bucket_list.json")
    STORAGE_KEY: str = get_secret("STORAGE_KEY", "bucketListItems")

    # Tracing/Observability settings
    OBSERVABILITY: str = get_secret("OBSERVABILITY", "logging").lower()
    TRACING_ENABLED: bool = get_secret("TRACING_ENABLED", "false").lower() == "true"
    OTLP_ENDPOINT: str = get_secret("OTLP_ENDPOINT", "http://localhost:4317")
    SERVICE_NAME: str = get_secret("SERVICE_NAME", "bucket-list-app")

    @classmethod
    def validate(cls) -> bool:
        """Check that enumerated settings hold known values."""
        if cls.STORAGE_BACKEND not in STORAGE_BACKENDS:
            raise ValueError(
                f"Unknown STORAGE_BACKEND '{cls.STORAGE_BACKEND}'. "
                f"Use one of: {', '.join(STORAGE_BACKENDS)}"
            )
        if cls.OBSERVABILITY not in OBSERVABILITY_MODES:
            raise ValueError(
                f"Unknown OBSERVABILITY '{cls.OBSERVABILITY}'. "
                f"Use one of: {', '.join(OBSERVABILITY_MODES)}"
            )
        if cls.LOG_LEVEL not in LOG_LEVELS:
            raise ValueError(
                f"Unknown LOG_LEVEL '{cls.LOG_LEVEL}'. Use one of: {', '.join(LOG_LEVELS)}"
            )
        return True

    @classmethod
    def is_development(cls) -> bool:
        return cls.APP_ENV == "development"


if __name__ != "__main__":
    try:
        Config.validate()
    except ValueError as e:
        logger.warning(e)
