"""
Application configuration, environment-aware.

Every setting can be overridden with the environment variable of the same
name.
"""

from __future__ import annotations

import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent

DAY = 24 * 60 * 60


def _flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class BaseConfig:
    # Catalog data (countries, subjects, careers)
    DATA_DIR = os.environ.get("CAREERPATH_DATA_DIR", str(PROJECT_ROOT / "data"))

    # Read-through cache windows: subject catalogs change rarely, careers
    # and university data more often.
    CATALOG_TTL_SECONDS = int(os.environ.get("CATALOG_TTL_SECONDS", str(7 * DAY)))
    CAREER_TTL_SECONDS = int(os.environ.get("CAREER_TTL_SECONDS", str(DAY)))

    # Default for the "enforce compulsory subjects" preference
    ENFORCE_COMPULSORY_SUBJECTS = _flag("ENFORCE_COMPULSORY_SUBJECTS", True)

    # Logging
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "text")  # "json" or "text"
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    CORS_ORIGINS = [o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]

    PORT = int(os.environ.get("PORT", "8000"))


class DevelopmentConfig(BaseConfig):
    DEBUG = True


class ProductionConfig(BaseConfig):
    DEBUG = False
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "json")


class TestingConfig(BaseConfig):
    TESTING = True
    CATALOG_TTL_SECONDS = 60
    CAREER_TTL_SECONDS = 60


config_by_name = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}


def get_config(name: str | None = None) -> type[BaseConfig]:
    name = (name or os.environ.get("CAREERPATH_ENV", "development")).lower()
    return config_by_name.get(name, DevelopmentConfig)
