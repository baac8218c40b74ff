"""Configuration management: profiles, TOML loading, and config models.

Usage:
    >>> from db_differ.config import load_db_config, DatabaseProfile, DatabaseConfig
"""

from db_differ.config.loader import load_db_config
from db_differ.config.models import DatabaseConfig, DatabaseProfile, DiffSettings

__all__ = ["load_db_config", "DatabaseConfig", "DatabaseProfile", "DiffSettings"]
