"""Configuration loading from db.toml."""

import os
import tomllib
from pathlib import Path

from db_differ.config.models import DatabaseConfig, DatabaseProfile, DiffSettings

CONFIG_ENV_VAR = "DB_DIFFER_CONFIG"


def default_config_path() -> Path:
    """``$DB_DIFFER_CONFIG`` if set, else ``db.toml`` in the working directory."""
    return Path(os.environ.get(CONFIG_ENV_VAR, "db.toml"))


def load_db_config(config_path: Path | None = None) -> DatabaseConfig:
    """Load database configuration from TOML file.

    Args:
        config_path: Path to db.toml (default: ``default_config_path()``)

    Returns:
        DatabaseConfig with all profiles and diff settings

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config format is invalid
    """
    if config_path is None:
        config_path = default_config_path()

    if not config_path.exists():
        raise FileNotFoundError(
            f"Database config not found: {config_path}\n"
            f"Create a db.toml with [profiles.<name>] tables."
        )

    with open(config_path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {config_path}: {e}") from e

    # Parse profiles
    profiles = {}
    for name, profile_data in data.get("profiles", {}).items():
        profiles[name] = DatabaseProfile(**profile_data)

    return DatabaseConfig(
        profiles=profiles,
        diff=DiffSettings(**data.get("diff", {})),
    )
