"""Pydantic models for database configuration."""

from pydantic import BaseModel, Field


# ============================================================================
# Configuration Models
# ============================================================================


class DatabaseProfile(BaseModel):
    """Database connection profile from db.toml."""

    url: str
    description: str = ""
    db_password: str | None = None  # For [YOUR-PASSWORD] placeholder substitution
    provider: str = "mysql"


class DiffSettings(BaseModel):
    """Defaults for the diff command from the ``[diff]`` table."""

    prefix: str = ""  # Only compare tables starting with this prefix


class DatabaseConfig(BaseModel):
    """Complete configuration from db.toml."""

    profiles: dict[str, DatabaseProfile] = Field(default_factory=dict)
    diff: DiffSettings = Field(default_factory=DiffSettings)
