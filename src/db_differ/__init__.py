"""db-differ: Diff database schemas and generate upgrade DDL.

Compares the structure of a newer (target) and an older (source) database
at table, column and index granularity, and renders the ordered MySQL
statements that bring the older one in line.

Usage:
    from db_differ import compare, generate, SchemaSnapshot
    from db_differ import get_differ, MySQLIntrospector
    from db_differ import load_db_config, DatabaseProfile, DatabaseConfig
"""

__version__ = "0.1.0"

# Schema
from db_differ.schema.comparator import compare
from db_differ.schema.delta import Delta
from db_differ.schema.generator import DataIntegrityError, generate
from db_differ.schema.introspector import MySQLIntrospector
from db_differ.schema.models import ColumnSchema, IndexSchema, SchemaSnapshot, TableSchema
from db_differ.schema.snapshot import load_snapshot, save_snapshot

# Backends
from db_differ.backends import (
    Differ,
    MySQLDiffer,
    UnknownBackendError,
    available_backends,
    get_backend,
)

# Config
from db_differ.config.loader import load_db_config
from db_differ.config.models import DatabaseConfig, DatabaseProfile

# Factory
from db_differ.factory import ProfileNotFoundError, get_differ, resolve_url

__all__ = [
    # Schema
    "compare",
    "generate",
    "Delta",
    "DataIntegrityError",
    "SchemaSnapshot",
    "TableSchema",
    "ColumnSchema",
    "IndexSchema",
    "MySQLIntrospector",
    "load_snapshot",
    "save_snapshot",
    # Backends
    "Differ",
    "MySQLDiffer",
    "UnknownBackendError",
    "available_backends",
    "get_backend",
    # Config
    "load_db_config",
    "DatabaseProfile",
    "DatabaseConfig",
    # Factory
    "get_differ",
    "ProfileNotFoundError",
    "resolve_url",
]
