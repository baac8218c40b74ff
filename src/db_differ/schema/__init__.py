"""Schema snapshots, comparison, and DDL generation.

Provides the snapshot models, schema comparison (``compare``), DDL
generation (``generate``), live MySQL introspection
(``MySQLIntrospector``) and JSON snapshot files (``save_snapshot``,
``load_snapshot``).

Usage:
    from db_differ.schema import compare, generate, MySQLIntrospector
    from db_differ.schema import SchemaSnapshot, TableSchema, ColumnSchema
"""

from db_differ.schema.comparator import compare, compare_tables
from db_differ.schema.delta import (
    ColumnDiff,
    Delta,
    IndexDiff,
    TableAttributeChange,
    TableChange,
)
from db_differ.schema.generator import DataIntegrityError, generate
from db_differ.schema.introspector import MySQLIntrospector
from db_differ.schema.models import (
    PRIMARY_KEY_NAME,
    ColumnSchema,
    IndexSchema,
    SchemaSnapshot,
    TableSchema,
)
from db_differ.schema.snapshot import FileSnapshotSource, load_snapshot, save_snapshot

__all__ = [
    "compare",
    "compare_tables",
    "generate",
    "DataIntegrityError",
    "Delta",
    "TableChange",
    "TableAttributeChange",
    "ColumnDiff",
    "IndexDiff",
    "SchemaSnapshot",
    "TableSchema",
    "ColumnSchema",
    "IndexSchema",
    "PRIMARY_KEY_NAME",
    "MySQLIntrospector",
    "FileSnapshotSource",
    "load_snapshot",
    "save_snapshot",
]
