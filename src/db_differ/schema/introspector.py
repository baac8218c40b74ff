"""MySQL schema introspection via SHOW statements.

This module queries a live database to build a ``SchemaSnapshot``:
- Tables: engine, version, row format, options, comment, collation
- Columns: type, collation, nullability, key, default, extra, comment
- Indexes: uniqueness, key name, ordered columns, type, comments

Uses SQLAlchemy with the PyMySQL driver.
"""

import logging
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine

from db_differ.schema.generator import quote_identifier
from db_differ.schema.models import (
    ColumnSchema,
    IndexSchema,
    SchemaSnapshot,
    TableSchema,
)

logger = logging.getLogger(__name__)


def like_prefix(prefix: str) -> str:
    """Build a LIKE pattern matching names that start with *prefix* literally.

    Example:
        >>> like_prefix("app_")
        'app\\\\_%'
    """
    escaped = prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return escaped + "%"


def normalize_url(database_url: str) -> str:
    """Normalize a MySQL URL to the ``mysql+pymysql://`` scheme.

    Accepts ``mysql://``, ``mariadb://`` and ``mysql+pymysql://`` URLs.
    """
    for scheme in ("mysql://", "mariadb://"):
        if database_url.startswith(scheme):
            return "mysql+pymysql://" + database_url[len(scheme):]
    return database_url


class MySQLIntrospector:
    """Introspects a MySQL database schema.

    Usage:
        with MySQLIntrospector(database_url) as introspector:
            snapshot = introspector.snapshot()

            # Only tables whose name starts with "app_"
            snapshot = introspector.snapshot(prefix="app_")
    """

    def __init__(self, database_url: str, engine: Engine | None = None):
        """Initialize with database connection URL.

        Args:
            database_url: MySQL connection URL.
            engine: Optional pre-built engine (the URL is then only used
                for display).
        """
        self._database_url = normalize_url(database_url)
        self._engine = engine
        self._owns_engine = engine is None
        self._conn: Connection | None = None

    def __enter__(self) -> "MySQLIntrospector":
        """Context manager entry - opens connection."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - closes connection."""
        self.close()

    def connect(self) -> None:
        if self._conn is not None:
            return
        if self._engine is None:
            self._engine = create_engine(
                self._database_url,
                pool_pre_ping=True,
                connect_args={"connect_timeout": 10},
            )
        self._conn = self._engine.connect()

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
        # An injected engine belongs to the caller
        if self._owns_engine and self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def snapshot(self, prefix: str = "") -> SchemaSnapshot:
        """Introspect every base table (optionally filtered by name prefix).

        Args:
            prefix: Only tables whose name starts with this prefix.

        Returns:
            SchemaSnapshot with tables, columns and indexes.
        """
        if self._conn is None:
            self.connect()

        tables = []
        for row in self._get_tables(prefix):
            name = row["Name"]
            tables.append(
                TableSchema(
                    name=name,
                    engine=row["Engine"],
                    version=str(row.get("Version") or ""),
                    row_format=row.get("Row_format") or "",
                    options=row.get("Create_options") or "",
                    comment=row.get("Comment") or "",
                    collation=row.get("Collation") or "",
                    columns=self._get_columns(name),
                    indexes=self._get_indexes(name),
                )
            )

        logger.debug(f"Introspected {len(tables)} tables (prefix={prefix!r})")
        return SchemaSnapshot(tables=tables)

    def _query(self, sql: str, params: dict[str, Any] | None = None) -> list[dict]:
        result = self._conn.execute(text(sql), params or {})
        return [dict(row) for row in result.mappings()]

    def _get_tables(self, prefix: str) -> list[dict]:
        """Get table status rows, skipping views (their engine is NULL)."""
        if prefix:
            rows = self._query(
                "SHOW TABLE STATUS LIKE :pattern", {"pattern": like_prefix(prefix)}
            )
        else:
            rows = self._query("SHOW TABLE STATUS")
        return [row for row in rows if row.get("Engine") is not None]

    def _get_columns(self, table: str) -> list[ColumnSchema]:
        """Get columns for a table in physical order."""
        columns = []
        previous = ""
        for row in self._query(f"SHOW FULL FIELDS FROM {quote_identifier(table)}"):
            columns.append(
                ColumnSchema(
                    name=row["Field"],
                    type=row["Type"],
                    collation=row.get("Collation"),
                    nullable=(row.get("Null") == "YES"),
                    key=row.get("Key") or "",
                    default=row.get("Default"),
                    extra=row.get("Extra") or "",
                    comment=row.get("Comment") or "",
                    after=previous,
                )
            )
            previous = row["Field"]
        return columns

    def _get_indexes(self, table: str) -> list[IndexSchema]:
        """Get indexes for a table, one per key name.

        SHOW INDEX returns one row per indexed column; rows of the same key
        are accumulated in ``Seq_in_index`` order.
        """
        rows = self._query(f"SHOW INDEX FROM {quote_identifier(table)}")
        if rows and len(rows[0]) not in (13, 14, 15):
            raise RuntimeError(f"SHOW INDEX returned {len(rows[0])} columns for {table}")

        indexes: dict[str, dict[str, Any]] = {}
        for row in sorted(rows, key=lambda r: (r["Key_name"], int(r["Seq_in_index"]))):
            key_name = row["Key_name"]
            # Functional key parts have no column name (MySQL 8.0.13+)
            column = row.get("Column_name") or row.get("Expression") or ""
            if key_name in indexes:
                indexes[key_name]["columns"].append(column)
                continue
            indexes[key_name] = {
                "table": row["Table"],
                "non_unique": int(row["Non_unique"]),
                "key_name": key_name,
                "columns": [column],
                "collation": row.get("Collation") or "",
                "index_type": row.get("Index_type") or "",
                "comment": row.get("Comment") or "",
                "index_comment": row.get("Index_comment") or "",
            }

        # Keep the server's key order (PRIMARY first)
        order = list(dict.fromkeys(row["Key_name"] for row in rows))
        return [IndexSchema(**indexes[name]) for name in order]
