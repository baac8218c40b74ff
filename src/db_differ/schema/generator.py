"""MySQL DDL generation from a Delta.

Renders a ``Delta`` into an ordered list of statements that bring the
older database in line with the newer one:

1. ``DROP TABLE`` for every dropped table
2. ``CREATE TABLE`` for every created table
3. For each changed table, in this order:
   a. table attribute ALTER (engine, row format, comment, charset)
   b. index drops (including old versions of replaced indexes)
   c. column drops
   d. column adds, positioned after their predecessor
   e. column changes
   f. index adds (including new versions of replaced indexes)

Indexes are dropped before the columns they may reference and added
after the columns they may need.

Usage:
    from db_differ.schema.generator import generate

    for statement in generate(delta):
        print(statement)
"""

import logging

from db_differ.schema.delta import Delta, TableAttributeChange, TableChange
from db_differ.schema.models import ColumnSchema, IndexSchema, TableSchema

logger = logging.getLogger(__name__)

# Base types whose defaults are string literals
QUOTED_DEFAULT_TYPES = frozenset(
    {
        "char",
        "varchar",
        "binary",
        "varbinary",
        "tinytext",
        "text",
        "mediumtext",
        "longtext",
        "tinyblob",
        "blob",
        "mediumblob",
        "longblob",
        "enum",
        "set",
    }
)

# Reported by MySQL 8 in Extra for expression defaults; not valid DDL
SYNTHETIC_EXTRA_MARKERS = ("DEFAULT_GENERATED",)


class DataIntegrityError(Exception):
    """Raised when a Delta is inconsistent and cannot be rendered."""

    pass


# ------------------------------------------------------------------
# Rendering helpers
# ------------------------------------------------------------------


def quote_identifier(name: str) -> str:
    return "`" + name.replace("`", "``") + "`"


def escape(value: str) -> str:
    """Escape a value for use inside a single-quoted SQL string.

    Example:
        >>> escape("O'Brien")
        "O\\\\'Brien"
    """
    return value.replace("\\", "\\\\").replace("'", "\\'")


def charset_of(collation: str) -> str:
    """Character set a collation belongs to (text before the first ``_``).

    Example:
        >>> charset_of("utf8mb4_general_ci")
        'utf8mb4'
    """
    return collation.split("_", 1)[0]


def base_type(column_type: str) -> str:
    """Lower-cased type keyword without length, precision or modifiers.

    Example:
        >>> base_type("VARCHAR(255)")
        'varchar'
        >>> base_type("int unsigned")
        'int'
    """
    words = column_type.split("(", 1)[0].split()
    return words[0].lower() if words else ""


def render_type(column_type: str) -> str:
    """Upper-case the type keywords, keeping parenthesized arguments as-is.

    ``enum('a','b')`` becomes ``ENUM('a','b')``, not ``ENUM('A','B')``.
    """
    head, paren, rest = column_type.partition("(")
    if not paren:
        return column_type.upper()
    args, close, tail = rest.rpartition(")")
    if not close:
        return head.upper() + paren + rest
    return head.upper() + paren + args + close + tail.upper()


def render_default(column: ColumnSchema) -> str:
    if column.default is None:
        return ""
    if base_type(column.type) in QUOTED_DEFAULT_TYPES:
        return f" DEFAULT '{escape(column.default)}'"
    return f" DEFAULT {column.default}"


def render_extra(extra: str) -> str:
    words = [w for w in extra.split() if w.upper() not in SYNTHETIC_EXTRA_MARKERS]
    if not words:
        return ""
    return " " + " ".join(words).upper()


def render_column(column: ColumnSchema) -> str:
    """Render a column definition (without ADD/CHANGE or positioning)."""
    sql = quote_identifier(column.name) + " " + render_type(column.type)
    if column.collation is not None:
        sql += f" CHARACTER SET {charset_of(column.collation)} COLLATE {column.collation}"
    sql += " NULL" if column.nullable else " NOT NULL"
    sql += render_default(column)
    sql += render_extra(column.extra)
    if column.comment:
        sql += f" COMMENT '{escape(column.comment)}'"
    return sql


def render_index_columns(index: IndexSchema) -> str:
    return "(" + ", ".join(quote_identifier(c) for c in index.columns) + ")"


def render_index(index: IndexSchema) -> str:
    """Render an index clause for CREATE TABLE or ALTER TABLE ... ADD.

    ``non_unique == 0`` renders UNIQUE, anything else INDEX.
    """
    if index.is_primary:
        return "PRIMARY KEY " + render_index_columns(index)
    keyword = "UNIQUE" if index.non_unique == 0 else "INDEX"
    return f"{keyword} {quote_identifier(index.key_name)} {render_index_columns(index)}"


# ------------------------------------------------------------------
# Statements
# ------------------------------------------------------------------


def drop_table_sql(table: TableSchema) -> str:
    return f"DROP TABLE {quote_identifier(table.name)};"


def create_table_sql(table: TableSchema) -> str:
    """Render CREATE TABLE with columns, indexes and table options.

    Raises:
        DataIntegrityError: If the table has no columns.
    """
    if not table.columns:
        raise DataIntegrityError(
            f"Cannot create table '{table.name}': no columns to create"
        )

    definitions = [render_column(c) for c in table.columns]
    definitions.extend(render_index(i) for i in table.indexes)

    sql = f"CREATE TABLE {quote_identifier(table.name)} ({', '.join(definitions)})"
    if table.engine:
        sql += f" ENGINE = {table.engine}"
    if table.collation:
        sql += (
            f" DEFAULT CHARSET = {charset_of(table.collation)}"
            f" COLLATE = {table.collation}"
        )
    if table.comment:
        sql += f" COMMENT = '{escape(table.comment)}'"
    return sql + ";"


def alter_table_sql(table: str, attributes: TableAttributeChange) -> str | None:
    """Render the attribute ALTER, or ``None`` if nothing changed."""
    clauses: list[str] = []
    if attributes.engine is not None:
        clauses.append(f"ENGINE = {attributes.engine}")
    if attributes.row_format is not None:
        clauses.append(f"ROW_FORMAT = {attributes.row_format}")
    if attributes.comment is not None:
        clauses.append(f"COMMENT = '{escape(attributes.comment)}'")
    if attributes.collation is not None:
        clauses.append(
            f"DEFAULT CHARACTER SET {charset_of(attributes.collation)}"
            f" COLLATE {attributes.collation}"
        )
    if not clauses:
        return None
    return f"ALTER TABLE {quote_identifier(table)} {' '.join(clauses)};"


def drop_index_sql(table: str, index: IndexSchema) -> str:
    if index.is_primary:
        return f"ALTER TABLE {quote_identifier(table)} DROP PRIMARY KEY;"
    return f"ALTER TABLE {quote_identifier(table)} DROP INDEX {quote_identifier(index.key_name)};"


def add_index_sql(table: str, index: IndexSchema) -> str:
    return f"ALTER TABLE {quote_identifier(table)} ADD {render_index(index)};"


def drop_column_sql(table: str, column: ColumnSchema) -> str:
    return f"ALTER TABLE {quote_identifier(table)} DROP {quote_identifier(column.name)};"


def add_column_sql(table: str, column: ColumnSchema) -> str:
    sql = f"ALTER TABLE {quote_identifier(table)} ADD {render_column(column)}"
    if column.after:
        sql += f" AFTER {quote_identifier(column.after)}"
    return sql + ";"


def change_column_sql(table: str, column: ColumnSchema) -> str:
    return (
        f"ALTER TABLE {quote_identifier(table)} CHANGE "
        f"{quote_identifier(column.name)} {render_column(column)};"
    )


def table_change_sql(change: TableChange) -> list[str]:
    """Render every statement for one changed table, in dependency order."""
    statements: list[str] = []
    table = change.table

    if change.attributes is not None:
        alter = alter_table_sql(table, change.attributes)
        if alter:
            statements.append(alter)

    statements.extend(drop_index_sql(table, i) for i in change.indexes.drop)
    statements.extend(drop_column_sql(table, c) for c in change.columns.drop)
    statements.extend(add_column_sql(table, c) for c in change.columns.add)
    statements.extend(change_column_sql(table, c) for c in change.columns.change)
    statements.extend(add_index_sql(table, i) for i in change.indexes.add)
    return statements


def generate(delta: Delta) -> list[str]:
    """Render *delta* into ordered MySQL DDL statements.

    All-or-nothing: an inconsistent Delta raises before any statement is
    returned.

    Args:
        delta: Result of ``compare(older, newer)``.

    Returns:
        Statements, each terminated by ``;``.  Empty if the delta is empty.

    Raises:
        DataIntegrityError: If a table queued for creation has no columns.

    Example:
        >>> generate(Delta())
        []
    """
    if delta.is_empty:
        return []

    statements: list[str] = [drop_table_sql(t) for t in delta.drop_tables]
    statements.extend(create_table_sql(t) for t in delta.create_tables)
    for change in delta.change_tables:
        statements.extend(table_change_sql(change))

    logger.debug(f"Generated {len(statements)} statements")
    return statements
