"""Pydantic models describing one database's structure.

This module contains the snapshot-domain models:
- ColumnSchema: one column, with its predecessor in declared order
- IndexSchema: one index (``PRIMARY`` is the primary-key constraint)
- TableSchema: one table with its ordered columns and its indexes
- SchemaSnapshot: every table of a database, in declared order

All models are frozen.  Columns, indexes and tables are stored as ordered
tuples with a name-to-position mapping built once per instance, so lookup
is O(1) while declaration order never depends on a dict's iteration order.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator

PRIMARY_KEY_NAME = "PRIMARY"


def _check_unique(names: list[str], kind: str, owner: str) -> None:
    seen: set[str] = set()
    for name in names:
        if name in seen:
            raise ValueError(f"Duplicate {kind} '{name}' in {owner}")
        seen.add(name)


def _positions(names: list[str]) -> dict[str, int]:
    return {name: i for i, name in enumerate(names)}


# ============================================================================
# Column / Index
# ============================================================================


class ColumnSchema(BaseModel):
    """Schema for a table column.

    ``collation`` and ``default`` are ``None`` when the server reports
    NULL, which is distinct from an empty string.  ``after`` names the
    preceding column (``""`` for the first column, ``None`` when not yet
    derived).

    Example:
        >>> col = ColumnSchema(name="id", type="int")
        >>> col.nullable
        True
    """

    model_config = ConfigDict(frozen=True)

    name: str
    type: str
    collation: str | None = None
    nullable: bool = True
    key: str = ""  # PRI, UNI, MUL -- derived from index membership
    default: str | None = None
    extra: str = ""
    comment: str = ""
    after: str | None = None

    def same_definition(self, other: "ColumnSchema") -> bool:
        """True if both columns would render to the same definition.

        ``key`` and ``after`` are not part of a column's definition.
        """
        return (
            self.type == other.type
            and self.collation == other.collation
            and self.nullable == other.nullable
            and self.default == other.default
            and self.extra == other.extra
            and self.comment == other.comment
        )


class IndexSchema(BaseModel):
    """Schema for a table index.

    ``non_unique`` keeps the server's polarity: 0 means UNIQUE.
    Equality covers every attribute, column order included.
    """

    model_config = ConfigDict(frozen=True)

    table: str
    non_unique: int = 1
    key_name: str
    columns: tuple[str, ...] = ()
    collation: str = ""
    index_type: str = "BTREE"
    comment: str = ""
    index_comment: str = ""

    @property
    def is_primary(self) -> bool:
        return self.key_name == PRIMARY_KEY_NAME

    @property
    def is_unique(self) -> bool:
        return self.non_unique == 0


# ============================================================================
# Table / Snapshot
# ============================================================================


class TableSchema(BaseModel):
    """Schema for a database table.

    Example:
        >>> table = TableSchema(
        ...     name="users",
        ...     columns=[ColumnSchema(name="id", type="int")],
        ... )
        >>> table.has_column("id")
        True
        >>> table.predecessor_of("id")
        ''
    """

    model_config = ConfigDict(frozen=True)

    name: str
    engine: str = "InnoDB"
    version: str = ""
    row_format: str = ""
    options: str = ""
    comment: str = ""
    collation: str = ""
    columns: tuple[ColumnSchema, ...] = ()
    indexes: tuple[IndexSchema, ...] = ()

    _column_positions: dict[str, int] = PrivateAttr(default_factory=dict)
    _index_positions: dict[str, int] = PrivateAttr(default_factory=dict)

    @model_validator(mode="after")
    def _check_columns(self) -> "TableSchema":
        owner = f"table '{self.name}'"
        _check_unique([c.name for c in self.columns], "column", owner)
        _check_unique([i.key_name for i in self.indexes], "index", owner)

        previous = ""
        for column in self.columns:
            if column.after is not None and column.after != previous:
                raise ValueError(
                    f"Column '{column.name}' in table '{self.name}' follows "
                    f"'{previous}' but declares predecessor '{column.after}'"
                )
            previous = column.name
        return self

    def model_post_init(self, context: Any) -> None:
        self._column_positions = _positions([c.name for c in self.columns])
        self._index_positions = _positions([i.key_name for i in self.indexes])

    def has_column(self, name: str) -> bool:
        return name in self._column_positions

    def column(self, name: str) -> ColumnSchema:
        """Return the column called *name*.

        Raises:
            KeyError: If the table has no such column.
        """
        return self.columns[self._column_positions[name]]

    def has_index(self, key_name: str) -> bool:
        return key_name in self._index_positions

    def index(self, key_name: str) -> IndexSchema:
        """Return the index called *key_name*.

        Raises:
            KeyError: If the table has no such index.
        """
        return self.indexes[self._index_positions[key_name]]

    def predecessor_of(self, name: str) -> str:
        """Name of the column declared right before *name* (``""`` if first)."""
        position = self._column_positions[name]
        return self.columns[position - 1].name if position else ""

    def with_predecessors(self) -> "TableSchema":
        """Copy of this table with every column's ``after`` filled in."""
        columns = tuple(
            c.model_copy(update={"after": self.columns[i - 1].name if i else ""})
            for i, c in enumerate(self.columns)
        )
        return self.model_copy(update={"columns": columns})


class SchemaSnapshot(BaseModel):
    """Complete structure of one database at a point in time."""

    model_config = ConfigDict(frozen=True)

    tables: tuple[TableSchema, ...] = Field(default_factory=tuple)

    _table_positions: dict[str, int] = PrivateAttr(default_factory=dict)

    @model_validator(mode="after")
    def _check_tables(self) -> "SchemaSnapshot":
        _check_unique([t.name for t in self.tables], "table", "snapshot")
        return self

    def model_post_init(self, context: Any) -> None:
        self._table_positions = _positions([t.name for t in self.tables])

    @property
    def table_names(self) -> list[str]:
        return [t.name for t in self.tables]

    def has_table(self, name: str) -> bool:
        return name in self._table_positions

    def table(self, name: str) -> TableSchema:
        """Return the table called *name*.

        Raises:
            KeyError: If the snapshot has no such table.
        """
        return self.tables[self._table_positions[name]]
