"""Delta data classes -- the classified differences between two snapshots.

Built by ``compare()`` and read by ``generate()``.  Every class is a frozen
dataclass holding tuples, so a Delta cannot be changed after construction.

Usage:
    from db_differ.schema.comparator import compare
    from db_differ.schema.generator import generate

    delta = compare(older, newer)
    if not delta.is_empty:
        statements = generate(delta)
"""

from dataclasses import dataclass, field, fields

from db_differ.schema.models import ColumnSchema, IndexSchema, TableSchema


@dataclass(frozen=True)
class TableAttributeChange:
    """Table attributes that changed; ``None`` means unchanged.

    Only the changed attributes are recorded, so the rendered ALTER never
    repeats an attribute the older table already has.

    Example:
        change = TableAttributeChange(engine="InnoDB")
        change.changed_keys
        # ['engine']
    """

    engine: str | None = None
    row_format: str | None = None
    comment: str | None = None
    collation: str | None = None

    @property
    def changed_keys(self) -> list[str]:
        return [f.name for f in fields(self) if getattr(self, f.name) is not None]

    @property
    def is_empty(self) -> bool:
        return not self.changed_keys


@dataclass(frozen=True)
class ColumnDiff:
    """Column sub-diff of a changed table.

    Attributes:
        drop: Old columns absent from the newer table.
        add: New columns absent from the older table, each carrying the
            newer table's predecessor in ``after``.
        change: Columns present in both with a different definition
            (newer definition, same name).
        create: Columns of a table being created.  Always empty for a
            changed table.
    """

    drop: tuple[ColumnSchema, ...] = ()
    add: tuple[ColumnSchema, ...] = ()
    change: tuple[ColumnSchema, ...] = ()
    create: tuple[ColumnSchema, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.drop or self.add or self.change or self.create)


@dataclass(frozen=True)
class IndexDiff:
    """Index sub-diff of a changed table.

    An index whose definition changed appears in both ``drop`` (old
    version) and ``add`` (new version); indexes are never altered in place.
    """

    drop: tuple[IndexSchema, ...] = ()
    add: tuple[IndexSchema, ...] = ()
    create: tuple[IndexSchema, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.drop or self.add or self.create)


@dataclass(frozen=True)
class TableChange:
    """Differences of one table present in both snapshots."""

    table: str
    attributes: TableAttributeChange | None = None
    columns: ColumnDiff = field(default_factory=ColumnDiff)
    indexes: IndexDiff = field(default_factory=IndexDiff)

    @property
    def is_empty(self) -> bool:
        return (
            (self.attributes is None or self.attributes.is_empty)
            and self.columns.is_empty
            and self.indexes.is_empty
        )


@dataclass(frozen=True)
class Delta:
    """Structural difference between an older and a newer snapshot.

    Attributes:
        drop_tables: Full records of tables only in the older snapshot.
        create_tables: Full records of tables only in the newer snapshot,
            with the complete column and index lists to create them from.
        change_tables: Non-empty changes of tables present in both.
    """

    drop_tables: tuple[TableSchema, ...] = ()
    create_tables: tuple[TableSchema, ...] = ()
    change_tables: tuple[TableChange, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (
            self.drop_tables
            or self.create_tables
            or any(not change.is_empty for change in self.change_tables)
        )

    def change_for(self, table: str) -> TableChange | None:
        """Return the change recorded for *table*, if any."""
        for change in self.change_tables:
            if change.table == table:
                return change
        return None

    def summary(self) -> dict[str, int]:
        """Count entries per category (used for the CLI summary table)."""
        counts = {
            "tables dropped": len(self.drop_tables),
            "tables created": len(self.create_tables),
            "tables altered": sum(
                1 for c in self.change_tables if c.attributes is not None
            ),
            "columns dropped": 0,
            "columns added": 0,
            "columns changed": 0,
            "indexes dropped": 0,
            "indexes added": 0,
        }
        for change in self.change_tables:
            counts["columns dropped"] += len(change.columns.drop)
            counts["columns added"] += len(change.columns.add)
            counts["columns changed"] += len(change.columns.change)
            counts["indexes dropped"] += len(change.indexes.drop)
            counts["indexes added"] += len(change.indexes.add)
        return counts
