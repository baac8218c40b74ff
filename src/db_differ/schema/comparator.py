"""Schema comparison at table, column and index granularity.

Compares an older snapshot against a newer one and classifies every
difference into a ``Delta``.
Pure logic -- no I/O, no database connections.

Usage:
    from db_differ.schema.comparator import compare
    from db_differ.schema.introspector import MySQLIntrospector

    with MySQLIntrospector(new_url) as introspector:
        newer = introspector.snapshot()
    with MySQLIntrospector(old_url) as introspector:
        older = introspector.snapshot()

    delta = compare(older, newer)
"""

import logging

from db_differ.schema.delta import (
    ColumnDiff,
    Delta,
    IndexDiff,
    TableAttributeChange,
    TableChange,
)
from db_differ.schema.models import SchemaSnapshot, TableSchema

logger = logging.getLogger(__name__)

# Table options (create_options) are never compared
_COMPARED_ATTRIBUTES = ("engine", "row_format", "comment", "collation")


def compare(older: SchemaSnapshot, newer: SchemaSnapshot) -> Delta:
    """Compute the structural delta that turns *older* into *newer*.

    Tables are matched by name:

    - Only in *older*: dropped (full old record).
    - Only in *newer*: created (full new record, columns carrying their
      predecessors).
    - In both: compared attribute by attribute, then index by index and
      column by column.  Tables with no difference produce no entry.

    Output order follows declaration order in the snapshots.

    Args:
        older: Snapshot of the database to be upgraded (source).
        newer: Snapshot of the database to match (target).

    Returns:
        ``Delta`` with dropped, created and changed tables.

    Examples:
        >>> same = SchemaSnapshot(tables=[TableSchema(name="users")])
        >>> compare(same, same).is_empty
        True
    """
    drop_tables = tuple(t for t in older.tables if not newer.has_table(t.name))
    create_tables = tuple(
        t.with_predecessors() for t in newer.tables if not older.has_table(t.name)
    )

    change_tables: list[TableChange] = []
    for new_table in newer.tables:
        if not older.has_table(new_table.name):
            continue
        change = compare_tables(older.table(new_table.name), new_table)
        if change.is_empty:
            continue
        change_tables.append(change)

    logger.debug(
        f"Compared {len(older.tables)} old / {len(newer.tables)} new tables: "
        f"{len(drop_tables)} dropped, {len(create_tables)} created, "
        f"{len(change_tables)} changed"
    )

    return Delta(
        drop_tables=drop_tables,
        create_tables=create_tables,
        change_tables=tuple(change_tables),
    )


def compare_tables(old: TableSchema, new: TableSchema) -> TableChange:
    """Compare two versions of the same table.

    The result may be empty; ``compare()`` discards empty changes.
    """
    return TableChange(
        table=new.name,
        attributes=_compare_attributes(old, new),
        columns=_compare_columns(old, new),
        indexes=_compare_indexes(old, new),
    )


def _compare_attributes(
    old: TableSchema, new: TableSchema
) -> TableAttributeChange | None:
    changed = {
        name: getattr(new, name)
        for name in _COMPARED_ATTRIBUTES
        if getattr(new, name) != getattr(old, name)
    }
    if not changed:
        return None
    return TableAttributeChange(**changed)


def _compare_indexes(old: TableSchema, new: TableSchema) -> IndexDiff:
    drop = [i for i in old.indexes if not new.has_index(i.key_name)]
    add = []

    for index in new.indexes:
        if not old.has_index(index.key_name):
            add.append(index)
            continue
        previous = old.index(index.key_name)
        if previous != index:
            # Replace: drop the old version, add the new one
            drop.append(previous)
            add.append(index)

    return IndexDiff(drop=tuple(drop), add=tuple(add))


def _compare_columns(old: TableSchema, new: TableSchema) -> ColumnDiff:
    drop = tuple(c for c in old.columns if not new.has_column(c.name))
    add = []
    change = []

    previous = ""
    for column in new.columns:
        if not old.has_column(column.name):
            add.append(column.model_copy(update={"after": previous}))
        elif not column.same_definition(old.column(column.name)):
            change.append(column.model_copy(update={"after": previous}))
        previous = column.name

    return ColumnDiff(drop=drop, add=tuple(add), change=tuple(change))
