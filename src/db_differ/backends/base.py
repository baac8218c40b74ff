"""Differ and snapshot-source protocol definitions.

Defines the ``Differ`` Protocol that every backend implements, and the
``SnapshotSource`` Protocol a backend reads its two snapshots from.

Usage:
    from db_differ.backends.base import Differ

    def upgrade_sql(differ: Differ) -> list[str]:
        try:
            return differ.generate(differ.diff())
        finally:
            differ.close()
"""

from typing import Protocol

from db_differ.schema.delta import Delta
from db_differ.schema.models import SchemaSnapshot


class SnapshotSource(Protocol):
    """Anything that can produce a ``SchemaSnapshot``.

    Implemented by ``MySQLIntrospector`` (live database) and
    ``FileSnapshotSource`` (JSON snapshot file).
    """

    def snapshot(self, prefix: str = "") -> SchemaSnapshot:
        """Return the structure of every table whose name starts with *prefix*."""
        ...

    def close(self) -> None:
        """Release connections or other resources."""
        ...


class Differ(Protocol):
    """Schema differ interface that all backends must implement.

    A differ holds a newer (target) and an older (source) database.
    ``diff()`` classifies their differences and ``generate()`` renders
    the statements that upgrade the older database.
    """

    def diff(self, prefix: str = "") -> Delta:
        """Compare both databases.

        Args:
            prefix: Only compare tables whose name starts with this prefix.

        Returns:
            ``Delta`` turning the older database into the newer one.

        Raises:
            Exception: Whatever the acquisition layer raises, unchanged.
        """
        ...

    def generate(self, delta: Delta) -> list[str]:
        """Render *delta* into ordered DDL statements.

        Raises:
            DataIntegrityError: If *delta* is inconsistent.
        """
        ...

    def close(self) -> None:
        """Close both database connections."""
        ...
