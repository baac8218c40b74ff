"""Tests for the backend registry and the MySQL differ."""

from unittest.mock import MagicMock, call, patch

import pytest

from db_differ.backends import (
    MYSQL,
    UnknownBackendError,
    available_backends,
    get_backend,
)
from db_differ.backends.base import Differ, SnapshotSource
from db_differ.backends.mysql import MySQLDiffer
from db_differ.schema.models import ColumnSchema, SchemaSnapshot, TableSchema


class FakeSource:
    """In-memory snapshot source recording the prefix it was asked for."""

    def __init__(self, snapshot: SchemaSnapshot, events: list[str], label: str) -> None:
        self._snapshot = snapshot
        self._events = events
        self._label = label
        self.prefixes: list[str] = []

    def snapshot(self, prefix: str = "") -> SchemaSnapshot:
        self.prefixes.append(prefix)
        self._events.append(f"snapshot {self._label}")
        return self._snapshot

    def close(self) -> None:
        self._events.append(f"close {self._label}")


def _table(*columns: str) -> TableSchema:
    return TableSchema(name="t", columns=[ColumnSchema(name=c, type="int") for c in columns])


class TestRegistry:
    """Backends are registered by database kind."""

    def test_mysql_registered(self) -> None:
        """The MySQL backend is available under 'mysql'."""
        assert MYSQL in available_backends()
        assert get_backend(MYSQL) is MySQLDiffer

    def test_unknown_backend(self) -> None:
        """An unknown kind names the available backends."""
        with pytest.raises(UnknownBackendError, match="Available: mysql"):
            get_backend("sqlite")


class TestProtocols:
    """Runtime structure of the backend protocols."""

    def test_differ_methods(self) -> None:
        """MySQLDiffer provides every Differ method."""
        for method in ("diff", "generate", "close"):
            assert hasattr(Differ, method)
            assert callable(getattr(MySQLDiffer, method))

    def test_source_methods(self) -> None:
        """FakeSource matches the SnapshotSource shape."""
        for method in ("snapshot", "close"):
            assert hasattr(SnapshotSource, method)
            assert callable(getattr(FakeSource, method))


class TestMySQLDiffer:
    """Diffing through two snapshot sources."""

    def test_diff_new_against_old(self) -> None:
        """diff() compares the old snapshot against the new one."""
        events: list[str] = []
        new = FakeSource(SchemaSnapshot(tables=[_table("a", "b")]), events, "new")
        old = FakeSource(SchemaSnapshot(tables=[_table("a")]), events, "old")
        differ = MySQLDiffer(new, old)

        delta = differ.diff("t")

        change = delta.change_for("t")
        assert change is not None
        assert [c.name for c in change.columns.add] == ["b"]
        assert new.prefixes == ["t"]
        assert old.prefixes == ["t"]
        assert events == ["snapshot new", "snapshot old"]

    def test_generate(self) -> None:
        """generate() renders the delta as statements."""
        events: list[str] = []
        differ = MySQLDiffer(
            FakeSource(SchemaSnapshot(), events, "new"),
            FakeSource(SchemaSnapshot(tables=[_table("a")]), events, "old"),
        )
        assert differ.generate(differ.diff()) == ["DROP TABLE `t`;"]

    def test_identical_sources(self) -> None:
        """Identical schemas produce no statements."""
        events: list[str] = []
        snapshot = SchemaSnapshot(tables=[_table("a")])
        differ = MySQLDiffer(
            FakeSource(snapshot, events, "new"), FakeSource(snapshot, events, "old")
        )
        assert differ.generate(differ.diff()) == []

    def test_close_both(self) -> None:
        """close() closes the new and then the old source."""
        events: list[str] = []
        differ = MySQLDiffer(
            FakeSource(SchemaSnapshot(), events, "new"),
            FakeSource(SchemaSnapshot(), events, "old"),
        )
        differ.close()
        assert events == ["close new", "close old"]

    def test_close_old_even_if_new_fails(self) -> None:
        """The old source is closed when closing the new one raises."""
        new = MagicMock()
        new.close.side_effect = RuntimeError("boom")
        old = MagicMock()

        with pytest.raises(RuntimeError, match="boom"):
            MySQLDiffer(new, old).close()

        old.close.assert_called_once()


class TestFromUrls:
    """Opening both databases by URL."""

    @patch("db_differ.backends.mysql.MySQLIntrospector")
    def test_connects_both(self, introspector_cls) -> None:
        """Both introspectors are created and connected."""
        differ = MySQLDiffer.from_urls("mysql://new/app", "mysql://old/app")

        assert isinstance(differ, MySQLDiffer)
        assert introspector_cls.call_args_list == [
            call("mysql://new/app"),
            call("mysql://old/app"),
        ]
        assert introspector_cls.return_value.connect.call_count == 2

    @patch("db_differ.backends.mysql.MySQLIntrospector")
    def test_first_closed_when_second_fails(self, introspector_cls) -> None:
        """A failure connecting the old database closes the new one."""
        new_source = MagicMock()
        old_source = MagicMock()
        old_source.connect.side_effect = ConnectionError("old is down")
        introspector_cls.side_effect = [new_source, old_source]

        with pytest.raises(ConnectionError, match="old is down"):
            MySQLDiffer.from_urls("mysql://new/app", "mysql://old/app")

        new_source.close.assert_called_once()
