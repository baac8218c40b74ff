"""Tests for JSON snapshot files."""

import json

import pytest
from pydantic import ValidationError

from db_differ.schema.models import ColumnSchema, IndexSchema, SchemaSnapshot, TableSchema
from db_differ.schema.snapshot import (
    SNAPSHOT_VERSION,
    FileSnapshotSource,
    load_snapshot,
    save_snapshot,
)


def _snapshot() -> SchemaSnapshot:
    return SchemaSnapshot(
        tables=[
            TableSchema(
                name="app_users",
                collation="utf8mb4_general_ci",
                columns=[
                    ColumnSchema(name="id", type="int", nullable=False, key="PRI", after=""),
                    ColumnSchema(name="email", type="varchar(255)", after="id"),
                ],
                indexes=[
                    IndexSchema(
                        table="app_users", non_unique=0, key_name="PRIMARY", columns=("id",)
                    ),
                ],
            ),
            TableSchema(name="audit_log", columns=[ColumnSchema(name="id", type="bigint")]),
        ]
    )


class TestSaveAndLoad:
    """Snapshots survive a trip through a file."""

    def test_save_then_load(self, tmp_path) -> None:
        """A saved snapshot loads back equal."""
        path = save_snapshot(_snapshot(), tmp_path / "prod.json")
        assert load_snapshot(path) == _snapshot()

    def test_file_is_versioned(self, tmp_path) -> None:
        """The file wraps the snapshot with a format version."""
        path = save_snapshot(_snapshot(), tmp_path / "prod.json")
        data = json.loads(path.read_text())
        assert data["version"] == SNAPSHOT_VERSION
        assert [t["name"] for t in data["snapshot"]["tables"]] == ["app_users", "audit_log"]

    def test_parent_directories_created(self, tmp_path) -> None:
        """Missing parent directories are created."""
        path = save_snapshot(_snapshot(), tmp_path / "nested" / "dir" / "s.json")
        assert path.exists()

    def test_bare_document_accepted(self, tmp_path) -> None:
        """A document without the version wrapper loads."""
        path = tmp_path / "bare.json"
        path.write_text(
            json.dumps({"tables": [{"name": "t", "columns": [{"name": "a", "type": "int"}]}]})
        )
        snapshot = load_snapshot(path)
        assert snapshot.table("t").column("a").type == "int"


class TestLoadErrors:
    """Invalid snapshot files are rejected."""

    def test_missing_file(self, tmp_path) -> None:
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="Snapshot file not found"):
            load_snapshot(tmp_path / "nope.json")

    def test_not_an_object(self, tmp_path) -> None:
        """A JSON array is not a snapshot."""
        path = tmp_path / "list.json"
        path.write_text("[]")
        with pytest.raises(ValueError, match="snapshot object"):
            load_snapshot(path)

    def test_future_version(self, tmp_path) -> None:
        """Newer format versions are refused."""
        path = tmp_path / "future.json"
        path.write_text(json.dumps({"version": SNAPSHOT_VERSION + 1, "snapshot": {}}))
        with pytest.raises(ValueError, match="unsupported snapshot version"):
            load_snapshot(path)

    @pytest.mark.parametrize("version", ["1", 1.5, None, True])
    def test_non_integer_version(self, tmp_path, version) -> None:
        """A version that is not an integer is a ValueError, not a TypeError."""
        path = tmp_path / "odd.json"
        path.write_text(json.dumps({"version": version, "snapshot": {}}))
        with pytest.raises(ValueError, match="invalid snapshot version"):
            load_snapshot(path)

    def test_duplicate_tables(self, tmp_path) -> None:
        """Model invariants apply to loaded data."""
        path = tmp_path / "dup.json"
        path.write_text(json.dumps({"tables": [{"name": "t"}, {"name": "t"}]}))
        with pytest.raises(ValidationError):
            load_snapshot(path)


class TestFileSnapshotSource:
    """A snapshot file used as a snapshot source."""

    def test_all_tables(self, tmp_path) -> None:
        """Without prefix every table is returned."""
        path = save_snapshot(_snapshot(), tmp_path / "s.json")
        source = FileSnapshotSource(path)
        assert source.snapshot().table_names == ["app_users", "audit_log"]
        source.close()

    def test_prefix_filter(self, tmp_path) -> None:
        """The prefix filters tables by name."""
        path = save_snapshot(_snapshot(), tmp_path / "s.json")
        snapshot = FileSnapshotSource(path).snapshot("app_")
        assert snapshot.table_names == ["app_users"]

    def test_missing_file_on_snapshot(self, tmp_path) -> None:
        """The file is read when the snapshot is taken."""
        source = FileSnapshotSource(tmp_path / "later.json")
        with pytest.raises(FileNotFoundError):
            source.snapshot()
