"""JSON snapshot files for offline diffing.

A snapshot file wraps a ``SchemaSnapshot`` with a format version so the
layout can evolve without breaking older files::

    {"version": 1, "snapshot": {"tables": [...]}}

A bare ``{"tables": [...]}`` document is accepted as well.

Usage:
    from db_differ.schema.snapshot import save_snapshot, load_snapshot

    save_snapshot(snapshot, "prod.json")
    snapshot = load_snapshot("prod.json")
"""

import json
from pathlib import Path

from db_differ.schema.models import SchemaSnapshot

SNAPSHOT_VERSION = 1


def save_snapshot(snapshot: SchemaSnapshot, path: str | Path) -> Path:
    """Write *snapshot* to *path*, creating parent directories."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    payload = {"version": SNAPSHOT_VERSION, "snapshot": snapshot.model_dump(mode="json")}
    p.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return p


def load_snapshot(path: str | Path) -> SchemaSnapshot:
    """Load a snapshot file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not a snapshot document (pydantic
            ``ValidationError`` for malformed table data).
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Snapshot file not found: {p}")

    data = json.loads(p.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{p.name} does not contain a snapshot object")

    if "snapshot" in data:
        version = data.get("version", SNAPSHOT_VERSION)
        # bool is an int subclass but never a valid version
        if not isinstance(version, int) or isinstance(version, bool):
            raise ValueError(f"{p.name} has an invalid snapshot version: {version!r}")
        if version > SNAPSHOT_VERSION:
            raise ValueError(f"{p.name} has unsupported snapshot version {version}")
        data = data["snapshot"]

    return SchemaSnapshot.model_validate(data)


class FileSnapshotSource:
    """Snapshot source backed by a JSON snapshot file.

    The prefix filter is applied to the loaded tables, so a file can stand
    in for a live database anywhere a ``SnapshotSource`` is accepted.
    """

    def __init__(self, path: str | Path):
        self._path = Path(path)

    def snapshot(self, prefix: str = "") -> SchemaSnapshot:
        snapshot = load_snapshot(self._path)
        if not prefix:
            return snapshot
        return SchemaSnapshot(
            tables=[t for t in snapshot.tables if t.name.startswith(prefix)]
        )

    def close(self) -> None:
        pass
