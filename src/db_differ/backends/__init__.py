"""Differ backends package.

Provides the ``Differ`` Protocol and a registry of backend constructors
keyed by database kind.  Each backend is constructed from two snapshot
sources: ``backend(new_source, old_source)``.

Usage:
    from db_differ.backends import available_backends, get_backend

    available_backends()
    # ['mysql']
    differ = get_backend("mysql")(new_source, old_source)
"""

from collections.abc import Callable

from db_differ.backends.base import Differ, SnapshotSource

_BACKENDS: dict[str, Callable[[SnapshotSource, SnapshotSource], Differ]] = {}


class UnknownBackendError(Exception):
    """Raised when no backend is registered for a database kind."""

    pass


def register_backend(name: str):
    """Class decorator registering a backend under *name*."""

    def decorator(factory):
        _BACKENDS[name] = factory
        return factory

    return decorator


def available_backends() -> list[str]:
    return sorted(_BACKENDS)


def get_backend(name: str) -> Callable[[SnapshotSource, SnapshotSource], Differ]:
    """Return the constructor registered for *name*.

    Raises:
        UnknownBackendError: If *name* is not registered.
    """
    try:
        return _BACKENDS[name]
    except KeyError:
        raise UnknownBackendError(
            f"{name} is not supported. Available: {', '.join(available_backends())}"
        ) from None


# Registers itself on import
from db_differ.backends.mysql import MYSQL, MySQLDiffer  # noqa: E402

__all__ = [
    "Differ",
    "SnapshotSource",
    "UnknownBackendError",
    "register_backend",
    "available_backends",
    "get_backend",
    "MYSQL",
    "MySQLDiffer",
]
