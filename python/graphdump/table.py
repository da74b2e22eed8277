"""
Dict with an attached behavior descriptor
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

INDEX_KEY = "__index"


class Table(dict):
    """A dict that may carry a behavior descriptor (``meta``).

    The descriptor is itself a dict. It is attached to the table rather than
    merged into its entries, so two tables can share one descriptor. A
    descriptor with an ``"__index"`` entry supplies values for missing keys:
    a mapping is indexed with the key, a callable is called with
    ``(table, key)``.
    """

    __slots__ = ("meta",)

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.meta: dict[Any, Any] | None = None

    def __missing__(self, key: Any) -> Any:
        if self.meta is None:
            raise KeyError(key)

        fallback = self.meta.get(INDEX_KEY)
        if fallback is None:
            raise KeyError(key)
        if isinstance(fallback, Mapping):
            return fallback[key]
        if callable(fallback):
            return fallback(self, key)
        raise KeyError(key)

    def __repr__(self) -> str:
        return f"Table({dict.__repr__(self)})"


def getmeta(value: object) -> dict[Any, Any] | None:
    if isinstance(value, Table):
        return value.meta
    return None


def setmeta(table: Table, meta: dict[Any, Any] | None) -> Table:
    if not isinstance(table, Table):
        raise TypeError(f"Expected Table, got {type(table).__name__}")
    if meta is not None and not isinstance(meta, dict):
        raise TypeError(f"Descriptor must be a dict, got {type(meta).__name__}")

    table.meta = meta
    return table


__all__ = ["Table", "getmeta", "setmeta"]
