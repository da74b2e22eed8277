"""
Builtin registry: identity -> dotted path for objects the host already provides
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from types import ModuleType, SimpleNamespace
from typing import Any

from graphdump.errors import mk_arg_err

logger = logging.getLogger(__name__)

# Values with a literal or structural form; never registered
_DATA_TYPES = (
    type(None),
    bool,
    int,
    float,
    complex,
    str,
    bytes,
    dict,
    list,
    set,
    tuple,
    frozenset,
)


class Registry:
    """Read-only mapping from object identity to the path it is reachable by"""

    def __init__(self, entries: Mapping[int, tuple[object, str]] | None = None):
        # id -> (object, path); the object is kept so its id stays valid
        self._entries: dict[int, tuple[object, str]] = dict(entries or {})

    @classmethod
    def build(cls, root: Any) -> "Registry":
        entries: dict[int, tuple[object, str]] = {}
        _walk(_members(root), "", entries, {id(root)})
        logger.debug("Built builtin registry with %d entries", len(entries))
        return cls(entries)

    def lookup(self, value: object) -> str | None:
        entry = self._entries.get(id(value))
        if entry is None or entry[0] is not value:
            return None
        return entry[1]

    def paths(self) -> dict[str, object]:
        return {path: obj for obj, path in self._entries.values()}

    def __contains__(self, value: object) -> bool:
        return self.lookup(value) is not None

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Registry({len(self._entries)} entries)"


def _is_namespace(value: object) -> bool:
    return isinstance(value, (ModuleType, SimpleNamespace))


def _members(namespace: Any) -> Mapping[str, Any]:
    if isinstance(namespace, dict):
        return namespace
    if _is_namespace(namespace):
        return vars(namespace)
    raise mk_arg_err("root_namespace", "a module, SimpleNamespace or dict", namespace)


def _items(members: Mapping[str, Any]) -> Iterator[tuple[str, Any]]:
    # Snapshot: walking a module can import lazily and mutate its dict
    for key, value in list(members.items()):
        if isinstance(key, str) and key.isidentifier():
            yield key, value


def _walk(
    members: Mapping[str, Any],
    prefix: str,
    entries: dict[int, tuple[object, str]],
    seen: set[int],
) -> None:
    for key, value in _items(members):
        path = prefix + key

        if isinstance(value, _DATA_TYPES):
            continue

        # First path found wins
        if id(value) not in entries:
            entries[id(value)] = (value, path)

        if _is_namespace(value) and id(value) not in seen:
            seen.add(id(value))
            _walk(vars(value), path + ".", entries, seen)


def build_registry(root_namespace: Any) -> Registry:
    """
    Walk ``root_namespace`` depth-first and record every non-data leaf under
    its dotted path. Modules and SimpleNamespace objects are descended into
    (each at most once); dicts, lists and other data are skipped because they
    are serialized by value.
    """
    return Registry.build(root_namespace)


__all__ = ["Registry", "build_registry"]
