from __future__ import annotations

from enum import Enum
from types import ModuleType

from graphdump.table import Table


class Kind(Enum):
    NIL = "nil"
    BOOLEAN = "boolean"
    NUMBER = "number"
    TEXT = "text"
    CONTAINER = "container"
    LIST = "list"
    SET = "set"
    TUPLE = "tuple"
    FROZENSET = "frozenset"
    MODULE = "module"
    CALLABLE = "callable"
    OPAQUE = "opaque"


# Kinds written inline as literals; they never get a slot
LITERAL_KINDS = frozenset({Kind.NIL, Kind.BOOLEAN, Kind.NUMBER})

# Kinds accepted as the root of a dump
ROOT_KINDS = frozenset({Kind.CONTAINER, Kind.LIST})

_EXACT_KINDS: dict[type, Kind] = {
    bool: Kind.BOOLEAN,
    int: Kind.NUMBER,
    float: Kind.NUMBER,
    complex: Kind.NUMBER,
    str: Kind.TEXT,
    bytes: Kind.TEXT,
    dict: Kind.CONTAINER,
    Table: Kind.CONTAINER,
    list: Kind.LIST,
    set: Kind.SET,
    tuple: Kind.TUPLE,
    frozenset: Kind.FROZENSET,
}


def classify(value: object) -> Kind:
    """Return the kind of ``value``.

    Builtin data types are matched exactly: a subclass of ``dict`` or ``int``
    would not survive reconstruction as its own type, so it falls through to
    the callable/opaque checks.
    """
    if value is None:
        return Kind.NIL

    kind = _EXACT_KINDS.get(type(value))
    if kind is not None:
        return kind

    if isinstance(value, ModuleType):
        return Kind.MODULE
    if callable(value):
        return Kind.CALLABLE
    return Kind.OPAQUE
