"""
Access to the parts of a callable that serialization needs
"""

from __future__ import annotations

import marshal
import sys
import types
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from graphdump.errors import mk_extract_err


@dataclass(frozen=True)
class Capture:
    """One captured variable of a closure"""

    index: int
    name: str
    value: Any
    # An unbound cell has no value to restore
    empty: bool = False


@runtime_checkable
class RuntimeIntrospection(Protocol):
    def dump_code(self, fn: Any) -> bytes: ...

    def captures(self, fn: Any) -> list[Capture]: ...

    def capture_id(self, fn: Any, index: int) -> object | None: ...

    def environment(self, fn: Any) -> dict[str, Any] | None: ...


class CPythonIntrospection:
    """Introspection of plain Python functions.

    ``dump_code`` marshals the function's code object, so the script only
    loads on the interpreter version that produced it. Capture identity is
    the closure cell object; closures created in one scope share cells.
    """

    def dump_code(self, fn: Any) -> bytes:
        if not isinstance(fn, types.FunctionType):
            raise mk_extract_err(fn, f"{type(fn).__name__} has no Python code object")

        try:
            return marshal.dumps(fn.__code__)
        except ValueError as e:
            raise mk_extract_err(fn, str(e)) from e

    def captures(self, fn: Any) -> list[Capture]:
        closure = getattr(fn, "__closure__", None)
        if not closure:
            return []

        names = fn.__code__.co_freevars
        result = []
        for i, (name, cell) in enumerate(zip(names, closure)):
            try:
                result.append(Capture(i, name, cell.cell_contents))
            except ValueError:
                result.append(Capture(i, name, None, empty=True))
        return result

    def capture_id(self, fn: Any, index: int) -> object | None:
        closure = getattr(fn, "__closure__", None)
        if not closure or index >= len(closure):
            return None
        return closure[index]

    def environment(self, fn: Any) -> dict[str, Any] | None:
        return getattr(fn, "__globals__", None)


class NoCaptureIdentity(CPythonIntrospection):
    """Introspection without capture identity; shared cells are duplicated"""

    def capture_id(self, fn: Any, index: int) -> object | None:
        return None


def namespace_module(value: Any) -> str | None:
    """Name of the imported module whose ``__dict__`` is ``value``, if any"""
    if type(value) is not dict:
        return None

    name = value.get("__name__")
    if not isinstance(name, str):
        return None

    module = sys.modules.get(name)
    if module is not None and getattr(module, "__dict__", None) is value:
        return name
    return None


__all__ = [
    "Capture",
    "RuntimeIntrospection",
    "CPythonIntrospection",
    "NoCaptureIdentity",
    "namespace_module",
]
