"""
Top-level dump operation
"""

from __future__ import annotations

import builtins
import logging
import math
from dataclasses import dataclass
from typing import Any

from graphdump.errors import InvalidArgumentError, SerializationError, mk_arg_err
from graphdump.introspection import CPythonIntrospection, RuntimeIntrospection
from graphdump.memo import CaptureJoins, Memoizer
from graphdump.registry import Registry, build_registry
from graphdump.script import ScriptAssembler
from graphdump.serialize.dispatch import Dispatcher
from graphdump.serialize.kind import ROOT_KINDS, classify

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 10_000


@dataclass(frozen=True)
class DumpOptions:
    max_entries: int = DEFAULT_MAX_ENTRIES
    # Raise UnsupportedValueError instead of writing a placeholder for opaque values
    strict: bool = False


def _check_max_entries(max_entries: Any) -> float:
    if isinstance(max_entries, bool) or not isinstance(max_entries, (int, float)):
        raise mk_arg_err("max_entries", "a non-negative number", max_entries)
    if math.isnan(max_entries) or max_entries < 0:
        raise InvalidArgumentError(f"max_entries must be a non-negative number, got {max_entries}")
    return max_entries


class Dumper:
    """Serializes value graphs into reconstruction scripts.

    The registry is shared by every dump made with this instance and never
    modified; all other state is created per call, so one Dumper may be used
    from several threads.
    """

    def __init__(
        self,
        registry: Registry | None = None,
        options: DumpOptions | None = None,
        introspection: RuntimeIntrospection | None = None,
    ):
        self.registry = registry if registry is not None else build_registry(builtins)
        self.options = options or DumpOptions()
        self.introspection = introspection or CPythonIntrospection()

    def dump(self, root: Any, max_entries: float | None = None) -> str:
        if classify(root) not in ROOT_KINDS:
            raise mk_arg_err("root", "a dict, Table or list", root)
        limit = _check_max_entries(
            self.options.max_entries if max_entries is None else max_entries
        )

        assembler = ScriptAssembler()
        joins = CaptureJoins()
        dispatcher = Dispatcher(self.introspection, joins, strict=self.options.strict)
        memo = Memoizer(assembler, self.registry, dispatcher, limit, pinned=_pinned())

        try:
            root_ref = memo.resolve(root)
        except RecursionError as e:
            raise SerializationError("value graph is nested too deeply") from e

        memo.check_defined()
        logger.debug("Dumped %d slots, %d shared captures", memo.size, len(joins))
        return assembler.finish(root_ref)


def _pinned() -> dict[int, tuple[object, str]]:
    # The serializer never serializes itself
    pins: list[tuple[object, str]] = [
        (dump, "graphdump.dump"),
        (build_registry, "graphdump.build_registry"),
        (Dumper, "graphdump.Dumper"),
    ]
    return {id(obj): (obj, path) for obj, path in pins}


def dump(
    root: Any,
    max_entries: float | None = None,
    *,
    registry: Registry | None = None,
    options: DumpOptions | None = None,
) -> str:
    """
    Serialize the graph reachable from ``root`` into a Python script.

    root: dict, Table or list to serialize
    max_entries: bound on the number of new slots (default 10 000)
    registry: builtin registry; built from ``builtins`` when omitted

    Executing the script with ``exec`` binds ``result`` to the rebuilt root.
    """
    return Dumper(registry, options).dump(root, max_entries)


__all__ = ["DEFAULT_MAX_ENTRIES", "DumpOptions", "Dumper", "dump"]
