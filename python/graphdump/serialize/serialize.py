"""
Per-kind serializers producing a definition statement plus follow-ups
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from typing_extensions import override

from graphdump.errors import ExtractionError, SerializationError, UnsupportedValueError
from graphdump.introspection import Capture, RuntimeIntrospection
from graphdump.serialize.kind import Kind
from graphdump.serialize.literals import quote
from graphdump.table import Table

if TYPE_CHECKING:
    from graphdump.memo import CaptureJoins, Memoizer

logger = logging.getLogger(__name__)


@dataclass
class Definition:
    """Right-hand side of ``slot = ...`` and the statements that follow it"""

    expr: str
    followups: list[str] = field(default_factory=list)


def tuple_expr(parts: list[str]) -> str:
    if len(parts) == 1:
        return f"({parts[0]},)"
    return f"({', '.join(parts)})"


def placeholder(value: Any) -> Definition:
    """Inert text standing in for a value that cannot be rebuilt"""
    return Definition(quote(repr(value)))


class ValueSerializer:
    """Base class for kind specific serializers"""

    def prepare(self, value: Any, memo: Memoizer) -> Any:
        """Resolve what the definition needs before the slot exists"""
        return None

    def serialize(self, value: Any, ref: str, memo: Memoizer, prepared: Any) -> Definition:
        """Serialize value assigned to slot ``ref``"""
        raise NotImplementedError


class TextSerializer(ValueSerializer):
    """Serializer for str and bytes"""

    @override
    def serialize(self, value: Any, ref: str, memo: Memoizer, prepared: Any) -> Definition:
        return Definition(quote(value))


class ContainerSerializer(ValueSerializer):
    """Serializer for dicts and tables"""

    @override
    def serialize(self, value: Any, ref: str, memo: Memoizer, prepared: Any) -> Definition:
        if not isinstance(value, dict):
            raise SerializationError(f"Expected dict, got {type(value)}")

        expr = "_table()" if isinstance(value, Table) else "{}"
        followups = []
        for k, v in list(value.items()):
            followups.append(f"{ref}[{memo.resolve(k)}] = {memo.resolve(v)}")

        meta = value.meta if isinstance(value, Table) else None
        if meta is not None:
            followups.append(f"_setmeta({ref}, {memo.resolve(meta)})")

        return Definition(expr, followups)


class ListSerializer(ValueSerializer):
    """Serializer for lists"""

    @override
    def serialize(self, value: Any, ref: str, memo: Memoizer, prepared: Any) -> Definition:
        followups = [f"{ref}.append({memo.resolve(element)})" for element in list(value)]
        return Definition("[]", followups)


class SetSerializer(ValueSerializer):
    """Serializer for sets"""

    @override
    def serialize(self, value: Any, ref: str, memo: Memoizer, prepared: Any) -> Definition:
        followups = [f"{ref}.add({memo.resolve(element)})" for element in list(value)]
        return Definition("set()", followups)


class TupleSerializer(ValueSerializer):
    """Serializer for tuples; elements must exist before the tuple is built"""

    @override
    def prepare(self, value: Any, memo: Memoizer) -> list[str]:
        return [memo.resolve(element) for element in value]

    @override
    def serialize(self, value: Any, ref: str, memo: Memoizer, prepared: list[str]) -> Definition:
        return Definition(tuple_expr(prepared))


class FrozenSetSerializer(ValueSerializer):
    """Serializer for frozensets"""

    @override
    def prepare(self, value: Any, memo: Memoizer) -> list[str]:
        return [memo.resolve(element) for element in value]

    @override
    def serialize(self, value: Any, ref: str, memo: Memoizer, prepared: list[str]) -> Definition:
        if not prepared:
            return Definition("frozenset()")
        return Definition(f"frozenset({tuple_expr(prepared)})")


class ModuleSerializer(ValueSerializer):
    """Serializer for modules, re-imported by name"""

    @override
    def serialize(self, value: Any, ref: str, memo: Memoizer, prepared: Any) -> Definition:
        return Definition(f"_module({quote(value.__name__)})")


@dataclass(frozen=True)
class PreparedCallable:
    code: bytes
    env_ref: str | None
    cell_refs: list[str]


class CallableSerializer(ValueSerializer):
    """Serializer for closures.

    Captured cells get slots of their own, defined before the function that
    closes over them. Closures sharing a cell are built from the same slot.
    """

    def __init__(self, introspection: RuntimeIntrospection, joins: CaptureJoins):
        self.introspection = introspection
        self.joins = joins

    @override
    def prepare(self, value: Any, memo: Memoizer) -> PreparedCallable | None:
        try:
            code = self.introspection.dump_code(value)
        except ExtractionError as e:
            logger.debug("Falling back to placeholder: %s", e)
            return None

        env = self.introspection.environment(value)
        env_ref = memo.resolve(env) if env is not None else None
        cell_refs = [
            self._cell_ref(value, capture, memo)
            for capture in self.introspection.captures(value)
        ]
        return PreparedCallable(code, env_ref, cell_refs)

    def _cell_ref(self, value: Any, capture: Capture, memo: Memoizer) -> str:
        token = self.introspection.capture_id(value, capture.index)
        if token is not None:
            ref = self.joins.lookup(token)
            if ref is not None:
                return ref

        ref = memo.define("_cell()")
        # Registered before the contents are resolved, so a closure reached
        # from its own capture reuses this cell
        if token is not None:
            self.joins.register(token, ref)
        if not capture.empty:
            memo.emit(f"_setcell({ref}, {memo.resolve(capture.value)})")
        return ref

    @override
    def serialize(
        self, value: Any, ref: str, memo: Memoizer, prepared: PreparedCallable | None
    ) -> Definition:
        if prepared is None:
            return placeholder(value)

        closure = prepared.cell_refs
        name = getattr(value, "__name__", "<lambda>")
        args = [repr(prepared.code), quote(name)]
        if closure or prepared.env_ref is not None:
            args.append(tuple_expr(closure) if closure else "None")
        if prepared.env_ref is not None:
            args.append(prepared.env_ref)

        followups = self._attributes(value, ref, name, memo)
        return Definition(f"_function({', '.join(args)})", followups)

    def _attributes(self, value: Any, ref: str, name: str, memo: Memoizer) -> list[str]:
        statements = []

        defaults = getattr(value, "__defaults__", None)
        if defaults:
            parts = [memo.resolve(d) for d in defaults]
            statements.append(f"{ref}.__defaults__ = {tuple_expr(parts)}")

        kwdefaults = getattr(value, "__kwdefaults__", None)
        if kwdefaults:
            items = ", ".join(f"{quote(k)}: {memo.resolve(v)}" for k, v in kwdefaults.items())
            statements.append(f"{ref}.__kwdefaults__ = {{{items}}}")

        qualname = getattr(value, "__qualname__", name)
        if qualname != name:
            statements.append(f"{ref}.__qualname__ = {quote(qualname)}")

        attrs = getattr(value, "__dict__", None)
        if attrs:
            statements.append(f"{ref}.__dict__ = {memo.resolve(attrs)}")

        return statements


class OpaqueSerializer(ValueSerializer):
    """Serializer for values with no reconstructible structure"""

    def __init__(self, strict: bool = False):
        self.strict = strict

    @override
    def serialize(self, value: Any, ref: str, memo: Memoizer, prepared: Any) -> Definition:
        if self.strict:
            raise UnsupportedValueError(value)

        logger.debug("Writing placeholder for opaque %s", type(value).__name__)
        return placeholder(value)


def create_serializer_for_kind(
    kind: Kind,
    *,
    introspection: RuntimeIntrospection,
    joins: CaptureJoins,
    strict: bool = False,
) -> ValueSerializer:
    """Create a ValueSerializer"""

    if kind == Kind.TEXT:
        return TextSerializer()
    elif kind == Kind.CONTAINER:
        return ContainerSerializer()
    elif kind == Kind.LIST:
        return ListSerializer()
    elif kind == Kind.SET:
        return SetSerializer()
    elif kind == Kind.TUPLE:
        return TupleSerializer()
    elif kind == Kind.FROZENSET:
        return FrozenSetSerializer()
    elif kind == Kind.MODULE:
        return ModuleSerializer()
    elif kind == Kind.CALLABLE:
        return CallableSerializer(introspection, joins)
    elif kind == Kind.OPAQUE:
        return OpaqueSerializer(strict)
    else:
        raise SerializationError(f"No serializer for kind: {kind.value}")
