from __future__ import annotations

from graphdump.introspection import RuntimeIntrospection
from graphdump.memo import CaptureJoins
from graphdump.serialize.kind import LITERAL_KINDS, Kind
from graphdump.serialize.serialize import ValueSerializer, create_serializer_for_kind


class Dispatcher:
    """Routes a value kind to its serializer; one instance per dump"""

    def __init__(
        self,
        introspection: RuntimeIntrospection,
        joins: CaptureJoins,
        strict: bool = False,
    ):
        self._serializers: dict[Kind, ValueSerializer] = {
            kind: create_serializer_for_kind(
                kind, introspection=introspection, joins=joins, strict=strict
            )
            for kind in Kind
            if kind not in LITERAL_KINDS
        }

    def serializer_for(self, kind: Kind) -> ValueSerializer:
        return self._serializers[kind]
