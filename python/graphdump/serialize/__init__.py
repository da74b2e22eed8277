"""
Value classification and per-kind serializers
"""

from .kind import Kind, classify
from .literals import literal, quote
from .serialize import (
    Definition,
    ValueSerializer,
    create_serializer_for_kind,
)

__all__ = [
    "Kind",
    "classify",
    "literal",
    "quote",
    "Definition",
    "ValueSerializer",
    "create_serializer_for_kind",
]
