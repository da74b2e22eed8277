"""
Graph-aware value serializer producing Python reconstruction scripts
"""

from .dumper import DEFAULT_MAX_ENTRIES, DumpOptions, Dumper, dump
from .errors import (
    ExtractionError,
    InvalidArgumentError,
    OutOfBudgetError,
    SerializationError,
    UnsupportedValueError,
)
from .registry import Registry, build_registry
from .script import RESULT_NAME
from .table import Table, getmeta, setmeta

__all__ = [
    # Main API
    "dump",
    "build_registry",
    "Dumper",
    "DumpOptions",
    "Registry",
    "RESULT_NAME",
    "DEFAULT_MAX_ENTRIES",
    # Tables
    "Table",
    "getmeta",
    "setmeta",
    # Errors
    "SerializationError",
    "InvalidArgumentError",
    "OutOfBudgetError",
    "ExtractionError",
    "UnsupportedValueError",
]
