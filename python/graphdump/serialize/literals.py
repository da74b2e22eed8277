import math
from typing import Any

from graphdump.serialize.kind import Kind

# Names bound by the script prologue
INF_NAME = "_INF"
NAN_NAME = "_NAN"


def quote(text: str | bytes) -> str:
    """Python literal for a str or bytes value, round-trips through eval"""
    return repr(text)


def float_literal(value: float) -> str:
    if math.isnan(value):
        return NAN_NAME
    if math.isinf(value):
        return INF_NAME if value > 0 else f"-{INF_NAME}"
    return repr(value)


def number_literal(value: int | float | complex) -> str:
    if isinstance(value, complex):
        if math.isfinite(value.real) and math.isfinite(value.imag):
            return repr(value)
        return f"complex({float_literal(value.real)}, {float_literal(value.imag)})"
    if isinstance(value, float):
        return float_literal(value)
    return repr(value)


def literal(value: Any, kind: Kind) -> str:
    if kind == Kind.NIL:
        return "None"
    elif kind == Kind.BOOLEAN:
        return "True" if value else "False"
    elif kind == Kind.NUMBER:
        return number_literal(value)
    else:
        raise ValueError(f"{kind} has no inline literal form")
