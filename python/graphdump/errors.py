# python/graphdump/errors.py
class SerializationError(Exception):
    pass


class InvalidArgumentError(SerializationError, ValueError):
    pass


class OutOfBudgetError(SerializationError):
    def __init__(self, limit: float):
        super().__init__(f"value graph has too many entries (limit {limit})")
        self.limit = limit


class ExtractionError(SerializationError):
    pass


class UnsupportedValueError(SerializationError, TypeError):
    def __init__(self, value: object):
        super().__init__(f"Cannot serialize opaque value of type {type(value).__name__}")
        self.value = value


def mk_arg_err(name: str, expected: str, got: object) -> InvalidArgumentError:
    """Make an argument error naming the parameter and the offending type"""
    return InvalidArgumentError(f"{name} must be {expected}, got {type(got).__name__}")


def mk_extract_err(value: object, reason: str) -> ExtractionError:
    """Make an extraction error for a callable whose code cannot be dumped"""
    return ExtractionError(f"Cannot extract code of {value!r}: {reason}")


__all__ = [
    "SerializationError",
    "InvalidArgumentError",
    "OutOfBudgetError",
    "ExtractionError",
    "UnsupportedValueError",
    "mk_arg_err",
    "mk_extract_err",
]
