"""Exceptions raised by the Conseq codec."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from conseq.types import ShapeDefinition


class ConseqError(Exception):
    """Base class for all codec errors.

    ``path`` holds the member keys leading from the root record to the value
    that failed, outermost first. The record codec fills it in as the error
    propagates out of nested blocks.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.path: list[str] = []

    def at(self, key: str) -> ConseqError:
        """Prefix ``key`` to the error path and return self for re-raising."""
        self.path.insert(0, key)
        return self

    def __str__(self) -> str:
        if self.path:
            return f"{'.'.join(self.path)}: {self.message}"
        return self.message


class UnsupportedRoot(ConseqError, TypeError):
    """A value to serialize is neither a record nor a sequence of records."""

    def __init__(self, value: Any) -> None:
        super().__init__(
            f"Cannot serialize {type(value).__name__!s}: not a record or a sequence of records"
        )
        self.value = value


class MalformedValue(ConseqError, ValueError):
    """Text cannot be parsed into the declared shape."""

    def __init__(self, shape: ShapeDefinition, text: str, reason: str | None = None) -> None:
        message = f"Malformed {shape.name} value {text!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.shape = shape
        self.text = text


class UnknownSymbol(ConseqError, ValueError):
    """Enum text matches no declared symbol."""

    def __init__(self, enum_type: type, text: str) -> None:
        symbols = ", ".join(enum_type.__members__)
        super().__init__(f"Unknown {enum_type.__name__} symbol {text!r} (expected one of: {symbols})")
        self.enum_type = enum_type
        self.text = text


class MissingTarget(ConseqError, TypeError):
    """The deserialization target is neither a record nor a container of records."""

    def __init__(self, target: Any) -> None:
        super().__init__(f"Cannot deserialize into {target!r}: not a record or a container of records")
        self.target = target


class UnrepresentableValue(ConseqError, ValueError):
    """A value's text would not survive the chosen layout unchanged."""

    def __init__(self, text: str, reason: str) -> None:
        super().__init__(f"Cannot write {text!r}: {reason}")
        self.text = text
