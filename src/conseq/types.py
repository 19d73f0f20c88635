"""Shape definitions for the Conseq codec.

A shape describes how a value is written as Conseq text. Shapes form a closed
algebra: leaves (text, scalars, temporal values, identifiers, enums) and the
composites built on them (nullable, sequence, mapping, record). The value
codec dispatches on these classes; nothing outside this set is encodable.
"""

from __future__ import annotations

import datetime as dt
import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Iterable


class ConseqFormat(Enum):
    """Layout used when writing Conseq text."""

    NONE = "none"
    COMPACT = "compact"
    READABLE = "readable"


class ScalarKind(Enum):
    """Primitive scalar kinds."""

    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    DECIMAL = "decimal"

    @property
    def python_type(self) -> type:
        """Return the Python type holding values of this kind."""
        types = {
            ScalarKind.BOOLEAN: bool,
            ScalarKind.INTEGER: int,
            ScalarKind.FLOAT: float,
            ScalarKind.DECIMAL: Decimal,
        }
        return types[self]


class TemporalKind(Enum):
    """Date, time and duration kinds."""

    DATETIME = "datetime"
    DATE = "date"
    TIME = "time"
    DURATION = "duration"

    @property
    def python_type(self) -> type:
        """Return the Python type holding values of this kind."""
        types = {
            TemporalKind.DATETIME: dt.datetime,
            TemporalKind.DATE: dt.date,
            TemporalKind.TIME: dt.time,
            TemporalKind.DURATION: dt.timedelta,
        }
        return types[self]

    @property
    def uses_colon(self) -> bool:
        """Return whether the text form of this kind contains ':'."""
        return self is not TemporalKind.DATE


class SequenceKind(Enum):
    """Supported homogeneous containers."""

    ARRAY = "array"
    LIST = "list"
    SET = "set"

    @property
    def container(self) -> type:
        """Return the Python container type for this kind."""
        containers = {
            SequenceKind.ARRAY: tuple,
            SequenceKind.LIST: list,
            SequenceKind.SET: set,
        }
        return containers[self]

    @property
    def is_ordered(self) -> bool:
        return self is not SequenceKind.SET


@dataclass
class ShapeDefinition:
    """Base class for all shapes."""

    name: str

    @property
    def is_leaf(self) -> bool:
        """Return whether values of this shape are written as a single token."""
        return False

    @property
    def is_inline(self) -> bool:
        """Return whether this shape can be an element of a sequence or mapping."""
        return self.is_leaf

    @property
    def is_nullable(self) -> bool:
        return False

    @property
    def is_record(self) -> bool:
        return False

    @property
    def is_block(self) -> bool:
        """Return whether values of this shape render as a braced block."""
        return False

    def default_value(self) -> Any:
        """Return the value a member of this shape holds when never assigned."""
        raise NotImplementedError


@dataclass
class TextShape(ShapeDefinition):
    """Strings, passed through verbatim."""

    @property
    def is_leaf(self) -> bool:
        return True

    def default_value(self) -> str:
        return ""


@dataclass
class ScalarShape(ShapeDefinition):
    """Booleans and numbers."""

    kind: ScalarKind

    @property
    def is_leaf(self) -> bool:
        return True

    def default_value(self) -> Any:
        defaults: dict[ScalarKind, Any] = {
            ScalarKind.BOOLEAN: False,
            ScalarKind.INTEGER: 0,
            ScalarKind.FLOAT: 0.0,
            ScalarKind.DECIMAL: Decimal(0),
        }
        return defaults[self.kind]


@dataclass
class TemporalShape(ShapeDefinition):
    """Date-times, dates, times of day and durations."""

    kind: TemporalKind

    @property
    def is_leaf(self) -> bool:
        return True

    def default_value(self) -> Any:
        defaults: dict[TemporalKind, Any] = {
            TemporalKind.DATETIME: dt.datetime.min,
            TemporalKind.DATE: dt.date.min,
            TemporalKind.TIME: dt.time(),
            TemporalKind.DURATION: dt.timedelta(0),
        }
        return defaults[self.kind]


@dataclass
class IdentifierShape(ShapeDefinition):
    """Globally unique identifiers (UUIDs)."""

    @property
    def is_leaf(self) -> bool:
        return True

    def default_value(self) -> uuid.UUID:
        return uuid.UUID(int=0)


@dataclass
class EnumShape(ShapeDefinition):
    """Symbolic values over the members of an ``enum.Enum`` subclass."""

    enum_type: type[Enum]

    def __post_init__(self) -> None:
        if not len(self.enum_type):
            raise TypeError(f"Enum '{self.enum_type.__name__}' has no members")

    @property
    def is_leaf(self) -> bool:
        return True

    def default_value(self) -> Enum:
        return next(iter(self.enum_type))

    def find_symbol(self, text: str) -> Enum | None:
        """Look up a member by name, exact match first, then ignoring case."""
        members = self.enum_type.__members__
        if text in members:
            return members[text]
        folded = text.casefold()
        for name, member in members.items():
            if name.casefold() == folded:
                return member
        return None


@dataclass
class NullableShape(ShapeDefinition):
    """An optional value: ``None`` or a value of the inner shape."""

    inner: ShapeDefinition

    def __post_init__(self) -> None:
        if self.inner.is_nullable:
            raise TypeError(f"Nullable shape '{self.name}' cannot wrap another nullable shape")

    @property
    def is_inline(self) -> bool:
        return self.inner.is_leaf

    @property
    def is_nullable(self) -> bool:
        return True

    @property
    def is_block(self) -> bool:
        return self.inner.is_block

    def default_value(self) -> None:
        return None


@dataclass
class SequenceShape(ShapeDefinition):
    """A homogeneous array, list or set written as ';'-separated elements."""

    element: ShapeDefinition
    kind: SequenceKind = SequenceKind.LIST

    def __post_init__(self) -> None:
        if not self.element.is_inline:
            raise TypeError(
                f"Sequence shape '{self.name}' needs a leaf element, got '{self.element.name}'"
            )

    def default_value(self) -> Any:
        return self.kind.container()


@dataclass
class MappingShape(ShapeDefinition):
    """A key-unique mapping written as ';'-separated ``key:value`` entries."""

    key: ShapeDefinition
    value: ShapeDefinition

    def __post_init__(self) -> None:
        if not self.key.is_leaf:
            raise TypeError(f"Mapping shape '{self.name}' needs a leaf key, got '{self.key.name}'")
        if not self.value.is_inline:
            raise TypeError(
                f"Mapping shape '{self.name}' needs a leaf value, got '{self.value.name}'"
            )
        for part in (self.key, self.value):
            if _text_has_colon(part):
                raise TypeError(
                    f"Mapping shape '{self.name}' cannot hold '{part.name}': its text contains ':'"
                )

    def default_value(self) -> dict[Any, Any]:
        return {}


def _text_has_colon(shape: ShapeDefinition) -> bool:
    if isinstance(shape, NullableShape):
        shape = shape.inner
    return isinstance(shape, TemporalShape) and shape.kind.uses_colon


_FORBIDDEN_KEY_CHARS = ("=", ":", "\n", "\r")


def check_key(key: str) -> None:
    """Raise ValueError if ``key`` cannot be written as a member key."""
    if not key or key != key.strip():
        raise ValueError(f"Member key {key!r} must be non-empty without surrounding whitespace")
    for char in _FORBIDDEN_KEY_CHARS:
        if char in key:
            raise ValueError(f"Member key {key!r} must not contain {char!r}")
    if key[0] in "#[{}":
        raise ValueError(f"Member key {key!r} must not start with {key[0]!r}")


@dataclass
class MemberDefinition:
    """A named member of a record shape.

    ``init`` members are passed to the record factory as keyword arguments;
    other members are assigned through ``setter`` after construction. A member
    with neither is read-only: it is written but never restored.
    """

    name: str
    shape: ShapeDefinition
    getter: Callable[[Any], Any]
    setter: Callable[[Any, Any], None] | None = None
    display_name: str | None = None
    comment: str | None = None
    init: bool = False

    def __post_init__(self) -> None:
        check_key(self.name)
        if self.display_name is not None:
            check_key(self.display_name)

    @property
    def key(self) -> str:
        """Return the key written for this member."""
        return self.display_name or self.name

    @property
    def readonly(self) -> bool:
        return not self.init and self.setter is None


@dataclass(eq=False)
class RecordShape(ShapeDefinition):
    """A composite value decomposed into ordered members.

    ``factory`` is called with the restored ``init`` members as keyword
    arguments and must supply defaults for everything it is not given.
    Record shapes compare by identity: a shape may reference itself through
    a nullable member.
    """

    members: list[MemberDefinition] = field(default_factory=list)
    factory: Callable[..., Any] | None = None
    record_type: type | None = None
    display_name: str | None = None
    comment: str | None = None

    def __post_init__(self) -> None:
        if self.display_name is not None and ("\n" in self.display_name or "\r" in self.display_name):
            raise ValueError(f"Display name of '{self.name}' must be a single line")
        if self.members:
            self.check_members()

    @property
    def is_record(self) -> bool:
        return True

    @property
    def is_block(self) -> bool:
        return True

    def check_members(self) -> None:
        """Raise ValueError unless every member's key reads back to that member."""
        for member in self.members:
            resolved = self.find_member(member.key)
            if resolved is not None and resolved is not member:
                raise ValueError(
                    f"Record '{self.name}' has duplicate member key '{member.key}' "
                    f"(members '{resolved.name}' and '{member.name}')"
                )

    def get_member(self, name: str) -> MemberDefinition | None:
        """Get a member by its natural name."""
        for m in self.members:
            if m.name == name:
                return m
        return None

    def find_member(self, key: str) -> MemberDefinition | None:
        """Resolve a key read from text, ignoring case.

        Display names win over natural member names.
        """
        folded = key.casefold()
        for m in self.members:
            if m.display_name is not None and m.display_name.casefold() == folded:
                return m
        for m in self.members:
            if m.name.casefold() == folded:
                return m
        return None

    def build(self, assigned: Iterable[tuple[MemberDefinition, Any]] = ()) -> Any:
        """Create a record from restored member values.

        Read-only members in ``assigned`` are skipped.
        """
        if self.factory is None:
            raise TypeError(f"Record shape '{self.name}' has no factory")
        kwargs: dict[str, Any] = {}
        late: list[tuple[Callable[[Any, Any], None], Any]] = []
        for member, value in assigned:
            if member.init:
                kwargs[member.name] = value
            elif member.setter is not None:
                late.append((member.setter, value))
        record = self.factory(**kwargs)
        for setter, value in late:
            setter(record, value)
        return record

    def default_value(self) -> Any:
        return self.build()

    def __eq__(self, other: object) -> bool:
        return self is other

    def __hash__(self) -> int:
        return id(self)

    def __repr__(self) -> str:
        return f"RecordShape({self.name!r}, members={[m.name for m in self.members]!r})"


# Built-in leaf shapes
TEXT = TextShape(name="text")
BOOLEAN = ScalarShape(name="boolean", kind=ScalarKind.BOOLEAN)
INTEGER = ScalarShape(name="integer", kind=ScalarKind.INTEGER)
FLOAT = ScalarShape(name="float", kind=ScalarKind.FLOAT)
DECIMAL = ScalarShape(name="decimal", kind=ScalarKind.DECIMAL)
DATETIME = TemporalShape(name="datetime", kind=TemporalKind.DATETIME)
DATE = TemporalShape(name="date", kind=TemporalKind.DATE)
TIME = TemporalShape(name="time", kind=TemporalKind.TIME)
DURATION = TemporalShape(name="duration", kind=TemporalKind.DURATION)
IDENTIFIER = IdentifierShape(name="identifier")

# Mapping from Python types to the leaf shape encoding them
LEAF_SHAPES: dict[type, ShapeDefinition] = {
    str: TEXT,
    bool: BOOLEAN,
    int: INTEGER,
    float: FLOAT,
    Decimal: DECIMAL,
    dt.datetime: DATETIME,
    dt.date: DATE,
    dt.time: TIME,
    dt.timedelta: DURATION,
    uuid.UUID: IDENTIFIER,
}
