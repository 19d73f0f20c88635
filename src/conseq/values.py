"""Conversion of single values to and from Conseq text.

Text conventions (shared by every layout):

- booleans: ``true`` / ``false`` (parsing ignores case)
- integers: decimal digits with optional sign
- floats and decimals: fixed-point, never exponent notation; float text is
  the shortest representation that reads back to the same float
- date-times, dates, times: ISO 8601 as produced by ``isoformat()``
- durations: ``[-][D.]HH:MM:SS[.ffffff]``
- identifiers: lower-case dashed UUID form
- enums: the member name (parsing ignores case)
- sequences: elements joined with ``;``
- mappings: ``key:value`` entries joined with ``;``
- nested records: a ``{ ... }`` block holding the record's members

Delimiters are never escaped: text values holding ``;`` or ``:`` do not
survive a trip through a sequence or mapping.
"""

from __future__ import annotations

import datetime as dt
import re
import textwrap
import uuid
from decimal import Decimal, InvalidOperation
from typing import Any

from conseq.errors import MalformedValue, UnknownSymbol, UnrepresentableValue
from conseq.types import (
    ConseqFormat,
    EnumShape,
    IdentifierShape,
    MappingShape,
    NullableShape,
    RecordShape,
    ScalarKind,
    ScalarShape,
    SequenceShape,
    ShapeDefinition,
    TemporalKind,
    TemporalShape,
    TextShape,
)

ELEMENT_SEPARATOR = ";"
ENTRY_SEPARATOR = ":"
BLOCK_OPEN = "{"
BLOCK_CLOSE = "}"
BLOCK_INDENT = "    "

_DURATION_RE = re.compile(
    r"^(?P<sign>-)?(?:(?P<days>\d+)\.)?(?P<hours>\d{1,2}):(?P<minutes>\d{2}):(?P<seconds>\d{2})"
    r"(?:\.(?P<fraction>\d{1,6}))?$"
)
_MICROSECONDS_PER_DAY = 86_400_000_000


def render_value(value: Any, shape: ShapeDefinition, fmt: ConseqFormat = ConseqFormat.NONE) -> str:
    """Render a value of the given shape as Conseq text.

    ``fmt`` only matters for nested records; every other shape renders the
    same text in every layout.
    """
    if isinstance(shape, TextShape):
        return value
    elif isinstance(shape, ScalarShape):
        return _render_scalar(value, shape.kind)
    elif isinstance(shape, TemporalShape):
        if shape.kind is TemporalKind.DURATION:
            return format_duration(value)
        return value.isoformat()
    elif isinstance(shape, IdentifierShape):
        return str(value)
    elif isinstance(shape, EnumShape):
        return value.name
    elif isinstance(shape, NullableShape):
        if value is None:
            return ""
        text = render_value(value, shape.inner, fmt)
        if not text.strip():
            # Blank text reads back as None
            raise UnrepresentableValue(text, f"an empty {shape.inner.name} value cannot be told apart from None")
        return text
    elif isinstance(shape, SequenceShape):
        return ELEMENT_SEPARATOR.join(render_value(v, shape.element) for v in value)
    elif isinstance(shape, MappingShape):
        return ELEMENT_SEPARATOR.join(
            f"{render_value(k, shape.key)}{ENTRY_SEPARATOR}{render_value(v, shape.value)}"
            for k, v in value.items()
        )
    elif isinstance(shape, RecordShape):
        return _render_block(value, shape, fmt)

    raise TypeError(f"Unsupported shape {shape!r}")


def parse_value(text: str, shape: ShapeDefinition) -> Any:
    """Parse Conseq text into a value of the given shape.

    Raises:
        MalformedValue: If the text does not hold a value of the shape.
        UnknownSymbol: If enum text names no member.
    """
    if isinstance(shape, TextShape):
        return text

    stripped = text.strip()

    if isinstance(shape, NullableShape):
        if not stripped:
            return None
        return parse_value(text, shape.inner)
    elif isinstance(shape, SequenceShape):
        if not stripped:
            return shape.kind.container()
        return shape.kind.container(
            parse_value(element, shape.element) for element in stripped.split(ELEMENT_SEPARATOR)
        )
    elif isinstance(shape, MappingShape):
        return _parse_mapping(stripped, shape)

    if not stripped:
        raise MalformedValue(shape, text, "empty text")

    if isinstance(shape, ScalarShape):
        return _parse_scalar(stripped, shape)
    elif isinstance(shape, TemporalShape):
        return _parse_temporal(stripped, shape)
    elif isinstance(shape, IdentifierShape):
        try:
            return uuid.UUID(stripped)
        except ValueError as e:
            raise MalformedValue(shape, stripped, str(e)) from e
    elif isinstance(shape, EnumShape):
        member = shape.find_symbol(stripped)
        if member is None:
            raise UnknownSymbol(shape.enum_type, stripped)
        return member
    elif isinstance(shape, RecordShape):
        return _parse_block(stripped, shape)

    raise TypeError(f"Unsupported shape {shape!r}")


def _render_scalar(value: Any, kind: ScalarKind) -> str:
    if kind is ScalarKind.BOOLEAN:
        return "true" if value else "false"
    elif kind is ScalarKind.INTEGER:
        return format(value, "d")
    elif kind is ScalarKind.FLOAT:
        # repr() is the shortest text that reads back to the same float
        return format(Decimal(repr(float(value))), "f")
    return format(Decimal(value), "f")


def _parse_scalar(text: str, shape: ScalarShape) -> Any:
    kind = shape.kind
    if kind is ScalarKind.BOOLEAN:
        lowered = text.lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
        raise MalformedValue(shape, text, "expected 'true' or 'false'")
    try:
        if kind is ScalarKind.INTEGER:
            return int(text)
        elif kind is ScalarKind.FLOAT:
            return float(text)
        return Decimal(text)
    except (ValueError, InvalidOperation) as e:
        raise MalformedValue(shape, text) from e


def _parse_temporal(text: str, shape: TemporalShape) -> Any:
    kind = shape.kind
    try:
        if kind is TemporalKind.DATETIME:
            return dt.datetime.fromisoformat(text)
        elif kind is TemporalKind.DATE:
            return dt.date.fromisoformat(text)
        elif kind is TemporalKind.TIME:
            return dt.time.fromisoformat(text)
        return parse_duration(text)
    except ValueError as e:
        raise MalformedValue(shape, text, str(e)) from e


def format_duration(value: dt.timedelta) -> str:
    """Format a timedelta as ``[-][D.]HH:MM:SS[.ffffff]``."""
    total = value // dt.timedelta(microseconds=1)
    sign = "-" if total < 0 else ""
    days, rest = divmod(abs(total), _MICROSECONDS_PER_DAY)
    seconds, micros = divmod(rest, 1_000_000)
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    text = f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    if days:
        text = f"{days}.{text}"
    if micros:
        text = f"{text}.{micros:06d}"
    return sign + text


def parse_duration(text: str) -> dt.timedelta:
    """Parse the text produced by ``format_duration``."""
    match = _DURATION_RE.match(text)
    if match is None:
        raise ValueError(f"expected [-][D.]HH:MM:SS[.ffffff], got {text!r}")
    hours = int(match["hours"])
    minutes = int(match["minutes"])
    seconds = int(match["seconds"])
    if hours > 23 or minutes > 59 or seconds > 59:
        raise ValueError(f"time of day out of range in {text!r}")
    value = dt.timedelta(
        days=int(match["days"] or 0),
        hours=hours,
        minutes=minutes,
        seconds=seconds,
        microseconds=int((match["fraction"] or "0").ljust(6, "0")),
    )
    return -value if match["sign"] else value


def _parse_mapping(text: str, shape: MappingShape) -> dict[Any, Any]:
    result: dict[Any, Any] = {}
    if not text:
        return result
    for pair in text.split(ELEMENT_SEPARATOR):
        if pair.count(ENTRY_SEPARATOR) != 1:
            raise MalformedValue(shape, pair, "each entry needs exactly one ':' between key and value")
        key_text, value_text = pair.split(ENTRY_SEPARATOR)
        key = parse_value(key_text, shape.key)
        if key in result:
            raise MalformedValue(shape, pair, f"duplicate key {key_text!r}")
        result[key] = parse_value(value_text, shape.value)
    return result


def _render_block(value: Any, shape: RecordShape, fmt: ConseqFormat) -> str:
    from conseq.records import serialize_record

    body = serialize_record(value, fmt, shape=shape, nested=True)
    if fmt is ConseqFormat.COMPACT:
        if not body:
            return f"{BLOCK_OPEN} {BLOCK_CLOSE}"
        return f"{BLOCK_OPEN} {body} {BLOCK_CLOSE}"
    if fmt is ConseqFormat.READABLE:
        body = textwrap.indent(body, BLOCK_INDENT)
    if not body:
        return f"{BLOCK_OPEN}\n{BLOCK_CLOSE}"
    return f"{BLOCK_OPEN}\n{body}\n{BLOCK_CLOSE}"


def _parse_block(text: str, shape: RecordShape) -> Any:
    from conseq.records import deserialize_record

    if not (text.startswith(BLOCK_OPEN) and text.endswith(BLOCK_CLOSE)) or len(text) < 2:
        raise MalformedValue(shape, text, "expected a '{ ... }' block")
    return deserialize_record(text[1:-1], shape)
