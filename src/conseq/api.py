"""Top-level entry points: text to records and back."""

from __future__ import annotations

import typing
from typing import IO, Any

from conseq.errors import MissingTarget, UnsupportedRoot
from conseq.records import (
    deserialize_record,
    deserialize_root_sequence,
    serialize_record,
    serialize_root_sequence,
)
from conseq.registry import ShapeRegistry, default_registry
from conseq.types import ConseqFormat, RecordShape, SequenceKind

# Containers accepted as root sequences when writing
_ROOT_SEQUENCE_TYPES = (list, tuple, set, frozenset)

# Containers accepted as deserialization targets, e.g. list[Item]
_ROOT_TARGET_KINDS: dict[Any, SequenceKind] = {
    list: SequenceKind.LIST,
    tuple: SequenceKind.ARRAY,
    set: SequenceKind.SET,
}


def dumps(obj: Any, fmt: ConseqFormat = ConseqFormat.NONE, *, registry: ShapeRegistry | None = None) -> str:
    """Serialize a record, or a list/tuple/set of records, to Conseq text.

    Raises:
        UnsupportedRoot: If ``obj`` is neither a record nor a sequence of records.
        UnrepresentableValue: If a value would not read back as written.
    """
    registry = registry or default_registry
    if isinstance(obj, _ROOT_SEQUENCE_TYPES):
        return serialize_root_sequence(obj, fmt, registry=registry)
    shape = registry.find_record_shape(type(obj))
    if shape is None:
        raise UnsupportedRoot(obj)
    return serialize_record(obj, fmt, shape=shape)


def loads(text: str, target: Any, *, registry: ShapeRegistry | None = None) -> Any:
    """Deserialize Conseq text into ``target``.

    Args:
        text: The Conseq text.
        target: A record class, a ``RecordShape``, or ``list[T]``,
            ``tuple[T, ...]`` or ``set[T]`` of a record class ``T``.
        registry: Registry to derive shapes from (default registry when omitted).

    Raises:
        MissingTarget: If ``target`` is none of the above.
        MalformedValue: If a value cannot be parsed into its member's shape.
        UnknownSymbol: If an enum value names no member.
    """
    registry = registry or default_registry
    if isinstance(target, RecordShape):
        return deserialize_record(text, target, registry=registry)

    origin = typing.get_origin(target)
    if origin in _ROOT_TARGET_KINDS:
        kind = _ROOT_TARGET_KINDS[origin]
        args = typing.get_args(target)
        if kind is SequenceKind.ARRAY:
            if len(args) != 2 or args[1] is not Ellipsis:
                raise MissingTarget(target)
        elif len(args) != 1:
            raise MissingTarget(target)
        return deserialize_root_sequence(text, args[0], kind, registry=registry)

    return deserialize_record(text, target, registry=registry)


def dump(
    obj: Any,
    fp: IO[str],
    fmt: ConseqFormat = ConseqFormat.NONE,
    *,
    registry: ShapeRegistry | None = None,
) -> None:
    """Serialize ``obj`` and write the text to a file object."""
    fp.write(dumps(obj, fmt, registry=registry))


def load(fp: IO[str], target: Any, *, registry: ShapeRegistry | None = None) -> Any:
    """Read a file object and deserialize its text into ``target``."""
    return loads(fp.read(), target, registry=registry)
