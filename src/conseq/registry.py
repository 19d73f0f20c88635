"""Derivation and caching of shapes for Python types."""

from __future__ import annotations

import dataclasses
import logging
import operator
import threading
import types
import typing
from enum import Enum
from typing import Any, Callable, Union

from conseq.metadata import (
    field_comment,
    field_display_name,
    field_skipped,
    record_comment,
    record_display_name,
)
from conseq.types import (
    LEAF_SHAPES,
    EnumShape,
    MappingShape,
    MemberDefinition,
    NullableShape,
    RecordShape,
    SequenceKind,
    SequenceShape,
    ShapeDefinition,
)

logger = logging.getLogger(__name__)

_SEQUENCE_ORIGINS: dict[Any, SequenceKind] = {
    list: SequenceKind.LIST,
    set: SequenceKind.SET,
    tuple: SequenceKind.ARRAY,
}


class ShapeRegistry:
    """Registry of shapes, by name and by the Python type they encode.

    Shapes for dataclasses, enums and typing generics are derived on first use
    and cached; hand-written record shapes are added with ``register_record``.
    Derivation holds a lock, so one registry can be shared between threads.
    """

    def __init__(self) -> None:
        self._shapes: dict[str, ShapeDefinition] = {}
        self._derived: dict[Any, ShapeDefinition] = {}
        self._lock = threading.RLock()
        self._register_leaves()

    def _register_leaves(self) -> None:
        """Register the built-in leaf shapes."""
        for python_type, shape in LEAF_SHAPES.items():
            self._shapes[shape.name] = shape
            self._derived[python_type] = shape

    def register(self, shape: ShapeDefinition) -> None:
        """Register a shape under its name."""
        with self._lock:
            if shape.name in self._shapes:
                raise ValueError(f"Shape '{shape.name}' is already defined")
            self._shapes[shape.name] = shape

    def register_record(self, shape: RecordShape, python_type: type | None = None) -> None:
        """Register a hand-written record shape, bound to the class it describes.

        ``python_type`` defaults to ``shape.record_type``.
        """
        python_type = python_type or shape.record_type
        with self._lock:
            self.register(shape)
            if python_type is not None:
                self._derived[python_type] = shape

    def get(self, name: str) -> ShapeDefinition | None:
        """Get a shape by name."""
        return self._shapes.get(name)

    def get_or_raise(self, name: str) -> ShapeDefinition:
        """Get a shape by name, raising if not found."""
        shape = self._shapes.get(name)
        if shape is None:
            raise KeyError(f"Shape '{name}' not found")
        return shape

    def list_shapes(self) -> list[str]:
        """List all registered shape names."""
        return list(self._shapes.keys())

    def shape_for(self, annotation: Any) -> ShapeDefinition:
        """Return the shape encoding values of ``annotation``.

        Raises:
            TypeError: If the annotation is outside the supported set.
        """
        with self._lock:
            return self._derive(annotation)

    def record_shape(self, cls: type) -> RecordShape:
        """Return the record shape for ``cls``, raising TypeError if it is not a record."""
        shape = self.shape_for(cls)
        if not isinstance(shape, RecordShape):
            raise TypeError(f"'{cls!r}' is not a record type")
        return shape

    def find_record_shape(self, cls: type) -> RecordShape | None:
        """Return the record shape for ``cls`` or None if it is not a record type."""
        if typing.get_origin(cls) is not None:
            return None
        with self._lock:
            shape = self._derived.get(cls)
            if shape is None and isinstance(cls, type) and dataclasses.is_dataclass(cls):
                shape = self._derive(cls)
        return shape if isinstance(shape, RecordShape) else None

    def _derive(self, annotation: Any) -> ShapeDefinition:
        try:
            cached = self._derived.get(annotation)
        except TypeError:
            raise TypeError(f"Unsupported annotation {annotation!r}") from None
        if cached is not None:
            return cached

        shape = self._derive_uncached(annotation)
        self._derived[annotation] = shape
        return shape

    def _derive_uncached(self, annotation: Any) -> ShapeDefinition:
        origin = typing.get_origin(annotation)
        args = typing.get_args(annotation)

        if origin is None and isinstance(annotation, type):
            if issubclass(annotation, Enum):
                return EnumShape(name=annotation.__qualname__, enum_type=annotation)
            if dataclasses.is_dataclass(annotation):
                return self._derive_record(annotation)
            raise TypeError(f"Unsupported type {annotation.__qualname__!r}")

        if origin is Union or origin is types.UnionType:
            present = [a for a in args if a is not type(None)]
            if len(present) != 1 or len(args) != 2:
                raise TypeError(f"Unsupported union {annotation!r}: only 'T | None' is allowed")
            inner = self._derive(present[0])
            return NullableShape(name=f"{inner.name}?", inner=inner)

        if origin in _SEQUENCE_ORIGINS:
            kind = _SEQUENCE_ORIGINS[origin]
            if kind is SequenceKind.ARRAY and (len(args) != 2 or args[1] is not Ellipsis):
                raise TypeError(f"Unsupported tuple {annotation!r}: use 'tuple[T, ...]'")
            if not args:
                raise TypeError(f"Unsupported annotation {annotation!r}: element type missing")
            element = self._derive(args[0])
            return SequenceShape(name=f"{kind.value}[{element.name}]", element=element, kind=kind)

        if origin is dict:
            if len(args) != 2:
                raise TypeError(f"Unsupported annotation {annotation!r}: key and value types missing")
            key = self._derive(args[0])
            value = self._derive(args[1])
            return MappingShape(name=f"dict[{key.name}, {value.name}]", key=key, value=value)

        raise TypeError(f"Unsupported annotation {annotation!r}")

    def _derive_record(self, cls: type) -> RecordShape:
        """Derive a record shape from a dataclass.

        The shape is cached before its members are resolved so that members
        referring back to ``cls`` (through ``T | None``) pick up the same
        instance.
        """
        shape = RecordShape(
            name=cls.__qualname__,
            record_type=cls,
            display_name=record_display_name(cls),
            comment=record_comment(cls),
        )
        known = set(self._derived)
        self._derived[cls] = shape
        try:
            hints = typing.get_type_hints(cls)
            members: list[MemberDefinition] = []
            required: dict[str, ShapeDefinition] = {}

            for f in dataclasses.fields(cls):
                has_default = (
                    f.default is not dataclasses.MISSING
                    or f.default_factory is not dataclasses.MISSING
                )
                if field_skipped(f):
                    if f.init and not has_default:
                        raise TypeError(f"Skipped field '{cls.__qualname__}.{f.name}' needs a default")
                    continue
                try:
                    member_shape = self._derive(hints[f.name])
                except TypeError as e:
                    raise TypeError(f"Field '{cls.__qualname__}.{f.name}': {e}") from e
                members.append(
                    MemberDefinition(
                        name=f.name,
                        shape=member_shape,
                        getter=operator.attrgetter(f.name),
                        setter=None if f.init else _attribute_setter(f.name),
                        display_name=field_display_name(f),
                        comment=field_comment(f),
                        init=f.init,
                    )
                )
                if f.init and not has_default:
                    required[f.name] = member_shape

            for name, prop in _public_properties(cls):
                prop_hints = typing.get_type_hints(prop.fget)
                if "return" not in prop_hints:
                    continue
                try:
                    member_shape = self._derive(prop_hints["return"])
                except TypeError as e:
                    raise TypeError(f"Property '{cls.__qualname__}.{name}': {e}") from e
                members.append(
                    MemberDefinition(
                        name=name,
                        shape=member_shape,
                        getter=operator.attrgetter(name),
                        setter=_attribute_setter(name) if prop.fset is not None else None,
                    )
                )

            shape.members = members
            shape.factory = _dataclass_factory(cls, required)
            shape.check_members()
        except Exception:
            # Drop everything cached while the shape was incomplete
            for annotation in set(self._derived) - known:
                del self._derived[annotation]
            raise

        logger.debug("Derived record shape %s with %d members", shape.name, len(shape.members))
        return shape


def _attribute_setter(name: str) -> Callable[[Any, Any], None]:
    def setter(record: Any, value: Any) -> None:
        setattr(record, name, value)

    return setter


def _dataclass_factory(cls: type, required: dict[str, ShapeDefinition]) -> Callable[..., Any]:
    """Build a factory filling required constructor arguments with shape defaults."""

    def factory(**kwargs: Any) -> Any:
        for name, shape in required.items():
            if name not in kwargs:
                kwargs[name] = shape.default_value()
        return cls(**kwargs)

    return factory


def _public_properties(cls: type) -> list[tuple[str, property]]:
    """List public properties of ``cls``, base classes first."""
    found: dict[str, property] = {}
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        for name, attr in vars(klass).items():
            if isinstance(attr, property) and not name.startswith("_"):
                found[name] = attr
    return list(found.items())


default_registry = ShapeRegistry()


def shape_of(annotation: Any) -> ShapeDefinition:
    """Return the shape for ``annotation`` from the default registry."""
    return default_registry.shape_for(annotation)
