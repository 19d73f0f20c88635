"""Conseq - a human-readable key/value text codec for typed records."""

from conseq.api import dump, dumps, load, loads
from conseq.errors import (
    ConseqError,
    MalformedValue,
    MissingTarget,
    UnknownSymbol,
    UnrepresentableValue,
    UnsupportedRoot,
)
from conseq.metadata import conseq_field, record
from conseq.records import (
    deserialize_record,
    deserialize_root_sequence,
    serialize_record,
    serialize_root_sequence,
)
from conseq.registry import ShapeRegistry, default_registry, shape_of
from conseq.settings import SettingsFile
from conseq.types import (
    ConseqFormat,
    EnumShape,
    IdentifierShape,
    MappingShape,
    MemberDefinition,
    NullableShape,
    RecordShape,
    ScalarKind,
    ScalarShape,
    SequenceKind,
    SequenceShape,
    ShapeDefinition,
    TemporalKind,
    TemporalShape,
    TextShape,
)
from conseq.values import parse_value, render_value

__all__ = [
    # Main API
    "dumps",
    "loads",
    "dump",
    "load",
    "ConseqFormat",
    "record",
    "conseq_field",
    "SettingsFile",
    # Codec
    "serialize_record",
    "serialize_root_sequence",
    "deserialize_record",
    "deserialize_root_sequence",
    "render_value",
    "parse_value",
    # Shapes
    "ShapeDefinition",
    "TextShape",
    "ScalarKind",
    "ScalarShape",
    "TemporalKind",
    "TemporalShape",
    "IdentifierShape",
    "EnumShape",
    "NullableShape",
    "SequenceKind",
    "SequenceShape",
    "MappingShape",
    "RecordShape",
    "MemberDefinition",
    "ShapeRegistry",
    "default_registry",
    "shape_of",
    # Errors
    "ConseqError",
    "UnsupportedRoot",
    "MalformedValue",
    "UnknownSymbol",
    "MissingTarget",
    "UnrepresentableValue",
]

__version__ = "0.1.0"
