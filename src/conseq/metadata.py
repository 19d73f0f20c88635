"""Display names and comments attached to record types and their fields.

Record types declare metadata with the ``record`` decorator::

    @record(name="example class", comment="Shown above the record")
    @dataclass
    class Example:
        numbers: list[int] = conseq_field(name="sample name", default_factory=list)

The registry reads it back through the lookup functions below when it derives
a record shape; the codec itself never looks at classes.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Callable, TypeVar

T = TypeVar("T", bound=type)

RECORD_NAME_ATTR = "__conseq_name__"
RECORD_COMMENT_ATTR = "__conseq_comment__"

FIELD_NAME_KEY = "conseq.name"
FIELD_COMMENT_KEY = "conseq.comment"
FIELD_SKIP_KEY = "conseq.skip"


def record(
    cls: T | None = None, *, name: str | None = None, comment: str | None = None
) -> T | Callable[[T], T]:
    """Attach a display name and/or comment to a record class.

    Usable bare (``@record``) or with arguments. The class itself is returned
    unchanged apart from the two metadata attributes.
    """

    def wrap(target: T) -> T:
        setattr(target, RECORD_NAME_ATTR, name)
        setattr(target, RECORD_COMMENT_ATTR, comment)
        return target

    if cls is None:
        return wrap
    return wrap(cls)


def conseq_field(
    *,
    name: str | None = None,
    comment: str | None = None,
    skip: bool = False,
    **kwargs: Any,
) -> Any:
    """Declare a dataclass field with Conseq metadata.

    Remaining keyword arguments go to ``dataclasses.field``.

    Args:
        name: Key written instead of the field name.
        comment: Comment line written above the member in readable layout.
        skip: Leave the field out of the record shape entirely.
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    if name is not None:
        metadata[FIELD_NAME_KEY] = name
    if comment is not None:
        metadata[FIELD_COMMENT_KEY] = comment
    if skip:
        metadata[FIELD_SKIP_KEY] = True
    return dataclasses.field(metadata=metadata, **kwargs)


def record_display_name(cls: type) -> str | None:
    """Return the display name declared on a record class, if any."""
    return getattr(cls, RECORD_NAME_ATTR, None) or None


def record_comment(cls: type) -> str | None:
    """Return the comment declared on a record class, if any."""
    return getattr(cls, RECORD_COMMENT_ATTR, None) or None


def field_display_name(f: dataclasses.Field[Any]) -> str | None:
    return f.metadata.get(FIELD_NAME_KEY) or None


def field_comment(f: dataclasses.Field[Any]) -> str | None:
    return f.metadata.get(FIELD_COMMENT_KEY) or None


def field_skipped(f: dataclasses.Field[Any]) -> bool:
    return bool(f.metadata.get(FIELD_SKIP_KEY, False))
