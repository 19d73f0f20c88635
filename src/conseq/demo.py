"""Sample record used by ``conseq demo`` and the examples."""

from __future__ import annotations

import datetime as dt
import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from conseq.metadata import conseq_field, record


class Status(Enum):
    NONE = 0
    ACTIVE = 1
    DISABLED = 2


@record(name="example class", comment="this class represents a test for Conseq processing")
@dataclass
class Example:
    numbers: tuple[int, ...] = conseq_field(name="sample-name", default=())
    names: list[str] = field(default_factory=list)
    ids: set[uuid.UUID] = field(default_factory=set)
    map: dict[str, int] = conseq_field(comment="letters to positions", default_factory=dict)
    created: dt.datetime = dt.datetime.min
    duration: dt.timedelta = dt.timedelta(0)
    price: Decimal = Decimal(0)
    enabled: bool = False
    status: Status = Status.NONE
    note: str | None = None


def build_example() -> Example:
    """Return an Example with every member populated."""
    return Example(
        numbers=(0, 0, 0, 1),
        names=["hello", "world", "!"],
        ids={uuid.uuid4(), uuid.uuid4()},
        map={"A": 1, "B": 2},
        created=dt.datetime.combine(dt.date.today(), dt.time()),
        duration=dt.timedelta(minutes=90),
        price=Decimal("123.45"),
        enabled=True,
        status=Status.ACTIVE,
    )
