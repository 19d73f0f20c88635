"""Example usage of the conseq library."""

import datetime as dt
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from pathlib import Path

import conseq
from conseq import ConseqFormat, SettingsFile, conseq_field, record


class Role(Enum):
    GUEST = 0
    MEMBER = 1
    ADMIN = 2


@dataclass
class Address:
    street: str = ""
    city: str = ""


@record(name="Person", comment="A member of the club")
@dataclass
class Person:
    name: str = ""
    age: int = 0
    role: Role = Role.GUEST
    joined: dt.date = dt.date.min
    fee: Decimal = conseq_field(default=Decimal(0), comment="Yearly fee in EUR")
    nicknames: list[str] = field(default_factory=list)
    scores: dict[str, int] = field(default_factory=dict)
    address: Address = field(default_factory=Address)
    referrer: str | None = None


people = [
    Person("Alice", 30, Role.ADMIN, dt.date(2020, 5, 1), Decimal("120.00"), ["Al"], {"chess": 3}, Address("Main", "Oslo")),
    Person("Bob", 25, Role.MEMBER, dt.date(2022, 1, 15), Decimal("60.50"), referrer="Alice"),
]

# One record in each layout
for fmt in ConseqFormat:
    print(f"--- {fmt.value} ---")
    print(conseq.dumps(people[0], fmt))
    print()

# A root list: records separated by blank lines
text = conseq.dumps(people, ConseqFormat.READABLE)
restored = conseq.loads(text, list[Person])
assert restored == people
print(f"Read back {len(restored)} people")

# Hand-written text: keys ignore case, unknown keys and comments are skipped
edited = conseq.loads("# edited by hand\nNAME = Carol\nrole = member\nshoe size = 39", Person)
print(edited)

# Settings file: defaults until the first save
settings = SettingsFile(Path("./example_data/person.txt"), Person)
person = settings.load()
person.name = "Dave"
settings.save(person)
print(settings.path.read_text(encoding="utf-8"))
