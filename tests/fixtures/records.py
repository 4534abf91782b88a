"""
Record types shared by the test modules.
"""
from dataclasses import dataclass, field

from sqlrecord import column


@dataclass
class Person:
    ID: int = column('id', default=0)
    Name: str = ''


@dataclass
class Place:
    Country: str = ''
    City: str = ''
    TelCode: int = column('telcode', default=0)


@dataclass(frozen=True)
class FrozenPerson:
    ID: int = column('id')
    Name: str = None


@dataclass(slots=True)
class SlottedPerson:
    ID: int = column('id', default=0)
    Name: str = ''


@dataclass
class Account:
    """Record with required fields and a mutable default."""
    account_id: int
    owner: str
    tags: list = field(default_factory=list)
    balance: float = 0.0


class PlainPerson:
    """Not a dataclass."""

    def __init__(self):
        self.id = 0
        self.name = ''
