"""
Record scanning: write the current row of a cursor into one record instance.

The scanner only builds the ordered list of destinations; decoding the row
and writing each value is left to the cursor's ``scan_into``.
"""
from dataclasses import dataclass
from typing import Any

from sqlrecord.descriptor import RecordDescriptor

__all__ = ['FieldSlot', 'field_slots', 'new_record', 'scan_row']


@dataclass(slots=True)
class FieldSlot:
    """Writable handle on one field of one record instance."""
    target: Any
    name: str

    def set(self, value: Any) -> None:
        # frozen and slotted dataclasses reject plain setattr
        object.__setattr__(self.target, self.name, value)

    def get(self) -> Any:
        return getattr(self.target, self.name)


def field_slots(target: Any, descriptor: RecordDescriptor,
                positions: tuple[int, ...]) -> list[FieldSlot]:
    """Return handles on the fields of target in column order.
    """
    fields = descriptor.fields
    return [FieldSlot(target, fields[pos].name) for pos in positions]


def new_record(descriptor: RecordDescriptor) -> Any:
    """Allocate a fresh scan target for the descriptor's record type."""
    return descriptor.blank()


def scan_row(target: Any, descriptor: RecordDescriptor, positions: tuple[int, ...],
             reader: Any) -> Any:
    """Fill target from the reader's current row and return it.

    ``positions`` must come from resolving the same column list the reader
    reports; reusing positions across column shapes is a caller error.
    """
    reader.scan_into(*field_slots(target, descriptor, positions))
    return target
