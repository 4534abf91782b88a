"""
Column resolution: match a result set's column list against a descriptor.
"""
from collections.abc import Sequence

from sqlrecord.cache import memoized
from sqlrecord.descriptor import RecordDescriptor
from sqlrecord.exceptions import UnmappedColumnError

__all__ = ['resolve_columns', 'resolve_cached']


def resolve_columns(descriptor: RecordDescriptor, columns: Sequence[str]) -> tuple[int, ...]:
    """Return the field position for each column, in column order.

    Matching is exact; names were already normalized when the descriptor was
    built. The first column without a field raises UnmappedColumnError.
    """
    names = descriptor.names
    positions = []
    for name in columns:
        try:
            positions.append(names[name])
        except KeyError:
            raise UnmappedColumnError(name, descriptor.record_type) from None
    return tuple(positions)


def _position_key(descriptor: RecordDescriptor, columns: Sequence[str]) -> tuple:
    return descriptor.record_type, tuple(columns)


@memoized('positions', key=_position_key, maxsize=256)
def resolve_cached(descriptor: RecordDescriptor, columns: Sequence[str]) -> tuple[int, ...]:
    """Like resolve_columns, memoized per (record type, column list)."""
    return resolve_columns(descriptor, columns)
