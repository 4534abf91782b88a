"""
Cursor wrappers and collection materialization.

`Rows` wraps a PEP-249 cursor and adds record scanning on top of it, `Row`
is the single-row variant returned by ``query_row``. `scan_all` drains a
cursor into a list of records.
"""
import logging
from collections.abc import Iterator, MutableSequence
from typing import Any

from sqlrecord.descriptor import get_descriptor
from sqlrecord.exceptions import DriverError, NoRowsError, ScanError
from sqlrecord.resolver import resolve_cached
from sqlrecord.scanner import FieldSlot, new_record, scan_row

__all__ = ['Rows', 'Row', 'RecordList', 'scan_all']

logger = logging.getLogger(__name__)


class RecordList(list):
    """List that remembers the record type of its elements.

    >>> people = RecordList(dict)
    >>> people.record_type
    <class 'dict'>
    """

    def __init__(self, record_type: type, iterable=()) -> None:
        super().__init__(iterable)
        self.record_type = record_type

    def __repr__(self) -> str:
        return f'RecordList({self.record_type.__name__}, {list.__repr__(self)})'


class Rows:
    """Row cursor with record scanning.

    Usage mirrors a manual fetch loop::

        with cn.query('select * from person') as rows:
            while rows.next_row():
                p = Person()
                rows.scan_record(p)

    The column to field resolution is done on the first ``scan_record`` call
    and reused for every later row, so one Rows instance must only ever scan
    into one record type.
    """

    def __init__(self, cursor: Any) -> None:
        self.cursor = cursor
        self._current: tuple | None = None
        self._closed = False
        self._descriptor = None
        self._positions: tuple[int, ...] | None = None

    @classmethod
    def wrap(cls, cursor: Any) -> 'Rows':
        if isinstance(cursor, cls):
            return cursor
        return cls(cursor)

    def __getattr__(self, name: str) -> Any:
        """Delegate members to underlying cursor."""
        if name == 'cursor':
            raise AttributeError(name)
        return getattr(self.cursor, name)

    def __enter__(self) -> 'Rows':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __iter__(self) -> Iterator[tuple]:
        while self.next_row():
            yield self._current

    @property
    def description(self) -> Any:
        return self.cursor.description

    @property
    def closed(self) -> bool:
        return self._closed

    def columns(self) -> list[str]:
        """Column names in the order reported by the driver."""
        return [d[0] for d in (self.cursor.description or [])]

    def next_row(self) -> bool:
        """Advance to the next row. Returns False once the cursor is drained."""
        try:
            self._current = self.cursor.fetchone()
        except DriverError as exc:
            self._current = None
            raise ScanError(f'Error reading row: {exc}') from exc
        return self._current is not None

    def fetchone(self) -> tuple | None:
        self.next_row()
        return self._current

    def scan(self) -> tuple:
        """Return the current row as a tuple."""
        if self._current is None:
            raise ScanError('scan called without a current row')
        return tuple(self._current)

    def scan_into(self, *slots: FieldSlot) -> None:
        """Write the current row into the given destinations, column by column."""
        row = self.scan()
        if len(row) != len(slots):
            raise ScanError(f'Expected {len(row)} destinations, got {len(slots)}')
        for slot, value in zip(slots, row):
            slot.set(value)

    def scan_record(self, dest: Any) -> Any:
        """Scan the current row into an existing record instance."""
        if self._positions is None:
            self._descriptor = get_descriptor(dest)
            self._positions = resolve_cached(self._descriptor, self.columns())
        assert type(dest) is self._descriptor.record_type, \
            f'Rows already resolved for {self._descriptor.record_type.__name__}'
        return scan_row(dest, self._descriptor, self._positions, self)

    def records(self, record_type: type) -> Iterator[Any]:
        """Yield one new record per remaining row."""
        descriptor = get_descriptor(record_type)
        positions = resolve_cached(descriptor, self.columns())
        while self.next_row():
            yield scan_row(new_record(descriptor), descriptor, positions, self)

    def close(self) -> None:
        """Close the underlying cursor. Safe to call more than once."""
        if not self._closed:
            self._closed = True
            self.cursor.close()


class Row:
    """Result of a query expected to yield at most one row.

    Every scan method closes the cursor; rows after the first are ignored.
    """

    def __init__(self, rows: Any) -> None:
        self.rows = Rows.wrap(rows)

    def columns(self) -> list[str]:
        return self.rows.columns()

    def scan(self) -> tuple:
        with self.rows:
            if not self.rows.next_row():
                raise NoRowsError('No rows in result set')
            return self.rows.scan()

    def scan_record(self, dest: Any) -> Any:
        """Scan the first row into dest."""
        with self.rows:
            descriptor = get_descriptor(dest)
            positions = resolve_cached(descriptor, self.rows.columns())
            if not self.rows.next_row():
                raise NoRowsError('No rows in result set')
            return scan_row(dest, descriptor, positions, self.rows)


def scan_all(rows: Any, dest: MutableSequence, record_type: type) -> MutableSequence:
    """Append one record per remaining row of rows to dest.

    Columns are resolved once before any row is read. A failing row stops the
    loop and propagates its error; records appended before it stay in dest.
    The cursor is drained but not closed.
    """
    rows = Rows.wrap(rows)
    descriptor = get_descriptor(record_type)
    positions = resolve_cached(descriptor, rows.columns())
    count = 0
    while rows.next_row():
        dest.append(scan_row(new_record(descriptor), descriptor, positions, rows))
        count += 1
    logger.debug(f'Scanned {count} {descriptor.record_type.__name__} records')
    return dest
