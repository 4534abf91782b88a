"""
Query functions that work over any Queryer or Execer.

``select`` and ``get`` are the core entry points:

    people = []
    select(cn, people, 'select id, name from person', record_type=Person)

    p = Person()
    get(cn, p, 'select id, name from person where id = ?', 7)

Both run on anything with a ``query(text, *args)`` method (`DB`, `Tx`,
`Stmt` or a caller's own object) and always close the cursor they open.
The ``*_verbose``, ``*_or_log`` and ``*_or_exit`` variants wrap the same
operations with a different failure policy; the core functions always raise.
"""
import logging
import pathlib
from collections.abc import MutableSequence
from typing import Any

from sqlrecord.descriptor import get_descriptor
from sqlrecord.exceptions import DatabaseError, DriverError
from sqlrecord.exceptions import InvalidDestinationError
from sqlrecord.protocols import CommandResult, Execer, Ext, Queryer
from sqlrecord.rows import Row, Rows, scan_all

__all__ = [
    'select',
    'get',
    'named_query',
    'named_exec',
    'named_select',
    'named_get',
    'load_file',
    'execute_verbose',
    'execute_or_log',
    'execute_or_exit',
    'select_verbose',
    'select_or_exit',
]

logger = logging.getLogger(__name__)

_FAILURES = (DatabaseError, *DriverError)


def _collection_record_type(dest: Any, record_type: type | None) -> type:
    """Validate a select destination and return its element type."""
    if not isinstance(dest, MutableSequence):
        raise InvalidDestinationError(
            f'Destination must be a mutable sequence, got {type(dest).__name__}')
    if record_type is None:
        record_type = getattr(dest, 'record_type', None)
    if record_type is None:
        raise InvalidDestinationError(
            'Element type unknown: pass record_type= or use a RecordList destination')
    if not isinstance(record_type, type):
        raise InvalidDestinationError(f'record_type must be a class, got {record_type!r}')
    return get_descriptor(record_type).record_type


_VALUE_TYPES = (bool, int, float, complex, str, bytes, bytearray, tuple, frozenset,
                list, dict, set)


def _check_record(dest: Any) -> None:
    if dest is None or isinstance(dest, (type, *_VALUE_TYPES)):
        raise InvalidDestinationError(
            f'Destination must be a record instance, got {dest!r}')
    get_descriptor(dest)


def select(q: Queryer, dest: MutableSequence, query: str, *args: Any,
           record_type: type | None = None) -> MutableSequence:
    """Run query and append one record per result row to dest.

    The destination is checked before the query runs. On a row error the
    records scanned so far remain in dest.
    """
    record_type = _collection_record_type(dest, record_type)
    with Rows.wrap(q.query(query, *args)) as rows:
        scan_all(rows, dest, record_type)
    return dest


def get(q: Queryer, dest: Any, query: str, *args: Any) -> Any:
    """Run query and scan its first row into dest.

    Raises NoRowsError when the query returns nothing. Further rows are
    ignored.
    """
    _check_record(dest)
    return Row(q.query(query, *args)).scan_record(dest)


def named_query(e: Ext, query: str, arg: Any) -> Any:
    """Bind ``:name`` parameters from arg, then query."""
    bound, args = e.bind_named(query, arg)
    return e.query(bound, *args)


def named_exec(e: Ext, query: str, arg: Any) -> CommandResult:
    """Bind ``:name`` parameters from arg, then execute."""
    bound, args = e.bind_named(query, arg)
    return e.execute(bound, *args)


def named_select(e: Ext, dest: MutableSequence, query: str, arg: Any,
                 record_type: type | None = None) -> MutableSequence:
    bound, args = e.bind_named(query, arg)
    return select(e, dest, bound, *args, record_type=record_type)


def named_get(e: Ext, dest: Any, query: str, arg: Any) -> Any:
    bound, args = e.bind_named(query, arg)
    return get(e, dest, bound, *args)


def load_file(e: Execer, path: str | pathlib.Path) -> CommandResult:
    """Execute the whole contents of a SQL file as a single command.

    The file is read into memory, so this suits schema setup rather than
    large data loads.
    """
    realpath = pathlib.Path(path).resolve()
    contents = realpath.read_text()
    logger.debug(f'Loading SQL file {realpath} ({len(contents)} bytes)')
    return e.execute(contents)


def execute_verbose(e: Execer, query: str, *args: Any) -> CommandResult:
    """Execute, logging the query and error before re-raising."""
    try:
        return e.execute(query, *args)
    except _FAILURES as exc:
        logger.error(f'{query} {args} {exc}')
        raise


def execute_or_log(e: Execer, query: str, *args: Any) -> CommandResult | None:
    """Execute, logging and discarding any error.

    Returns None on failure. Meant for experiments and scripts.
    """
    try:
        return e.execute(query, *args)
    except _FAILURES as exc:
        logger.warning(f'{query} {args} {exc}')
        return None


def execute_or_exit(e: Execer, query: str, *args: Any) -> CommandResult:
    """Execute, logging any error and exiting the process with status 1."""
    try:
        return e.execute(query, *args)
    except _FAILURES as exc:
        logger.critical(f'{query} {args} {exc}')
        raise SystemExit(1) from exc


def select_verbose(q: Queryer, dest: MutableSequence, query: str, *args: Any,
                   record_type: type | None = None) -> MutableSequence:
    """Select, logging the query and error before re-raising."""
    try:
        return select(q, dest, query, *args, record_type=record_type)
    except _FAILURES as exc:
        logger.error(f'{query} {exc}')
        raise


def select_or_exit(q: Queryer, dest: MutableSequence, query: str, *args: Any,
                   record_type: type | None = None) -> MutableSequence:
    """Select, logging any error and exiting the process with status 1."""
    try:
        return select(q, dest, query, *args, record_type=record_type)
    except _FAILURES as exc:
        logger.critical(f'{query} {exc}')
        raise SystemExit(1) from exc
