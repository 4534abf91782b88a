"""
Bindvar rewriting for the placeholder styles of different drivers.

Queries are written with ``?`` positional placeholders or ``:name`` named
placeholders and rewritten for the driver in use:

- `rebind()` - Convert ``?`` to the driver's positional style
- `bind_named()` - Compile ``:name`` placeholders to positional ones plus an
  argument list taken from a mapping or a record

String literals are never rewritten and ``::`` casts are not parameters.
"""
import itertools
import logging
import re
from collections.abc import Mapping
from enum import Enum, auto
from typing import Any

from sqlrecord.descriptor import get_descriptor
from sqlrecord.exceptions import BindError, NotAStructError

__all__ = ['BindType', 'bind_type', 'rebind', 'bind_named']

logger = logging.getLogger(__name__)


class BindType(Enum):
    """Positional placeholder styles."""
    UNKNOWN = auto()
    QUESTION = auto()   # ?
    DOLLAR = auto()     # $1
    FORMAT = auto()     # %s
    NAMED = auto()      # :arg1


_DRIVER_BIND_TYPES = {
    'sqlite': BindType.QUESTION,
    'sqlite3': BindType.QUESTION,
    'mysql': BindType.QUESTION,
    'postgresql': BindType.FORMAT,
    'postgres': BindType.FORMAT,
    'psycopg': BindType.FORMAT,
    'pq': BindType.DOLLAR,
    'pgx': BindType.DOLLAR,
    'oracle': BindType.NAMED,
    'oci8': BindType.NAMED,
}

_TOKENIZE = re.compile(r"""
    (?P<string>'(?:[^']|'')*'|"(?:[^"]|"")*")
    |(?P<cast>::)
    |(?P<named>(?<![:\w]):(?P<pname>[A-Za-z_]\w*))
    |(?P<qmark>\?)
    |(?P<percent>%)
""", re.VERBOSE)


def bind_type(driver_name: str) -> BindType:
    """Return the placeholder style for a driver or dialect name."""
    return _DRIVER_BIND_TYPES.get((driver_name or '').lower(), BindType.UNKNOWN)


def _placeholder(bindtype: BindType, n: int) -> str:
    if bindtype is BindType.DOLLAR:
        return f'${n}'
    if bindtype is BindType.FORMAT:
        return '%s'
    if bindtype is BindType.NAMED:
        return f':arg{n}'
    return '?'


def rebind(bindtype: BindType, query: str) -> str:
    """Rewrite ``?`` placeholders in query for the given style.

    With the FORMAT style literal percent signs are doubled, but only when
    the query has placeholders since drivers leave parameterless queries
    alone.

    >>> rebind(BindType.DOLLAR, 'select * from t where a = ? and b = ?')
    'select * from t where a = $1 and b = $2'
    >>> rebind(BindType.FORMAT, "select '?%' where a = ?")
    "select '?%%' where a = %s"
    """
    if bindtype in {BindType.QUESTION, BindType.UNKNOWN}:
        return query
    if not any(m.group('qmark') for m in _TOKENIZE.finditer(query)):
        return query

    counter = itertools.count(1)
    escape = bindtype is BindType.FORMAT

    def replace(match):
        if match.group('qmark'):
            return _placeholder(bindtype, next(counter))
        if escape and match.group('percent'):
            return '%%'
        if escape and match.group('string'):
            return match.group(0).replace('%', '%%')
        return match.group(0)

    return _TOKENIZE.sub(replace, query)


def _arg_lookup(arg: Any):
    """Return a name -> value accessor for a mapping or record argument."""
    if isinstance(arg, Mapping):
        def lookup(name):
            try:
                return arg[name]
            except KeyError:
                raise BindError(f'Could not find name {name!r} in argument map') from None
        return lookup

    try:
        descriptor = get_descriptor(arg)
    except NotAStructError as exc:
        raise BindError(f'Named arguments must be a mapping or record, got {type(arg).__name__}') from exc

    def lookup(name):
        pos = descriptor.position(name)
        if pos is None:
            raise BindError(f'Could not find name {name!r} in {descriptor.record_type.__name__}')
        return getattr(arg, descriptor.fields[pos].name)
    return lookup


def bind_named(bindtype: BindType, query: str, arg: Any) -> tuple[str, list[Any]]:
    """Compile ``:name`` placeholders into positional ones.

    Returns the rewritten query and the argument values in placeholder order.
    A name used twice is bound twice.

    >>> bind_named(BindType.QUESTION, 'select * from t where a = :a and b = :b', {'a': 1, 'b': 2})
    ('select * from t where a = ? and b = ?', [1, 2])
    """
    lookup = _arg_lookup(arg)
    names: list[str] = []

    def replace(match):
        if match.group('named'):
            names.append(match.group('pname'))
            return '?'
        return match.group(0)

    compiled = _TOKENIZE.sub(replace, query)
    values = [lookup(name) for name in names]
    logger.debug(f'Bound {len(names)} named parameters: {names}')
    return rebind(bindtype, compiled), values
