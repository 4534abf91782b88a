"""
Connections: `connect()` opens a `DB` over a SQLAlchemy engine shared per
options value.

Besides plain ``query``/``execute`` a `DB` offers the record mapping
shortcuts:
- select(dest, sql, *args) - Append one record per row to dest
- get(dest, sql, *args) - Scan the first row into a record
- named_exec(sql, arg) - Execute with ``:name`` parameters
- begin() - Start a transaction
"""
import atexit
import logging
import sqlite3
import threading
from collections.abc import Callable
from typing import Any, Self

import sqlalchemy as sa
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool

from sqlrecord.base import BaseExt
from sqlrecord.exceptions import ConnectionFailure, DbConnectionError
from sqlrecord.options import DatabaseOptions, load_options
from sqlrecord.transaction import Tx
from sqlrecord.utils import configure_connection, get_dialect_name
from sqlrecord.utils import get_raw_connection

__all__ = [
    'DB',
    'connect',
    'create_url_from_options',
    'get_engine_for_options',
    'dispose_all_engines',
]

logger = logging.getLogger(__name__)

_engines: dict[tuple, Engine] = {}
_engines_lock = threading.RLock()


def create_url_from_options(options: DatabaseOptions) -> sa.URL:
    """SQLAlchemy URL for the options; postgresql goes through psycopg 3."""
    if options.drivername == 'sqlite':
        return sa.URL.create('sqlite', database=options.database)
    query = {'application_name': options.appname}
    if options.timeout:
        query['connect_timeout'] = str(options.timeout)
    return sa.URL.create(
        'postgresql+psycopg',
        username=options.username,
        password=options.password,
        host=options.hostname,
        port=options.port or None,
        database=options.database,
        query=query,
    )


def _engine_kwargs(options: DatabaseOptions) -> dict[str, Any]:
    kwargs: dict[str, Any] = {}
    if options.drivername == 'sqlite':
        kwargs['connect_args'] = {
            'detect_types': sqlite3.PARSE_DECLTYPES | sqlite3.PARSE_COLNAMES,
            'check_same_thread': False,
        }
    if options.use_pool:
        kwargs.update(pool_size=options.pool_max_connections,
                      pool_recycle=options.pool_max_idle_time,
                      pool_timeout=options.pool_wait_timeout,
                      pool_pre_ping=True)
    else:
        kwargs['poolclass'] = NullPool
    return kwargs


def get_engine_for_options(options: DatabaseOptions,
                           engine_factory: Callable[..., Engine] = sa.create_engine,
                           **kwargs: Any) -> Engine:
    """Return the shared engine for these options, creating it once.

    Extra keyword arguments go to the engine factory on creation only.
    """
    key = (str(options), repr(sorted(kwargs.items())))
    with _engines_lock:
        engine = _engines.get(key)
        if engine is None:
            engine = engine_factory(create_url_from_options(options),
                                    **{**_engine_kwargs(options), **kwargs})
            _engines[key] = engine
            logger.debug(f'Created {options.drivername} engine ({len(_engines)} registered)')
        return engine


def dispose_all_engines() -> None:
    with _engines_lock:
        for engine in _engines.values():
            engine.dispose()
        _engines.clear()


atexit.register(dispose_all_engines)


class DB(BaseExt):
    """A SQLAlchemy connection with the query surface and call statistics.

    ``calls`` and ``time`` count every query and command run through it.
    """

    def __init__(self, sa_connection: sa.engine.Connection,
                 options: DatabaseOptions | None = None) -> None:
        self.sa_connection = sa_connection
        self.engine = sa_connection.engine
        self.options = options
        self.dbapi_connection = sa_connection.connection
        self._dialect = get_dialect_name(sa_connection)
        self.calls = 0
        self.time = 0.0
        self.in_transaction = False

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        self.close()

    def __repr__(self) -> str:
        return f'DB({self._dialect}, calls={self.calls})'

    @property
    def driver_name(self) -> str:
        return self._dialect

    @property
    def dialect(self) -> str:
        return self._dialect

    @property
    def driver_connection(self) -> Any:
        return get_raw_connection(self.dbapi_connection)

    @property
    def closed(self) -> bool:
        return self.sa_connection.closed

    def cursor(self) -> Any:
        """Get a DB-API cursor, reconnecting if the connection was closed."""
        if self.sa_connection.closed:
            self.sa_connection = self.engine.connect()
            self.dbapi_connection = self.sa_connection.connection
            configure_connection(self.driver_connection, self._dialect)
            logger.debug('Reopened closed connection')
        return self.dbapi_connection.cursor()

    def addcall(self, elapsed: float) -> None:
        """Track execution statistics
        """
        self.time += elapsed
        self.calls += 1

    def begin(self) -> Tx:
        """Start a transaction. Use it as a context manager or call
        commit/rollback yourself.
        """
        return Tx(self).begin()

    def ping(self) -> None:
        """Run a trivial query, raising ConnectionFailure when it fails."""
        try:
            with self.query('SELECT 1') as rows:
                rows.next_row()
        except DbConnectionError as exc:
            raise ConnectionFailure(f'Could not reach {self._dialect} database: {exc}') from exc

    def close(self) -> None:
        """Close the underlying connection."""
        if not self.sa_connection.closed:
            self.sa_connection.close()
            logger.debug(f'Connection closed: {self.calls} queries in {self.time:.2f}s '
                         f'(avg: {self.time/max(1, self.calls):.3f}s per query)')


def connect(options: DatabaseOptions | dict[str, Any] | None = None, **kwargs: Any) -> DB:
    """Open a connection.

    Accepts DatabaseOptions, a dict of option values and/or keyword options.
    The connection is checked with a trivial query unless check_connection
    is off.

    >>> cn = connect(drivername='sqlite', database=':memory:')
    >>> cn.execute('create table t (a int)').rowcount
    -1
    >>> cn.close()
    """
    options = load_options(options, **kwargs)
    engine = get_engine_for_options(options)
    try:
        sa_connection = engine.connect()
    except sa.exc.DBAPIError as exc:
        raise ConnectionFailure(f'Could not connect to {options.drivername}: {exc}') from exc
    cn = DB(sa_connection, options)
    configure_connection(cn.driver_connection, cn.dialect)
    if options.check_connection:
        cn.ping()
    logger.debug(f'Connected to {options.drivername} database {options.database}')
    return cn
