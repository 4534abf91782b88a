"""
Driver helpers: dialect detection, auto-commit switching and SQL logging.
"""
import logging
import time
from functools import wraps
from typing import Any

from sqlrecord.exceptions import DbConnectionError, is_retryable_error

logger = logging.getLogger(__name__)

__all__ = [
    'check_connection',
    'get_dialect_name',
    'get_raw_connection',
    'configure_connection',
    'enable_auto_commit',
    'disable_auto_commit',
    'dumpsql',
]


def get_dialect_name(obj: Any) -> str:
    """Get dialect name for a database connection or engine.

    Raises
        AttributeError: If dialect cannot be determined
    """
    if hasattr(obj, 'dialect'):
        dialect = obj.dialect
        if isinstance(dialect, str):
            return dialect.lower()
        return str(dialect.name).lower()

    if hasattr(obj, 'engine') and hasattr(obj.engine, 'dialect'):
        return str(obj.engine.dialect.name).lower()

    if hasattr(obj, 'dbapi_connection'):
        return get_dialect_name(obj.dbapi_connection)

    type_name = f'{type(obj).__module__}.{type(obj).__name__}'
    if 'psycopg' in type_name:
        return 'postgresql'
    if 'sqlite3' in type_name:
        return 'sqlite'

    raise AttributeError(f'Cannot determine dialect for {type(obj)}')


def get_raw_connection(connection: Any) -> Any:
    """Extract the raw DBAPI connection from a pool proxy."""
    return getattr(connection, 'driver_connection', None) or connection


def enable_auto_commit(raw_conn: Any, dialect: str) -> None:
    if dialect == 'sqlite':
        raw_conn.isolation_level = None
    else:
        raw_conn.autocommit = True


def disable_auto_commit(raw_conn: Any, dialect: str) -> None:
    if dialect == 'sqlite':
        raw_conn.isolation_level = 'DEFERRED'
    else:
        raw_conn.autocommit = False


def configure_connection(raw_conn: Any, dialect: str) -> None:
    """Apply per-dialect session settings to a fresh connection.

    Connections run in auto-commit mode outside transactions.
    """
    if dialect == 'sqlite':
        raw_conn.execute('PRAGMA foreign_keys = ON')
    enable_auto_commit(raw_conn, dialect)
    logger.debug(f'Configured {dialect} connection')


def check_connection(func=None, *, max_retries=3, retry_delay=1,
                     retry_errors=None, retry_backoff=1.5, sleep_func=time.sleep):
    """Connection retry decorator with backoff.

    Retries the wrapped call when it fails with one of retry_errors (default:
    DbConnectionError) whose message looks transient. Supports both
    @check_connection and @check_connection() syntax.
    """
    def decorator(f):
        @wraps(f)
        def inner(*args, **kwargs):
            error_types = retry_errors if retry_errors is not None else DbConnectionError

            tries = 0
            delay = retry_delay
            while True:
                try:
                    return f(*args, **kwargs)
                except error_types as err:
                    tries += 1
                    if not is_retryable_error(err):
                        raise
                    if tries >= max_retries:
                        logger.error(f'Maximum retries ({max_retries}) exceeded: {err}')
                        raise
                    logger.warning(f'Connection error (attempt {tries}/{max_retries}): {err}')
                    sleep_func(delay)
                    delay *= retry_backoff

        return inner

    if func is None:
        return decorator
    return decorator(func)


def dumpsql(func):
    """Decorator for logging SQL queries and parameters."""
    @wraps(func)
    def wrapper(self, operation: str, *args: Any, **kwargs: Any):
        start = time.time()
        logger.debug(f'SQL:\n{operation}\nargs: {args}')
        try:
            return func(self, operation, *args, **kwargs)
        except Exception:
            logger.error(f'Error with query:\nSQL:\n{operation}\nargs: {args}')
            raise
        finally:
            elapsed = time.time() - start
            self.addcall(elapsed)
            logger.debug(f'Query time: {elapsed:.4f}s')
    return wrapper
