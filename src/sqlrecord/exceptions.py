"""
Exception classes for the record mapping layer and its access collaborators.
"""
import re
import sqlite3

import psycopg

RETRYABLE_PATTERNS = [
    # SSL/TLS errors
    r'ssl',
    r'tls',
    # Connection drops
    r'connection.*(closed|reset|refused|lost|terminated|broken)',
    r'server closed',
    r'eof detected',
    r'broken pipe',
    # Timeouts
    r'timeout',
    r'timed out',
    # Network issues
    r'could not connect',
    r'no route to host',
    r'network.*(unreachable|error)',
    # Database unavailable
    r'database.*unavailable',
    r'database is locked',
    r'too many connections',
]

_RETRYABLE_REGEX = re.compile('|'.join(RETRYABLE_PATTERNS), re.IGNORECASE)


def is_retryable_error(exc: BaseException) -> bool:
    """Check if an exception represents a transient error worth retrying.

    Syntax errors, missing tables and constraint violations fail the same way
    on a second attempt and are not retryable.
    """
    return bool(_RETRYABLE_REGEX.search(str(exc)))


class DatabaseError(Exception):
    """Base class for all sqlrecord errors.
    """


class ConnectionFailure(DatabaseError):
    """Error establishing or maintaining database connection.
    """


class QueryError(DatabaseError):
    """Error in query syntax or execution.
    """


class BindError(QueryError):
    """A named parameter could not be bound to a value.
    """


class ValidationError(DatabaseError):
    """Error in input validation.
    """


class MappingError(DatabaseError):
    """Base class for errors raised while mapping rows onto records.
    """


class InvalidDestinationError(MappingError):
    """Destination is not an addressable record or collection of records.
    """


class NotAStructError(MappingError):
    """Record type is not a flat aggregate (a dataclass).
    """


class DuplicateColumnError(NotAStructError):
    """Two fields of one record type resolve to the same column name.
    """

    def __init__(self, record_type: type, column: str, first: str, second: str) -> None:
        self.record_type = record_type
        self.column = column
        super().__init__(
            f'{record_type.__name__}: fields {first!r} and {second!r} both map to column {column!r}')


class UnmappedColumnError(MappingError):
    """A result column has no corresponding field in the record type.
    """

    def __init__(self, column: str, record_type: type | None = None) -> None:
        self.column = column
        self.record_type = record_type
        where = f' in {record_type.__name__}' if record_type is not None else ''
        super().__init__(f'Could not find name {column!r}{where}')


class NoRowsError(MappingError):
    """Single-row fetch found zero rows.
    """


class ScanError(MappingError):
    """Underlying value decode failed while reading a row.
    """


DbConnectionError = (
    psycopg.OperationalError,
    psycopg.InterfaceError,
    sqlite3.OperationalError,
    sqlite3.InterfaceError,
    ConnectionFailure,
    )

IntegrityError = (
    psycopg.IntegrityError,
    sqlite3.IntegrityError,
    )

ProgrammingError = (
    psycopg.ProgrammingError,
    psycopg.DatabaseError,
    sqlite3.ProgrammingError,
    sqlite3.DatabaseError,
    QueryError,
    )

OperationalError = (
    psycopg.OperationalError,
    sqlite3.OperationalError,
    )

DriverError = (
    psycopg.Error,
    sqlite3.Error,
    )
