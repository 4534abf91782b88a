"""
Query surface shared by connections and transactions.
"""
import logging
import pathlib
import sqlite3
from abc import ABC, abstractmethod
from collections.abc import MutableSequence
from typing import Any

from sqlrecord import query as q
from sqlrecord.bind import bind_named, bind_type, rebind
from sqlrecord.protocols import CommandResult
from sqlrecord.rows import Row, Rows
from sqlrecord.utils import check_connection, dumpsql

__all__ = ['BaseExt', 'Stmt']

logger = logging.getLogger(__name__)


def _is_multi_statement(sql: str) -> bool:
    """Check if SQL contains multiple statements."""
    return ';' in sql and len([s for s in sql.split(';') if s.strip()]) > 1


def _split_statements(sql: str) -> list[str]:
    """Split SQLite script text into complete statements.

    Semicolons inside literals and trigger bodies do not end a statement.
    """
    statements, buf = [], ''
    for piece in sql.split(';'):
        buf = f'{buf};{piece}' if buf else piece
        if sqlite3.complete_statement(f'{buf};'):
            if buf.strip():
                statements.append(buf.strip())
            buf = ''
    if buf.strip():
        statements.append(buf.strip())
    return statements


class BaseExt(ABC):
    """Binder, Queryer and Execer on top of a DB-API connection.

    Subclasses supply the cursor and the dialect; everything else, including
    the record mapping shortcuts, lives here.
    """

    in_transaction = False

    @property
    @abstractmethod
    def driver_name(self) -> str:
        """Dialect name used for placeholder rewriting."""

    @abstractmethod
    def cursor(self) -> Any:
        """Return a new DB-API cursor."""

    @abstractmethod
    def addcall(self, elapsed: float) -> None:
        """Record one executed statement."""

    def rebind(self, query: str) -> str:
        """Rewrite ``?`` placeholders for this connection's driver."""
        return rebind(bind_type(self.driver_name), query)

    def bind_named(self, query: str, arg: Any) -> tuple[str, list[Any]]:
        """Compile ``:name`` placeholders against a mapping or record."""
        return bind_named(bind_type(self.driver_name), query, arg)

    @check_connection
    @dumpsql
    def query(self, query: str, *args: Any) -> Rows:
        """Run a query and return its open cursor.

        The caller owns the returned Rows and must close it.
        """
        cursor = self.cursor()
        try:
            if args:
                cursor.execute(query, args)
            else:
                cursor.execute(query)
        except Exception:
            cursor.close()
            raise
        return Rows(cursor)

    def query_row(self, query: str, *args: Any) -> Row:
        return Row(self.query(query, *args))

    @check_connection
    @dumpsql
    def execute(self, query: str, *args: Any) -> CommandResult:
        """Execute a command and return its row count and last row id.
        """
        cursor = self.cursor()
        try:
            if args:
                cursor.execute(query, args)
            elif self.driver_name == 'sqlite' and _is_multi_statement(query):
                if self.in_transaction:
                    # executescript would commit the open transaction first
                    for statement in _split_statements(query):
                        cursor.execute(statement)
                else:
                    cursor.executescript(query)
            else:
                cursor.execute(query)
            result = CommandResult(cursor.rowcount, getattr(cursor, 'lastrowid', None))
        finally:
            cursor.close()
        logger.debug(f'Command affected {result.rowcount} rows')
        return result

    def select(self, dest: MutableSequence, query: str, *args: Any,
               record_type: type | None = None) -> MutableSequence:
        return q.select(self, dest, query, *args, record_type=record_type)

    def get(self, dest: Any, query: str, *args: Any) -> Any:
        return q.get(self, dest, query, *args)

    def named_query(self, query: str, arg: Any) -> Rows:
        return q.named_query(self, query, arg)

    def named_exec(self, query: str, arg: Any) -> CommandResult:
        return q.named_exec(self, query, arg)

    def named_select(self, dest: MutableSequence, query: str, arg: Any,
                     record_type: type | None = None) -> MutableSequence:
        return q.named_select(self, dest, query, arg, record_type=record_type)

    def named_get(self, dest: Any, query: str, arg: Any) -> Any:
        return q.named_get(self, dest, query, arg)

    def load_file(self, path: str | pathlib.Path) -> CommandResult:
        return q.load_file(self, path)

    def prepare(self, query: str) -> 'Stmt':
        """Return a statement bound to this connection or transaction."""
        return Stmt(self, query)


class _StmtQueryer:
    """Queryer/Execer view of a Stmt; the query text passed in is ignored."""

    def __init__(self, stmt: 'Stmt') -> None:
        self.stmt = stmt

    def query(self, query: str, *args: Any) -> Rows:
        return self.stmt.query(*args)

    def execute(self, query: str, *args: Any) -> CommandResult:
        return self.stmt.execute(*args)


class Stmt:
    """A query fixed at creation and run with varying arguments.

    Drivers handle server-side preparation themselves (psycopg prepares
    statements it sees repeatedly), so this only carries the text.
    """

    def __init__(self, ext: BaseExt, query: str) -> None:
        self.ext = ext
        self.sql = query

    def __repr__(self) -> str:
        return f'Stmt({self.sql!r})'

    def query(self, *args: Any) -> Rows:
        return self.ext.query(self.sql, *args)

    def query_row(self, *args: Any) -> Row:
        return Row(self.query(*args))

    def execute(self, *args: Any) -> CommandResult:
        return self.ext.execute(self.sql, *args)

    def select(self, dest: MutableSequence, *args: Any,
               record_type: type | None = None) -> MutableSequence:
        return q.select(_StmtQueryer(self), dest, self.sql, *args, record_type=record_type)

    def get(self, dest: Any, *args: Any) -> Any:
        return q.get(_StmtQueryer(self), dest, self.sql, *args)

    def execute_verbose(self, *args: Any) -> CommandResult:
        return q.execute_verbose(_StmtQueryer(self), self.sql, *args)

    def execute_or_log(self, *args: Any) -> CommandResult | None:
        return q.execute_or_log(_StmtQueryer(self), self.sql, *args)

    def execute_or_exit(self, *args: Any) -> CommandResult:
        return q.execute_or_exit(_StmtQueryer(self), self.sql, *args)
