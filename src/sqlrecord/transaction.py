"""
Transactions over a `DB` connection.
"""
import logging
import threading
from typing import Any

from sqlrecord.base import BaseExt, Stmt
from sqlrecord.exceptions import ValidationError
from sqlrecord.utils import disable_auto_commit, enable_auto_commit

logger = logging.getLogger(__name__)

__all__ = ['Tx']

_local = threading.local()


def _active_transactions() -> set[int]:
    if not hasattr(_local, 'active_transactions'):
        _local.active_transactions = set()
    return _local.active_transactions


class Tx(BaseExt):
    """A transaction with the same query surface as its connection.

    State is tracked per thread, so each thread may run its own transaction
    but nested transactions on one connection within a thread are rejected.

    Examples
        with cn.begin() as tx:
            tx.execute('delete from ...', args)
            tx.select(people, 'select ...', record_type=Person)
    """

    def __init__(self, db: Any) -> None:
        self.db = db
        self._active = False

    def __repr__(self) -> str:
        state = 'active' if self._active else 'done'
        return f'Tx({self.db!r}, {state})'

    def __enter__(self) -> 'Tx':
        if not self._active:
            self.begin()
        return self

    def __exit__(self, exc_type: type | None, value: Exception | None, traceback: Any | None) -> None:
        if not self._active:
            return
        if exc_type is not None:
            logger.warning('Rolling back the current transaction')
            self.rollback()
        else:
            self.commit()

    @property
    def driver_name(self) -> str:
        return self.db.driver_name

    @property
    def active(self) -> bool:
        return self._active

    @property
    def in_transaction(self) -> bool:
        return self.db.in_transaction

    def cursor(self) -> Any:
        return self.db.cursor()

    def addcall(self, elapsed: float) -> None:
        self.db.addcall(elapsed)

    def begin(self) -> 'Tx':
        active = _active_transactions()
        if id(self.db) in active:
            raise RuntimeError('Nested transactions are not supported')
        disable_auto_commit(self.db.driver_connection, self.db.dialect)
        active.add(id(self.db))
        self.db.in_transaction = True
        self._active = True
        logger.debug(f'Started transaction for connection {id(self.db)}')
        return self

    def commit(self) -> None:
        self._finish('commit')

    def rollback(self) -> None:
        self._finish('rollback')

    def _finish(self, action: str) -> None:
        if not self._active:
            raise ValidationError('Transaction has already been committed or rolled back')
        try:
            getattr(self.db.driver_connection, action)()
            logger.debug(f'Transaction {action} for connection {id(self.db)}')
        finally:
            _active_transactions().discard(id(self.db))
            enable_auto_commit(self.db.driver_connection, self.db.dialect)
            self.db.in_transaction = False
            self._active = False

    def stmt(self, stmt: Stmt) -> Stmt:
        """Return a copy of a statement that runs inside this transaction."""
        return Stmt(self, stmt.sql)
