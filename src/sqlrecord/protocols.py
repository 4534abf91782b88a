"""
Capability interfaces the query functions depend on.

Anything with a matching ``query`` method is a Queryer, anything with a
matching ``execute`` is an Execer; `DB`, `Tx` and `Stmt` implement both.
"""
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

__all__ = [
    'CommandResult',
    'Cursor',
    'Queryer',
    'Execer',
    'Binder',
    'Ext',
    'Preparer',
]


@dataclass(frozen=True)
class CommandResult:
    """Summary of an executed command."""
    rowcount: int
    lastrowid: Any = None


@runtime_checkable
class Cursor(Protocol):
    """The subset of a PEP-249 cursor used for scanning."""

    @property
    def description(self) -> Any: ...

    def fetchone(self) -> Any: ...

    def close(self) -> None: ...


@runtime_checkable
class Queryer(Protocol):
    def query(self, query: str, *args: Any) -> Cursor: ...


@runtime_checkable
class Execer(Protocol):
    def execute(self, query: str, *args: Any) -> CommandResult: ...


@runtime_checkable
class Binder(Protocol):
    @property
    def driver_name(self) -> str: ...

    def rebind(self, query: str) -> str: ...

    def bind_named(self, query: str, arg: Any) -> tuple[str, list[Any]]: ...


@runtime_checkable
class Ext(Binder, Queryer, Execer, Protocol):
    """Something that can bind, query and execute (DB, Tx)."""


@runtime_checkable
class Preparer(Protocol):
    def prepare(self, query: str) -> Any: ...
