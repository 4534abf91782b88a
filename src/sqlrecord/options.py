import pathlib
import sys
from dataclasses import dataclass, fields
from typing import Any

__all__ = ['DatabaseOptions', 'SUPPORTED_DIALECTS', 'load_options']

SUPPORTED_DIALECTS = ('postgresql', 'sqlite')

_REQUIRED = {
    'postgresql': ('hostname', 'username', 'database'),
    'sqlite': ('database',),
}


def _scriptname() -> str | None:
    name = pathlib.Path(sys.argv[0]).stem if sys.argv and sys.argv[0] else ''
    return name or None


@dataclass
class DatabaseOptions:
    """Options

    supported driver names: `postgresql`, `sqlite`

    Connection pooling options:
    - use_pool: Whether to use connection pooling (default: False)
    - pool_max_connections: Maximum connections in pool (default: 5)
    - pool_max_idle_time: Maximum seconds a connection can be idle (default: 300)
    - pool_wait_timeout: Maximum seconds to wait for a connection (default: 30)
    """
    drivername: str = 'postgresql'
    hostname: str = None
    username: str = None
    password: str = None
    database: str = None
    port: int = 0
    timeout: int = 0
    appname: str = None
    check_connection: bool = True
    use_pool: bool = False
    pool_max_connections: int = 5
    pool_max_idle_time: int = 300
    pool_wait_timeout: int = 30

    def __post_init__(self):
        if self.drivername not in SUPPORTED_DIALECTS:
            raise ValueError(f'drivername must be one of: {list(SUPPORTED_DIALECTS)}')
        self.appname = self.appname or _scriptname() or 'python_console'
        missing = [name for name in _REQUIRED[self.drivername] if not getattr(self, name)]
        if missing:
            raise ValueError(f'{self.drivername} requires options: {missing}')


def load_options(options: DatabaseOptions | dict[str, Any] | None = None,
                 **kwargs: Any) -> DatabaseOptions:
    """Build DatabaseOptions from an options object, a dict and/or keywords.

    Keywords override values from the first argument. Unknown keys raise
    ValueError.
    """
    if isinstance(options, DatabaseOptions):
        values = {f.name: getattr(options, f.name) for f in fields(DatabaseOptions)}
    else:
        values = dict(options or {})
    values.update(kwargs)
    known = {f.name for f in fields(DatabaseOptions)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ValueError(f'Unknown database options: {unknown}')
    return DatabaseOptions(**values)
