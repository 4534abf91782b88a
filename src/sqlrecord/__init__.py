"""
Row to record mapping for PostgreSQL and SQLite.

Query results are scanned into dataclass records by matching column names
to field names (lower-cased) or to an explicit ``db`` field tag:

    @dataclass
    class Person:
        ID: int = column('id')
        Name: str = ''

    cn = connect(drivername='sqlite', database=':memory:')
    people = select(cn, [], 'select id, name from person', record_type=Person)

All query functions can be called either as:
- Module functions: sqlrecord.select(cn, dest, sql, *args)
- DB/Tx methods: cn.select(dest, sql, *args)

The module functions accept any object with a ``query`` method, not just a
`DB`.
"""
__version__ = '0.1.0'

from sqlrecord.base import Stmt
from sqlrecord.bind import BindType, bind_named, bind_type, rebind
from sqlrecord.connection import DB, connect
from sqlrecord.descriptor import RecordDescriptor, column, get_descriptor
from sqlrecord.exceptions import BindError, ConnectionFailure, DatabaseError
from sqlrecord.exceptions import DbConnectionError, DuplicateColumnError
from sqlrecord.exceptions import IntegrityError, InvalidDestinationError
from sqlrecord.exceptions import MappingError, NoRowsError, NotAStructError
from sqlrecord.exceptions import OperationalError, ProgrammingError
from sqlrecord.exceptions import QueryError, ScanError, UnmappedColumnError
from sqlrecord.exceptions import ValidationError
from sqlrecord.options import DatabaseOptions
from sqlrecord.protocols import Binder, CommandResult, Execer, Ext, Queryer
from sqlrecord.query import execute_or_exit, execute_or_log, execute_verbose
from sqlrecord.query import get, load_file, named_exec, named_get
from sqlrecord.query import named_query, named_select, select, select_or_exit
from sqlrecord.query import select_verbose
from sqlrecord.rows import RecordList, Row, Rows, scan_all
from sqlrecord.transaction import Tx

__all__ = [
    'connect',
    'DB',
    'Tx',
    'Stmt',
    'DatabaseOptions',
    'column',
    'get_descriptor',
    'RecordDescriptor',
    'RecordList',
    'Rows',
    'Row',
    'scan_all',
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
    'BindType',
    'bind_type',
    'rebind',
    'bind_named',
    'Queryer',
    'Execer',
    'Binder',
    'Ext',
    'CommandResult',
    'DatabaseError',
    'ConnectionFailure',
    'QueryError',
    'BindError',
    'ValidationError',
    'MappingError',
    'InvalidDestinationError',
    'NotAStructError',
    'DuplicateColumnError',
    'UnmappedColumnError',
    'NoRowsError',
    'ScanError',
    'DbConnectionError',
    'IntegrityError',
    'ProgrammingError',
    'OperationalError',
]
