"""
Commands, named parameters, statements and SQL files against SQLite.
"""
import sqlite3

import pytest
import sqlrecord
from sqlrecord.exceptions import BindError

from tests.fixtures.records import Person, Place


def count(cn, table):
    return cn.query_row(f'SELECT count(*) FROM {table}').scan()[0]


def test_execute_returns_rowcount(sqlite_conn):
    result = sqlite_conn.execute('UPDATE person SET name = upper(name) WHERE id < ?', 3)
    assert result.rowcount == 2


def test_execute_lastrowid(sqlite_conn):
    result = sqlite_conn.execute('INSERT INTO person (name) VALUES (?)', 'Dee')
    assert result.lastrowid == 4


def test_execute_integrity_error(sqlite_conn):
    with pytest.raises(sqlite3.IntegrityError):
        sqlite_conn.execute('INSERT INTO person (id, name) VALUES (?, ?)', 9, 'Alice')
    assert count(sqlite_conn, 'person') == 3


def test_named_exec_with_record(sqlite_conn):
    sqlite_conn.named_exec('INSERT INTO person (id, name) VALUES (:id, :name)', Person(4, 'Dee'))
    assert sqlite_conn.get(Person(), 'SELECT * FROM person WHERE id = 4') == Person(4, 'Dee')


def test_named_exec_with_mapping(sqlite_conn):
    sqlrecord.named_exec(sqlite_conn, 'UPDATE place SET city = :city WHERE country = :country',
                         {'city': 'Victoria', 'country': 'Hong Kong'})
    place = sqlite_conn.get(Place(), "SELECT * FROM place WHERE country = 'Hong Kong'")
    assert place.City == 'Victoria'


def test_named_select_and_get(sqlite_conn):
    people = sqlite_conn.named_select([], 'SELECT id, name FROM person WHERE name = :name',
                                      {'name': 'Bob'}, record_type=Person)
    assert people == [Person(2, 'Bob')]
    p = sqlite_conn.named_get(Person(), 'SELECT id, name FROM person WHERE id = :id', {'id': 3})
    assert p.Name == 'Charlie'


def test_named_missing_parameter(sqlite_conn):
    with pytest.raises(BindError):
        sqlite_conn.named_exec('DELETE FROM person WHERE id = :id', {'name': 'Bob'})
    assert count(sqlite_conn, 'person') == 3


def test_rebind_is_noop_for_sqlite(sqlite_conn):
    sql = 'SELECT * FROM person WHERE id = ?'
    assert sqlite_conn.rebind(sql) == sql


class TestStmt:

    def test_prepared_get_and_select(self, sqlite_conn):
        stmt = sqlite_conn.prepare('SELECT id, name FROM person WHERE id >= ? ORDER BY id')
        assert stmt.get(Person(), 3) == Person(3, 'Charlie')
        assert [p.ID for p in stmt.select([], 2, record_type=Person)] == [2, 3]

    def test_prepared_execute(self, sqlite_conn):
        stmt = sqlite_conn.prepare('INSERT INTO person (name) VALUES (?)')
        for name in ('Dee', 'Eve'):
            stmt.execute(name)
        assert count(sqlite_conn, 'person') == 5

    def test_prepared_query_row(self, sqlite_conn):
        stmt = sqlite_conn.prepare('SELECT name FROM person WHERE id = ?')
        assert stmt.query_row(2).scan() == ('Bob',)

    def test_execute_or_log_on_failure(self, sqlite_conn):
        stmt = sqlite_conn.prepare('INSERT INTO person (id, name) VALUES (?, ?)')
        assert stmt.execute_or_log(1, 'Duplicate') is None


def test_load_file(sqlite_conn, tmp_path):
    path = tmp_path / 'extra.sql'
    path.write_text("""
    CREATE TABLE pet (name TEXT NOT NULL, owner INTEGER REFERENCES person(id));
    INSERT INTO pet (name, owner) VALUES ('Rex', 1), ('Tom', 2);
    """)
    sqlite_conn.load_file(path)
    assert count(sqlite_conn, 'pet') == 2


def test_foreign_keys_enforced(sqlite_conn):
    sqlite_conn.execute('CREATE TABLE pet (name TEXT, owner INTEGER REFERENCES person(id))')
    with pytest.raises(sqlite3.IntegrityError):
        sqlite_conn.execute('INSERT INTO pet (name, owner) VALUES (?, ?)', 'Rex', 99)


def test_reopens_closed_connection(sqlite_file_conn):
    sqlite_file_conn.close()
    assert sqlite_file_conn.closed
    people = sqlite_file_conn.select([], 'SELECT * FROM person ORDER BY id', record_type=Person)
    assert [p.Name for p in people] == ['Alice', 'Bob']
