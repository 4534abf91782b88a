"""
Fixtures for SQLite-specific integration tests.
"""
import pytest
import sqlrecord


@pytest.fixture
def sqlite_file_conn(tmp_path):
    """File-based SQLite connection fixture for testing persistence across connections."""
    db_file = tmp_path / 'test_sqlite.db'

    conn = sqlrecord.connect({
        'drivername': 'sqlite',
        'database': str(db_file)
    })

    create_table = """
    CREATE TABLE person (
        id INTEGER PRIMARY KEY,
        name TEXT NOT NULL UNIQUE
    )
    """
    conn.execute(create_table)
    conn.execute("INSERT INTO person (id, name) VALUES (1, 'Alice'), (2, 'Bob')")

    yield conn

    conn.close()
