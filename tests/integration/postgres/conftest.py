"""
Fixtures for PostgreSQL-specific integration tests.
"""
import pytest


@pytest.fixture
def people_sql(psql_conn):
    """Person query with the connection's own placeholder style."""
    return psql_conn.rebind('select id, name from person where id >= ? order by id')
