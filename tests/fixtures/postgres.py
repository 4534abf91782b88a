import logging

import pytest
import sqlrecord
from testcontainers.postgres import PostgresContainer

logger = logging.getLogger(__name__)

POSTGRESQL = {
    'drivername': 'postgresql',
    'username': 'postgres',
    'password': 'postgres',
    'database': 'test_db',
    'timeout': 30,
}


def start_container():
    """Start a PostgreSQL container, skipping the caller when none can run.

    Both creating the container (which opens the Docker client) and starting
    it fail without a container runtime.
    """
    try:
        container = PostgresContainer(
            image='postgres:16',
            username=POSTGRESQL['username'],
            password=POSTGRESQL['password'],
            dbname=POSTGRESQL['database'],
        )
        container.start()
    except Exception as e:
        pytest.skip(f'PostgreSQL container unavailable: {e}')
    return container


@pytest.fixture(scope='session')
def psql_docker(request):
    """Session-scoped PostgreSQL container using testcontainers.

    Testcontainers assigns a random available port and waits for the
    database to be ready.
    """
    container = start_container()

    def finalizer():
        try:
            container.stop()
            logger.info('PostgreSQL container stopped')
        except Exception as e:
            logger.warning(f'Error stopping container: {e}')

    request.addfinalizer(finalizer)

    options = dict(POSTGRESQL,
                   hostname=container.get_container_host_ip(),
                   port=int(container.get_exposed_port(5432)))
    logger.info(f"PostgreSQL container started at {options['hostname']}:{options['port']}")
    return options


def stage_test_data(cn):
    cn.execute('drop table if exists place')
    cn.execute('drop table if exists person')

    create_and_insert_data = """
create table person (
    id serial primary key,
    name varchar(255) not null unique
);

create table place (
    country text not null,
    city text,
    telcode integer not null
);

insert into person (id, name) values
(1, 'Alice'),
(2, 'Bob'),
(3, 'Charlie');

insert into place (country, city, telcode) values
('United States', 'New York', 1),
('Hong Kong', null, 852),
('Singapore', null, 65);
"""
    cn.execute(create_and_insert_data)


@pytest.fixture
def psql_conn(psql_docker):
    """Connection with freshly staged person and place tables."""
    cn = sqlrecord.connect(psql_docker)
    try:
        stage_test_data(cn)
        yield cn
    finally:
        cn.close()
