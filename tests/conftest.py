import os
import pytest
import sqlalchemy as sa

from graphjoiner.testing import created_tables

from tests.util.library_sa import metadata, insert_library


@pytest.fixture(scope='function')
def engine() -> sa.engine.Engine:
    return sa.create_engine(DATABASE_URL)


@pytest.fixture(scope='function')
def connection(engine: sa.engine.Engine) -> sa.engine.Connection:
    """ A connection to a database that has the library in it """
    with engine.connect() as conn:
        with created_tables(conn, metadata):
            insert_library(conn)
            yield conn


# URL of the database to connect to
DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite://')
