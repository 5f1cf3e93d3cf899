"""Tests for PostgresClient - pooled psycopg2 access with a mocked pool."""

from unittest.mock import MagicMock, patch

import psycopg2
import pytest

from clients.postgres_client import PostgresClient

DSN = "postgresql://test/pos"


@pytest.fixture
def cursor():
    cur = MagicMock()
    cur.description = [("num",)]
    cur.fetchall.return_value = [{"num": 1, "word": "hello"}]
    return cur


@pytest.fixture
def connection(cursor):
    conn = MagicMock()
    conn.cursor.return_value.__enter__.return_value = cursor
    return conn


@pytest.fixture
def pool(connection):
    with patch("psycopg2.pool.ThreadedConnectionPool") as pool_cls:
        pool = pool_cls.return_value
        pool.getconn.return_value = connection
        yield pool
    PostgresClient.close_all_pools()


class TestPostgresClientInit:
    """Connection pool initialization."""

    def test_pool_shared_per_url(self, pool):
        with patch("psycopg2.pool.ThreadedConnectionPool") as pool_cls:
            PostgresClient(DSN)
            PostgresClient(DSN)
        assert pool_cls.call_count == 1

    def test_close_removes_pool(self, pool):
        client = PostgresClient(DSN)
        client.close()
        pool.closeall.assert_called_once()
        assert DSN not in PostgresClient._connection_pools


class TestExecuteMethods:
    """Query execution methods."""

    def test_execute_returns_list_of_dicts(self, pool, connection):
        results = PostgresClient(DSN).execute("SELECT 1 as num, 'hello' as word")
        assert results == [{"num": 1, "word": "hello"}]
        connection.commit.assert_called_once()
        pool.putconn.assert_called_once_with(connection)

    def test_execute_without_result_set(self, pool, cursor):
        cursor.description = None
        assert PostgresClient(DSN).execute("UPDATE x SET y = 1") == []

    def test_execute_single_no_rows_returns_none(self, pool, cursor):
        cursor.fetchall.return_value = []
        assert PostgresClient(DSN).execute_single("SELECT 1 WHERE false") is None

    def test_execute_passes_params(self, pool, cursor):
        PostgresClient(DSN).execute("SELECT * FROM t WHERE id = %(id)s", {"id": "a"})
        cursor.execute.assert_called_once_with("SELECT * FROM t WHERE id = %(id)s", {"id": "a"})

    def test_execute_returning_commits(self, pool, connection, cursor):
        cursor.fetchall.return_value = [{"id": "t1"}]
        rows = PostgresClient(DSN).execute_returning("DELETE FROM t RETURNING id")
        assert rows == [{"id": "t1"}]
        connection.commit.assert_called_once()


class TestErrors:

    def test_error_rolls_back_and_returns_connection(self, pool, connection, cursor):
        cursor.execute.side_effect = psycopg2.OperationalError("lost")

        with pytest.raises(psycopg2.OperationalError):
            PostgresClient(DSN).execute_returning("INSERT ...")

        connection.rollback.assert_called_once()
        pool.putconn.assert_called_once_with(connection)
