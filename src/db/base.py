import psycopg2
from psycopg2.extras import RealDictCursor
from contextlib import contextmanager
from typing import Generator

from src.config.settings import settings


class DatabaseNotConfiguredError(Exception):
    """Raised when no database is configured or it cannot be reached"""


def get_db_connection():
    """Create a database connection"""
    if not settings.database_configured:
        raise DatabaseNotConfiguredError("POSTGRES_DB is not set")

    try:
        return psycopg2.connect(
            dbname=settings.POSTGRES_DB,
            user=settings.POSTGRES_USER,
            password=settings.POSTGRES_PASSWORD,
            host=settings.POSTGRES_HOST,
            port=settings.POSTGRES_PORT,
            cursor_factory=RealDictCursor
        )
    except psycopg2.OperationalError as e:
        raise DatabaseNotConfiguredError(str(e)) from e

@contextmanager
def get_db() -> Generator:
    """Database connection context manager"""
    conn = get_db_connection()
    try:
        yield conn
    finally:
        conn.close()

def execute_query(conn, query, params: tuple = None):
    """Execute a query and return results"""
    with conn.cursor() as cur:
        cur.execute(query, params)
        try:
            return cur.fetchall()
        except psycopg2.ProgrammingError:
            return None
