import json
from contextlib import contextmanager
from typing import Dict, List, Optional
from unittest.mock import MagicMock

import httpx
import psycopg2.errors
import pytest
from fastapi.testclient import TestClient

from src.api.dependencies import get_turnstile_verifier
from src.core.captcha.turnstile import TurnstileVerifier
from src.core.waitlist.schema import WaitlistColumnDescriptor
from src.main import app


def column(name, is_required=False, has_default=False, is_primary_key=False):
    return WaitlistColumnDescriptor(
        name=name,
        is_required=is_required,
        has_default=has_default,
        is_primary_key=is_primary_key,
    )


DEFAULT_COLUMNS = [
    column("id", is_required=False, has_default=True, is_primary_key=True),
    column("email", is_required=True),
    column("subscribed_at", has_default=True),
]


class FakeWaitlistTable:
    """In-memory stand-in for the waitlist table with a unique email column"""

    def __init__(self, columns: Optional[List[WaitlistColumnDescriptor]] = None):
        self.columns = list(DEFAULT_COLUMNS if columns is None else columns)
        self.rows: List[Dict] = []

    def fetch_column_descriptors(self, conn, schema, table):
        return list(self.columns)

    def insert_waitlist_row(self, conn, schema, table, values):
        if not self.columns:
            raise psycopg2.errors.UndefinedTable(f'relation "{schema}.{table}" does not exist')
        names = {c.name for c in self.columns}
        for name in values:
            if name not in names:
                raise psycopg2.errors.UndefinedColumn(
                    f'column "{name}" of relation "{table}" does not exist'
                )
        email = values.get("email")
        if any(row.get("email") == email for row in self.rows):
            raise psycopg2.errors.UniqueViolation(
                f'duplicate key value violates unique constraint "{table}_email_key"'
            )
        self.rows.append(dict(values))

    def list_waitlist_rows(self, conn, schema, table, email_column, timestamp_column=None):
        if timestamp_column:
            rows = sorted(self.rows, key=lambda r: r[timestamp_column], reverse=True)
            return [{"email": r[email_column], "subscribed_at": r[timestamp_column]} for r in rows]
        rows = sorted(self.rows, key=lambda r: r[email_column])
        return [{"email": r[email_column]} for r in rows]


@pytest.fixture
def waitlist_table(mocker):
    """Patch the waitlist queries with an in-memory table"""
    table = FakeWaitlistTable()
    for module in ("src.core.waitlist.inserter", "src.core.waitlist.listing"):
        mocker.patch(f"{module}.fetch_column_descriptors", side_effect=table.fetch_column_descriptors)
    mocker.patch("src.core.waitlist.inserter.insert_waitlist_row", side_effect=table.insert_waitlist_row)
    mocker.patch("src.core.waitlist.listing.list_waitlist_rows", side_effect=table.list_waitlist_rows)
    return table


@pytest.fixture
def db_connection(mocker):
    """Patch get_db in the waitlist routes to yield a mock connection"""
    conn = MagicMock()

    @contextmanager
    def fake_get_db():
        yield conn

    mocker.patch("src.api.routes.waitlist.get_db", side_effect=fake_get_db)
    return conn


class TurnstileStub:
    """Records verification requests and answers with a canned response"""

    def __init__(self):
        self.status_code = 200
        self.payload = {"success": True}
        self.requests: List[httpx.Request] = []
        self.error: Optional[Exception] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, content=json.dumps(self.payload))

    def verifier(self) -> TurnstileVerifier:
        return TurnstileVerifier(
            secret="test-secret",
            verify_url="https://turnstile.test/siteverify",
            transport=httpx.MockTransport(self.handler),
        )


@pytest.fixture
def turnstile():
    stub = TurnstileStub()
    app.dependency_overrides[get_turnstile_verifier] = stub.verifier
    yield stub
    app.dependency_overrides.pop(get_turnstile_verifier, None)


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
