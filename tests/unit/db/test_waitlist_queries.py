from unittest.mock import MagicMock

from psycopg2 import sql

from src.core.waitlist.schema import WaitlistColumnDescriptor
from src.db.queries.waitlist import fetch_column_descriptors, insert_waitlist_row, list_waitlist_rows


def info_row(name, is_nullable="YES", column_default=None, is_identity="NO", is_generated="NEVER", is_primary_key=False):
    return {
        "column_name": name,
        "is_nullable": is_nullable,
        "column_default": column_default,
        "is_identity": is_identity,
        "is_generated": is_generated,
        "is_primary_key": is_primary_key,
    }


def test_fetch_column_descriptors_maps_information_schema(mocker):
    execute = mocker.patch("src.db.queries.waitlist.execute_query", return_value=[
        info_row("id", is_nullable="NO", is_identity="YES", is_primary_key=True),
        info_row("email", is_nullable="NO"),
        info_row("subscribed_at", is_nullable="NO", column_default="now()"),
        info_row("source"),
    ])

    columns = fetch_column_descriptors(MagicMock(), "public", "waitlist")

    assert columns == [
        WaitlistColumnDescriptor("id", is_required=False, has_default=True, is_primary_key=True),
        WaitlistColumnDescriptor("email", is_required=True, has_default=False, is_primary_key=False),
        WaitlistColumnDescriptor("subscribed_at", is_required=False, has_default=True, is_primary_key=False),
        WaitlistColumnDescriptor("source", is_required=False, has_default=False, is_primary_key=False),
    ]
    assert execute.call_args.args[2] == ("public", "waitlist")


def test_fetch_column_descriptors_missing_table(mocker):
    mocker.patch("src.db.queries.waitlist.execute_query", return_value=None)

    assert fetch_column_descriptors(MagicMock(), "public", "waitlist") == []


def test_insert_waitlist_row_binds_values_and_commits():
    conn = MagicMock()
    cursor = conn.cursor.return_value.__enter__.return_value

    insert_waitlist_row(conn, "public", "waitlist", {"email": "a@b.c", "joined_at": "now"})

    query, params = cursor.execute.call_args.args
    assert isinstance(query, sql.Composed)
    assert params == ("a@b.c", "now")
    conn.commit.assert_called_once()


def render(query):
    """Flatten a composed query into text, quoting identifiers"""
    if isinstance(query, sql.Composed):
        return "".join(render(part) for part in query.seq)
    if isinstance(query, sql.Identifier):
        return ".".join(f'"{name}"' for name in query.strings)
    return query.string


def test_list_waitlist_rows_orders_by_timestamp_newest_first(mocker):
    execute = mocker.patch("src.db.queries.waitlist.execute_query", return_value=[])

    list_waitlist_rows(MagicMock(), "public", "waitlist", email_column="email", timestamp_column="subscribed_at")

    text = render(execute.call_args.args[1])
    assert 'FROM "public"."waitlist"' in text
    assert '"subscribed_at" AS subscribed_at' in text
    assert text.endswith('ORDER BY "subscribed_at" DESC')


def test_list_waitlist_rows_orders_by_email_without_timestamp(mocker):
    execute = mocker.patch("src.db.queries.waitlist.execute_query", return_value=None)

    rows = list_waitlist_rows(MagicMock(), "public", "waitlist", email_column="Email")

    text = render(execute.call_args.args[1])
    assert "subscribed_at" not in text
    assert text.endswith('ORDER BY "Email" ASC')
    assert rows == []
