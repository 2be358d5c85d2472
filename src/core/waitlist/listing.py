from datetime import datetime
from typing import Dict, List, Union

from src.core.waitlist.outcomes import SchemaError
from src.core.waitlist.schema import (
    EMAIL_COLUMN,
    SCHEMA_NOT_INITIALIZED,
    find_column,
    resolve_timestamp_column
)
from src.db.queries.waitlist import fetch_column_descriptors, list_waitlist_rows

def list_subscribers(conn, schema: str, table: str) -> Union[List[Dict], SchemaError]:
    """
    Read every waitlist entry.

    Sorted by the resolved timestamp column, newest first, or by email when
    the table has no timestamp column.
    """
    columns = fetch_column_descriptors(conn, schema, table)
    if not columns:
        return SchemaError(SCHEMA_NOT_INITIALIZED)

    email_column = find_column(columns, EMAIL_COLUMN)
    if email_column is None:
        return SchemaError("Waitlist table is missing the email column")

    timestamp_column = resolve_timestamp_column(columns)
    rows = list_waitlist_rows(
        conn,
        schema,
        table,
        email_column=email_column.name,
        timestamp_column=timestamp_column.name if timestamp_column else None
    )

    subscribers = []
    for row in rows:
        subscriber = {"email": row["email"]}
        subscribed_at = row.get("subscribed_at")
        if isinstance(subscribed_at, datetime):
            subscriber["subscribedAt"] = subscribed_at.isoformat()
        elif subscribed_at is not None:
            subscriber["subscribedAt"] = str(subscribed_at)
        subscribers.append(subscriber)
    return subscribers
