"""
Decision table for inserting into a waitlist table whose shape is only known
at runtime.

The destination table is introspected on every insert. ``plan_insert`` turns
the live column list into either an ``InsertPlan`` or a ``SchemaError``, and
``classify_insert_error`` maps a database error message onto an outcome.
Both are pure so they can be tested without a database.
"""
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from src.core.waitlist.outcomes import Duplicate, InsertOutcome, SchemaError

EMAIL_COLUMN = "email"

# Accepted names for the signup time column, highest priority first
TIMESTAMP_COLUMN_ALIASES = ("subscribed_at", "created_at", "joined_at")

SCHEMA_NOT_INITIALIZED = "Database schema not initialized"


@dataclass(frozen=True)
class WaitlistColumnDescriptor:
    name: str
    is_required: bool
    has_default: bool
    is_primary_key: bool


@dataclass(frozen=True)
class InsertPlan:
    email_column: str
    timestamp_column: Optional[str] = None


def find_column(columns: Sequence[WaitlistColumnDescriptor], name: str) -> Optional[WaitlistColumnDescriptor]:
    """Case-insensitive lookup of a column by name"""
    wanted = name.lower()
    for column in columns:
        if column.name.lower() == wanted:
            return column
    return None


def resolve_timestamp_column(columns: Sequence[WaitlistColumnDescriptor]) -> Optional[WaitlistColumnDescriptor]:
    """Return the first accepted timestamp alias present in the table"""
    for alias in TIMESTAMP_COLUMN_ALIASES:
        column = find_column(columns, alias)
        if column is not None:
            return column
    return None


def plan_insert(columns: Sequence[WaitlistColumnDescriptor]) -> Union[InsertPlan, SchemaError]:
    """
    Decide how to insert a signup into a table with the given columns.

    The email is always bound. The timestamp column, when one of the aliases
    exists, is bound to the server time. Any other NOT NULL column without a
    default that is not the primary key cannot be filled, so the table is
    rejected.
    """
    if not columns:
        return SchemaError(SCHEMA_NOT_INITIALIZED)

    email_column = find_column(columns, EMAIL_COLUMN)
    if email_column is None:
        return SchemaError("Waitlist table is missing the email column")

    timestamp_column = resolve_timestamp_column(columns)
    bound = {email_column.name.lower()}
    if timestamp_column is not None:
        bound.add(timestamp_column.name.lower())

    unfillable = [
        column.name
        for column in columns
        if column.name.lower() not in bound
        and column.is_required
        and not column.is_primary_key
    ]
    if unfillable:
        return SchemaError(
            "Waitlist table has required columns without defaults: "
            + ", ".join(unfillable)
        )

    return InsertPlan(
        email_column=email_column.name,
        timestamp_column=timestamp_column.name if timestamp_column else None,
    )


def classify_insert_error(message: str, email: str) -> Optional[InsertOutcome]:
    """
    Map a database error message onto an insert outcome.

    Returns None for errors that are not recognised; the caller re-raises
    those. Messages from both PostgreSQL and SQLite are understood.
    """
    text = message.lower()

    if "unique constraint" in text or "duplicate key" in text:
        return Duplicate(email)

    if "no such table" in text or ("relation" in text and "does not exist" in text and "column" not in text):
        return SchemaError(SCHEMA_NOT_INITIALIZED)

    if "no such column" in text or "has no column named" in text or (
        "column" in text and "does not exist" in text
    ):
        return SchemaError("Waitlist table is missing an expected column")

    if "not null" in text or "not-null" in text:
        return SchemaError("Waitlist table has required columns without defaults")

    return None
