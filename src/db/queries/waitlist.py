from psycopg2 import sql
from typing import Dict, List, Optional

from src.db.base import execute_query
from src.core.waitlist.schema import WaitlistColumnDescriptor

def fetch_column_descriptors(conn, schema: str, table: str) -> List[WaitlistColumnDescriptor]:
    """Get the live column definitions of the waitlist table"""
    rows = execute_query(
        conn,
        """
        SELECT
            c.column_name,
            c.is_nullable,
            c.column_default,
            c.is_identity,
            c.is_generated,
            EXISTS (
                SELECT 1
                FROM information_schema.table_constraints tc
                JOIN information_schema.key_column_usage kcu
                  ON tc.constraint_name = kcu.constraint_name
                 AND tc.table_schema = kcu.table_schema
                 AND tc.table_name = kcu.table_name
                WHERE tc.constraint_type = 'PRIMARY KEY'
                  AND tc.table_schema = c.table_schema
                  AND tc.table_name = c.table_name
                  AND kcu.column_name = c.column_name
            ) AS is_primary_key
        FROM information_schema.columns c
        WHERE c.table_schema = %s AND c.table_name = %s
        ORDER BY c.ordinal_position
        """,
        (schema, table)
    ) or []

    descriptors = []
    for row in rows:
        # Identity and generated columns are filled by the database
        has_default = (
            row['column_default'] is not None
            or row.get('is_identity') == 'YES'
            or row.get('is_generated') == 'ALWAYS'
        )
        descriptors.append(WaitlistColumnDescriptor(
            name=row['column_name'],
            is_required=row['is_nullable'] == 'NO' and not has_default,
            has_default=has_default,
            is_primary_key=bool(row['is_primary_key'])
        ))
    return descriptors

def insert_waitlist_row(conn, schema: str, table: str, values: Dict[str, object]) -> None:
    """Insert one waitlist row and commit"""
    columns = list(values.keys())
    query = sql.SQL("INSERT INTO {}.{} ({}) VALUES ({})").format(
        sql.Identifier(schema),
        sql.Identifier(table),
        sql.SQL(", ").join(sql.Identifier(column) for column in columns),
        sql.SQL(", ").join(sql.Placeholder() for _ in columns)
    )
    with conn.cursor() as cur:
        cur.execute(query, tuple(values[column] for column in columns))
    conn.commit()

def list_waitlist_rows(
    conn,
    schema: str,
    table: str,
    email_column: str,
    timestamp_column: Optional[str] = None
) -> List[Dict]:
    """Get all waitlist entries, newest first when a timestamp column exists"""
    if timestamp_column:
        query = sql.SQL("SELECT {email} AS email, {ts} AS subscribed_at FROM {schema}.{table} ORDER BY {ts} DESC").format(
            email=sql.Identifier(email_column),
            ts=sql.Identifier(timestamp_column),
            schema=sql.Identifier(schema),
            table=sql.Identifier(table)
        )
    else:
        query = sql.SQL("SELECT {email} AS email FROM {schema}.{table} ORDER BY {email} ASC").format(
            email=sql.Identifier(email_column),
            schema=sql.Identifier(schema),
            table=sql.Identifier(table)
        )
    return execute_query(conn, query) or []
