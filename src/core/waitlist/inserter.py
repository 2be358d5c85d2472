from datetime import datetime, timezone
from typing import Callable, Dict

import psycopg2

from src.core.waitlist.outcomes import InsertOutcome, Inserted, SchemaError
from src.core.waitlist.schema import classify_insert_error, plan_insert
from src.db.queries.waitlist import fetch_column_descriptors, insert_waitlist_row
from src.utils.logger import get_logger

logger = get_logger(__name__)


class SchemaAdaptiveInserter:
    """
    Inserts waitlist emails into a table whose columns are discovered at
    insert time.

    Columns are fetched on every call; the table may be migrated while the
    service keeps running.
    """

    def __init__(
        self,
        schema: str,
        table: str,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)
    ):
        self.schema = schema
        self.table = table
        self.clock = clock

    def insert(self, conn, email: str) -> InsertOutcome:
        normalized_email = email.strip().lower()

        columns = fetch_column_descriptors(conn, self.schema, self.table)
        plan = plan_insert(columns)
        if isinstance(plan, SchemaError):
            logger.error(f"Waitlist table {self.schema}.{self.table} rejected: {plan.message}")
            return plan

        values: Dict[str, object] = {plan.email_column: normalized_email}
        if plan.timestamp_column:
            values[plan.timestamp_column] = self.clock()

        try:
            insert_waitlist_row(conn, self.schema, self.table, values)
        except psycopg2.Error as e:
            conn.rollback()
            outcome = classify_insert_error(str(e), normalized_email)
            if outcome is None:
                raise
            if isinstance(outcome, SchemaError):
                logger.error(f"Waitlist insert failed on schema: {e}")
            return outcome

        return Inserted(normalized_email)
