from typing import Dict, Any

from src.config.settings import settings
from src.db.base import get_db, execute_query
from src.db.queries.waitlist import fetch_column_descriptors
from src.utils.logger import get_logger

logger = get_logger(__name__)

async def check_database() -> Dict[str, Any]:
    """Check PostgreSQL connection and that the waitlist table exists"""
    try:
        with get_db() as conn:
            execute_query(conn, "SELECT 1")
            columns = fetch_column_descriptors(conn, settings.WAITLIST_SCHEMA, settings.WAITLIST_TABLE)
        if not columns:
            return {
                "status": "degraded",
                "error": f"table {settings.WAITLIST_SCHEMA}.{settings.WAITLIST_TABLE} not found"
            }
        return {
            "status": "healthy",
            "columns": [column.name for column in columns]
        }
    except Exception as e:
        logger.error(f"Database health check failed: {str(e)}")
        return {
            "status": "unhealthy",
            "error": str(e)
        }

async def check_turnstile() -> Dict[str, Any]:
    """Check that a Turnstile secret is available"""
    if settings.TURNSTILE_SECRET_KEY:
        return {"status": "healthy"}
    if settings.DEVELOPMENT_MODE:
        return {"status": "degraded", "error": "using Turnstile test secret"}
    return {"status": "unhealthy", "error": "TURNSTILE_SECRET_KEY not configured"}
