from fastapi import APIRouter, Depends, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from typing import List, Optional

from src.api.dependencies import get_client_ip, get_turnstile_verifier, get_waitlist_inserter
from src.config.settings import settings
from src.core.captcha.turnstile import CaptchaServiceUnavailableError, TurnstileVerifier
from src.core.waitlist.inserter import SchemaAdaptiveInserter
from src.core.waitlist.listing import list_subscribers
from src.core.waitlist.outcomes import Duplicate, InsertOutcome, Inserted, SchemaError
from src.core.waitlist.validation import SignupValidationError, parse_signup_request
from src.db.base import DatabaseNotConfiguredError, get_db
from src.schemas.waitlist import ErrorResponse, SubscribeResponse, WaitlistListResponse
from src.utils.logger import get_logger
from src.utils.metrics import WAITLIST_SIGNUP_COUNT

logger = get_logger(__name__)

CAPTCHA_UNAVAILABLE = "CAPTCHA verification service unavailable"
DATABASE_NOT_CONFIGURED = "Database not configured"

router = APIRouter(
    prefix="/api",
    tags=["waitlist"],
    responses={
        400: {
            "model": ErrorResponse,
            "description": "Invalid signup",
            "content": {
                "application/json": {
                    "example": {"error": "Valid email is required"}
                }
            }
        },
        503: {
            "model": ErrorResponse,
            "description": "A dependency is unavailable or the table schema is unsupported",
            "content": {
                "application/json": {
                    "example": {"error": "Database not configured"}
                }
            }
        }
    }
)

def error_response(status_code: int, message: str, codes: Optional[List[str]] = None) -> JSONResponse:
    content = {"error": message}
    if codes is not None:
        content["codes"] = codes
    return JSONResponse(status_code=status_code, content=content)

def outcome_response(outcome: InsertOutcome) -> JSONResponse:
    """Map an insert outcome onto the HTTP response"""
    if isinstance(outcome, Inserted):
        WAITLIST_SIGNUP_COUNT.labels(outcome="inserted").inc()
        body = SubscribeResponse(message="Successfully joined waitlist!")
        return JSONResponse(status_code=status.HTTP_200_OK, content=body.model_dump())
    if isinstance(outcome, Duplicate):
        WAITLIST_SIGNUP_COUNT.labels(outcome="duplicate").inc()
        body = SubscribeResponse(message="You're already on the waitlist!")
        return JSONResponse(status_code=status.HTTP_200_OK, content=body.model_dump())
    if isinstance(outcome, SchemaError):
        WAITLIST_SIGNUP_COUNT.labels(outcome="schema_error").inc()
        return error_response(status.HTTP_503_SERVICE_UNAVAILABLE, outcome.message)
    raise TypeError(f"Unhandled insert outcome: {outcome!r}")

def save_signup(inserter: SchemaAdaptiveInserter, email: str) -> InsertOutcome:
    with get_db() as conn:
        return inserter.insert(conn, email)

@router.post(
    "/subscribe",
    response_model=SubscribeResponse,
    responses={
        200: {
            "description": "Waitlist response",
            "content": {
                "application/json": {
                    "examples": {
                        "new_entry": {
                            "value": {"success": True, "message": "Successfully joined waitlist!"}
                        },
                        "existing": {
                            "value": {"success": True, "message": "You're already on the waitlist!"}
                        }
                    }
                }
            }
        }
    }
)
@router.post("/waitlist", response_model=SubscribeResponse, include_in_schema=False)
async def subscribe(
    request: Request,
    verifier: Optional[TurnstileVerifier] = Depends(get_turnstile_verifier),
    inserter: SchemaAdaptiveInserter = Depends(get_waitlist_inserter)
) -> JSONResponse:
    """
    Add an email to the waitlist.

    Expects `{"email": ..., "cf-turnstile-response": ...}`. The Turnstile
    token is verified before anything is written. Submitting an email that
    is already on the list is reported as success.
    """
    try:
        try:
            body = await request.json()
        except ValueError:
            body = None

        try:
            signup = parse_signup_request(body, get_client_ip(request))
        except SignupValidationError as e:
            logger.info(f"Rejected signup input: {e.message}")
            WAITLIST_SIGNUP_COUNT.labels(outcome="invalid_input").inc()
            return error_response(status.HTTP_400_BAD_REQUEST, e.message)

        if verifier is None:
            logger.error("TURNSTILE_SECRET_KEY not configured and DEVELOPMENT_MODE is off")
            WAITLIST_SIGNUP_COUNT.labels(outcome="unavailable").inc()
            return error_response(status.HTTP_503_SERVICE_UNAVAILABLE, CAPTCHA_UNAVAILABLE)

        try:
            verification = await verifier.verify(signup.captcha_token, signup.client_ip)
        except CaptchaServiceUnavailableError as e:
            logger.warning(f"Turnstile unavailable: {e}")
            WAITLIST_SIGNUP_COUNT.labels(outcome="unavailable").inc()
            return error_response(status.HTTP_503_SERVICE_UNAVAILABLE, CAPTCHA_UNAVAILABLE)

        if not verification.success:
            codes = verification.error_codes or []
            logger.warning(f"Turnstile verification failed: {codes}")
            WAITLIST_SIGNUP_COUNT.labels(outcome="captcha_failed").inc()
            return error_response(status.HTTP_400_BAD_REQUEST, "CAPTCHA verification failed", codes=codes)

        try:
            outcome = await run_in_threadpool(save_signup, inserter, signup.email)
        except DatabaseNotConfiguredError as e:
            logger.error(f"Database unavailable, signup not saved: {e}")
            WAITLIST_SIGNUP_COUNT.labels(outcome="unavailable").inc()
            return error_response(status.HTTP_503_SERVICE_UNAVAILABLE, DATABASE_NOT_CONFIGURED)

        return outcome_response(outcome)
    except Exception:
        logger.exception("Waitlist API error")
        WAITLIST_SIGNUP_COUNT.labels(outcome="error").inc()
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Waitlist service error. Please try again later."
        )

@router.get(
    "/list",
    response_model=WaitlistListResponse,
    response_model_exclude_none=True
)
def list_waitlist():
    """
    Get all emails on the waitlist.

    Not authenticated; deploy behind an access-controlled proxy.
    """
    try:
        with get_db() as conn:
            subscribers = list_subscribers(conn, settings.WAITLIST_SCHEMA, settings.WAITLIST_TABLE)
    except DatabaseNotConfiguredError as e:
        logger.error(f"Database unavailable: {e}")
        return error_response(status.HTTP_503_SERVICE_UNAVAILABLE, DATABASE_NOT_CONFIGURED)
    except Exception:
        logger.exception("Error listing waitlist")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch waitlist")

    if isinstance(subscribers, SchemaError):
        logger.error(f"Cannot list waitlist: {subscribers.message}")
        return error_response(status.HTTP_503_SERVICE_UNAVAILABLE, subscribers.message)

    return WaitlistListResponse(count=len(subscribers), subscribers=subscribers)
