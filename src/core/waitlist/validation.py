from typing import Any, Optional

from src.schemas.waitlist import SignupRequest

CAPTCHA_FIELD = "cf-turnstile-response"


class SignupValidationError(Exception):
    """Client input that cannot be turned into a signup request"""
    message = "Invalid request"

    def __init__(self):
        super().__init__(self.message)


class InvalidBodyError(SignupValidationError):
    message = "Invalid JSON body"


class InvalidEmailError(SignupValidationError):
    message = "Valid email is required"


class MissingCaptchaError(SignupValidationError):
    message = "Missing CAPTCHA token"


def to_trimmed_string(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def parse_signup_request(body: Any, client_ip: Optional[str] = None) -> SignupRequest:
    """
    Normalize an untrusted request body into a SignupRequest.

    Checks run in order and stop at the first failure: the body must have
    parsed (None means it did not), the email must contain '@', the CAPTCHA
    token must be non-empty. Parsed bodies that are not objects have no
    fields and fail on the email. Nothing beyond the '@' is checked.
    """
    if body is None:
        raise InvalidBodyError()

    fields = body if isinstance(body, dict) else {}
    email = to_trimmed_string(fields.get("email"))
    captcha_token = to_trimmed_string(fields.get(CAPTCHA_FIELD))

    if not email or "@" not in email:
        raise InvalidEmailError()

    if not captcha_token:
        raise MissingCaptchaError()

    return SignupRequest(email=email, captcha_token=captcha_token, client_ip=client_ip or None)
