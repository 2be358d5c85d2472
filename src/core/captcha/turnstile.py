"""
Cloudflare Turnstile verification.

The verification endpoint answers with ``{"success": bool, "error-codes": [...]}``.
Its body is parsed defensively: anything other than ``success: true`` counts
as a rejection. Transport failures and non-2xx statuses are a different
condition (the service is unavailable) and raise instead.
"""
from dataclasses import dataclass
from typing import Any, List, Optional

import httpx

from src.config.settings import Settings
from src.utils.logger import get_logger
from src.utils.metrics import (
    CAPTCHA_VERIFICATION_COUNT,
    CAPTCHA_VERIFICATION_DURATION,
    track_time
)

logger = get_logger(__name__)

# Cloudflare's always-passes test secret, only used in development mode
TURNSTILE_TEST_SECRET_KEY = "1x0000000000000000000000000000000AA"


class CaptchaServiceUnavailableError(Exception):
    """The verification service could not be reached or answered non-2xx"""


@dataclass(frozen=True)
class CaptchaVerificationResult:
    success: bool
    error_codes: Optional[List[str]] = None


def parse_verification_response(payload: Any) -> CaptchaVerificationResult:
    if not isinstance(payload, dict):
        return CaptchaVerificationResult(success=False)

    error_codes = payload.get("error-codes")
    if isinstance(error_codes, list):
        error_codes = [code for code in error_codes if isinstance(code, str)]
    else:
        error_codes = None

    return CaptchaVerificationResult(
        success=payload.get("success") is True,
        error_codes=error_codes
    )


def resolve_turnstile_secret(settings: Settings) -> Optional[str]:
    """Configured secret, or the test secret when running in development mode"""
    if settings.TURNSTILE_SECRET_KEY:
        return settings.TURNSTILE_SECRET_KEY
    if settings.DEVELOPMENT_MODE:
        logger.warning("TURNSTILE_SECRET_KEY not set, using the Turnstile test secret")
        return TURNSTILE_TEST_SECRET_KEY
    return None


class TurnstileVerifier:
    def __init__(
        self,
        secret: str,
        verify_url: str,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.secret = secret
        self.verify_url = verify_url
        self.transport = transport

    @track_time(CAPTCHA_VERIFICATION_DURATION)
    async def verify(self, token: str, client_ip: Optional[str] = None) -> CaptchaVerificationResult:
        """Verify a Turnstile token, forwarding the client IP when known"""
        payload = {"secret": self.secret, "response": token}
        if client_ip:
            payload["remoteip"] = client_ip

        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                response = await client.post(self.verify_url, data=payload)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            CAPTCHA_VERIFICATION_COUNT.labels(result="unavailable").inc()
            logger.error(f"Turnstile API returned status {exc.response.status_code}")
            raise CaptchaServiceUnavailableError(
                f"verification returned status {exc.response.status_code}"
            ) from exc
        except httpx.RequestError as exc:
            CAPTCHA_VERIFICATION_COUNT.labels(result="unavailable").inc()
            logger.error(f"Turnstile request failed: {exc}")
            raise CaptchaServiceUnavailableError(str(exc)) from exc

        try:
            body = response.json()
        except ValueError:
            logger.warning("Turnstile returned a non-JSON body")
            body = None

        result = parse_verification_response(body)
        CAPTCHA_VERIFICATION_COUNT.labels(
            result="success" if result.success else "rejected"
        ).inc()
        return result
