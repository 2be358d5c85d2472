from fastapi import Request
from typing import Optional

from src.config.settings import settings
from src.core.captcha.turnstile import TurnstileVerifier, resolve_turnstile_secret
from src.core.waitlist.inserter import SchemaAdaptiveInserter

def get_turnstile_verifier() -> Optional[TurnstileVerifier]:
    """Verifier for the configured secret, or None when no secret may be used"""
    secret = resolve_turnstile_secret(settings)
    if secret is None:
        return None
    return TurnstileVerifier(secret=secret, verify_url=settings.TURNSTILE_VERIFY_URL)

def get_waitlist_inserter() -> SchemaAdaptiveInserter:
    return SchemaAdaptiveInserter(
        schema=settings.WAITLIST_SCHEMA,
        table=settings.WAITLIST_TABLE
    )

def get_client_ip(request: Request) -> Optional[str]:
    """Client IP as reported by Cloudflare"""
    return request.headers.get("CF-Connecting-IP") or None
