from prometheus_client import Counter, Histogram
import time
from typing import Callable
from functools import wraps

# API Metrics
HTTP_REQUEST_COUNT = Counter(
    'http_request_total',
    'Total number of HTTP requests',
    ['method', 'endpoint', 'status']
)

HTTP_REQUEST_DURATION = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint']
)

# Waitlist Metrics
WAITLIST_SIGNUP_COUNT = Counter(
    'waitlist_signup_total',
    'Total number of waitlist signup attempts by outcome',
    ['outcome']  # outcomes: inserted, duplicate, schema_error, invalid_input, captcha_failed, unavailable, error
)

# CAPTCHA Metrics
CAPTCHA_VERIFICATION_COUNT = Counter(
    'captcha_verification_total',
    'Total number of Turnstile verification calls',
    ['result']  # results: success, rejected, unavailable
)

CAPTCHA_VERIFICATION_DURATION = Histogram(
    'captcha_verification_duration_seconds',
    'Turnstile verification duration in seconds'
)

def track_time(metric: Histogram) -> Callable:
    """Decorator to track coroutine execution time"""
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                return await func(*args, **kwargs)
            finally:
                duration = time.time() - start_time
                metric.observe(duration)
        return wrapper
    return decorator
