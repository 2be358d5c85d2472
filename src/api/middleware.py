from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
import time

from src.utils.metrics import HTTP_REQUEST_COUNT, HTTP_REQUEST_DURATION

class PrometheusMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        # Get the route path if it exists, otherwise use the raw path
        route = request.scope.get("route")
        endpoint = route.path if route else request.url.path

        try:
            response = await call_next(request)

            HTTP_REQUEST_COUNT.labels(
                method=request.method,
                endpoint=endpoint,
                status=response.status_code
            ).inc()

            duration = time.time() - start_time
            HTTP_REQUEST_DURATION.labels(
                method=request.method,
                endpoint=endpoint
            ).observe(duration)

            return response

        except Exception:
            HTTP_REQUEST_COUNT.labels(
                method=request.method,
                endpoint=endpoint,
                status=500
            ).inc()
            raise
