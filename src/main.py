# src/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from prometheus_client import make_asgi_app

from src.api.middleware import PrometheusMiddleware
from src.api.routes import health, waitlist
from src.config.settings import settings

def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title="Waitlist API",
        version="1.0.0",
        description="""
        Collects email signups for the product waitlist.

        ## Signup

        `POST /api/subscribe` takes an email and a Cloudflare Turnstile token.
        The token is verified with Cloudflare before the email is stored.
        Emails are stored lowercase and each address is stored once;
        submitting it again is reported as success.

        ## Listing

        `GET /api/list` returns every stored email. It is not authenticated
        and must only be exposed behind an access-controlled proxy.
        """,
        routes=app.routes,
    )

    app.openapi_schema = openapi_schema
    return app.openapi_schema

app = FastAPI(
    title="Waitlist API",
    description="API for waitlist signups",
    version="1.0.0",
    debug=settings.DEBUG,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json"
)

# Customize OpenAPI schema
app.openapi = custom_openapi

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)

# Add Prometheus middleware
app.add_middleware(PrometheusMiddleware)

# Include routers
app.include_router(waitlist.router)
app.include_router(health.router)

# Create metrics endpoint
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)

@app.get("/health")
async def health_check():
    return {"status": "healthy"}
