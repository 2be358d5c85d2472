from pydantic_settings import BaseSettings
from typing import List, Optional

class Settings(BaseSettings):
    # Application
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Enables the always-passing Turnstile test secret when no secret is set
    DEVELOPMENT_MODE: bool = False

    # FastAPI
    PORT: int = 8000
    CORS_ALLOW_ORIGINS: List[str] = ["*"]

    # Database settings
    POSTGRES_USER: Optional[str] = None
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_DB: Optional[str] = None
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432

    # Waitlist destination table
    WAITLIST_SCHEMA: str = "public"
    WAITLIST_TABLE: str = "waitlist"

    # Cloudflare Turnstile
    TURNSTILE_SECRET_KEY: Optional[str] = None
    TURNSTILE_VERIFY_URL: str = "https://challenges.cloudflare.com/turnstile/v0/siteverify"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "allow"

    @property
    def database_configured(self) -> bool:
        return bool(self.POSTGRES_DB)


settings = Settings()
