from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = ConfigDict(env_file=".env", case_sensitive=True)

    DATABASE_URL: str
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Redis configuration for caching and duplicate detection
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_CACHE_TTL: int = 60  # stats endpoint cache
    REDIS_DUPLICATE_CHECK_TTL: int = 86400  # correlation id -> lead id

    # CORS configuration: comma-separated origins
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:8080"

    # Partner intake rate limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_INTAKE: str = "120/minute"

    # Outbound email (Resend). An empty key leaves the transport unconfigured.
    RESEND_API_KEY: str = ""
    RESEND_API_URL: str = "https://api.resend.com/emails"
    FROM_EMAIL: str = "onboarding@resend.dev"
    SENDER_NAME: str = "Netic"
    BOOKING_URL: str = "http://localhost:3000/book"
    EMAIL_TIMEOUT_SECONDS: float = 10.0

    # True: send the intro email during intake. False: draft only.
    SEND_INTRO_ON_INTAKE: bool = True


settings = Settings()
