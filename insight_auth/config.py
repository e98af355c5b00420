"""Configuration settings for Insight auth"""

from pydantic_settings import BaseSettings
from typing import List
import os


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./insight_auth.db")

    # Password hashing (bcrypt cost factor, 4-31)
    PASSWORD_HASH_ROUNDS: int = 12

    # Token lifetimes
    SIGNUP_EXPIRY_HOURS: int = 24
    INVITE_EXPIRY_DAYS: int = 7
    PASSWORD_RESET_EXPIRY_HOURS: int = 24
    REVOKE_SESSIONS_ON_PASSWORD_RESET: bool = False

    # Sessions
    SESSION_COOKIE_NAME: str = "SessionId"

    # Email
    EMAIL_FROM: str = "Insight Support <support@insight.com>"
    SMTP_HOST: str = ""  # Empty: messages are logged instead of sent
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"

    # Frontend URL for links in emails and post-login redirects
    FRONTEND_URL: str = "http://localhost:3000"

    # OAuth Configuration
    OAUTH_PROVIDER: str = "google"
    OAUTH_REDIRECT_URI: str = "http://localhost:8080/api/v1/sso/google/oauth2callback"
    OAUTH_STATE_COOKIE_NAME: str = "state"
    OAUTH_STATE_COOKIE_MAX_AGE: int = 600  # 10 minutes
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: str = ""

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
