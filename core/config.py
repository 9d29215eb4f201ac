from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "Vaad Bayit API"
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # Public URL of the web app (used for auth redirects)
    APP_URL: str = Field("http://localhost:3000", env="APP_URL")

    # -------------------------------------------------
    # Locales
    # -------------------------------------------------
    DEFAULT_LOCALE: str = "he"
    SUPPORTED_LOCALES: List[str] = ["he", "en"]

    # -------------------------------------------------
    # CORS
    # -------------------------------------------------
    FRONTEND_DOMAINS: List[str] = [
        "http://localhost:3000",
    ]
    BACKEND_CORS_ORIGINS: List[str] = []

    # -------------------------------------------------
    # Supabase (Auth, DB, Storage)
    # -------------------------------------------------
    SUPABASE_URL: Optional[str] = Field(None, env="SUPABASE_URL")
    SUPABASE_ANON_KEY: Optional[str] = Field(None, env="SUPABASE_ANON_KEY")
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = Field(None, env="SUPABASE_SERVICE_ROLE_KEY")

    # Storage bucket holding building documents
    DOCUMENTS_BUCKET: str = "documents"
    SIGNED_URL_TTL_SECONDS: int = 3600

    # -------------------------------------------------
    # Session cookies
    # -------------------------------------------------
    ACCESS_TOKEN_COOKIE: str = "sb-access-token"
    REFRESH_TOKEN_COOKIE: str = "sb-refresh-token"
    CODE_VERIFIER_COOKIE: str = "sb-code-verifier"
    COOKIE_SECURE: bool = True
    COOKIE_MAX_AGE_SECONDS: int = 60 * 60 * 24 * 7

    # -------------------------------------------------
    # SMTP Email (bug reports)
    # -------------------------------------------------
    SMTP_HOST: Optional[str] = Field(None, env="SMTP_HOST")
    SMTP_PORT: Optional[int] = Field(None, env="SMTP_PORT")
    SMTP_USER: Optional[str] = Field(None, env="SMTP_USER")
    SMTP_PASS: Optional[str] = Field(None, env="SMTP_PASS")

    # Inbox receiving bug reports (falls back to SMTP_USER)
    SUPPORT_EMAIL: Optional[str] = Field(None, env="SUPPORT_EMAIL")

    # -------------------------------------------------
    # Webhooks (new contact requests)
    # -------------------------------------------------
    CONTACT_WEBHOOK_URL: Optional[str] = Field(None, env="CONTACT_WEBHOOK_URL")

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    class Config:
        case_sensitive = True


# Instantiate settings
settings = Settings()

# -------------------------------------------------
# Build CORS list after loading settings
# -------------------------------------------------
cors_origins = [d.rstrip("/") for d in settings.FRONTEND_DOMAINS]

if settings.APP_URL:
    cors_origins.append(settings.APP_URL.rstrip("/"))

settings.BACKEND_CORS_ORIGINS = sorted(list(set(cors_origins)))
