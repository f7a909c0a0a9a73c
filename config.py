"""Application configuration module."""

import os
from datetime import timedelta
from pathlib import Path


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y"}


class Config:
    """Base configuration for the Flask application."""

    # Core
    SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", SECRET_KEY)
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=int(os.getenv("JWT_EXPIRES_HOURS", "24")))
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///app.db")
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Uploads
    UPLOAD_DIR = os.getenv("UPLOAD_DIR", str(Path("workspace") / "uploads"))
    MAX_UPLOAD_SIZE = int(os.getenv("MAX_UPLOAD_SIZE", str(10 * 1024 * 1024)))
    ALLOWED_UPLOAD_TYPES = os.getenv("ALLOWED_UPLOAD_TYPES", "jpg,jpeg,png,webp,pdf")

    # CORS
    _raw_origins = os.getenv("ORIGINS", "*")
    if _raw_origins.strip() == "*":
        CORS_ORIGINS = "*"
    else:
        CORS_ORIGINS = [o.strip() for o in _raw_origins.split(",") if o.strip()]

    # Rate limiting
    RATE_LIMIT = os.getenv("RATE_LIMIT", "200 per 15 minutes")
    AUTH_RATE_LIMIT = os.getenv("AUTH_RATE_LIMIT", "5 per 15 minutes")
    UPLOAD_RATE_LIMIT = os.getenv("UPLOAD_RATE_LIMIT", "10 per minute")
    APPLICATION_RATE_LIMIT = os.getenv("APPLICATION_RATE_LIMIT", "3 per hour")
    MESSAGE_RATE_LIMIT = os.getenv("MESSAGE_RATE_LIMIT", "20 per 5 minutes")
    RATELIMIT_HEADERS_ENABLED = True
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_KEY_PREFIX = os.getenv("RATELIMIT_KEY_PREFIX", "")

    # Case rules
    MAX_APPLICATIONS_PER_USER = int(os.getenv("MAX_APPLICATIONS_PER_USER", "5"))
    APPOINTMENT_LOCATION = os.getenv("APPOINTMENT_LOCATION", "IOM Office, Port-au-Prince")
    APPOINTMENT_DAILY_LIMIT = int(os.getenv("APPOINTMENT_DAILY_LIMIT", "25"))
    APPOINTMENT_LIMITED_THRESHOLD = int(os.getenv("APPOINTMENT_LIMITED_THRESHOLD", "15"))

    # E-mail (disabled when SMTP_HOST is unset)
    SMTP_HOST = os.getenv("SMTP_HOST")
    SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME = os.getenv("SMTP_USERNAME")
    SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
    SMTP_USE_SSL = _env_bool("SMTP_USE_SSL")
    MAIL_FROM = os.getenv("MAIL_FROM", "no-reply@visa-portal.local")
    FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")

    # Push
    VAPID_PUBLIC_KEY = os.getenv("VAPID_PUBLIC_KEY")
