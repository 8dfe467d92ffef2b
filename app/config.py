"""
Application configuration. Loads from environment variables.
Secrets and sensitive config must never be hardcoded.
"""

import os

from dotenv import load_dotenv

load_dotenv()
from functools import lru_cache


@lru_cache(maxsize=1)
def get_settings() -> "Settings":
    """Return cached settings instance."""
    return Settings()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() == "true"


class Settings:
    """Application settings loaded from environment."""

    # App
    app_name: str = "SAFE-8"
    debug: bool = False

    # Database (postgresql+psycopg for psycopg3; sqlite:// is accepted for tests)
    database_url: str = "postgresql+psycopg://localhost:5432/safe8_dev"
    db_connect_timeout: int = 10  # seconds
    db_pool_size: int = 5

    # SMTP / Email. No user+password means the email client is disabled.
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_secure: bool = False  # True = implicit TLS (port 465); False = STARTTLS
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_from: str = ""
    smtp_from_name: str = "Forvis Mazars - SAFE-8 Platform"
    email_on_submit: bool = True

    # Report branding
    report_brand_name: str = "Forvis Mazars"
    report_logo_path: str = ""
    advisory_contact_email: str = "ai.advisory@forvismazars.com"

    def __init__(self) -> None:
        self.app_name = os.getenv("APP_NAME", self.app_name)
        self.debug = _env_bool("DEBUG")

        default_user = os.getenv("PGUSER") or os.getenv("USER") or "postgres"
        default_url = (
            f"postgresql+psycopg://{default_user}:"
            f"{os.getenv('PGPASSWORD', '')}@"
            f"{os.getenv('PGHOST', 'localhost')}:"
            f"{os.getenv('PGPORT', '5432')}/"
            f"{os.getenv('PGDATABASE', 'safe8_dev')}"
        )
        raw_url = os.getenv("DATABASE_URL", default_url)
        # Ensure psycopg3 driver if URL uses generic postgresql://
        if raw_url.startswith("postgresql://") and not raw_url.startswith("postgresql+psycopg"):
            raw_url = raw_url.replace("postgresql://", "postgresql+psycopg://", 1)
        self.database_url = raw_url
        self.db_connect_timeout = int(os.getenv("DB_CONNECT_TIMEOUT", str(self.db_connect_timeout)))
        self.db_pool_size = int(os.getenv("DB_POOL_SIZE", str(self.db_pool_size)))

        self.smtp_host = os.getenv("SMTP_HOST", self.smtp_host)
        self.smtp_port = int(os.getenv("SMTP_PORT", str(self.smtp_port)))
        self.smtp_secure = _env_bool("SMTP_SECURE")
        self.smtp_user = os.getenv("SMTP_USER", "")
        # SMTP_PASS accepted as an alias for older .env files
        self.smtp_password = os.getenv("SMTP_PASSWORD") or os.getenv("SMTP_PASS", "")
        self.smtp_from = os.getenv("SMTP_FROM", "") or self.smtp_user
        self.smtp_from_name = os.getenv("SMTP_FROM_NAME", self.smtp_from_name)
        self.email_on_submit = _env_bool("EMAIL_ON_SUBMIT", "true")

        self.report_brand_name = os.getenv("REPORT_BRAND_NAME", self.report_brand_name)
        self.report_logo_path = os.getenv("REPORT_LOGO_PATH", "")
        self.advisory_contact_email = os.getenv(
            "ADVISORY_CONTACT_EMAIL", self.advisory_contact_email
        )
