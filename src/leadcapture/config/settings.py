"""
Application configuration settings for the lead capture service.
"""

import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """
    Application settings configuration.

    Values are read from the environment when the instance is created, so a
    settings object built inside ``patch.dict(os.environ, ...)`` sees the
    patched values.
    """

    def __init__(self):
        # Persistence
        self.DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///data/leads.db")
        self.TABLE_NAME = os.getenv("TABLE_NAME", "submissions")

        # Notification addresses
        self.TO_EMAIL = os.getenv("TO_EMAIL", "").strip()
        self.FROM_EMAIL = os.getenv("FROM_EMAIL", "").strip()

        # SMTP transport
        self.SMTP_HOST = os.getenv("SMTP_HOST", "localhost")
        self.SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
        self.SMTP_USER = os.getenv("SMTP_USER", "")
        self.SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
        self.SMTP_TLS_MODE = os.getenv("SMTP_TLS_MODE", "starttls").strip().lower()  # starttls|ssl|none
        self.SMTP_TIMEOUT = float(os.getenv("SMTP_TIMEOUT", "10"))

        # Validation
        self.STRICT_VALIDATION = _env_bool("STRICT_VALIDATION", "true")

        # Auto-reply boilerplate
        self.BUSINESS_NAME = os.getenv("BUSINESS_NAME", "Meatfest Catering")
        self.BUSINESS_PHONE = os.getenv("BUSINESS_PHONE", "(614) 555-1234")
        self.BUSINESS_HOURS = os.getenv("BUSINESS_HOURS", "Mon-Fri 9am-6pm EST")
        self.BUSINESS_CITY = os.getenv("BUSINESS_CITY", "Columbus, Ohio")

        # Server
        self.API_HOST = os.getenv("API_HOST", "0.0.0.0")
        self.API_PORT = int(os.getenv("API_PORT", "8000"))
        self.API_RELOAD = _env_bool("API_RELOAD", "false")

        # Client
        self.API_URL = os.getenv("LEADCAPTURE_API_URL", "")

        # Logging
        self.LOG_DIR = os.getenv("LOG_DIR", "logs")
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    def missing_email_settings(self) -> list:
        """Return the names of unset notification addresses."""
        return [name for name in ("TO_EMAIL", "FROM_EMAIL") if not getattr(self, name)]

