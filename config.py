"""
Configuration for the Portfolio backend

All settings are read from the environment once (after loading a local .env
file) and handed to the app and services as a single Settings object.
"""

import logging.config
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator


def _flag(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    app_env: str = Field("development", description="production hides error details")
    port: int = Field(5000, description="HTTP port for uvicorn")
    log_level: str = Field("INFO")
    allowed_origin: str = Field("*", description="Origin allowed by CORS")

    database_url: Optional[str] = None
    database_name: Optional[str] = None

    smtp_host: Optional[str] = None
    smtp_port: Optional[int] = Field(None, description="Defaults to 465 with SMTP_SECURE, else 587")
    smtp_secure: bool = Field(False, description="Use implicit TLS (SMTPS) instead of STARTTLS")
    smtp_user: Optional[str] = None
    smtp_pass: Optional[str] = None
    smtp_timeout: float = Field(10.0, description="Connection/greeting timeout in seconds")
    from_name: str = "Portfolio Contact"
    from_email: Optional[str] = None
    to_email: Optional[str] = None

    api_url: str = Field("http://localhost:5000", description="Base URL used by the contact form client")

    @model_validator(mode="after")
    def _default_smtp_port(self) -> "Settings":
        if self.smtp_port is None:
            self.smtp_port = 465 if self.smtp_secure else 587
        return self

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"

    @property
    def email_configured(self) -> bool:
        return bool(self.smtp_host and self.to_email)

    @property
    def sender(self) -> str:
        return self.from_email or self.smtp_user or "no-reply@portfolio.local"

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Settings":
        load_dotenv(env_file)
        env = os.environ
        return cls(
            app_env=env.get("APP_ENV", "development"),
            port=int(env.get("PORT", "5000")),
            log_level=env.get("LOG_LEVEL", "INFO"),
            allowed_origin=env.get("ALLOWED_ORIGIN", "*"),
            database_url=env.get("DATABASE_URL"),
            database_name=env.get("DATABASE_NAME"),
            smtp_host=env.get("SMTP_HOST"),
            smtp_port=int(env["SMTP_PORT"]) if env.get("SMTP_PORT") else None,
            smtp_secure=_flag(env.get("SMTP_SECURE")),
            smtp_user=env.get("SMTP_USER"),
            smtp_pass=env.get("SMTP_PASS"),
            smtp_timeout=float(env.get("SMTP_TIMEOUT", "10")),
            from_name=env.get("FROM_NAME", "Portfolio Contact"),
            from_email=env.get("FROM_EMAIL"),
            to_email=env.get("TO_EMAIL") or env.get("OWNER_EMAIL"),
            api_url=env.get("API_URL", "http://localhost:5000"),
        )


def configure_logging(settings: Settings) -> None:
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "verbose": {
                "format": "{levelname} {asctime} {module} {message}",
                "style": "{",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "verbose",
            },
        },
        "root": {
            "handlers": ["console"],
            "level": settings.log_level.upper(),
        },
        "loggers": {
            "pymongo": {
                "handlers": ["console"],
                "level": "WARNING",
                "propagate": False,
            },
        },
    })
