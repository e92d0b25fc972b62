# attendance_api/config.py
"""
Application configuration using Pydantic-Settings.
All settings can be overridden via environment variables or .env file.
"""

import secrets
from pydantic import Field
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # ── Network ───────────────────────────────────────────────────────────
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # ── TLS (served by uvicorn when enabled and both files exist) ─────────
    HTTPS_ENABLED: bool = False
    HTTPS_PORT: int = 3443
    TLS_KEY: Optional[str] = None
    TLS_CERT: Optional[str] = None

    # ── Sessions ──────────────────────────────────────────────────────────
    SESSION_SECRET: str = Field(default_factory=lambda: secrets.token_hex(64))
    SESSION_COOKIE: str = "sid"
    SESSION_TTL_SECONDS: int = 60 * 60 * 8

    # ── CouchDB backend ───────────────────────────────────────────────────
    COUCH_URL: str = "http://127.0.0.1:5984"
    PRIMARY_DB: str = "attendance"
    COUCH_ADMIN_USER: str = ""
    COUCH_ADMIN_PASS: str = ""
    COUCH_TIMEOUT_SECONDS: float = 15.0

    # ── Application ───────────────────────────────────────────────────────
    ADMIN_ROLE: str = "app:admin"
    DEFAULT_PAGE_SIZE: int = 25

    # ── Logging ───────────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None           # default: <project>/logs
    LOG_TO_FILE: bool = True

    @property
    def HAS_ADMIN_CREDENTIAL(self) -> bool:
        return bool(self.COUCH_ADMIN_USER and self.COUCH_ADMIN_PASS)

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
