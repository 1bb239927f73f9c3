# backend/quotedesk/config.py
from __future__ import annotations
import os


def _origins(raw: str) -> set[str]:
    return {o.strip() for o in raw.split(",") if o.strip()}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/quotedesk.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///quotedesk.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Frontend base URL, used to build password reset links
    CLIENT_URL = os.environ.get("CLIENT_URL", "http://localhost:5173")
    CORS_ORIGINS = _origins(os.environ.get(
        "CORS_ORIGINS",
        "http://localhost:5173,http://127.0.0.1:5173",
    ))

    # Outbound mail (Resend HTTP API). No key means links are only logged.
    RESEND_API_KEY = os.environ.get("RESEND_API_KEY")
    RESEND_API_URL = os.environ.get("RESEND_API_URL", "https://api.resend.com/emails")
    MAIL_FROM = os.environ.get("MAIL_FROM", "Quotes <onboarding@resend.dev>")
    MAIL_TIMEOUT_SECONDS = float(os.environ.get("MAIL_TIMEOUT_SECONDS", "10"))

    SESSION_TTL_DAYS = int(os.environ.get("SESSION_TTL_DAYS", "7"))
    RESET_TOKEN_TTL_MINUTES = int(os.environ.get("RESET_TOKEN_TTL_MINUTES", "10"))

    # Document code allocation: total insert attempts on a code collision
    CODE_RETRY_ATTEMPTS = int(os.environ.get("CODE_RETRY_ATTEMPTS", "2"))
    CODE_RETRY_BACKOFF = float(os.environ.get("CODE_RETRY_BACKOFF", "0.05"))

    # bcrypt cost factor; tests lower it to keep hashing fast
    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))
