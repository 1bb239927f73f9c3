# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service

Users register with name + email + password and log in with email +
password. Passwords are hashed with bcrypt; password reset tokens are random,
emailed in plaintext and stored only as a SHA-256 digest with an expiry.

SECURITY NOTES:
- bcrypt cost factor from BCRYPT_ROUNDS (default 12)
- Minimum 8 characters, at least one letter and one digit
- Reset tokens are single use and expire after RESET_TOKEN_TTL_MINUTES
- A successful reset revokes every open session of the user
"""

from __future__ import annotations

import hashlib
import re
import secrets
from datetime import timedelta

import bcrypt
from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import User
from ..validation import ConflictError, ValidationError
from quotedesk.time_utils import utcnow
from .session_service import revoke_all_user_sessions


EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
EMAIL_TAKEN_MESSAGE = "Email already exists. Please login instead."


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""
    pass


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def validate_password_strength(password: str | None) -> None:
    """
    Validate password meets strength requirements.

    Requirements:
    - Minimum 8 characters
    - At least one letter
    - At least one digit

    Raises PasswordValidationError if requirements not met.
    """
    if not password or len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r"[A-Za-z]", password):
        raise PasswordValidationError("Password must contain at least one letter")

    if not re.search(r"\d", password):
        raise PasswordValidationError("Password must contain at least one digit")


def hash_password(password: str) -> str:
    """Hash password using bcrypt. Password is validated for strength before hashing."""
    validate_password_strength(password)
    rounds = int(current_app.config.get("BCRYPT_ROUNDS", 12))
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    WHY timing-safe: bcrypt.checkpw() prevents timing attacks automatically.
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def email_registered(email: str) -> bool:
    return db.session.query(User.id).filter_by(email=email).first() is not None


def register_user(name: str | None, email: str | None, password: str | None) -> User:
    """
    Create a new user.

    Raises:
        ValidationError: missing name/email/password or malformed email
        PasswordValidationError: weak password
        ConflictError: email already registered
    """
    name = (name or "").strip()
    email = normalize_email(email)

    if not name or not email or not password:
        raise ValidationError("All fields are required")
    if len(name) > 120:
        raise ValidationError("name exceeds max length 120")
    if not EMAIL_PATTERN.match(email) or len(email) > 255:
        raise ValidationError("Invalid email address")

    if email_registered(email):
        raise ConflictError(EMAIL_TAKEN_MESSAGE)

    user = User(name=name, email=email, password_hash=hash_password(password))

    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # A concurrent registration won the unique index on email
        db.session.rollback()
        raise ConflictError(EMAIL_TAKEN_MESSAGE)
    return user


def authenticate(email: str | None, password: str | None) -> User | None:
    """
    Authenticate user with email and password.

    Returns User if credentials valid, None otherwise.
    Updates last_login_at timestamp on successful authentication.
    """
    if not email or not password:
        return None

    user = db.session.query(User).filter(
        User.email == normalize_email(email),
        User.is_active.is_(True),
    ).first()

    if not user:
        return None

    if verify_password(password, user.password_hash):
        user.last_login_at = utcnow()
        db.session.commit()
        return user

    return None


def start_password_reset(email: str | None) -> tuple[User, str] | None:
    """
    Issue a reset token for the account with this email.

    Returns (user, plaintext_token), or None when no active account matches.
    Only the token hash is stored; a new request replaces any older token.
    """
    user = db.session.query(User).filter(
        User.email == normalize_email(email),
        User.is_active.is_(True),
    ).first()
    if not user:
        return None

    token = secrets.token_hex(32)
    ttl = timedelta(minutes=int(current_app.config.get("RESET_TOKEN_TTL_MINUTES", 10)))

    user.reset_token_hash = hash_reset_token(token)
    user.reset_token_expires_at = utcnow() + ttl
    db.session.commit()

    return user, token


def reset_password(token: str | None, new_password: str | None) -> User:
    """
    Set a new password using a reset token.

    Raises ValidationError for a missing password, an unknown token or an
    expired token.
    """
    if not new_password:
        raise ValidationError("Password is required")
    if not token:
        raise ValidationError("Invalid or expired token")

    user = db.session.query(User).filter(
        User.reset_token_hash == hash_reset_token(token),
        User.reset_token_expires_at > utcnow(),
    ).first()

    if not user:
        raise ValidationError("Invalid or expired token")

    user.password_hash = hash_password(new_password)
    user.reset_token_hash = None
    user.reset_token_expires_at = None
    db.session.commit()

    revoke_all_user_sessions(user.id, reason="Password reset")
    return user
