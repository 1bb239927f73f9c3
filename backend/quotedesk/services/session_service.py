# Overview: Bearer-token sessions for the quoting API.

"""
Sessions

A login hands the client a random 64-char hex token. Only its SHA-256
digest is stored, so a leaked sessions table cannot be replayed. A session
lives SESSION_TTL_DAYS from creation (no sliding renewal). Logout and
password reset revoke it early; so does deactivating the user.
"""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta

from flask import current_app

from ..extensions import db
from ..models import SessionToken, User
from quotedesk.time_utils import utcnow


@dataclass
class SessionContext:
    """What require_auth puts on flask.g for the current request."""
    user: User
    session: SessionToken


def generate_token() -> str:
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    # Tokens carry 256 bits of entropy, a plain digest is enough
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _session_ttl() -> timedelta:
    return timedelta(days=int(current_app.config.get("SESSION_TTL_DAYS", 7)))


def _open_session(token: str) -> SessionToken | None:
    return (
        db.session.query(SessionToken)
        .filter(SessionToken.token_hash == hash_token(token), SessionToken.is_revoked.is_(False))
        .first()
    )


def _close(session: SessionToken, reason: str, when: datetime) -> None:
    session.is_revoked = True
    session.revoked_at = when
    session.revoked_reason = reason


def create_session(user_id: int, user_agent: str | None = None, ip_address: str | None = None):
    """Open a session for `user_id`; returns (SessionToken, plaintext token)."""
    if db.session.get(User, user_id) is None:
        raise ValueError("User not found")

    token = generate_token()
    opened_at = utcnow()
    record = SessionToken(
        user_id=user_id,
        token_hash=hash_token(token),
        created_at=opened_at,
        last_used_at=opened_at,
        expires_at=opened_at + _session_ttl(),
        user_agent=(user_agent or "")[:255] or None,
        ip_address=ip_address,
        is_revoked=False,
    )
    db.session.add(record)
    db.session.commit()
    return record, token


def validate_session(token: str) -> SessionContext | None:
    """
    Resolve a bearer token to its user, or None.

    Unknown, revoked and expired tokens all give None. A token whose user
    was deactivated is closed on sight.
    """
    record = _open_session(token)
    if record is None:
        return None

    seen_at = utcnow()
    if record.expires_at < seen_at:
        return None

    if record.user is None or not record.user.is_active:
        _close(record, "User account deactivated", seen_at)
        db.session.commit()
        return None

    record.last_used_at = seen_at
    db.session.commit()
    return SessionContext(user=record.user, session=record)


def revoke_session(token: str, reason: str = "User logout") -> bool:
    """Close one session. False if the token was unknown or already closed."""
    record = _open_session(token)
    if record is None:
        return False
    _close(record, reason, utcnow())
    db.session.commit()
    return True


def revoke_all_user_sessions(user_id: int, reason: str = "Revoke all sessions") -> int:
    """Close every open session of a user; returns how many were closed."""
    closed_at = utcnow()
    records = (
        db.session.query(SessionToken)
        .filter(SessionToken.user_id == user_id, SessionToken.is_revoked.is_(False))
        .all()
    )
    for record in records:
        _close(record, reason, closed_at)
    db.session.commit()
    return len(records)


def cleanup_expired_sessions(retention_days: int = 30) -> int:
    """Delete closed or expired sessions created more than `retention_days` ago."""
    now = utcnow()
    deleted = (
        db.session.query(SessionToken)
        .filter(
            db.or_(SessionToken.expires_at < now, SessionToken.is_revoked.is_(True)),
            SessionToken.created_at < now - timedelta(days=retention_days),
        )
        .delete(synchronize_session=False)
    )
    db.session.commit()
    return deleted
