# Overview: Commit and retry helpers; turns storage failures into domain errors.

from __future__ import annotations

import time
from typing import Callable, TypeVar

from flask import current_app
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db
from ..validation import ConflictError, PersistenceError

T = TypeVar("T")


def is_code_collision(exc: IntegrityError, table: str) -> bool:
    """
    True when the failed insert hit the unique constraint on `<table>.code`.

    PostgreSQL names the constraint (uq_<table>_code); SQLite names the
    column ("UNIQUE constraint failed: <table>.code").
    """
    message = str(exc.orig)
    return f"uq_{table}_code" in message or f"{table}.code" in message


def run_with_retry(func: Callable[[], T], *, attempts: int = 3, backoff_base: float = 0.1) -> T:
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, locks) and StaleDataError
    (optimistic locking conflicts). Any other SQLAlchemy failure, or the
    last failed attempt, surfaces as PersistenceError. Domain errors raised
    by func pass through untouched.
    """
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            db.session.rollback()
            if attempt >= attempts - 1:
                raise PersistenceError("Database busy") from exc
            time.sleep(backoff_base * (2 ** attempt))
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise PersistenceError("Database error") from exc
    raise PersistenceError("Database error")


def insert_with_unique_code(build: Callable[[str], T], next_code: Callable[[], str]) -> T:
    """
    Allocate a human-readable code, insert the document built for it and commit.

    Code allocation reads existing rows and is not atomic with the insert, so
    two writers can pick the same code. The unique constraint on `code`
    rejects the loser; we roll back, back off and try again with a freshly
    allocated code. After CODE_RETRY_ATTEMPTS inserts the collision is
    surfaced as ConflictError. Any other integrity failure (NOT NULL, foreign
    key) is a PersistenceError and is not retried.

    `build` must construct a brand-new object graph on every call: rollback
    expunges the previous attempt's pending objects.
    """
    attempts = max(1, int(current_app.config.get("CODE_RETRY_ATTEMPTS", 2)))
    backoff_base = float(current_app.config.get("CODE_RETRY_BACKOFF", 0.05))

    for attempt in range(attempts):
        code = next_code()
        document = build(code)
        db.session.add(document)
        try:
            db.session.commit()
            return document
        except IntegrityError as exc:
            db.session.rollback()
            if not is_code_collision(exc, document.__tablename__):
                raise PersistenceError("Database error") from exc
            current_app.logger.warning(
                "Document code %s already taken (attempt %d of %d)", code, attempt + 1, attempts
            )
            if attempt < attempts - 1 and backoff_base > 0:
                time.sleep(backoff_base * (2 ** attempt))
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise PersistenceError("Database error") from exc

    raise ConflictError("Could not allocate a unique document code, please retry")
