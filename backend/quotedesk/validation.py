from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from sqlalchemy import Boolean, Float, Integer, Numeric, String, Text
from sqlalchemy.orm import DeclarativeMeta

from .models import DOCUMENT_STATUSES


# Upper bound for any money-like input; keeps floats well inside exact range
MAX_MONEY_VALUE = 999_999_999.99


class ServiceError(Exception):
    """Domain error with a client-safe message and an HTTP-equivalent status."""
    status_code = 400


class ValidationError(ServiceError, ValueError):
    """400-level input problem."""
    status_code = 400


class NotFoundError(ServiceError, LookupError):
    """404-level: no such document for this owner (also used for other owners' documents)."""
    status_code = 404


class ConflictError(ServiceError, ValueError):
    """409-level conflict (e.g., duplicate email, document code collision)."""
    status_code = 409


class PersistenceError(Exception):
    """Storage failure. Logged in full server-side; clients only see a generic 500."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """writable_fields: what clients are allowed to set (security boundary)."""
    writable_fields: set[str]


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def coerce_number(field: str, value: Any, *, integer: bool = False) -> float | int:
    """
    Strictly convert client input to a finite number.

    Accepts ints, floats and plain numeric strings. Booleans, blanks, NaN and
    infinities are rejected instead of being silently treated as zero.
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} must be a number")

    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} must be a number")
        if integer:
            # Reject decimal points and scientific notation (e.g., "12.5", "1e3")
            if "." in stripped or "e" in stripped.lower():
                raise ValidationError(f"{field} must be a whole number")
            try:
                return int(stripped)
            except ValueError:
                raise ValidationError(f"{field} must be a whole number")
        try:
            value = float(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be a number")

    if integer:
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        raise ValidationError(f"{field} must be a whole number")

    if not isinstance(value, (int, float)):
        raise ValidationError(f"{field} must be a number")
    if not math.isfinite(value):
        raise ValidationError(f"{field} must be a finite number")
    return float(value)


def coerce_bool(field: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ValidationError(f"{field} must be true or false")


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    if isinstance(coltype, Boolean):
        return coerce_bool(col.key, value)

    if isinstance(coltype, Integer):
        return coerce_number(col.key, value, integer=True)

    # Money columns; Float is not a Numeric subclass on every SQLAlchemy release
    if isinstance(coltype, (Float, Numeric)):
        return coerce_number(col.key, value)

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        if isinstance(value, (dict, list)):
            raise ValidationError(f"{col.key} must be text")
        return str(value).strip()

    # Default: leave as-is
    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    Returns a cleaned patch dict with only the keys that were provided.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    cols = _columns_by_key(model)

    # Reject unknown / non-writable fields
    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")
        if k not in cols:
            raise ValidationError(f"Unknown field: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

        # NULL handling
        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    return patch


def enforce_rules_status(patch: dict) -> None:
    # Flat enum; any status may follow any other
    if "status" in patch and patch["status"] not in DOCUMENT_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(DOCUMENT_STATUSES)}")


def enforce_rules_quote(patch: dict) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Keep these small and centralized.
    """
    enforce_rules_status(patch)

    for field in ("first_tax_percent", "second_tax_percent"):
        if field in patch:
            pct = patch[field]
            if pct < 0 or pct > 100:
                raise ValidationError(f"{field} must be between 0 and 100")

    if "packing_charge" in patch:
        charge = patch["packing_charge"]
        if charge < 0:
            raise ValidationError("packing_charge must be >= 0")
        if charge > MAX_MONEY_VALUE:
            raise ValidationError(f"packing_charge cannot exceed {MAX_MONEY_VALUE:,.2f}")
