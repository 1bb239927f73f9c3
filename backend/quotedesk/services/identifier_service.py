# Overview: Human-readable document codes and identifier classification.

"""
Identifier Service

QUOTE CODES: "Q-" + sequence number, zero padded to 4 digits ("Q-0001").
The next number derives from the most recently created quote; there is no
counter table. Quotes whose code suffix is not numeric (legacy imports,
hand edits) are skipped and the next most recent quote is used instead.

MATERIAL CODES: "MAT-" + 6 random uppercase alphanumerics. Not sequential,
so collisions are possible; uniqueness is enforced by the database and
handled by concurrency.insert_with_unique_code.

DUAL LOOKUP: every document has an internal integer id and a code. A caller
may pass either; is_internal_id() decides which column to match.
"""

from __future__ import annotations

import random
import string

from ..extensions import db
from ..models import Quote


QUOTE_PREFIX = "Q"
QUOTE_PAD = 4

MATERIAL_PREFIX = "MAT"
MATERIAL_CODE_LENGTH = 6
MATERIAL_CODE_ALPHABET = string.ascii_uppercase + string.digits

# Largest value a BIGINT primary key can hold
MAX_INTERNAL_ID = 2 ** 63 - 1


def format_quote_code(number: int) -> str:
    return f"{QUOTE_PREFIX}-{number:0{QUOTE_PAD}d}"


def parse_code_number(code: str | None, prefix: str = QUOTE_PREFIX) -> int | None:
    """Return the numeric suffix of "<prefix>-<digits>", or None if malformed."""
    head, sep, tail = (code or "").partition("-")
    if head != prefix or not sep:
        return None
    if not (tail.isascii() and tail.isdigit()):
        return None
    return int(tail)


def next_quote_code() -> str:
    """
    Next sequential quote code.

    Newest quote first (created_at, then id to break same-instant ties).
    "Q-0047" -> "Q-0048"; no quotes yet -> "Q-0001"; "Q-9999" -> "Q-10000".
    """
    codes = db.session.query(Quote.code).order_by(Quote.created_at.desc(), Quote.id.desc())

    latest = codes.first()
    if latest is None:
        return format_quote_code(1)

    number = parse_code_number(latest.code)
    if number is None:
        # Latest code is malformed; walk back to the newest well-formed one
        for (code,) in codes.all():
            number = parse_code_number(code)
            if number is not None:
                break
        else:
            number = 0

    return format_quote_code(number + 1)


def generate_material_code(rng: random.Random | None = None) -> str:
    """Random material code; `rng` is injectable for deterministic tests."""
    rng = rng or random
    suffix = "".join(rng.choice(MATERIAL_CODE_ALPHABET) for _ in range(MATERIAL_CODE_LENGTH))
    return f"{MATERIAL_PREFIX}-{suffix}"


def is_internal_id(identifier) -> bool:
    """
    Internal ids are positive integers (or their decimal string form) no
    larger than MAX_INTERNAL_ID.

    Codes always carry a letter prefix, so the two never overlap. An
    out-of-range digit string is looked up as a code and simply not found.
    """
    if isinstance(identifier, bool):
        return False
    if isinstance(identifier, str):
        if not (identifier.isascii() and identifier.isdigit()):
            return False
        if len(identifier) > len(str(MAX_INTERNAL_ID)):
            return False
        identifier = int(identifier)
    if isinstance(identifier, int):
        return 0 < identifier <= MAX_INTERNAL_ID
    return False
