# Overview: Pytest coverage for document codes and the unique-code insert retry.

import random
from datetime import timedelta

import pytest

from quotedesk.models import Quote, MaterialQuote
from quotedesk.services import quote_service, material_service
from quotedesk.services.identifier_service import (
    format_quote_code,
    generate_material_code,
    is_internal_id,
    next_quote_code,
    parse_code_number,
)
from quotedesk.time_utils import utcnow
from quotedesk.validation import ConflictError, PersistenceError

from helpers import window, material


def _bare_quote(user, code, created_at):
    quote = Quote(code=code, user_id=user.id, created_at=created_at, updated_at=created_at)
    return quote


class TestFormatting:
    def test_format(self):
        assert format_quote_code(1) == "Q-0001"
        assert format_quote_code(48) == "Q-0048"
        assert format_quote_code(10000) == "Q-10000"

    @pytest.mark.parametrize("code,expected", [
        ("Q-0047", 47),
        ("Q-10000", 10000),
        ("Q-", None),
        ("Q-12a", None),
        ("LEGACY-7", None),
        ("Q0047", None),
        (None, None),
    ])
    def test_parse(self, code, expected):
        assert parse_code_number(code) == expected

    def test_material_code_shape(self):
        code = generate_material_code(random.Random(7))
        assert code.startswith("MAT-")
        suffix = code[4:]
        assert len(suffix) == 6
        assert all(c.isupper() or c.isdigit() for c in suffix)

    def test_material_code_uses_rng(self):
        assert generate_material_code(random.Random(1)) == generate_material_code(random.Random(1))

    @pytest.mark.parametrize("identifier,expected", [
        (5, True),
        ("12", True),
        ("Q-0001", False),
        ("MAT-AB12CD", False),
        ("", False),
        (0, False),
        (True, False),
        ("１２", False),
        (str(2 ** 63 - 1), True),
        (str(2 ** 63), False),
        (2 ** 63, False),
        ("99999999999999999999999", False),
    ])
    def test_is_internal_id(self, identifier, expected):
        assert is_internal_id(identifier) is expected


class TestNextQuoteCode:
    def test_first_quote(self, db_session):
        assert next_quote_code() == "Q-0001"

    def test_increments_latest(self, db_session, user_a):
        now = utcnow()
        db_session.add(_bare_quote(user_a, "Q-0046", now - timedelta(minutes=2)))
        db_session.add(_bare_quote(user_a, "Q-0047", now - timedelta(minutes=1)))
        db_session.commit()

        assert next_quote_code() == "Q-0048"

    def test_sequence_is_global_across_users(self, db_session, user_a, user_b):
        db_session.add(_bare_quote(user_b, "Q-0009", utcnow()))
        db_session.commit()

        quote = quote_service.create_quote(user_a.id, {"windows": [window()]})
        assert quote.code == "Q-0010"

    def test_malformed_latest_falls_back_to_newest_valid(self, db_session, user_a):
        now = utcnow()
        db_session.add(_bare_quote(user_a, "Q-0005", now - timedelta(minutes=2)))
        db_session.add(_bare_quote(user_a, "LEGACY-7", now - timedelta(minutes=1)))
        db_session.commit()

        assert next_quote_code() == "Q-0006"

    def test_only_malformed_codes_restart_at_one(self, db_session, user_a):
        db_session.add(_bare_quote(user_a, "OLD-1", utcnow()))
        db_session.commit()

        assert next_quote_code() == "Q-0001"


class TestUniqueCodeRetry:
    def test_collision_retries_with_fresh_code(self, db_session, user_a, monkeypatch):
        quote_service.create_quote(user_a.id, {"windows": [window()]})

        # First allocation loses the race to the existing Q-0001
        codes = iter(["Q-0001", "Q-0002"])
        monkeypatch.setattr(quote_service, "next_quote_code", lambda: next(codes))

        quote = quote_service.create_quote(user_a.id, {"windows": [window()]})

        assert quote.code == "Q-0002"
        assert db_session.query(Quote).count() == 2

    def test_repeated_collision_is_conflict(self, db_session, user_a, monkeypatch):
        quote_service.create_quote(user_a.id, {"windows": [window()]})
        monkeypatch.setattr(quote_service, "next_quote_code", lambda: "Q-0001")

        with pytest.raises(ConflictError):
            quote_service.create_quote(user_a.id, {"windows": [window()]})

        assert db_session.query(Quote).count() == 1

    def test_material_code_collision_retries(self, db_session, user_a, monkeypatch):
        first = material_service.create_material_quote(user_a.id, {"materials": [material()]})

        codes = iter([first.code, "MAT-ZZZZZZ"])
        monkeypatch.setattr(material_service, "generate_material_code", lambda: next(codes))

        second = material_service.create_material_quote(user_a.id, {"materials": [material()]})

        assert second.code == "MAT-ZZZZZZ"
        assert db_session.query(MaterialQuote).count() == 2

    def test_attempt_count_is_configurable(self, app, db_session, user_a, monkeypatch):
        quote_service.create_quote(user_a.id, {"windows": [window()]})

        calls = []

        def always_taken():
            calls.append(1)
            return "Q-0001"

        monkeypatch.setattr(quote_service, "next_quote_code", always_taken)
        monkeypatch.setitem(app.config, "CODE_RETRY_ATTEMPTS", 4)

        with pytest.raises(ConflictError):
            quote_service.create_quote(user_a.id, {"windows": [window()]})

        assert len(calls) == 4

    def test_other_integrity_errors_are_not_retried(self, db_session, user_a, monkeypatch):
        calls = []

        def allocate():
            calls.append(1)
            return f"Q-{len(calls):04d}"

        monkeypatch.setattr(quote_service, "next_quote_code", allocate)

        # user_id is NOT NULL; that failure is not a code collision
        with pytest.raises(PersistenceError):
            quote_service.create_quote(None, {"windows": [window()]})

        assert len(calls) == 1
        assert db_session.query(Quote).count() == 0
