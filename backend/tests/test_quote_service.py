# Overview: Pytest coverage for the window quote lifecycle, versioning and owner scoping.

"""
Quote Service Tests

Covers:
1. Create: server-side pricing, defaults, validation
2. Update: recompute-on-edit, one version entry per update
3. Lookup by id or code, scoped to the owner
4. Listing: pagination clamps, filters, sort
"""

import pytest

from quotedesk.models import QuoteWindow, QuoteVersion
from quotedesk.services import quote_service
from quotedesk.validation import NotFoundError, ValidationError

from helpers import window, small_window


@pytest.fixture
def quote(db_session, user_a):
    return quote_service.create_quote(user_a.id, {
        "client_name": "Acme Builders",
        "project": "Tower B",
        "packing_charge": 50,
        "windows": [window(), small_window()],
    })


class TestCreateQuote:
    def test_totals(self, quote):
        assert quote.code == "Q-0001"
        assert quote.status == "pending"
        assert quote.subtotal == pytest.approx(350.5)
        assert quote.first_tax_amount == pytest.approx(31.545)
        assert quote.second_tax_amount == pytest.approx(31.545)
        assert quote.grand_total == pytest.approx(463.59)

    def test_lines_stored_in_order(self, quote):
        assert [w.position for w in quote.windows] == [0, 1]
        assert [w.window_type for w in quote.windows] == ["slider", "fixed-left"]
        assert quote.windows[1].sq_ft == 4.0

    def test_tax_defaults(self, db_session, user_a):
        quote = quote_service.create_quote(user_a.id, {"windows": [window()]})
        assert quote.apply_tax is True
        assert quote.first_tax_percent == 9.0
        assert quote.second_tax_percent == 9.0
        assert quote.packing_charge == 0.0
        assert quote.grand_total == pytest.approx(354.0)

    def test_no_tax(self, db_session, user_a):
        quote = quote_service.create_quote(user_a.id, {"apply_tax": False, "windows": [window()]})
        assert quote.first_tax_amount == 0
        assert quote.grand_total == 300.0

    def test_empty_windows_rejected(self, db_session, user_a):
        with pytest.raises(ValidationError, match="Window list is empty"):
            quote_service.create_quote(user_a.id, {"client_name": "X", "windows": []})

    def test_unknown_field_rejected(self, db_session, user_a):
        with pytest.raises(ValidationError, match="grand_total"):
            quote_service.create_quote(user_a.id, {"grand_total": 1, "windows": [window()]})

    @pytest.mark.parametrize("payload", [
        {"status": "archived"},
        {"first_tax_percent": 101},
        {"packing_charge": -1},
        {"packing_charge": "abc"},
        {"first_tax_percent": "abc"},
        {"second_tax_percent": [9]},
        {"apply_tax": "maybe"},
    ])
    def test_invalid_fields_rejected(self, db_session, user_a, payload):
        with pytest.raises(ValidationError):
            quote_service.create_quote(user_a.id, {**payload, "windows": [window()]})

    def test_starts_without_history(self, quote):
        assert quote.versions == []
        assert quote.to_dict()["version_count"] == 0


class TestUpdateQuote:
    def test_packing_only_update_keeps_subtotal(self, quote, user_a):
        updated = quote_service.update_quote(user_a.id, quote.code, {"packing_charge": 100})

        assert updated.subtotal == pytest.approx(350.5)
        assert updated.first_tax_amount == pytest.approx(31.545)
        assert updated.grand_total == pytest.approx(513.59)

    def test_tax_toggle_recomputes(self, quote, user_a):
        updated = quote_service.update_quote(user_a.id, quote.id, {"apply_tax": False})
        assert updated.first_tax_amount == 0
        assert updated.second_tax_amount == 0
        assert updated.grand_total == pytest.approx(400.5)

    def test_windows_replace_lines(self, db_session, quote, user_a):
        updated = quote_service.update_quote(user_a.id, quote.code, {"windows": [window(quantity=2)]})

        assert len(updated.windows) == 1
        assert updated.subtotal == 600.0
        assert updated.grand_total == pytest.approx(600 * 1.18 + 50)
        assert db_session.query(QuoteWindow).count() == 1

    def test_exactly_one_version_per_update(self, db_session, quote, user_a):
        quote_service.update_quote(user_a.id, quote.code, {"client_name": "New", "windows": [window()]})
        assert db_session.query(QuoteVersion).count() == 1

        quote_service.update_quote(user_a.id, quote.code, {"status": "approved"})
        assert db_session.query(QuoteVersion).count() == 2

    def test_version_holds_previous_state(self, quote, user_a):
        quote_service.update_quote(user_a.id, quote.code, {"windows": [window(quantity=3)], "client_name": "New"})

        versions = quote_service.list_versions(user_a.id, quote.code)
        assert len(versions) == 1
        previous = versions[0]["previous"]
        assert versions[0]["version_number"] == 1
        assert versions[0]["timestamp"].endswith("Z")
        assert previous["subtotal"] == pytest.approx(350.5)
        assert previous["grand_total"] == pytest.approx(463.59)
        assert previous["client_name"] == "Acme Builders"
        assert previous["status"] == "pending"
        assert len(previous["windows"]) == 2

    def test_version_numbers_increase(self, quote, user_a):
        for charge in (10, 20, 30):
            quote_service.update_quote(user_a.id, quote.code, {"packing_charge": charge})

        versions = quote_service.list_versions(user_a.id, quote.code)
        assert [v["version_number"] for v in versions] == [1, 2, 3]
        assert [v["previous"]["packing_charge"] for v in versions] == [50, 10, 20]

    def test_empty_update_records_no_version(self, quote, user_a):
        quote_service.update_quote(user_a.id, quote.code, {})
        assert quote_service.list_versions(user_a.id, quote.code) == []

    def test_empty_windows_list_rejected(self, quote, user_a):
        with pytest.raises(ValidationError, match="Window list is empty"):
            quote_service.update_quote(user_a.id, quote.code, {"windows": []})

    def test_rejected_update_changes_nothing(self, db_session, quote, user_a):
        with pytest.raises(ValidationError):
            quote_service.update_quote(user_a.id, quote.code, {"client_name": "New", "windows": [window(width=0)]})

        db_session.expire_all()
        fresh = quote_service.get_quote(user_a.id, quote.code)
        assert fresh.client_name == "Acme Builders"
        assert fresh.versions == []

    def test_any_status_transition_allowed(self, quote, user_a):
        quote_service.update_quote(user_a.id, quote.code, {"status": "rejected"})
        updated = quote_service.update_quote(user_a.id, quote.code, {"status": "pending"})
        assert updated.status == "pending"


class TestOwnership:
    def test_get_by_id_and_code(self, quote, user_a):
        assert quote_service.get_quote(user_a.id, quote.id).code == quote.code
        assert quote_service.get_quote(user_a.id, str(quote.id)).code == quote.code
        assert quote_service.get_quote(user_a.id, quote.code).id == quote.id

    def test_other_user_sees_not_found(self, quote, user_b):
        with pytest.raises(NotFoundError, match="Quote not found"):
            quote_service.get_quote(user_b.id, quote.code)

    def test_other_user_cannot_update(self, quote, user_a, user_b):
        with pytest.raises(NotFoundError):
            quote_service.update_quote(user_b.id, quote.code, {"status": "approved"})
        assert quote_service.get_quote(user_a.id, quote.code).status == "pending"

    def test_other_user_cannot_delete(self, quote, user_a, user_b):
        with pytest.raises(NotFoundError):
            quote_service.delete_quote(user_b.id, quote.code)
        assert quote_service.get_quote(user_a.id, quote.code)

    def test_delete_removes_lines_and_history(self, db_session, quote, user_a):
        quote_service.update_quote(user_a.id, quote.code, {"packing_charge": 0})

        result = quote_service.delete_quote(user_a.id, quote.id)

        assert result == {"deleted_code": "Q-0001"}
        assert db_session.query(QuoteWindow).count() == 0
        assert db_session.query(QuoteVersion).count() == 0
        with pytest.raises(NotFoundError):
            quote_service.get_quote(user_a.id, quote.code)

    def test_unknown_identifier(self, db_session, user_a):
        with pytest.raises(NotFoundError):
            quote_service.get_quote(user_a.id, "Q-9999")
        with pytest.raises(NotFoundError):
            quote_service.get_quote(user_a.id, 424242)

    def test_out_of_range_id_is_not_found(self, quote, user_a):
        for identifier in ("99999999999999999999999", str(2 ** 63), "9" * 5000):
            with pytest.raises(NotFoundError):
                quote_service.get_quote(user_a.id, identifier)
            with pytest.raises(NotFoundError):
                quote_service.update_quote(user_a.id, identifier, {"status": "approved"})
            with pytest.raises(NotFoundError):
                quote_service.delete_quote(user_a.id, identifier)


class TestListQuotes:
    @pytest.fixture
    def three_quotes(self, db_session, user_a, user_b):
        created = [
            quote_service.create_quote(user_a.id, {"client_name": name, "windows": [window(quantity=qty)]})
            for name, qty in (("Alpha", 1), ("Bravo", 3), ("Charlie", 2))
        ]
        quote_service.create_quote(user_b.id, {"windows": [window()]})
        return created

    def test_defaults_newest_first(self, three_quotes, user_a):
        result = quote_service.list_quotes(user_a.id)

        assert result["page"] == 1
        assert result["limit"] == 10
        assert result["total"] == 3
        assert result["pages"] == 1
        assert [q["code"] for q in result["items"]] == ["Q-0003", "Q-0002", "Q-0001"]

    def test_only_own_quotes(self, three_quotes, user_b):
        result = quote_service.list_quotes(user_b.id)
        assert [q["code"] for q in result["items"]] == ["Q-0004"]

    def test_limit_is_capped(self, three_quotes, user_a):
        assert quote_service.list_quotes(user_a.id, limit=1000)["limit"] == 100

    def test_page_zero_becomes_one(self, three_quotes, user_a):
        assert quote_service.list_quotes(user_a.id, page=0)["page"] == 1

    def test_paging(self, three_quotes, user_a):
        result = quote_service.list_quotes(user_a.id, page=2, limit=2)
        assert result["pages"] == 2
        assert [q["code"] for q in result["items"]] == ["Q-0001"]

    def test_string_params_from_query_string(self, three_quotes, user_a):
        result = quote_service.list_quotes(user_a.id, page="1", limit="2")
        assert result["limit"] == 2
        assert len(result["items"]) == 2

    def test_status_filter(self, three_quotes, user_a):
        quote_service.update_quote(user_a.id, "Q-0002", {"status": "approved"})
        result = quote_service.list_quotes(user_a.id, status="approved")
        assert [q["code"] for q in result["items"]] == ["Q-0002"]

    def test_code_search_is_case_insensitive(self, three_quotes, user_a):
        result = quote_service.list_quotes(user_a.id, q="q-0003")
        assert [q["code"] for q in result["items"]] == ["Q-0003"]

    def test_sort_by_grand_total(self, three_quotes, user_a):
        result = quote_service.list_quotes(user_a.id, sort="-grand_total")
        assert [q["client_name"] for q in result["items"]] == ["Bravo", "Charlie", "Alpha"]

    def test_unknown_sort_rejected(self, three_quotes, user_a):
        with pytest.raises(ValidationError, match="Cannot sort by"):
            quote_service.list_quotes(user_a.id, sort="password_hash")

    def test_empty_result(self, db_session, user_a):
        result = quote_service.list_quotes(user_a.id)
        assert result["total"] == 0
        assert result["pages"] == 0
        assert result["items"] == []


class TestRecompute:
    def test_recompute_after_manual_edit(self, db_session, quote):
        quote.grand_total = 0
        db_session.commit()

        assert quote_service.recompute_totals(quote) is True
        assert quote.grand_total == pytest.approx(463.59)
        assert quote_service.recompute_totals(quote) is False


def test_null_packing_charge_means_zero(db_session, user_a):
    quote = quote_service.create_quote(user_a.id, {"packing_charge": None, "windows": [window()]})
    assert quote.packing_charge == 0
    assert quote.grand_total == pytest.approx(354.0)


def test_oversized_line_amount_rejected(db_session, user_a):
    huge = window(width=999_999_999, height=999_999_999, price_per_sqft=999_999_999, quantity=999_999_999)
    with pytest.raises(ValidationError, match="amount cannot exceed"):
        quote_service.create_quote(user_a.id, {"windows": [huge]})
