# Overview: Pytest coverage for material quotes.

import pytest

from quotedesk.models import MaterialLine, MaterialQuoteVersion
from quotedesk.services import material_service
from quotedesk.validation import NotFoundError, ValidationError

from helpers import material


RECIPIENT = {"to_name": "R. Mehta", "company": "Mehta Glass", "address": "12 Ring Road", "reference": "PO-17"}


@pytest.fixture
def material_quote(db_session, user_a):
    return material_service.create_material_quote(user_a.id, {
        "recipient_info": RECIPIENT,
        "materials": [material(), material(description="Rubber gasket", unit="pcs", qty=4, rate=2.5)],
    })


class TestCreateMaterialQuote:
    def test_total_is_sum_of_lines(self, material_quote):
        assert material_quote.code.startswith("MAT-")
        assert material_quote.total_value == 760.0
        assert [m.amount for m in material_quote.materials] == [750.0, 10.0]
        assert material_quote.status == "pending"

    def test_recipient_info_round_trip(self, material_quote):
        assert material_quote.to_dict()["recipient_info"] == RECIPIENT

    def test_recipient_optional(self, db_session, user_a):
        mq = material_service.create_material_quote(user_a.id, {"materials": [material()]})
        assert mq.recipient_info == {"to_name": "", "company": "", "address": "", "reference": ""}

    def test_empty_materials_rejected(self, db_session, user_a):
        with pytest.raises(ValidationError, match="Material list is empty"):
            material_service.create_material_quote(user_a.id, {"materials": []})

    def test_unknown_recipient_key_rejected(self, db_session, user_a):
        with pytest.raises(ValidationError, match="phone"):
            material_service.create_material_quote(user_a.id, {
                "recipient_info": {"phone": "123"},
                "materials": [material()],
            })

    def test_recipient_must_be_object(self, db_session, user_a):
        with pytest.raises(ValidationError, match="recipient_info"):
            material_service.create_material_quote(user_a.id, {"recipient_info": "Bob", "materials": [material()]})


class TestUpdateMaterialQuote:
    def test_replacing_lines_recomputes_total(self, db_session, material_quote, user_a):
        updated = material_service.update_material_quote(
            user_a.id, material_quote.code, {"materials": [material(qty=2)]}
        )
        assert updated.total_value == 150.0
        assert db_session.query(MaterialLine).count() == 1

    def test_partial_recipient_update(self, material_quote, user_a):
        updated = material_service.update_material_quote(
            user_a.id, material_quote.id, {"recipient_info": {"reference": "PO-18"}}
        )
        assert updated.reference == "PO-18"
        assert updated.company == "Mehta Glass"
        assert updated.total_value == 760.0

    def test_update_records_version(self, db_session, material_quote, user_a):
        material_service.update_material_quote(user_a.id, material_quote.code, {"status": "approved"})

        versions = material_service.list_versions(user_a.id, material_quote.code)
        assert db_session.query(MaterialQuoteVersion).count() == 1
        assert versions[0]["previous"]["status"] == "pending"
        assert versions[0]["previous"]["total_value"] == 760.0
        assert len(versions[0]["previous"]["materials"]) == 2

    def test_empty_materials_rejected(self, material_quote, user_a):
        with pytest.raises(ValidationError, match="Material list is empty"):
            material_service.update_material_quote(user_a.id, material_quote.code, {"materials": []})

    def test_invalid_status_rejected(self, material_quote, user_a):
        with pytest.raises(ValidationError, match="status"):
            material_service.update_material_quote(user_a.id, material_quote.code, {"status": "sent"})


class TestMaterialOwnership:
    def test_other_user_sees_not_found(self, material_quote, user_b):
        with pytest.raises(NotFoundError, match="Material quote not found"):
            material_service.get_material_quote(user_b.id, material_quote.code)

    def test_other_user_cannot_delete(self, material_quote, user_a, user_b):
        with pytest.raises(NotFoundError):
            material_service.delete_material_quote(user_b.id, material_quote.id)
        assert material_service.get_material_quote(user_a.id, material_quote.id)

    def test_delete(self, db_session, material_quote, user_a):
        code = material_quote.code
        assert material_service.delete_material_quote(user_a.id, code) == {"deleted_code": code}
        assert db_session.query(MaterialLine).count() == 0


class TestListMaterialQuotes:
    def test_list(self, material_quote, user_a, user_b):
        material_service.create_material_quote(user_b.id, {"materials": [material()]})

        result = material_service.list_material_quotes(user_a.id)

        assert result["total"] == 1
        item = result["items"][0]
        assert item["code"] == material_quote.code
        assert item["line_count"] == 2
        assert item["total_value"] == 760.0

    def test_search_by_code(self, material_quote, user_a):
        fragment = material_quote.code[4:7].lower()
        assert material_service.list_material_quotes(user_a.id, q=fragment)["total"] == 1
        assert material_service.list_material_quotes(user_a.id, q="nomatch")["total"] == 0

    def test_recompute_total(self, db_session, material_quote):
        material_quote.total_value = 1
        assert material_service.recompute_total(material_quote) is True
        assert material_quote.total_value == 760.0
