# Overview: Service-layer operations for material quotes; encapsulates business logic and database work.

"""
Material Quote Service

Same lifecycle as quote_service without tax: total_value is the sum of
line amounts. Updates append a version snapshot exactly like quotes do.

recipient_info is a nested object on the wire ({to_name, company, address,
reference}) stored as flat columns; on update only the keys sent change.
"""

from __future__ import annotations

from ..extensions import db
from ..models import MaterialQuote, MaterialLine, MaterialQuoteVersion, RECIPIENT_FIELDS
from ..validation import (
    ModelValidationPolicy,
    ValidationError,
    validate_payload,
    enforce_rules_status,
)
from quotedesk.time_utils import utcnow
from .concurrency import insert_with_unique_code, run_with_retry
from .document_service import (
    get_owned_document,
    list_owned_documents,
    delete_owned_document,
)
from .identifier_service import generate_material_code
from .pricing_service import compute_material_total, price_material_lines


MATERIAL_QUOTE_POLICY = ModelValidationPolicy(writable_fields={"status"})
RECIPIENT_POLICY = ModelValidationPolicy(writable_fields=set(RECIPIENT_FIELDS))

SORTABLE_FIELDS = {"created_at", "updated_at", "code", "total_value", "status"}


def _parse_payload(payload) -> tuple[dict, object]:
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    body = dict(payload)
    raw_materials = body.pop("materials", None)
    recipient = body.pop("recipient_info", None)

    patch = validate_payload(model=MaterialQuote, payload=body, policy=MATERIAL_QUOTE_POLICY)
    enforce_rules_status(patch)

    if recipient is not None:
        if not isinstance(recipient, dict):
            raise ValidationError("recipient_info must be an object")
        patch.update(
            validate_payload(model=MaterialQuote, payload=recipient, policy=RECIPIENT_POLICY)
        )

    return patch, raw_materials


def _build_lines(lines: list[dict]) -> list[MaterialLine]:
    return [MaterialLine(position=i, **line) for i, line in enumerate(lines)]


def create_material_quote(owner_id: int, payload: dict) -> MaterialQuote:
    """Create a material quote with a random MAT-XXXXXX code."""
    patch, raw_materials = _parse_payload(payload)
    lines = price_material_lines(raw_materials)
    total_value = compute_material_total(lines)

    def build(code: str) -> MaterialQuote:
        material_quote = MaterialQuote(
            code=code,
            user_id=owner_id,
            status=patch.get("status") or "pending",
            total_value=total_value,
            **{field: patch.get(field) or "" for field in RECIPIENT_FIELDS},
        )
        material_quote.materials = _build_lines(lines)
        return material_quote

    return insert_with_unique_code(build, generate_material_code)


def list_material_quotes(
    owner_id: int,
    page=None,
    limit=None,
    status: str | None = None,
    q: str | None = None,
    sort: str | None = None,
) -> dict:
    return list_owned_documents(
        MaterialQuote,
        owner_id,
        page=page,
        limit=limit,
        status=status,
        q=q,
        sort=sort,
        sortable=SORTABLE_FIELDS,
    )


def get_material_quote(owner_id: int, identifier) -> MaterialQuote:
    return get_owned_document(MaterialQuote, owner_id, identifier, label="Material quote")


def append_version(material_quote: MaterialQuote) -> MaterialQuoteVersion:
    version = MaterialQuoteVersion(
        version_number=len(material_quote.versions) + 1,
        snapshot=material_quote.snapshot(),
        created_at=utcnow(),
    )
    material_quote.versions.append(version)
    return version


def update_material_quote(owner_id: int, identifier, payload: dict) -> MaterialQuote:
    patch, raw_materials = _parse_payload(payload)
    lines = price_material_lines(raw_materials) if raw_materials is not None else None

    def _op() -> MaterialQuote:
        material_quote = get_material_quote(owner_id, identifier)

        if patch or lines is not None:
            append_version(material_quote)

        for field, value in patch.items():
            setattr(material_quote, field, value)

        if lines is not None:
            material_quote.materials = _build_lines(lines)

        material_quote.total_value = compute_material_total(
            lines if lines is not None else material_quote.materials
        )

        db.session.commit()
        return material_quote

    return run_with_retry(_op)


def delete_material_quote(owner_id: int, identifier) -> dict:
    return delete_owned_document(MaterialQuote, owner_id, identifier, label="Material quote")


def list_versions(owner_id: int, identifier) -> list[dict]:
    material_quote = get_material_quote(owner_id, identifier)
    return [v.to_dict() for v in material_quote.versions]


def recompute_total(material_quote: MaterialQuote) -> bool:
    """Re-sum stored line amounts; returns True if total_value changed. Caller commits."""
    before = material_quote.total_value
    material_quote.total_value = compute_material_total(material_quote.materials)
    return before != material_quote.total_value
