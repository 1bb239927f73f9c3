# Overview: Service-layer operations for window quotes; encapsulates business logic and database work.

"""
Quote Service - create/list/get/update/delete window quotes

OWNERSHIP: every operation is scoped to owner_id. Another user's quote is
reported as NotFoundError, never as forbidden.

UPDATE PROTOCOL (single commit):
1. Load by owner + (id or code), NotFoundError if absent
2. If the payload carries any known field, append the pre-update snapshot
   to version history
3. Apply only the fields present in the payload
4. If windows were sent, replace the lines and recompute the subtotal
5. Always recompute tax amounts and grand total (tax settings may have
   changed even when the lines did not)
"""

from __future__ import annotations

from ..extensions import db
from ..models import Quote, QuoteWindow, QuoteVersion
from ..validation import (
    ModelValidationPolicy,
    ValidationError,
    validate_payload,
    enforce_rules_quote,
)
from quotedesk.time_utils import utcnow
from .concurrency import insert_with_unique_code, run_with_retry
from .document_service import (
    get_owned_document,
    list_owned_documents,
    delete_owned_document,
)
from .identifier_service import next_quote_code
from .pricing_service import (
    QuoteTotals,
    TaxConfig,
    compute_tax_totals,
    compute_window_totals,
    price_window_lines,
    sum_line_amounts,
)


QUOTE_POLICY = ModelValidationPolicy(
    writable_fields={
        "client_name",
        "project",
        "finish",
        "apply_tax",
        "first_tax_percent",
        "second_tax_percent",
        "packing_charge",
        "status",
    },
)

SORTABLE_FIELDS = {"created_at", "updated_at", "code", "grand_total", "status", "client_name"}


def _parse_payload(payload) -> tuple[dict, object]:
    """Split request JSON into a validated column patch and raw windows (or None)."""
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    body = dict(payload)
    raw_windows = body.pop("windows", None)

    # An explicit null packing charge means no packing
    if "packing_charge" in body and body["packing_charge"] is None:
        body["packing_charge"] = 0

    patch = validate_payload(model=Quote, payload=body, policy=QUOTE_POLICY)
    enforce_rules_quote(patch)
    return patch, raw_windows


def _build_windows(lines: list[dict]) -> list[QuoteWindow]:
    return [QuoteWindow(position=i, **line) for i, line in enumerate(lines)]


def _apply_totals(quote: Quote, totals: QuoteTotals) -> None:
    quote.subtotal = totals.subtotal
    quote.first_tax_amount = totals.first_tax_amount
    quote.second_tax_amount = totals.second_tax_amount
    quote.grand_total = totals.grand_total


def create_quote(owner_id: int, payload: dict) -> Quote:
    """
    Create a quote with a freshly allocated Q-NNNN code.

    Tax settings default to apply_tax=True, 9% + 9%, packing 0.
    Raises ValidationError for an empty/invalid window list.
    """
    patch, raw_windows = _parse_payload(payload)
    lines = price_window_lines(raw_windows)

    tax = TaxConfig.from_payload(patch)
    totals = compute_window_totals(lines, tax)

    def build(code: str) -> Quote:
        quote = Quote(
            code=code,
            user_id=owner_id,
            client_name=patch.get("client_name") or "",
            project=patch.get("project") or "",
            finish=patch.get("finish") or "",
            status=patch.get("status") or "pending",
            apply_tax=tax.apply_tax,
            first_tax_percent=tax.first_tax_percent,
            second_tax_percent=tax.second_tax_percent,
            packing_charge=tax.packing_charge,
        )
        quote.windows = _build_windows(lines)
        _apply_totals(quote, totals)
        return quote

    return insert_with_unique_code(build, next_quote_code)


def list_quotes(
    owner_id: int,
    page=None,
    limit=None,
    status: str | None = None,
    q: str | None = None,
    sort: str | None = None,
) -> dict:
    """Paginated quote summaries; q searches the code case-insensitively."""
    return list_owned_documents(
        Quote,
        owner_id,
        page=page,
        limit=limit,
        status=status,
        q=q,
        sort=sort,
        sortable=SORTABLE_FIELDS,
    )


def get_quote(owner_id: int, identifier) -> Quote:
    return get_owned_document(Quote, owner_id, identifier, label="Quote")


def append_version(quote: Quote) -> QuoteVersion:
    """Record the quote's current state as the next history entry."""
    version = QuoteVersion(
        version_number=len(quote.versions) + 1,
        snapshot=quote.snapshot(),
        created_at=utcnow(),
    )
    quote.versions.append(version)
    return version


def update_quote(owner_id: int, identifier, payload: dict) -> Quote:
    """
    Partial update; see module docstring for the protocol.

    Everything is validated before the quote is touched, so a rejected
    payload leaves no pending changes in the session.
    """
    patch, raw_windows = _parse_payload(payload)
    lines = price_window_lines(raw_windows) if raw_windows is not None else None

    def _op() -> Quote:
        quote = get_quote(owner_id, identifier)

        if patch or lines is not None:
            append_version(quote)

        for field, value in patch.items():
            setattr(quote, field, value)

        if lines is not None:
            quote.windows = _build_windows(lines)
            quote.subtotal = sum_line_amounts(lines)

        _apply_totals(quote, compute_tax_totals(quote.subtotal, TaxConfig.from_quote(quote)))

        db.session.commit()
        return quote

    return run_with_retry(_op)


def delete_quote(owner_id: int, identifier) -> dict:
    return delete_owned_document(Quote, owner_id, identifier, label="Quote")


def list_versions(owner_id: int, identifier) -> list[dict]:
    quote = get_quote(owner_id, identifier)
    return [v.to_dict() for v in quote.versions]


def recompute_totals(quote: Quote) -> bool:
    """Re-run pricing on stored lines; returns True if any total changed. Caller commits."""
    before = (quote.subtotal, quote.first_tax_amount, quote.second_tax_amount, quote.grand_total)
    _apply_totals(quote, compute_window_totals(quote.windows, TaxConfig.from_quote(quote)))
    after = (quote.subtotal, quote.first_tax_amount, quote.second_tax_amount, quote.grand_total)
    return before != after
