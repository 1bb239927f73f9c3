# Overview: Owner-scoped lookup, listing and deletion shared by quotes and material quotes.

from __future__ import annotations

import math

from ..extensions import db
from ..validation import NotFoundError, ValidationError
from .concurrency import run_with_retry
from .identifier_service import is_internal_id


DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def find_owned_document(model, owner_id: int, identifier):
    """
    Resolve an internal id or a human-readable code to a document of `owner_id`.

    Returns None when nothing matches. A document that exists but belongs to
    someone else is indistinguishable from one that does not exist.
    """
    q = db.session.query(model).filter(model.user_id == owner_id)

    if is_internal_id(identifier):
        q = q.filter(model.id == int(identifier))
    else:
        q = q.filter(model.code == str(identifier).strip())

    return q.first()


def get_owned_document(model, owner_id: int, identifier, *, label: str):
    document = find_owned_document(model, owner_id, identifier)
    if document is None:
        raise NotFoundError(f"{label} not found")
    return document


def clamp_pagination(page, limit) -> tuple[int, int]:
    """page < 1 -> 1; limit missing/0 -> 10; limit capped to 1..100."""
    try:
        page = int(page or 1)
    except (TypeError, ValueError):
        page = 1
    try:
        limit = int(limit or DEFAULT_PAGE_SIZE)
    except (TypeError, ValueError):
        limit = DEFAULT_PAGE_SIZE
    return max(1, page), max(1, min(MAX_PAGE_SIZE, limit))


def parse_sort(model, sort: str | None, sortable: set[str], default: str = "-created_at"):
    """
    "-created_at" -> created_at DESC, "code" -> code ASC.

    id in the same direction is appended as a tiebreaker so pages are stable.
    """
    sort = (sort or default).strip()
    descending = sort.startswith("-")
    field = sort.lstrip("-+")
    if field not in sortable:
        raise ValidationError(f"Cannot sort by '{field}'. Allowed: {', '.join(sorted(sortable))}")

    column = getattr(model, field)
    if descending:
        return [column.desc(), model.id.desc()]
    return [column.asc(), model.id.asc()]


def list_owned_documents(
    model,
    owner_id: int,
    *,
    page=None,
    limit=None,
    status: str | None = None,
    q: str | None = None,
    sort: str | None = None,
    sortable: set[str],
) -> dict:
    """
    Paginated owner-scoped listing.

    Returns {"page", "limit", "total", "pages", "items"} where items are
    summary dicts.
    """
    page, limit = clamp_pagination(page, limit)
    order_by = parse_sort(model, sort, sortable)

    query = db.session.query(model).filter(model.user_id == owner_id)

    if status:
        query = query.filter(model.status == status)
    if q and q.strip():
        query = query.filter(model.code.icontains(q.strip(), autoescape=True))

    total = query.count()
    items = (
        query.order_by(*order_by)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit),
        "items": [item.to_summary_dict() for item in items],
    }


def delete_owned_document(model, owner_id: int, identifier, *, label: str) -> dict:
    """Hard delete (lines and versions cascade). Returns {"deleted_code": code}."""
    def _op() -> dict:
        document = get_owned_document(model, owner_id, identifier, label=label)
        code = document.code
        db.session.delete(document)
        db.session.commit()
        return {"deleted_code": code}

    return run_with_retry(_op)
