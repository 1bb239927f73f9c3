# Overview: Flask API routes for window quotes; parses input and returns JSON responses.

"""
Quote Routes

All routes require authentication and only ever see the caller's own quotes.
<identifier> is either the numeric internal id or the Q-NNNN code.
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_auth
from ..services import quote_service
from ..validation import ServiceError


quotes_bp = Blueprint("quotes", __name__, url_prefix="/api/quotes")


@quotes_bp.post("")
@require_auth
def create_quote_route():
    """
    Create a quote.

    Request body:
    {
        "client_name": "...", "project": "...", "finish": "...",
        "apply_tax": true, "first_tax_percent": 9, "second_tax_percent": 9,
        "packing_charge": 0, "status": "pending",
        "windows": [{"window_type": "slider", "width": 4, "height": 5,
                     "quantity": 1, "price_per_sqft": 17.525, ...}]
    }
    """
    try:
        quote = quote_service.create_quote(g.current_user.id, request.get_json(silent=True))
        return jsonify({"message": "Quote created successfully", "quote": quote.to_dict()}), 201
    except ServiceError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create quote")
        return jsonify({"error": "Internal server error"}), 500


@quotes_bp.get("")
@require_auth
def list_quotes_route():
    """
    Query parameters:
    - page (default 1), limit (default 10, max 100)
    - status: pending | approved | rejected
    - q: case-insensitive search on the quote code
    - sort: field name, "-" prefix for descending (default -created_at)
    """
    try:
        result = quote_service.list_quotes(
            g.current_user.id,
            page=request.args.get("page"),
            limit=request.args.get("limit"),
            status=request.args.get("status"),
            q=request.args.get("q"),
            sort=request.args.get("sort"),
        )
        return jsonify(result)
    except ServiceError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to list quotes")
        return jsonify({"error": "Internal server error"}), 500


@quotes_bp.get("/<identifier>")
@require_auth
def get_quote_route(identifier: str):
    try:
        quote = quote_service.get_quote(g.current_user.id, identifier)
        return jsonify({"message": "Quote fetched successfully", "quote": quote.to_dict()})
    except ServiceError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to fetch quote %s", identifier)
        return jsonify({"error": "Internal server error"}), 500


@quotes_bp.route("/<identifier>", methods=["PUT", "PATCH"])
@require_auth
def update_quote_route(identifier: str):
    """
    Partial update. Only the fields present are changed; sending "windows"
    replaces every line. The pre-update state is kept as a version entry.
    """
    try:
        quote = quote_service.update_quote(g.current_user.id, identifier, request.get_json(silent=True))
        return jsonify({"message": "Quote updated successfully", "quote": quote.to_dict()})
    except ServiceError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update quote %s", identifier)
        return jsonify({"error": "Internal server error"}), 500


@quotes_bp.delete("/<identifier>")
@require_auth
def delete_quote_route(identifier: str):
    try:
        result = quote_service.delete_quote(g.current_user.id, identifier)
        return jsonify({"message": "Quote deleted successfully", **result})
    except ServiceError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to delete quote %s", identifier)
        return jsonify({"error": "Internal server error"}), 500


@quotes_bp.get("/<identifier>/versions")
@require_auth
def list_quote_versions_route(identifier: str):
    try:
        versions = quote_service.list_versions(g.current_user.id, identifier)
        return jsonify({"items": versions, "count": len(versions)})
    except ServiceError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to list versions for quote %s", identifier)
        return jsonify({"error": "Internal server error"}), 500
