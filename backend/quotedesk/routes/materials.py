# Overview: Flask API routes for material quotes; parses input and returns JSON responses.

"""
Material Quote Routes

Mirrors /api/quotes for material lists. <identifier> is the numeric
internal id or the MAT-XXXXXX code.
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_auth
from ..services import material_service
from ..validation import ServiceError


materials_bp = Blueprint("materials", __name__, url_prefix="/api/materials")


@materials_bp.post("")
@require_auth
def create_material_quote_route():
    """
    Request body:
    {
        "recipient_info": {"to_name": "...", "company": "...", "address": "...", "reference": "..."},
        "status": "pending",
        "materials": [{"description": "Aluminium track", "unit": "m", "qty": 10, "rate": 75, "notes": "..."}]
    }
    """
    try:
        material_quote = material_service.create_material_quote(g.current_user.id, request.get_json(silent=True))
        return jsonify({
            "message": "Material quote created successfully",
            "quote": material_quote.to_dict(),
        }), 201
    except ServiceError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create material quote")
        return jsonify({"error": "Internal server error"}), 500


@materials_bp.get("")
@require_auth
def list_material_quotes_route():
    try:
        result = material_service.list_material_quotes(
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
        current_app.logger.exception("Failed to list material quotes")
        return jsonify({"error": "Internal server error"}), 500


@materials_bp.get("/<identifier>")
@require_auth
def get_material_quote_route(identifier: str):
    try:
        material_quote = material_service.get_material_quote(g.current_user.id, identifier)
        return jsonify({"message": "Material quote fetched successfully", "quote": material_quote.to_dict()})
    except ServiceError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to fetch material quote %s", identifier)
        return jsonify({"error": "Internal server error"}), 500


@materials_bp.route("/<identifier>", methods=["PUT", "PATCH"])
@require_auth
def update_material_quote_route(identifier: str):
    try:
        material_quote = material_service.update_material_quote(
            g.current_user.id, identifier, request.get_json(silent=True)
        )
        return jsonify({"message": "Material quote updated successfully", "quote": material_quote.to_dict()})
    except ServiceError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update material quote %s", identifier)
        return jsonify({"error": "Internal server error"}), 500


@materials_bp.delete("/<identifier>")
@require_auth
def delete_material_quote_route(identifier: str):
    try:
        result = material_service.delete_material_quote(g.current_user.id, identifier)
        return jsonify({"message": "Material quote deleted successfully", **result})
    except ServiceError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to delete material quote %s", identifier)
        return jsonify({"error": "Internal server error"}), 500


@materials_bp.get("/<identifier>/versions")
@require_auth
def list_material_quote_versions_route(identifier: str):
    try:
        versions = material_service.list_versions(g.current_user.id, identifier)
        return jsonify({"items": versions, "count": len(versions)})
    except ServiceError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to list versions for material quote %s", identifier)
        return jsonify({"error": "Internal server error"}), 500
