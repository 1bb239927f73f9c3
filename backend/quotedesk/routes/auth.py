# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

"""
Authentication API routes

- Self-registration with name, email and password
- Bearer session tokens (see session_service)
- Password reset by emailed single-use link
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import require_auth, bearer_token
from ..extensions import mailer
from ..services import auth_service
from ..services import session_service
from ..validation import ServiceError


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _start_session(user):
    return session_service.create_session(
        user_id=user.id,
        user_agent=request.headers.get("User-Agent"),
        ip_address=request.remote_addr,
    )


@auth_bp.post("/register")
def register_route():
    """
    Create an account and log it in.

    Request body: {"name": "...", "email": "...", "password": "..."}
    """
    try:
        data = request.get_json(silent=True) or {}
        user = auth_service.register_user(data.get("name"), data.get("email"), data.get("password"))
        session, token = _start_session(user)

        return jsonify({
            "message": "User registered successfully",
            "user": user.to_dict(),
            "token": token,
            "session": session.to_dict(),
        }), 201

    except ServiceError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to register user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and create session token.

    Token must be included in Authorization header for protected routes.
    Unknown email and wrong password both answer 401 with the same message.
    """
    try:
        data = request.get_json(silent=True) or {}
        email = data.get("email")
        password = data.get("password")

        if not all([email, password]):
            return jsonify({"error": "Email and password required"}), 400

        user = auth_service.authenticate(email, password)

        if not user:
            return jsonify({"error": "Invalid credentials"}), 401

        session, token = _start_session(user)

        return jsonify({
            "message": "Login successful",
            "user": user.to_dict(),
            "token": token,
            "session": session.to_dict(),
        }), 200

    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
def logout_route():
    """
    Revoke session token (logout).

    Expects Authorization header: Bearer <token>
    """
    try:
        token = bearer_token()
        if not token:
            return jsonify({"error": "Authorization header required"}), 401

        revoked = session_service.revoke_session(token, reason="User logout")

        if not revoked:
            return jsonify({"error": "Invalid or expired token"}), 401

        return jsonify({"message": "Logout successful"}), 200

    except Exception:
        current_app.logger.exception("Failed to logout user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/me")
@require_auth
def me_route():
    return jsonify({
        "user": g.current_user.to_dict(),
        "session": g.session_context.session.to_dict(),
    })


@auth_bp.post("/forgot-password")
def forgot_password_route():
    """
    Email a password reset link.

    The answer is the same whether or not the email belongs to an account,
    so the endpoint cannot be used to discover registered addresses.
    """
    try:
        data = request.get_json(silent=True) or {}
        email = data.get("email")
        if not email:
            return jsonify({"error": "Email is required"}), 400

        issued = auth_service.start_password_reset(email)
        if issued:
            user, token = issued
            reset_url = f"{current_app.config['CLIENT_URL'].rstrip('/')}/reset-password/{token}"
            mailer.send_password_reset(
                to=user.email,
                reset_url=reset_url,
                ttl_minutes=current_app.config["RESET_TOKEN_TTL_MINUTES"],
            )

        return jsonify({"message": "If that email is registered, a password reset link has been sent"}), 200

    except Exception:
        current_app.logger.exception("Failed to start password reset")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/reset-password/<token>")
def reset_password_route(token: str):
    """Request body: {"password": "..."}"""
    try:
        data = request.get_json(silent=True) or {}
        auth_service.reset_password(token, data.get("password"))
        return jsonify({"message": "Password reset successful"}), 200

    except ServiceError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to reset password")
        return jsonify({"error": "Internal server error"}), 500
