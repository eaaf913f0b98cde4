"""
Session identity routes for StreamQueue.

In production the external sign-in service places ``user_id`` in the
session; ``POST /session`` only exists for local development and is
disabled unless ALLOW_DEV_LOGIN is set.
"""

from flask import Blueprint, current_app, jsonify, request, session

from ..auth.identity import current_user_id


session_bp = Blueprint('session', __name__)


@session_bp.route("/session", methods=["GET"])
def whoami():
    user_id = current_user_id()
    return jsonify({"authenticated": bool(user_id), "userId": user_id})


@session_bp.route("/session", methods=["POST"])
def dev_login():
    if not current_app.config.get("ALLOW_DEV_LOGIN"):
        return jsonify({"error": "Forbidden", "reason": "dev_login_disabled", "message": "Development login is disabled"}), 403

    data = request.get_json(silent=True) or {}
    user_id = str(data.get("userId") or "").strip()
    if not user_id or len(user_id) > 64:
        return jsonify({"error": "InvalidInput", "reason": "user_id", "message": "userId is required"}), 400

    session["user_id"] = user_id
    return jsonify({"authenticated": True, "userId": user_id})


@session_bp.route("/session/logout", methods=["POST"])
def logout():
    session.clear()
    return jsonify({"authenticated": False, "userId": None})
