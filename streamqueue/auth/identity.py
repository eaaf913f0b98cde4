"""
Caller identity for StreamQueue.

Authentication itself is handled by an external provider which stores the
signed-in user's id in the Flask session under ``user_id``; this module
only reads it and enforces room ownership.
"""

from flask import session

from ..core.errors import Forbidden, Unauthorized


def current_user_id():
    user_id = session.get("user_id")
    return str(user_id) if user_id else None


def require_user():
    """Return the caller's id or raise Unauthorized"""
    user_id = current_user_id()
    if not user_id:
        raise Unauthorized("Unauthenticated", reason="session")
    return user_id


def require_room_owner(owner_id):
    """Return the caller's id when they own the room; raise otherwise"""
    user_id = require_user()
    if user_id != owner_id:
        raise Forbidden("Only the room owner can do that", reason="owner_only")
    return user_id
