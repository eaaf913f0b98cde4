"""
Socket.IO event handlers for StreamQueue.
Clients subscribe to a room's channel to hear about queue changes and may
vote over the socket as well as over HTTP.
"""

import logging
import os
from flask import current_app, request
from flask_socketio import SocketIO, emit, join_room, leave_room

from ..auth.identity import current_user_id
from ..core.errors import InvalidInput, NotFound, QueueError, Unauthorized


logger = logging.getLogger(__name__)

# SocketIO instance is created by init_socketio
socketio = None


def room_channel(owner_id):
    return f"room:{owner_id}"


def init_socketio(app):
    """Initialize Socket.IO with the Flask app"""
    global socketio
    socketio = SocketIO(
        app,
        cors_allowed_origins=os.getenv("CORS_ORIGINS", "*"),
        ping_timeout=120,
        ping_interval=30,
        manage_session=False,  # Let Flask-Session own the session
        logger=False,
        engineio_logger=False,
        async_mode=os.getenv("SOCKETIO_ASYNC_MODE", "threading")
    )
    app.socketio = socketio

    register_handlers()
    return socketio


def broadcast_queue_change(owner_id, action, entry_id):
    """Tell everyone watching the room that its queue changed"""
    if socketio is None:
        return
    socketio.emit(
        "queue_updated",
        {"ownerId": owner_id, "action": action, "entryId": entry_id},
        to=room_channel(owner_id),
    )


def _owner_from(data):
    if not isinstance(data, dict):
        raise InvalidInput("Event payload must be an object", reason="payload")
    owner_id = str(data.get("ownerId") or "").strip()
    if not owner_id:
        raise InvalidInput("ownerId is required", reason="owner_id")
    return owner_id


def register_handlers():
    """Register all Socket.IO event handlers"""

    @socketio.on("connect")
    def handle_connect(auth=None):
        logger.debug(f"Client connected (user: {current_user_id()}, sid: {request.sid})")
        emit("connected", {"userId": current_user_id()})

    @socketio.on("disconnect")
    def handle_disconnect(reason=None):
        logger.debug(f"Client disconnected (sid: {request.sid}, reason: {reason})")

    @socketio.on("join_room")
    def handle_join_room(data):
        try:
            owner_id = _owner_from(data)
        except QueueError as e:
            emit("error", e.to_dict())
            return
        join_room(room_channel(owner_id))
        emit("joined", {"ownerId": owner_id})

    @socketio.on("leave_room")
    def handle_leave_room(data):
        try:
            owner_id = _owner_from(data)
        except QueueError as e:
            emit("error", e.to_dict())
            return
        leave_room(room_channel(owner_id))
        emit("left", {"ownerId": owner_id})

    @socketio.on("vote")
    def handle_vote(data):
        """Toggle a vote - any signed-in user"""
        try:
            voter_id = current_user_id()
            if not voter_id:
                raise Unauthorized("You must be logged in to vote", reason="session")

            owner_id = _owner_from(data)
            try:
                entry_id = int(data.get("entryId"))
            except (TypeError, ValueError):
                raise InvalidInput("entryId must be an integer", reason="entry_id")

            services = current_app.queue_services
            entry = services.store.get_entry(entry_id)
            if entry is None or entry.owner_id != owner_id:
                raise NotFound("Entry not found in this room", reason="entry")

            direction = data.get("direction")
            changed, upvotes = services.ranking.vote(entry_id, voter_id, direction)
        except QueueError as e:
            emit("error", e.to_dict())
            return

        if changed:
            broadcast_queue_change(owner_id, "voted", entry_id)
        emit("vote_result", {
            "entryId": entry_id,
            "upvotes": upvotes,
            "haveUpvoted": direction == "up",
            "changed": changed,
        })
