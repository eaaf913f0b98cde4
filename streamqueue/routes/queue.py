"""
Queue routes for StreamQueue.
Handles submissions, the ranked queue listing, voting, advancing and the
owner-only administrative operations of a room.
"""

import logging
from flask import Blueprint, current_app, jsonify, request

from ..auth.identity import require_room_owner, require_user
from ..core.errors import InvalidInput, NotFound, QueueError
from ..websockets.handlers import broadcast_queue_change


logger = logging.getLogger(__name__)

queue_bp = Blueprint('queue', __name__)


def services():
    return current_app.queue_services


@queue_bp.errorhandler(QueueError)
def handle_queue_error(error):
    return jsonify(error.to_dict()), error.status_code


@queue_bp.route("/rooms/<owner_id>/queue", methods=["GET"])
def get_queue(owner_id):
    """Ranked queue and now-playing entry of a room, as seen by the caller"""
    viewer_id = require_user()
    ranked = services().ranking.rank(owner_id, viewer_id)
    active = services().playback.now_playing(owner_id)

    return jsonify({
        "streams": [row.entry.to_dict(row.vote_count, row.have_upvoted) for row in ranked],
        "activeStream": active.to_dict() if active else None,
        "creatorId": owner_id,
        "isCreator": viewer_id == owner_id,
        "count": len(ranked),
    })


@queue_bp.route("/rooms/<owner_id>/queue", methods=["POST"])
def submit_link(owner_id):
    """Submit a video link to the room's queue"""
    submitter_id = require_user()
    data = request.get_json(silent=True) or {}
    url = data.get("url")
    if not isinstance(url, str):
        raise InvalidInput("YouTube link cannot be empty", reason="empty")

    entry = services().admission.submit(owner_id, submitter_id, url)
    broadcast_queue_change(owner_id, "added", entry.id)
    return jsonify(entry.to_dict(upvotes=0, have_upvoted=False)), 201


def _vote(owner_id, entry_id, direction):
    voter_id = require_user()
    entry = services().store.get_entry(entry_id)
    if entry is None or entry.owner_id != owner_id:
        raise NotFound("Entry not found in this room", reason="entry")

    changed, upvotes = services().ranking.vote(entry_id, voter_id, direction)
    if changed:
        broadcast_queue_change(owner_id, "voted", entry_id)
    return jsonify({
        "entryId": entry_id,
        "upvotes": upvotes,
        "haveUpvoted": direction == "up",
        "changed": changed,
    })


@queue_bp.route("/rooms/<owner_id>/queue/<int:entry_id>/upvote", methods=["POST"])
def upvote(owner_id, entry_id):
    return _vote(owner_id, entry_id, "up")


@queue_bp.route("/rooms/<owner_id>/queue/<int:entry_id>/downvote", methods=["POST"])
def downvote(owner_id, entry_id):
    return _vote(owner_id, entry_id, "down")


@queue_bp.route("/rooms/<owner_id>/next", methods=["POST"])
def play_next(owner_id):
    """Advance the room to its top-ranked entry - Owner only"""
    require_room_owner(owner_id)
    entry = services().playback.play_next(owner_id)
    broadcast_queue_change(owner_id, "advanced", entry.id)
    return jsonify({"stream": entry.to_dict()})


@queue_bp.route("/rooms/<owner_id>/queue/<int:entry_id>", methods=["DELETE"])
def remove_entry(owner_id, entry_id):
    """Remove a single entry and its votes - Owner only"""
    require_room_owner(owner_id)
    services().store.remove_entry(owner_id, entry_id)
    logger.info(f"Owner removed entry {entry_id} from room {owner_id}")
    broadcast_queue_change(owner_id, "removed", entry_id)
    return jsonify({"message": "Song removed successfully", "entryId": entry_id})


@queue_bp.route("/rooms/<owner_id>/queue/empty", methods=["POST"])
def empty_queue(owner_id):
    """Mark every queued entry as played - Owner only"""
    require_room_owner(owner_id)
    removed = services().store.empty_queue(owner_id)
    logger.info(f"Owner emptied room {owner_id} ({removed} entries)")
    broadcast_queue_change(owner_id, "emptied", None)
    return jsonify({"message": f"Queue emptied. Removed {removed} songs.", "removed": removed})
