"""
Queue ordering and toggle voting.
"""

import logging

from .errors import InvalidInput


logger = logging.getLogger(__name__)

DIRECTIONS = ("up", "down")


def rank_key(row):
    # Most upvotes first; ties go to the oldest submission, then the lowest id
    entry = row.entry
    return (-row.vote_count, entry.created_at, entry.id)


def rank_entries(rows):
    """Return queue rows ordered for playback, best first"""
    return sorted(rows, key=rank_key)


class RankingEngine:

    def __init__(self, store):
        self.store = store

    def rank(self, owner_id, viewer_id=None):
        """Live ranking of a room's queued entries as seen by ``viewer_id``"""
        return rank_entries(self.store.list_active_entries(owner_id, viewer_id))

    def select_next(self, owner_id):
        ranked = self.rank(owner_id)
        return ranked[0] if ranked else None

    def vote(self, entry_id, voter_id, direction):
        """Toggle the voter's upvote on an entry.

        An upvote while already upvoted, or a downvote without an upvote,
        leaves the tally untouched. Returns (changed, vote_count).
        """
        if direction not in DIRECTIONS:
            raise InvalidInput("Vote direction must be 'up' or 'down'", reason="direction")

        changed, vote_count = self.store.toggle_vote(entry_id, voter_id, direction)
        if changed:
            logger.info(f"Vote {direction} on entry {entry_id} by {voter_id} (now {vote_count})")
        else:
            logger.debug(f"Vote {direction} on entry {entry_id} by {voter_id} was a no-op")
        return changed, vote_count
