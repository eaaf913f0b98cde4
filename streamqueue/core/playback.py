"""
Advancing a room to its next entry.
"""

import logging

from .errors import NoEntries


logger = logging.getLogger(__name__)


class PlaybackAdvancer:

    def __init__(self, store, ranking, locks):
        self.store = store
        self.ranking = ranking
        self.locks = locks

    def play_next(self, owner_id):
        """Promote the top-ranked queued entry to now playing.

        Selection and the played/current-stream update run under the room's
        advance lock; the update itself only succeeds while the entry is
        still unplayed, so a racing advance gets Conflict instead of
        replaying the same entry. Raises NoEntries on an empty queue.
        """
        with self.locks.hold(owner_id, "advance"):
            top = self.ranking.select_next(owner_id)
            if top is None:
                raise NoEntries()

            entry = self.store.apply_advance(owner_id, top.entry.id)

        logger.info(f"Room {owner_id} now playing entry {entry.id} ({entry.external_video_id}, {top.vote_count} votes)")
        return entry

    def now_playing(self, owner_id):
        return self.store.get_current_stream(owner_id)
