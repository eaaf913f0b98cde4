"""
Wires the store, resolver and locks into the queue components for an app.
"""

from .api.youtube import YouTubeMetadataResolver
from .core import AdmissionController, PlaybackAdvancer, QueuePolicy, RankingEngine
from .models import QueueStore
from .utils.locks import RoomLocks


class QueueServices:

    def __init__(self, store, resolver, locks, policy):
        self.store = store
        self.ranking = RankingEngine(store)
        self.admission = AdmissionController(store, resolver, locks, policy)
        self.playback = PlaybackAdvancer(store, self.ranking, locks)

    @classmethod
    def from_app(cls, app, cache=None, redis_client=None):
        config = app.config
        resolver = YouTubeMetadataResolver(
            api_key=config.get("YOUTUBE_API_KEY") or None,
            timeout=config.get("RESOLVER_TIMEOUT_SECONDS", 4),
            cache=cache,
            cache_timeout=config.get("METADATA_CACHE_SECONDS", 300),
        )
        locks = RoomLocks(redis_client, timeout=config.get("ADVANCE_LOCK_TIMEOUT_SECONDS", 10))
        return cls(QueueStore(), resolver, locks, QueuePolicy.from_config(config))
