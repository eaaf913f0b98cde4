"""
Queue admission control, ranking and playback advancement.
"""

from .errors import (
    QueueError, InvalidInput, RateLimited, QueueFull, ResolverUnavailable,
    Conflict, NotFound, NoEntries, Unauthorized, Forbidden, StoreFailure,
)
from .policy import QueuePolicy
from .admission import AdmissionController
from .ranking import RankingEngine, rank_entries
from .playback import PlaybackAdvancer

__all__ = [
    'QueueError', 'InvalidInput', 'RateLimited', 'QueueFull', 'ResolverUnavailable',
    'Conflict', 'NotFound', 'NoEntries', 'Unauthorized', 'Forbidden', 'StoreFailure',
    'QueuePolicy', 'AdmissionController', 'RankingEngine', 'rank_entries', 'PlaybackAdvancer',
]
