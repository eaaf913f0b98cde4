"""
Database models for StreamQueue
"""

from .database_config import Base, engine, SessionLocal, get_db, init_db
from .queue_models import QueueEntry, Vote, CurrentStream
from .store import QueueStore, QueueRow

__all__ = [
    'Base', 'engine', 'SessionLocal', 'get_db', 'init_db',
    'QueueEntry', 'Vote', 'CurrentStream', 'QueueStore', 'QueueRow',
]
