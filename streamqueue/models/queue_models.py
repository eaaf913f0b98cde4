"""
Queue, vote and now-playing models for StreamQueue.
"""

from datetime import timezone
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from .database_config import Base
from ..utils.timing import utcnow


def as_utc(value):
    """SQLite hands back naive datetimes; treat them as UTC"""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class QueueEntry(Base):
    __tablename__ = "queue_entries"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(String(64), nullable=False, index=True)  # room the entry belongs to
    submitter_id = Column(String(64), nullable=False, index=True)
    type = Column(String(16), nullable=False, default="Youtube")
    source_url = Column(String(2048), nullable=False)
    external_video_id = Column(String(64), nullable=False, index=True)
    title = Column(String(512), nullable=False)
    thumbnail_small = Column(String(1024), nullable=False)
    thumbnail_large = Column(String(1024), nullable=False)
    played = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    def to_dict(self, upvotes=None, have_upvoted=None):
        created_at = as_utc(self.created_at)
        data = {
            "id": self.id,
            "ownerId": self.owner_id,
            "submitterId": self.submitter_id,
            "type": self.type,
            "url": self.source_url,
            "extractedId": self.external_video_id,
            "title": self.title,
            "smallImg": self.thumbnail_small,
            "bigImg": self.thumbnail_large,
            "played": bool(self.played),
            "createdAt": created_at.isoformat() if created_at else None,
        }
        if upvotes is not None:
            data["upvotes"] = upvotes
            data["haveUpvoted"] = bool(have_upvoted)
        return data

    def __repr__(self):
        return f"<QueueEntry {self.id} {self.external_video_id} ({'played' if self.played else 'queued'})>"


class Vote(Base):
    __tablename__ = "votes"
    __table_args__ = (UniqueConstraint("entry_id", "voter_id", name="uq_vote_entry_voter"),)

    id = Column(Integer, primary_key=True, index=True)
    entry_id = Column(Integer, ForeignKey("queue_entries.id", ondelete="CASCADE"), nullable=False, index=True)
    voter_id = Column(String(64), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self):
        return f"<Vote {self.voter_id} for {self.entry_id}>"


class CurrentStream(Base):
    __tablename__ = "current_streams"

    # One row per room; owner_id is the key
    owner_id = Column(String(64), primary_key=True)
    entry_id = Column(Integer, ForeignKey("queue_entries.id", ondelete="SET NULL"), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<CurrentStream {self.owner_id} -> {self.entry_id}>"
