"""
SQLAlchemy-backed persistence for queue entries, votes and the
now-playing pointer of each room.

Every method accepts an optional ``db`` session so that callers can run
several reads and a write inside one transaction; without it the method
opens and commits its own session.
"""

import logging
from collections import namedtuple
from contextlib import contextmanager

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .database_config import get_db
from .queue_models import QueueEntry, Vote, CurrentStream
from ..core.errors import Conflict, NotFound, QueueError, StoreFailure


logger = logging.getLogger(__name__)

QueueRow = namedtuple("QueueRow", ["entry", "vote_count", "have_upvoted"])


class QueueStore:

    @contextmanager
    def session(self):
        """Open a transaction; database errors surface as StoreFailure"""
        try:
            with get_db() as db:
                yield db
        except QueueError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Store operation failed: {e}")
            raise StoreFailure("The queue store is unavailable, try again later") from e

    @contextmanager
    def _use(self, db):
        if db is not None:
            yield db
        else:
            with self.session() as own:
                yield own

    # Admission queries

    def count_entries(self, owner_id, submitter_id, since, db=None):
        with self._use(db) as db:
            return db.query(func.count(QueueEntry.id)).filter(
                QueueEntry.owner_id == owner_id,
                QueueEntry.submitter_id == submitter_id,
                QueueEntry.created_at >= since,
            ).scalar()

    def find_duplicate(self, owner_id, external_video_id, since, submitter_id=None, db=None):
        with self._use(db) as db:
            query = db.query(QueueEntry).filter(
                QueueEntry.owner_id == owner_id,
                QueueEntry.external_video_id == external_video_id,
                QueueEntry.created_at >= since,
            )
            if submitter_id is not None:
                query = query.filter(QueueEntry.submitter_id == submitter_id)
            return query.first()

    def count_active_entries(self, owner_id, db=None):
        with self._use(db) as db:
            return db.query(func.count(QueueEntry.id)).filter(
                QueueEntry.owner_id == owner_id,
                QueueEntry.played.is_(False),
            ).scalar()

    def create_entry(self, fields, db=None):
        with self._use(db) as db:
            entry = QueueEntry(played=False, **fields)
            db.add(entry)
            db.flush()
            return entry

    # Queue reads

    def get_entry(self, entry_id, db=None):
        with self._use(db) as db:
            return db.get(QueueEntry, entry_id)

    def list_active_entries(self, owner_id, viewer_id, db=None):
        """Queued entries of a room with their upvote totals and the viewer's own vote"""
        with self._use(db) as db:
            counts = (
                db.query(Vote.entry_id.label("entry_id"), func.count(Vote.id).label("upvotes"))
                .group_by(Vote.entry_id)
                .subquery()
            )
            rows = (
                db.query(QueueEntry, func.coalesce(counts.c.upvotes, 0))
                .outerjoin(counts, counts.c.entry_id == QueueEntry.id)
                .filter(QueueEntry.owner_id == owner_id, QueueEntry.played.is_(False))
                .all()
            )

            voted = set()
            if viewer_id is not None:
                voted = {
                    entry_id for (entry_id,) in db.query(Vote.entry_id)
                    .join(QueueEntry, QueueEntry.id == Vote.entry_id)
                    .filter(
                        Vote.voter_id == viewer_id,
                        QueueEntry.owner_id == owner_id,
                        QueueEntry.played.is_(False),
                    )
                }

            return [QueueRow(entry, int(count), entry.id in voted) for entry, count in rows]

    def get_current_stream(self, owner_id, db=None):
        with self._use(db) as db:
            current = db.get(CurrentStream, owner_id)
            if current is None or current.entry_id is None:
                return None
            return db.get(QueueEntry, current.entry_id)

    # Mutations

    def apply_advance(self, owner_id, entry_id, db=None):
        """Mark the entry played and point the room's CurrentStream at it.

        Both writes share one transaction; the played flag is only flipped
        when it is still false, otherwise Conflict is raised.
        """
        with self._use(db) as db:
            result = db.execute(
                update(QueueEntry)
                .where(
                    QueueEntry.id == entry_id,
                    QueueEntry.owner_id == owner_id,
                    QueueEntry.played.is_(False),
                )
                .values(played=True)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise Conflict("Entry was already advanced by another request", reason="already_played")

            current = db.get(CurrentStream, owner_id)
            if current is None:
                db.add(CurrentStream(owner_id=owner_id, entry_id=entry_id))
            else:
                current.entry_id = entry_id
            db.flush()

            entry = db.get(QueueEntry, entry_id)
            db.refresh(entry)
            return entry

    def toggle_vote(self, entry_id, voter_id, direction):
        """Apply an upvote or downvote; returns (changed, vote_count)"""
        with self.session() as db:
            entry = db.get(QueueEntry, entry_id)
            if entry is None or entry.played:
                raise NotFound("Entry is not in the queue", reason="entry")

            existing = db.query(Vote).filter_by(entry_id=entry_id, voter_id=voter_id).first()
            changed = False
            if direction == "up" and existing is None:
                db.add(Vote(entry_id=entry_id, voter_id=voter_id))
                try:
                    db.flush()
                    changed = True
                except IntegrityError:
                    # A concurrent upvote from the same voter won the insert
                    db.rollback()
            elif direction == "down" and existing is not None:
                db.delete(existing)
                db.flush()
                changed = True

            count = db.query(func.count(Vote.id)).filter(Vote.entry_id == entry_id).scalar()
            return changed, int(count)

    def remove_entry(self, owner_id, entry_id):
        with self.session() as db:
            entry = db.query(QueueEntry).filter_by(id=entry_id, owner_id=owner_id).first()
            if entry is None:
                raise NotFound("Entry not found in this room", reason="entry")

            db.query(Vote).filter(Vote.entry_id == entry_id).delete(synchronize_session=False)
            db.query(CurrentStream).filter(
                CurrentStream.owner_id == owner_id,
                CurrentStream.entry_id == entry_id,
            ).update({CurrentStream.entry_id: None}, synchronize_session=False)
            db.delete(entry)
            return entry

    def empty_queue(self, owner_id):
        """Mark every queued entry of the room played; returns how many changed"""
        with self.session() as db:
            result = db.execute(
                update(QueueEntry)
                .where(QueueEntry.owner_id == owner_id, QueueEntry.played.is_(False))
                .values(played=True)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount
