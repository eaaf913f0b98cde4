"""
Admission control for room queues.

A submission is validated, its metadata resolved, and then checked
against the duplicate window, the burst and sustained rate limits and the
room capacity. The checks and the insert share one transaction inside the
room's admission lock, so nothing is written unless every check passed.
Metadata lookups happen before the lock is taken.
"""

import logging

from .errors import QueueFull, RateLimited, ResolverUnavailable
from .links import parse_video_link
from .policy import QueuePolicy
from .thumbnails import select_thumbnails
from ..utils.timing import utcnow, window_start


logger = logging.getLogger(__name__)


class AdmissionController:

    def __init__(self, store, resolver, locks, policy=None, clock=utcnow):
        self.store = store
        self.resolver = resolver
        self.locks = locks
        self.policy = policy or QueuePolicy()
        self.clock = clock

    def submit(self, owner_id, submitter_id, raw_url):
        """Admit a link into the room's queue and return the new entry"""
        video_id = parse_video_link(raw_url)
        metadata = self._resolve(video_id)

        title = metadata.get("title")
        if not isinstance(title, str) or not title.strip():
            title = self.policy.placeholder_title

        small, large = select_thumbnails(
            metadata.get("thumbnails"),
            self.policy.fallback_thumbnail_small,
            self.policy.fallback_thumbnail_large,
        )
        fields = {
            "owner_id": owner_id,
            "submitter_id": submitter_id,
            "type": "Youtube",
            "source_url": raw_url.strip(),
            "external_video_id": video_id,
            "title": title.strip()[:512],
            "thumbnail_small": small,
            "thumbnail_large": large,
        }

        with self.locks.hold(owner_id, "admission"):
            with self.store.session() as db:
                now = self.clock()
                if submitter_id != owner_id:
                    self._check_limits(db, owner_id, submitter_id, video_id, now)
                self._check_capacity(db, owner_id)

                fields["created_at"] = now
                entry = self.store.create_entry(fields, db=db)

        logger.info(f"Accepted {video_id} into room {owner_id} from {submitter_id} (entry {entry.id})")
        return entry

    def _resolve(self, video_id):
        try:
            metadata = self.resolver.resolve(video_id)
        except ResolverUnavailable as e:
            logger.warning(f"Metadata unavailable for {video_id}, using placeholders: {e.message}")
            return {}
        except Exception as e:
            # Lookup failures never block admission
            logger.warning(f"Metadata lookup for {video_id} failed, using placeholders: {e!r}")
            return {}
        if not isinstance(metadata, dict):
            logger.warning(f"Metadata for {video_id} was not a mapping, using placeholders")
            return {}
        return metadata

    def _check_limits(self, db, owner_id, submitter_id, video_id, now):
        policy = self.policy

        duplicate = self.store.find_duplicate(
            owner_id, video_id, window_start(now, policy.duplicate_window_minutes),
            submitter_id=submitter_id, db=db,
        )
        if duplicate is not None:
            self._reject(RateLimited(
                f"This song was already added in the last {policy.duplicate_window_minutes} min",
                reason=RateLimited.DUPLICATE,
            ), owner_id, submitter_id)

        recent = self.store.count_entries(
            owner_id, submitter_id, window_start(now, policy.burst_window_minutes), db=db,
        )
        if recent >= policy.burst_limit:
            self._reject(RateLimited(
                f"Rate limit exceeded: You can only add {policy.burst_limit} songs "
                f"per {policy.burst_window_minutes} minutes",
                reason=RateLimited.BURST,
            ), owner_id, submitter_id)

        sustained = self.store.count_entries(
            owner_id, submitter_id, window_start(now, policy.sustained_window_minutes), db=db,
        )
        if sustained >= policy.sustained_limit:
            self._reject(RateLimited(
                f"Rate limit exceeded: You can only add {policy.sustained_limit} songs "
                f"per {policy.sustained_window_minutes} minutes",
                reason=RateLimited.SUSTAINED,
            ), owner_id, submitter_id)

    def _check_capacity(self, db, owner_id):
        active = self.store.count_active_entries(owner_id, db=db)
        if active >= self.policy.max_queue_len:
            raise QueueFull("Queue is full", reason="capacity")

    def _reject(self, error, owner_id, submitter_id):
        logger.info(f"Rejected submission to room {owner_id} from {submitter_id}: {error.kind}({error.reason})")
        raise error
