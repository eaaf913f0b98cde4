"""
Admission limits for a room.
"""

from dataclasses import dataclass


PLACEHOLDER_TITLE = "Can't find video"
PLACEHOLDER_THUMBNAIL = "https://cdn.pixabay.com/photo/2024/02/28/07/42/european-shorthair-8601492_640.jpg"


@dataclass(frozen=True)
class QueuePolicy:
    max_queue_len: int = 20
    duplicate_window_minutes: int = 10
    burst_window_minutes: int = 2
    burst_limit: int = 2
    sustained_window_minutes: int = 10
    sustained_limit: int = 5
    placeholder_title: str = PLACEHOLDER_TITLE
    fallback_thumbnail_small: str = PLACEHOLDER_THUMBNAIL
    fallback_thumbnail_large: str = PLACEHOLDER_THUMBNAIL

    @classmethod
    def from_config(cls, config):
        """Build a policy from a Flask config mapping, falling back to defaults"""
        defaults = cls()
        return cls(
            max_queue_len=int(config.get("MAX_QUEUE_LEN", defaults.max_queue_len)),
            duplicate_window_minutes=int(config.get("DUPLICATE_WINDOW_MINUTES", defaults.duplicate_window_minutes)),
            burst_window_minutes=int(config.get("BURST_WINDOW_MINUTES", defaults.burst_window_minutes)),
            burst_limit=int(config.get("BURST_LIMIT", defaults.burst_limit)),
            sustained_window_minutes=int(config.get("SUSTAINED_WINDOW_MINUTES", defaults.sustained_window_minutes)),
            sustained_limit=int(config.get("SUSTAINED_LIMIT", defaults.sustained_limit)),
            fallback_thumbnail_small=config.get("FALLBACK_THUMBNAIL_SMALL") or defaults.fallback_thumbnail_small,
            fallback_thumbnail_large=config.get("FALLBACK_THUMBNAIL_LARGE") or defaults.fallback_thumbnail_large,
        )
