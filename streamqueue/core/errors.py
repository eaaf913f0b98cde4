"""
Outcome kinds reported by queue operations.

Every rejection carries a machine-readable ``kind`` (plus an optional
``reason`` sub-kind) and a human-readable message, so callers can decide
whether to retry, wait, or ask for new input.
"""


class QueueError(Exception):
    kind = "Error"
    status_code = 500

    def __init__(self, message, reason=None):
        super().__init__(message)
        self.message = message
        self.reason = reason

    def to_dict(self):
        return {"error": self.kind, "reason": self.reason, "message": self.message}


class InvalidInput(QueueError):
    kind = "InvalidInput"
    status_code = 400


class RateLimited(QueueError):
    kind = "RateLimited"
    status_code = 429

    DUPLICATE = "duplicate"
    BURST = "burst"
    SUSTAINED = "sustained"


class QueueFull(QueueError):
    kind = "QueueFull"
    status_code = 429


class ResolverUnavailable(QueueError):
    """Metadata lookup failed; absorbed by admission, never surfaced"""
    kind = "ResolverUnavailable"
    status_code = 502


class Conflict(QueueError):
    kind = "Conflict"
    status_code = 409


class NotFound(QueueError):
    kind = "NotFound"
    status_code = 404


class NoEntries(NotFound):
    def __init__(self, message="No queued entries to play", reason="empty"):
        super().__init__(message, reason)


class Unauthorized(QueueError):
    kind = "Unauthorized"
    status_code = 401


class Forbidden(QueueError):
    kind = "Forbidden"
    status_code = 403


class StoreFailure(QueueError):
    kind = "StoreFailure"
    status_code = 503
