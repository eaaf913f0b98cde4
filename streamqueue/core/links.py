"""
YouTube link validation and video id extraction.
"""

import re
from urllib.parse import urlparse, parse_qs

from .errors import InvalidInput


YT_REGEX = re.compile(
    r"^(?:(?:https?:)?//)?(?:www\.)?(?:m\.)?"
    r"(?:youtu(?:be)?\.com/(?:v/|embed/|watch(?:/|\?v=))|youtu\.be/)"
    r"((?:\w|-){11})(?:\S+)?$"
)

MAX_URL_LENGTH = 2048


def is_youtube_link(url):
    """Check that the URL is non-empty and looks like a YouTube video link"""
    if not url or not isinstance(url, str):
        return False
    url = url.strip()
    if not url or len(url) > MAX_URL_LENGTH:
        return False
    return YT_REGEX.match(url) is not None


def extract_video_id(url):
    """Return the video id carried by the link, or an empty string"""
    url = url.strip()
    parsed = urlparse(url if "//" in url else f"//{url}")
    host = (parsed.hostname or "").lower()

    # watch?v=<id> is the canonical form
    video_id = (parse_qs(parsed.query).get("v") or [""])[0]
    if video_id:
        return video_id

    if host == "youtu.be":
        return parsed.path.lstrip("/").split("/")[0]

    for prefix in ("/embed/", "/v/", "/watch/"):
        if parsed.path.startswith(prefix):
            return parsed.path[len(prefix):].split("/")[0]

    return ""


def parse_video_link(url):
    """Validate a submitted link and return its canonical video id.

    Raises InvalidInput when the link is empty, is not a recognised
    YouTube URL, or carries no extractable id.
    """
    if not url or not isinstance(url, str) or not url.strip():
        raise InvalidInput("YouTube link cannot be empty", reason="empty")
    if not is_youtube_link(url):
        raise InvalidInput("Invalid YouTube URL format", reason="format")

    video_id = extract_video_id(url)
    if not video_id:
        raise InvalidInput("Could not find a video id in the link", reason="video_id")
    return video_id
