"""
YouTube metadata lookup for StreamQueue.
Uses the YouTube Data API when a key is configured, oEmbed otherwise.
Every request is bounded by a timeout; failures raise ResolverUnavailable.
"""

import logging
import requests

from ..core.errors import ResolverUnavailable


logger = logging.getLogger(__name__)

DATA_API_URL = "https://www.googleapis.com/youtube/v3/videos"
OEMBED_URL = "https://www.youtube.com/oembed"
WATCH_URL = "https://www.youtube.com/watch?v={video_id}"
USER_AGENT = "StreamQueue/1.0"


class YouTubeMetadataResolver:

    def __init__(self, api_key=None, timeout=4, cache=None, cache_timeout=300):
        self.api_key = api_key
        self.timeout = timeout
        self.cache = cache
        self.cache_timeout = cache_timeout

    def resolve(self, video_id):
        """Return {"title": str|None, "thumbnails": [{"url", "width"}, ...]}"""
        cache_key = f"yt_meta:{video_id}"
        if self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached:
                return cached

        if self.api_key:
            metadata = self._fetch_data_api(video_id)
        else:
            metadata = self._fetch_oembed(video_id)

        if self.cache is not None:
            self.cache.set(cache_key, metadata, timeout=self.cache_timeout)
        return metadata

    def _get_json(self, url, params):
        try:
            response = requests.get(
                url,
                params=params,
                timeout=self.timeout,
                headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
            )
        except requests.RequestException as e:
            raise ResolverUnavailable(f"Metadata request failed: {e}", reason="network") from e

        if response.status_code != 200:
            raise ResolverUnavailable(f"Metadata request returned {response.status_code}", reason="status")

        try:
            data = response.json()
        except ValueError as e:
            raise ResolverUnavailable("Metadata response was not JSON", reason="payload") from e

        if not isinstance(data, dict):
            raise ResolverUnavailable("Metadata response was not a JSON object", reason="payload")
        return data

    def _fetch_data_api(self, video_id):
        data = self._get_json(DATA_API_URL, {"id": video_id, "part": "snippet", "key": self.api_key})
        items = data.get("items") or []
        if not isinstance(items, list) or not items:
            raise ResolverUnavailable(f"No video found for {video_id}", reason="missing")
        if not isinstance(items[0], dict):
            raise ResolverUnavailable("Video item was not a JSON object", reason="payload")

        snippet = items[0].get("snippet")
        if not isinstance(snippet, dict):
            snippet = {}
        thumbs = snippet.get("thumbnails")
        if not isinstance(thumbs, dict):
            thumbs = {}
        thumbnails = [
            {"url": thumb.get("url"), "width": thumb.get("width") or 0}
            for thumb in thumbs.values()
            if isinstance(thumb, dict)
        ]
        return {"title": snippet.get("title"), "thumbnails": thumbnails}

    def _fetch_oembed(self, video_id):
        data = self._get_json(OEMBED_URL, {"url": WATCH_URL.format(video_id=video_id), "format": "json"})
        thumbnails = []
        if data.get("thumbnail_url"):
            thumbnails.append({"url": data["thumbnail_url"], "width": data.get("thumbnail_width") or 0})
        return {"title": data.get("title"), "thumbnails": thumbnails}
