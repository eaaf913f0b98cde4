"""
Thumbnail selection for resolved video metadata.
"""


def _width(thumbnail):
    try:
        return int(thumbnail.get("width") or 0)
    except (TypeError, ValueError):
        return 0


def _url(thumbnail, fallback):
    url = thumbnail.get("url")
    if isinstance(url, str) and url.strip():
        return url.strip()
    return fallback


def select_thumbnails(thumbnails, fallback_small, fallback_large):
    """Pick (small, large) thumbnail URLs from a list of {url, width} dicts.

    The list is ordered by ascending width; the widest becomes the large
    image and the second widest the small one (or the widest again when
    only one exists). Missing URLs fall back to the placeholders, and
    widths that are not numbers count as zero.
    """
    if not isinstance(thumbnails, (list, tuple)):
        return fallback_small, fallback_large

    usable = [t for t in thumbnails if isinstance(t, dict)]
    if not usable:
        return fallback_small, fallback_large

    ordered = sorted(usable, key=_width)
    large = _url(ordered[-1], fallback_large)
    small_source = ordered[-2] if len(ordered) > 1 else ordered[-1]
    small = _url(small_source, fallback_small)
    return small, large
