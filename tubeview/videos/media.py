"""
Helpers for picking images out of backend image lists and for pulling
video ids out of watch URLs.
"""
import re
from urllib.parse import urlsplit, parse_qs

_VIDEO_ID_PATTERNS = (
    re.compile(r"[?&]v=([^&]+)"),
    re.compile(r"youtu\.be/([^?&]+)"),
    re.compile(r"embed/([^?&]+)"),
    re.compile(r"/watch/([^?&]+)"),
)


def _url_at(images, index):
    if -len(images) <= index < len(images):
        image = images[index] or {}
        return image.get("url")
    return None


def select_best_thumbnail(thumbnails: list[dict] | None, fallback: str) -> str:
    """Prefer the medium thumbnail (index 1), then the last, then the first."""
    if not thumbnails:
        return fallback
    return _url_at(thumbnails, 1) or _url_at(thumbnails, -1) or _url_at(thumbnails, 0) or fallback


def select_best_uploader_avatar(avatars: list[dict] | None, fallback: str) -> str:
    """Prefer the largest uploader avatar (last in the list), then the first."""
    if not avatars:
        return fallback
    return _url_at(avatars, -1) or _url_at(avatars, 0) or fallback


def select_best_avatar(avatars: list[dict] | None, fallback: str) -> str:
    """Prefer the medium avatar (index 2), then the first."""
    if not avatars:
        return fallback
    return _url_at(avatars, 2) or _url_at(avatars, 0) or fallback


def extract_video_id_from_url(url: str | None) -> str:
    """
    Extract a video id from a watch URL.

    Absolute URLs use the ``v`` query parameter, or the last path segment
    (youtu.be/ID, /embed/ID, /shorts/ID). Relative URLs such as
    '/watch?v=ID' are matched against a few known patterns.

    Args:
        url (str | None): Watch URL as returned by the backend.

    Returns:
        str: The video id, or an empty string when none is found.
    """
    if not url:
        return ""
    parts = urlsplit(url)
    if parts.scheme and parts.netloc:
        v = parse_qs(parts.query).get("v")
        if v and v[0]:
            return v[0]
        segments = [s for s in parts.path.split("/") if s]
        return segments[-1] if segments else ""
    for pattern in _VIDEO_ID_PATTERNS:
        match = pattern.search(url)
        if match and match.group(1):
            return match.group(1)
    return ""
