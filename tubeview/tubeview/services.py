"""
Services module for Tubeview.

This module is the client for the streams backend API. It fetches video
details, related videos, search results, stream lists, subtitles,
thumbnails, comments and DASH manifests, and keeps manifests in the Django
cache so any worker process can serve them to the player by URL.

Key functionality:
- Caching: Manifests handed to the player live in the configured Django cache (CACHES) with a TTL.
- Backend calls: Thin wrappers over the REST endpoints with uniform error handling.
- Manifests: Fetch the backend MPD, or build one locally from the stream lists.

Functions:
- _cache_get(key): Retrieve cached data if present and not expired.
- _cache_set(key, data, ttl): Store data in the cache with a TTL.
- get_video_details(video_id): Video details (title, description, counts...).
- get_related_streams(video_id): Related video items.
- get_search_results(query, sort_filter): Search payload for a query.
- get_video_streams(video_id) / get_audio_streams(video_id): Stream lists.
- get_all_streams(video_id): Video and audio stream lists fetched in parallel.
- get_subtitles(video_id): Subtitle tracks.
- get_video_thumbnails(video_id): Best available thumbnail.
- get_video_comments(video_id): Comments payload.
- get_manifest(video_id): Backend DASH manifest, stored for the player.
- get_manifest_url(video_id): URL of the stored backend manifest.
- build_stream_manifest(video_id): Locally generated DASH manifest, stored for the player.
- load_manifest(video_id): Manifest from the configured source.
- store_manifest(manifest_xml) / get_stored_manifest(token): Manifest cache access.
"""

import logging
import uuid
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional

import requests
from django.conf import settings
from django.core.cache import cache
from django.urls import reverse

from videos.adapters import adapt_stream_metadata, calculate_duration
from videos.dash import generate_dash_manifest, parse_manifest
from videos.proxy import rewrite_segment_url
from videos.streams import select_audio_streams, select_subtitles, select_video_streams

logger = logging.getLogger(__name__)


class BackendError(RuntimeError):
    """Raised when the backend answers with an error status or an unexpected payload."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


# ValueError covers undecodable JSON bodies
FETCH_ERRORS = (requests.RequestException, BackendError, ValueError)


def _cache_get(key: str) -> Optional[Any]:
    """
    Retrieve cached data for a key if it exists and has not expired.

    The configured Django cache backend is shared by every worker when a
    shared backend (Redis, Memcached, database, file) is selected.

    Args:
        key (str): Cache key.

    Returns:
        The cached data if valid, None if not cached or expired.
    """
    return cache.get(key)


def _cache_set(key: str, data: Any, ttl: int = 90) -> None:
    """
    Store data in the cache with a time-to-live (TTL).

    Args:
        key (str): Cache key.
        data: Data to cache.
        ttl (int): Time to live in seconds (default 90).
    """
    cache.set(key, data, ttl)


def _get(path: str, what: str, ident: str, **params) -> requests.Response:
    """
    GET an endpoint below API_BASE_URL and fail on an error status.

    Args:
        path (str): Endpoint path relative to the API base (e.g. 'streams/details').
        what (str): Human readable name of the resource, used in error messages.
        ident (str): Video id or query the request is about, used in error messages.
        **params: Query parameters, URL-encoded by requests.

    Returns:
        requests.Response: The successful response.

    Raises:
        BackendError: On a 4xx/5xx status, carrying the status code.
    """
    url = f"{settings.API_BASE_URL}/{path}"
    resp = requests.get(url, params=params, timeout=settings.REQUEST_TIMEOUT)
    if not resp.ok:
        raise BackendError(
            f"Failed to fetch {what} for {ident}: {resp.status_code} {resp.reason}",
            status_code=resp.status_code,
        )
    return resp


def _as_list(data: Any, key: str, what: str) -> list:
    """Accept either a bare list or an object wrapping the list under key."""
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get(key), list):
        return data[key]
    raise BackendError(f"Unexpected response format for {what}")


def _first_if_list(data: Any, what: str) -> dict:
    """
    Unwrap a single-object payload that the backend may also send as a list.

    Args:
        data: Decoded JSON payload.
        what (str): Human readable name of the resource, used in error messages.

    Returns:
        dict: The object itself, or the first element of a list.

    Raises:
        BackendError: For an empty list or anything that is not an object.
    """
    if isinstance(data, list):
        if not data:
            raise BackendError(f"Unexpected response format for {what}")
        data = data[0]
    if not isinstance(data, dict):
        raise BackendError(f"Unexpected response format for {what}")
    return data


def get_video_details(video_id: str) -> dict:
    """
    Fetch video details from the backend.

    Args:
        video_id (str): Video identifier.

    Returns:
        dict: Raw details payload (videoTitle, description, channelName, counts...).

    Raises:
        BackendError: On an error status or an unexpected payload.
        requests.RequestException: On transport errors.
    """
    try:
        data = _get("streams/details", "video details", video_id, id=video_id).json()
        return _first_if_list(data, "video details")
    except FETCH_ERRORS as exc:
        logger.error("Error fetching video details: %s", exc)
        raise


def get_related_streams(video_id: str) -> list[dict]:
    """
    Fetch related video items for a video.

    The backend answers with either a list or an object with a 'streams' list.

    Args:
        video_id (str): Video identifier.

    Returns:
        list[dict]: Raw related items.
    """
    try:
        data = _get("streams/related", "related streams", video_id, id=video_id).json()
        return _as_list(data, "streams", "related streams")
    except FETCH_ERRORS as exc:
        logger.error("Error fetching related streams: %s", exc)
        raise


def get_search_results(query: str, sort_filter: str = "asc") -> dict:
    """
    Fetch search results for a query.

    Args:
        query (str): Search string.
        sort_filter (str): Backend sort filter (default 'asc').

    Returns:
        dict: Raw search payload with an 'items' list.
    """
    try:
        resp = _get("streams/search", "search results", query, searchString=query, sortFilter=sort_filter)
        return resp.json()
    except FETCH_ERRORS as exc:
        logger.error("Error fetching search results: %s", exc)
        raise


def get_video_streams(video_id: str) -> list[dict]:
    """Fetch video-only streams for a video."""
    try:
        data = _get("streams/video", "video streams", video_id, id=video_id).json()
        return _as_list(data, "streams", "video streams")
    except FETCH_ERRORS as exc:
        logger.error("Error fetching video streams: %s", exc)
        raise


def get_audio_streams(video_id: str) -> list[dict]:
    """Fetch audio-only streams for a video."""
    try:
        data = _get("streams/audio", "audio streams", video_id, id=video_id).json()
        return _as_list(data, "streams", "audio streams")
    except FETCH_ERRORS as exc:
        logger.error("Error fetching audio streams: %s", exc)
        raise


def get_all_streams(video_id: str) -> tuple[list[dict], list[dict]]:
    """
    Fetch video and audio streams in parallel.

    Returns:
        tuple: (video_streams, audio_streams). Either failure propagates.
    """
    with ThreadPoolExecutor(max_workers=2) as pool:
        video_future = pool.submit(get_video_streams, video_id)
        audio_future = pool.submit(get_audio_streams, video_id)
        return video_future.result(), audio_future.result()


def get_subtitles(video_id: str) -> list[dict]:
    """Fetch subtitle tracks; the backend answers with a list or {'subtitles': [...]}."""
    try:
        data = _get("streams/subtitles", "subtitles", video_id, id=video_id).json()
        return _as_list(data, "subtitles", "subtitles")
    except FETCH_ERRORS as exc:
        logger.error("Error fetching subtitles: %s", exc)
        raise


def get_video_thumbnails(video_id: str) -> dict:
    """
    Fetch the thumbnails of a video and return the best one.

    Prefers the thumbnail with estimatedResolutionLevel 'HIGH', then the
    last, then the first.

    Args:
        video_id (str): Video identifier.

    Returns:
        dict: Thumbnail with at least a 'url' key.

    Raises:
        BackendError: If the video has no thumbnails.
    """
    try:
        thumbnails = _get("streams/thumbnails", "thumbnails", video_id, id=video_id).json() or []
        if not isinstance(thumbnails, list):
            raise BackendError("Unexpected response format for thumbnails")
        high = [t for t in thumbnails if t and t.get("estimatedResolutionLevel") == "HIGH"]
        if high:
            return high[0]
        if not thumbnails:
            raise BackendError(f"No thumbnails available for video {video_id}")
        return thumbnails[-1] or thumbnails[0]
    except FETCH_ERRORS as exc:
        logger.error("Error fetching video thumbnails: %s", exc)
        raise


def get_video_comments(video_id: str) -> dict:
    """Fetch the comments payload ('relatedItems', 'nextPage'...) for a video."""
    try:
        data = _get("comments", "comments", video_id, id=video_id).json()
        return _first_if_list(data, "comments")
    except FETCH_ERRORS as exc:
        logger.error("Error fetching video comments: %s", exc)
        raise


def store_manifest(manifest_xml: str) -> str:
    """
    Keep a manifest in the cache and return the URL that serves it.

    Every call gets a fresh token, so two loads of the same video never
    share a URL.
    """
    token = uuid.uuid4().hex
    _cache_set(f"manifest:{token}", manifest_xml, ttl=settings.MANIFEST_TTL)
    return reverse("manifest", args=[token])


def get_stored_manifest(token: str) -> Optional[str]:
    """
    Look up a stored manifest.

    Args:
        token (str): Token from the URL returned by store_manifest.

    Returns:
        str or None: The MPD XML, or None when unknown or expired.
    """
    return _cache_get(f"manifest:{token}")


def get_manifest(video_id: str) -> dict:
    """
    Fetch the backend DASH manifest for a video and store it for the player.

    The MPD is parsed for its presentation duration and id; an unreadable
    or missing duration is reported as 0.

    Args:
        video_id (str): Video identifier.

    Returns:
        dict: {'url': local manifest URL, 'duration': seconds, 'video_id': MPD id or None}.
    """
    try:
        manifest_xml = _get("streams/dash", "DASH manifest", video_id, id=video_id).text
    except FETCH_ERRORS as exc:
        logger.error("Error fetching DASH manifest: %s", exc)
        raise
    parsed = parse_manifest(manifest_xml)
    url = store_manifest(manifest_xml)
    logger.info("Manifest loaded for %s: duration=%ss, id=%s", video_id, parsed["duration"], parsed["id"])
    return {"url": url, "duration": parsed["duration"], "video_id": parsed["id"]}


def get_manifest_url(video_id: str) -> str:
    """Fetch and store the backend manifest, returning only its local URL."""
    return get_manifest(video_id)["url"]


def _proxied(metadata: dict) -> dict:
    url, _ = rewrite_segment_url(metadata["url"], None, settings.PROXY_URL)
    return {**metadata, "url": url}


def build_stream_manifest(video_id: str) -> dict:
    """
    Build a DASH manifest locally from the backend's stream lists.

    Selects one video stream per quality level, one audio stream per
    language and one subtitle track per language, derives the duration
    from the stream metadata, rewrites segment URLs through the proxy and
    stores the generated MPD for the player. Subtitles are optional: a
    failed subtitle fetch only drops the text tracks.

    Args:
        video_id (str): Video identifier.

    Returns:
        dict: {'url': local manifest URL, 'duration': seconds, 'video_id': video_id}.

    Raises:
        BackendError: If the backend offers no playable stream.
    """
    video_streams, audio_streams = get_all_streams(video_id)
    try:
        subtitles = select_subtitles(get_subtitles(video_id))
    except FETCH_ERRORS as exc:
        logger.warning("Continuing without subtitles for %s: %s", video_id, exc)
        subtitles = []

    selected_video = select_video_streams(video_streams)
    selected_audio = select_audio_streams(audio_streams)
    if not selected_video and not selected_audio:
        raise BackendError(f"No playable streams for video {video_id}")

    duration = calculate_duration(
        selected_video[0] if selected_video else None,
        selected_audio[0] if selected_audio else None,
    )
    manifest_xml = generate_dash_manifest(
        video_streams=[_proxied(adapt_stream_metadata(s, True)) for s in selected_video],
        audio_streams=[_proxied(adapt_stream_metadata(s, False)) for s in selected_audio],
        duration=duration,
        subtitles=[_proxied(s) for s in subtitles],
    )
    url = store_manifest(manifest_xml)
    logger.info(
        "Manifest generated for %s: duration=%ss, %d video, %d audio, %d subtitle tracks",
        video_id, duration, len(selected_video), len(selected_audio), len(subtitles),
    )
    return {"url": url, "duration": duration, "video_id": video_id}


def load_manifest(video_id: str) -> dict:
    """Manifest from the configured source ('backend' or 'generated')."""
    if settings.MANIFEST_SOURCE == "generated":
        return build_stream_manifest(video_id)
    return get_manifest(video_id)
