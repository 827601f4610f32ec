"""
Views for the videos app.

This module provides view functions used by the videos application, including:
- the video page data (player configuration, metadata, related videos),
- a video's comments,
- serving stored DASH manifests to the player,
- proxying media segments whose URLs were rewritten to the proxy.

Functions:
- video_detail: Load everything the video page needs, in parallel.
- video_comments: Adapted comments of a video.
- manifest: Serve a stored DASH manifest.
- segment_proxy: Proxy media segments to clients with byte-range support.
"""
import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait

import requests
from django.conf import settings
from django.http import Http404, HttpResponse, HttpResponseForbidden, JsonResponse
from django.http import StreamingHttpResponse

from tubeview.services import (
    FETCH_ERRORS, get_related_streams, get_stored_manifest, get_video_comments, get_video_details,
    get_video_thumbnails, load_manifest,
)
from .adapters import (
    adapt_comments, adapt_player_config, adapt_related_videos, adapt_video_metadata,
    error_metadata, error_player_config,
)
from .proxy import upstream_url_from_proxy

logger = logging.getLogger(__name__)

PASSTHROUGH_HEADERS = ['Content-Length', 'Content-Range', 'Accept-Ranges', 'Cache-Control']


def video_detail(request, video_id):
    """
    Return the data the video page needs.

    Thumbnail, details, manifest and related videos are fetched in
    parallel. Related videos are optional: their failure is logged and an
    empty list is returned in their place. Any other failure yields the
    error payload as soon as it happens, without waiting for the remaining
    fetches, so the page can still render a fallback player.

    Args:
        request (HttpRequest): Incoming request.
        video_id (str): Video identifier.

    Returns:
        JsonResponse: {'player_config', 'metadata', 'related_videos'}, plus
        'error' when loading failed.
    """
    poster = settings.DEFAULT_THUMBNAIL
    pool = ThreadPoolExecutor(max_workers=4)
    try:
        thumbnail_future = pool.submit(get_video_thumbnails, video_id)
        details_future = pool.submit(get_video_details, video_id)
        manifest_future = pool.submit(load_manifest, video_id)
        related_future = pool.submit(get_related_streams, video_id)

        # Stop at the first required fetch that fails instead of waiting for the rest
        required = [thumbnail_future, details_future, manifest_future]
        wait(required, return_when=FIRST_EXCEPTION)
        if thumbnail_future.done() and thumbnail_future.exception() is None:
            poster = thumbnail_future.result().get("url") or settings.DEFAULT_THUMBNAIL
        for future in required:
            if future.done() and future.exception() is not None:
                raise future.exception()

        details = details_future.result()
        manifest_info = manifest_future.result()
        try:
            related = related_future.result()
        except FETCH_ERRORS as e:
            logger.warning("Failed to fetch related videos: %s", e)
            related = []

        return JsonResponse({
            "player_config": adapt_player_config(manifest_info["url"], manifest_info["duration"], poster),
            "metadata": adapt_video_metadata(details, poster),
            "related_videos": adapt_related_videos(related, settings.DEFAULT_THUMBNAIL, settings.DEFAULT_AVATAR),
        })
    except Exception as e:
        logger.error("Error loading video data for %s: %s", video_id, e)
        return JsonResponse({
            "player_config": error_player_config(poster),
            "metadata": error_metadata(),
            "related_videos": [],
            "error": str(e) or "Unknown error loading video",
        })
    finally:
        # Running fetches finish in the background; their results are dropped
        pool.shutdown(wait=False, cancel_futures=True)


def video_comments(request, video_id):
    """
    Return the adapted comments of a video.

    Args:
        request (HttpRequest): Incoming request.
        video_id (str): Video identifier.

    Returns:
        JsonResponse: {'comments', 'next_page', 'error'}.
    """
    try:
        data = get_video_comments(video_id)
    except FETCH_ERRORS as e:
        return JsonResponse({"comments": [], "next_page": None, "error": str(e) or "Failed to load comments"})
    return JsonResponse({
        "comments": adapt_comments(data.get("relatedItems"), settings.DEFAULT_AVATAR),
        "next_page": data.get("nextPage"),
        "error": None,
    })


def manifest(request, token):
    """
    Serve a stored DASH manifest.

    Args:
        request (HttpRequest): Incoming request.
        token (str): Token returned when the manifest was stored.

    Returns:
        HttpResponse: The MPD document as application/dash+xml.

    Raises:
        Http404: If the token is unknown or the manifest has expired.
    """
    manifest_xml = get_stored_manifest(token)
    if manifest_xml is None:
        raise Http404("Manifest not found or expired")
    resp = HttpResponse(manifest_xml, content_type="application/dash+xml")
    resp["Cache-Control"] = "no-store"
    return resp


def segment_proxy(request, path):
    """
    Proxy a media segment to the client.

    The upstream host is provided via the 'host' query parameter and a byte
    range via 'range'; without 'range' the client's Range header is
    forwarded instead.

    Args:
        request (HttpRequest): Incoming request containing query parameter 'host'.
        path (str): Upstream path (e.g. 'videoplayback').

    Returns:
        StreamingHttpResponse: Proxied segment content, HttpResponseForbidden
        for a missing or foreign host, or a 502 response when the upstream
        cannot be reached.
    """
    try:
        upstream_url, byte_range = upstream_url_from_proxy(path, request.GET)
    except ValueError as e:
        return HttpResponseForbidden(str(e))
    headers = {}
    if byte_range:
        headers['Range'] = f"bytes={byte_range}"
    elif 'Range' in request.headers:
        headers['Range'] = request.headers['Range']
    try:
        upstream = requests.get(upstream_url, headers=headers, stream=True, timeout=settings.REQUEST_TIMEOUT)
    except requests.RequestException as e:
        logger.error("Error proxying segment %s: %s", path, e)
        return HttpResponse("Upstream unavailable", status=502)
    resp = StreamingHttpResponse(upstream.iter_content(chunk_size=64 * 1024),
                                 status=upstream.status_code,
                                 content_type=upstream.headers.get('Content-Type', 'application/octet-stream'))
    for h in PASSTHROUGH_HEADERS:
        if h in upstream.headers:
            resp[h] = upstream.headers[h]
    return resp
