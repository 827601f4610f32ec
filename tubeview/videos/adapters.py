"""
Adapters from raw backend payloads to view-models.

Backend payloads use the backend's camelCase field names and may omit
fields or report unknown counts as -1. The adapters here produce flat
snake_case dicts with every field present, so views and clients never
have to deal with missing data.

Functions:
- handle_negative_count(count): Map missing/negative counts to 0.
- adapt_video_metadata(details, default_avatar): Video page metadata.
- adapt_player_config(manifest_url, duration, poster_url): Player configuration.
- adapt_related_videos(items, default_thumbnail, default_avatar): Related video cards.
- adapt_search_results(search_result, default_thumbnail, default_avatar): Search result cards.
- adapt_comment(comment, default_avatar) / adapt_comments(...): Comment entries.
- adapt_stream_metadata(stream, is_video): Stream metadata for the DASH generator.
- calculate_duration(video_stream, audio_stream): Duration in seconds from stream metadata.
- error_player_config(poster_url) / error_metadata(): Fallback payloads for failed loads.
"""
from .codecs import infer_mime_type
from .formatters import format_count, format_date, format_duration_display
from .media import (
    extract_video_id_from_url, select_best_avatar, select_best_thumbnail, select_best_uploader_avatar,
)
from .streams import get_audio_language, get_audio_language_name

DEFAULT_VIDEO = {
    "codec": "avc1.42E01E",
    "mime_type": "video/mp4",
    "width": 1920,
    "height": 1080,
    "bandwidth": 1000000,
    "frame_rate": 30,
    "format": "MPEG_4",
}

DEFAULT_AUDIO = {
    "codec": "mp4a.40.2",
    "mime_type": "audio/mp4",
    "bandwidth": 128000,
    "sample_rate": 44100,
    "channels": 2,
    "format": "M4A",
}


def handle_negative_count(count) -> int:
    """The backend reports unknown counts as -1; treat those and missing values as 0."""
    if count is None or count < 0:
        return 0
    return count


def adapt_video_metadata(details: dict, default_avatar: str) -> dict:
    """
    Adapt a /streams/details payload into video page metadata.

    Args:
        details (dict): Raw details payload.
        default_avatar (str): Avatar URL used when the uploader has none.

    Returns:
        dict: Keys 'title', 'description', 'channel_name', 'channel_avatar',
              'view_count', 'upload_date', 'upload_date_text', 'like_count',
              'dislike_count', 'subscriber_count'.
    """
    details = details or {}
    description = details.get("description") or {}
    upload_date = details.get("uploadDate") or ""
    return {
        "title": details.get("videoTitle") or "Untitled Video",
        "description": description.get("content") or "No description available",
        "channel_name": details.get("channelName") or "Unknown Channel",
        "channel_avatar": select_best_avatar(details.get("uploaderAvatars"), default_avatar),
        "view_count": handle_negative_count(details.get("viewCount")),
        "upload_date": upload_date,
        "upload_date_text": format_date(upload_date),
        "like_count": handle_negative_count(details.get("likeCount")),
        "dislike_count": handle_negative_count(details.get("dislikeCount")),
        "subscriber_count": handle_negative_count(details.get("channelSubscriberCount")),
    }


def adapt_player_config(manifest_url: str, duration, poster_url: str) -> dict:
    """
    Build the player configuration.

    Args:
        manifest_url (str): Local URL of the stored manifest.
        duration: Duration in seconds.
        poster_url (str): Poster image shown before playback.

    Returns:
        dict: {'manifest_url', 'duration', 'poster'}.
    """
    return {
        "manifest_url": manifest_url,
        "duration": duration,
        "poster": poster_url,
    }


def _adapt_related_video(item: dict, default_thumbnail: str, default_avatar: str) -> dict:
    duration = handle_negative_count(item.get("duration"))
    return {
        "id": extract_video_id_from_url(item.get("url")) or item.get("id") or "",
        "url": item.get("url") or "",
        "title": item.get("name") or "Untitled Video",
        "thumbnail": select_best_thumbnail(item.get("thumbnails"), default_thumbnail),
        "channel_name": item.get("uploaderName") or "Unknown Channel",
        "channel_avatar": select_best_uploader_avatar(item.get("uploaderAvatars"), default_avatar),
        "view_count": handle_negative_count(item.get("viewCount")),
        "duration": duration,
        "duration_text": format_duration_display(duration),
        "upload_date": item.get("textualUploadDate") or "",
    }


def adapt_related_videos(items: list[dict] | None, default_thumbnail: str, default_avatar: str) -> list[dict]:
    """Adapt related items, dropping entries without a URL or a name."""
    if not items:
        return []
    return [
        _adapt_related_video(item, default_thumbnail, default_avatar)
        for item in items
        if item and item.get("url") and item.get("name")
    ]


def _adapt_search_item(item: dict, default_thumbnail: str, default_avatar: str) -> dict:
    view_count = handle_negative_count(item.get("viewCount"))
    duration = handle_negative_count(item.get("duration"))
    verified = item.get("uploaderVerified")
    return {
        "id": extract_video_id_from_url(item.get("url")),
        "url": item.get("url") or "",
        "title": item.get("name") or "Untitled Video",
        "thumbnail": item.get("thumbnailUrl") or default_thumbnail,
        "channel_name": item.get("uploaderName") or "Unknown Channel",
        "channel_url": item.get("uploaderUrl") or "",
        "channel_avatar": item.get("uploaderAvatarUrl") or default_avatar,
        "verified": verified if verified is not None else False,
        "view_count": view_count,
        "view_count_text": format_count(view_count),
        "duration": duration,
        "duration_text": format_duration_display(duration),
        "upload_date": item.get("uploadDate") or "",
        "type": item.get("type") or "stream",
    }


def adapt_search_results(search_result: dict | None, default_thumbnail: str, default_avatar: str) -> list[dict]:
    """
    Adapt a search payload into result cards.

    Items without a URL or a name are dropped.

    Args:
        search_result (dict | None): Raw search payload with an 'items' list.
        default_thumbnail (str): Thumbnail URL used when an item has none.
        default_avatar (str): Avatar URL used when an item has none.

    Returns:
        list[dict]: One dict per valid item.
    """
    items = (search_result or {}).get("items") or []
    return [
        _adapt_search_item(item, default_thumbnail, default_avatar)
        for item in items
        if item and item.get("url") and item.get("name")
    ]


def adapt_comment(comment: dict, default_avatar: str) -> dict:
    """
    Map a backend comment to the comment view-model.

    Args:
        comment (dict): Raw comment from the comments endpoint.
        default_avatar (str): Avatar used when the author has none.

    Returns:
        dict: Comment with author, text, likes and reply information.
    """
    comment_text = comment.get("commentText") or {}
    replies = comment.get("replies") or {}
    reply_count = comment.get("replyCount") or 0
    return {
        "id": comment.get("commentId"),
        "text": comment_text.get("content") or "",
        "author": comment.get("uploaderName") or "Unknown User",
        "author_avatar": select_best_avatar(comment.get("uploaderAvatars"), default_avatar),
        "author_url": comment.get("uploaderUrl") or "",
        "is_verified": comment.get("uploaderVerified") or False,
        "is_channel_owner": comment.get("channelOwner") or False,
        "upload_date": comment.get("textualUploadDate") or "",
        "like_count": comment.get("likeCount") or 0,
        "like_count_text": comment.get("textualLikeCount") or "0",
        "is_pinned": comment.get("pinned") or False,
        "is_hearted": comment.get("heartedByUploader") or False,
        "reply_count": reply_count,
        "has_replies": reply_count > 0,
        "replies_url": replies.get("url"),
    }


def adapt_comments(comments: list[dict] | None, default_avatar: str) -> list[dict]:
    """Adapt a list of comments, skipping empty entries."""
    return [adapt_comment(c, default_avatar) for c in comments or [] if c]


def adapt_stream_metadata(stream: dict, is_video: bool) -> dict:
    """
    Map a backend stream to the metadata consumed by the DASH generator.

    Missing values are filled from DEFAULT_VIDEO / DEFAULT_AUDIO. Byte
    ranges come from the stream's itagItem and are left as None when the
    backend did not report them.

    Args:
        stream (dict): Backend stream with an optional 'itagItem'.
        is_video (bool): Whether the stream is a video-only stream.

    Returns:
        dict: Stream metadata for videos.dash.generate_dash_manifest.
    """
    item = stream.get("itagItem") or {}
    defaults = DEFAULT_VIDEO if is_video else DEFAULT_AUDIO
    fmt = stream.get("format") or defaults["format"]
    codec = stream.get("codec") or defaults["codec"]
    metadata = {
        "url": stream.get("url"),
        "codec": codec,
        "format": fmt,
        "mime_type": infer_mime_type(fmt, codec, is_video),
        "bandwidth": stream.get("bitrate") or item.get("bitrate") or defaults["bandwidth"],
        "init_start": item.get("initStart"),
        "init_end": item.get("initEnd"),
        "index_start": item.get("indexStart"),
        "index_end": item.get("indexEnd"),
    }
    if is_video:
        metadata.update({
            "width": stream.get("width") or defaults["width"],
            "height": stream.get("height") or defaults["height"],
            "frame_rate": stream.get("fps") or defaults["frame_rate"],
        })
    else:
        metadata.update({
            "audio_sample_rate": item.get("sampleRate") or defaults["sample_rate"],
            "audio_channels": item.get("audioChannels") or defaults["channels"],
            "language": get_audio_language(stream),
            "language_name": get_audio_language_name(stream),
        })
    return metadata


def calculate_duration(video_stream: dict | None, audio_stream: dict | None) -> float:
    """Duration in seconds from approxDurationMs, video stream first."""
    for stream in (video_stream, audio_stream):
        duration_ms = ((stream or {}).get("itagItem") or {}).get("approxDurationMs")
        if duration_ms:
            return duration_ms / 1000
    return 0


def error_player_config(poster_url: str) -> dict:
    """Player configuration without a manifest, shown when loading failed."""
    return adapt_player_config("", 0, poster_url)


def error_metadata() -> dict:
    """Placeholder metadata shown when the video could not be loaded."""
    return {
        "title": "Error Loading Video",
        "description": "Failed to load video information",
        "channel_name": "Unknown",
        "channel_avatar": None,
        "view_count": 0,
        "upload_date": "",
        "upload_date_text": "",
        "like_count": 0,
        "dislike_count": 0,
        "subscriber_count": 0,
    }
