"""
Stream selection heuristics.

The backend returns every rendition it knows about for a video: muxed and
video-only streams in several containers, one audio stream per bitrate and
language, and subtitle tracks in several formats. The functions here pick
the subset that ends up in the playback manifest.

Functions:
- get_base_itag(stream_id): Strip the variant suffix from an itag ('137-1' -> '137').
- best_video_stream(streams): Single preferred video-only stream.
- best_audio_stream(streams): Single preferred audio stream.
- select_video_streams(streams): One video-only stream per quality level.
- get_audio_language(stream): Normalized language of an audio stream.
- select_audio_streams(streams): One audio stream per language.
- select_subtitles(subtitles): One subtitle track per language.
"""
import re

from .codecs import infer_mime_type
from .languages import (
    extract_language_from_url, get_language_name, language_sort_key, normalize_language_code,
)

PREFERRED_VIDEO_ITAGS = (
    "264",  # 1440p MP4 AVC
    "137",  # 1080p MP4 AVC
    "136",  # 720p MP4 AVC
    "135",  # 480p MP4 AVC
    "400",  # 1440p MP4 AV1
    "399",  # 1080p MP4 AV1
    "398",  # 720p MP4 AV1
    "397",  # 480p MP4 AV1
    "271",  # 1440p webm VP9
    "248",  # 1080p webm VP9
    "247",  # 720p webm VP9
    "246",  # 480p webm VP9
)

PREFERRED_AUDIO_ITAGS = (
    "139",  # m4a 48kbps
    "140",  # m4a 128kbps
    "141",  # m4a 256kbps
    "249",  # webm 50kbps
    "250",  # webm 70kbps
    "251",  # webm 160kbps
)

SUBTITLE_MIME_TYPES = {
    "vtt": "text/vtt",
    "srv3": "application/ttml+xml",
    "srv2": "application/ttml+xml",
    "srv1": "application/x-subrip",
    "ttml": "application/ttml+xml",
    "srt": "application/x-subrip",
}

# Containers in order of preference when several can cover the same qualities
_CONTAINER_PREFERENCE = ("video/mp4", "video/webm")

_RESOLUTION_RE = re.compile(r"^(\d+)p")


def get_base_itag(stream_id) -> str:
    stream_id = str(stream_id or "")
    return stream_id.split("-", 1)[0]


def _stream_itag(stream: dict) -> str:
    return get_base_itag(stream.get("id") or stream.get("itag"))


def _pick_by_stream_id(streams: list[dict], priority: tuple) -> dict | None:
    for itag in priority:
        for stream in streams:
            if _stream_itag(stream) == itag:
                return stream
    return None


def best_video_stream(streams: list[dict]) -> dict | None:
    """
    Pick the single preferred video-only stream.

    Walks the preferred itag list first; if that yields nothing usable,
    falls back to the largest MP4 stream with an AV-family codec.

    Args:
        streams (list[dict]): Video streams from the backend.

    Returns:
        dict or None: The chosen stream, or None if none qualifies.
    """
    streams = [s for s in streams or [] if s]
    candidate = _pick_by_stream_id(streams, PREFERRED_VIDEO_ITAGS)
    if candidate and candidate.get("videoOnly"):
        return candidate
    fallback = [
        s for s in streams
        if s.get("format") == "MPEG_4" and (s.get("codec") or "").startswith("av")
    ]
    if not fallback:
        return None
    fallback.sort(key=lambda s: (s.get("width") or 0) * (s.get("height") or 1), reverse=True)
    return fallback[0]


def best_audio_stream(streams: list[dict]) -> dict | None:
    """
    Pick the single preferred audio stream.

    Walks the preferred itag list first; if that yields nothing usable,
    falls back to the first MP4A stream with an mp4a codec.

    Args:
        streams (list[dict]): Audio streams from the backend.

    Returns:
        dict or None: The chosen stream, or None if none qualifies.
    """
    streams = [s for s in streams or [] if s]
    candidate = _pick_by_stream_id(streams, PREFERRED_AUDIO_ITAGS)
    if candidate and not candidate.get("videoOnly"):
        return candidate
    fallback = [
        s for s in streams
        if s.get("format") == "MP4A" and (s.get("codec") or "").startswith("mp4a")
    ]
    return fallback[0] if fallback else None


def _quality_height(stream: dict) -> int:
    match = _RESOLUTION_RE.match(stream.get("resolution") or "")
    if match:
        return int(match.group(1))
    return int(stream.get("height") or 0)


def _video_rank(stream: dict) -> tuple:
    itag = _stream_itag(stream)
    preferred = PREFERRED_VIDEO_ITAGS.index(itag) if itag in PREFERRED_VIDEO_ITAGS else len(PREFERRED_VIDEO_ITAGS)
    return (preferred, -(stream.get("bitrate") or 0))


def _container(stream: dict) -> str:
    return infer_mime_type(stream.get("format"), stream.get("codec"), True)


def select_video_streams(streams: list[dict]) -> list[dict]:
    """
    Select one video-only stream per quality level, best quality first.

    All selected streams share one container so they fit in a single DASH
    AdaptationSet; the container offering the most quality levels wins,
    MP4 before WebM on a tie. Within a quality level preferred itags come
    first, then higher bitrate. Variants of an already selected itag
    ('137-1', '137-2') are skipped.

    Args:
        streams (list[dict]): Video streams from the backend.

    Returns:
        list[dict]: Selected streams ordered from highest to lowest quality.
    """
    candidates = [
        s for s in streams or []
        if s and s.get("videoOnly") and s.get("url") and _quality_height(s) > 0
    ]
    if not candidates:
        return []

    by_container: dict[str, list[dict]] = {}
    for stream in candidates:
        by_container.setdefault(_container(stream), []).append(stream)

    def container_score(mime_type):
        heights = {_quality_height(s) for s in by_container[mime_type]}
        preference = (
            _CONTAINER_PREFERENCE.index(mime_type)
            if mime_type in _CONTAINER_PREFERENCE else len(_CONTAINER_PREFERENCE)
        )
        return (-len(heights), preference)

    family = by_container[min(by_container, key=container_score)]

    by_height: dict[int, list[dict]] = {}
    for stream in family:
        by_height.setdefault(_quality_height(stream), []).append(stream)

    selected = []
    seen_itags = set()
    for height in sorted(by_height, reverse=True):
        for stream in sorted(by_height[height], key=_video_rank):
            itag = _stream_itag(stream)
            if itag in seen_itags:
                continue
            seen_itags.add(itag)
            selected.append(stream)
            break
    return selected


def get_audio_language(stream: dict) -> str:
    """Language of an audio stream: audio locale, track id, then the URL's lang parameter."""
    item = stream.get("itagItem") or {}
    locale = item.get("audioLocale") or stream.get("audioLocale")
    if not locale:
        track_id = item.get("audioTrackId") or stream.get("audioTrackId") or ""
        locale = track_id.split(".", 1)[0] or None
    if not locale:
        locale = extract_language_from_url(stream.get("url"))
    return normalize_language_code(locale)


def get_audio_language_name(stream: dict) -> str:
    item = stream.get("itagItem") or {}
    return item.get("audioTrackName") or stream.get("audioTrackName") or get_language_name(get_audio_language(stream))


def _is_m4a(stream: dict) -> bool:
    fmt = (stream.get("format") or "").upper()
    return fmt in ("M4A", "MP4A", "MPEG_4") or (stream.get("codec") or "").startswith("mp4a")


def select_audio_streams(streams: list[dict]) -> list[dict]:
    """
    Select one audio stream per language.

    M4A is preferred over WebM so the audio plays wherever the video does;
    within a container the highest bitrate wins. Languages are ordered with
    original/undetermined audio first, then English, then alphabetically.
    """
    best: dict[str, dict] = {}
    for stream in streams or []:
        if not stream or stream.get("videoOnly") or not stream.get("url"):
            continue
        language = get_audio_language(stream)
        score = (_is_m4a(stream), stream.get("bitrate") or 0)
        current = best.get(language)
        if current is None or score > (_is_m4a(current), current.get("bitrate") or 0):
            best[language] = stream
    return [best[lang] for lang in sorted(best, key=language_sort_key)]


def select_subtitles(subtitles: list[dict]) -> list[dict]:
    """
    Select one subtitle track per language.

    Manual tracks win over auto-generated ones and WebVTT wins over other
    formats. Tracks in formats without a known MIME type are dropped.

    Args:
        subtitles (list[dict]): Subtitle entries from the backend.

    Returns:
        list[dict]: Subtitle metadata dicts with keys 'url', 'language',
                    'language_name', 'mime_type', 'kind', 'autogenerated',
                    ordered by language preference.
    """
    chosen: dict[str, tuple] = {}
    for sub in subtitles or []:
        if not sub:
            continue
        fmt = (sub.get("format") or "").lower()
        mime_type = SUBTITLE_MIME_TYPES.get(fmt)
        url = sub.get("url") or sub.get("content")
        if not mime_type or not url:
            continue
        language = normalize_language_code(sub.get("languageTag") or sub.get("locale"))
        autogenerated = bool(sub.get("autogenerated"))
        name = sub.get("displayLanguageName") or get_language_name(language)
        if autogenerated:
            name = f"{name} (auto-generated)"
        rank = (autogenerated, fmt != "vtt")
        current = chosen.get(language)
        if current is None or rank < current[0]:
            chosen[language] = (rank, {
                "url": url,
                "language": language,
                "language_name": name,
                "mime_type": mime_type,
                "kind": "subtitles",
                "autogenerated": autogenerated,
            })
    return [chosen[lang][1] for lang in sorted(chosen, key=language_sort_key)]
