"""
Codec and MIME type helpers used when building DASH manifests.

The backend reports codecs and container formats in several spellings
("h264", "avc1.640028", "MPEG_4", "WEBMA_OPUS", ...). These helpers fold
them into what a DASH player expects in the ``codecs`` and ``mimeType``
attributes.
"""
import re

_DASH_CODEC_RE = re.compile(r"^(avc1|vp09|av01|mp4a|opus|vorbis)\.", re.IGNORECASE)

# (substring, DASH codec) in match order
_CODEC_ALIASES = (
    ("h264", "avc1.42E01E"),
    ("vp9", "vp09.00.10.08"),
    ("av1", "av01.0.05M.08"),
    ("aac", "mp4a.40.2"),
    ("opus", "opus"),
    ("vorbis", "vorbis"),
)

_FORMAT_MIME_TYPES = {
    "MPEG_4": "video/mp4",
    "MP4": "video/mp4",
    "WEBM": "video/webm",
    "V_VP9": "video/webm",
    "VP9": "video/webm",
    "M4A": "audio/mp4",
    "MP4A": "audio/mp4",
    "WEBMA": "audio/webm",
    "WEBMA_OPUS": "audio/webm",
    "OPUS": "audio/webm",
    "VORBIS": "audio/webm",
}

_CODEC_MIME_TYPES = (
    (("avc1", "h264"), "video/mp4"),
    (("vp09", "vp9"), "video/webm"),
    (("av01", "av1"), "video/mp4"),
    (("mp4a",), "audio/mp4"),
    (("opus",), "audio/webm"),
    (("vorbis",), "audio/webm"),
)


def normalize_dash_codec(codec: str) -> str:
    """
    Normalize a codec string to a DASH-compatible value.

    Codecs already carrying a DASH prefix (``avc1.``, ``vp09.``, ``av01.``,
    ``mp4a.``, ``opus.``, ``vorbis.``) are returned unchanged. Common short
    names are mapped to a representative profile string. Anything else is
    returned as-is.

    Args:
        codec (str): Raw codec string from stream metadata.

    Returns:
        str: DASH-compatible codec string.
    """
    if not codec:
        return codec
    if _DASH_CODEC_RE.match(codec):
        return codec
    lower = codec.lower()
    for alias, dash_codec in _CODEC_ALIASES:
        if alias in lower:
            return dash_codec
    return codec


def _mime_type_from_format(fmt: str) -> str | None:
    return _FORMAT_MIME_TYPES.get(fmt.upper())


def _mime_type_from_codec(codec: str) -> str | None:
    lower = codec.lower()
    for needles, mime_type in _CODEC_MIME_TYPES:
        if any(n in lower for n in needles):
            return mime_type
    return None


def infer_mime_type(fmt: str | None, codec: str | None, is_video: bool) -> str:
    """
    Infer the MIME type of a stream.

    The container format is the most reliable hint and is checked first,
    then the codec. When neither is recognised the result falls back to
    MP4 for the stream kind.

    Args:
        fmt (str | None): Backend format name (e.g. "MPEG_4", "WEBM", "M4A").
        codec (str | None): Codec string (e.g. "avc1.640028", "opus").
        is_video (bool): Whether the stream carries video.

    Returns:
        str: MIME type such as 'video/mp4' or 'audio/webm'.
    """
    if fmt:
        mime_type = _mime_type_from_format(fmt)
        if mime_type:
            return mime_type
    if codec:
        mime_type = _mime_type_from_codec(codec)
        if mime_type:
            return mime_type
    return "video/mp4" if is_video else "audio/mp4"
