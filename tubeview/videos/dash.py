"""
DASH manifest generation and parsing.

Builds static on-demand MPD documents with SegmentBase byte-range
addressing from already selected stream metadata, and reads the few
attributes the player page needs back out of a backend-provided MPD.

Stream metadata dicts use the keys produced by
``videos.adapters.adapt_stream_metadata``: 'url', 'codec', 'mime_type',
'format', 'bandwidth', 'width', 'height', 'frame_rate',
'audio_sample_rate', 'audio_channels', 'language', 'language_name',
'init_start', 'init_end', 'index_start', 'index_end'.
"""
import logging
import re
from xml.sax.saxutils import escape

from lxml import etree

from .codecs import infer_mime_type, normalize_dash_codec
from .languages import normalize_language_code

logger = logging.getLogger(__name__)

MPD_NAMESPACE = "urn:mpeg:dash:schema:mpd:2011"
ON_DEMAND_PROFILE = "urn:mpeg:dash:profile:isoff-on-demand:2011"
AUDIO_CHANNEL_SCHEME = "urn:mpeg:dash:23003:3:audio_channel_configuration:2011"
ROLE_SCHEME = "urn:mpeg:dash:role:2011"
MIN_BUFFER_TIME = "PT2S"

_ISO_DURATION_RE = re.compile(
    r"^P(?:(?P<days>\d+(?:\.\d+)?)D)?"
    r"(?:T(?:(?P<hours>\d+(?:\.\d+)?)H)?"
    r"(?:(?P<minutes>\d+(?:\.\d+)?)M)?"
    r"(?:(?P<seconds>\d+(?:\.\d+)?)S)?)?$"
)


def _esc(value) -> str:
    return escape(str(value), {'"': "&quot;", "'": "&apos;"})


def format_duration(seconds) -> str:
    """
    Convert seconds to an ISO 8601 duration.

    176 -> 'PT2M56S', 5445.5 -> 'PT1H30M45.500S', 0 -> 'PT0S'.
    """
    total_ms = int(round((seconds or 0) * 1000))
    if total_ms <= 0:
        return "PT0S"
    hours, rest = divmod(total_ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    secs, millis = divmod(rest, 1000)
    duration = "PT"
    if hours:
        duration += f"{hours}H"
    if minutes:
        duration += f"{minutes}M"
    if secs or millis:
        duration += f"{secs}.{millis:03d}S" if millis else f"{secs}S"
    return duration


def parse_duration(value: str | None) -> float:
    """
    Convert an ISO 8601 duration to seconds.

    'PT1H30M45S' -> 5445, 'PT1M30.5S' -> 90.5. Missing or malformed values
    yield 0.
    """
    if not value:
        return 0
    match = _ISO_DURATION_RE.match(value.strip())
    if not match:
        return 0
    parts = {k: float(v) for k, v in match.groupdict().items() if v}
    total = (
        parts.get("days", 0) * 86400
        + parts.get("hours", 0) * 3600
        + parts.get("minutes", 0) * 60
        + parts.get("seconds", 0)
    )
    return int(total) if total == int(total) else total


def parse_manifest(xml_text) -> dict:
    """
    Read the presentation duration and id from an MPD document.

    Args:
        xml_text (str | bytes): The MPD XML.

    Returns:
        dict: {'duration': seconds (0 when unknown), 'id': MPD id or None}.
    """
    if isinstance(xml_text, str):
        xml_text = xml_text.encode("utf-8")
    try:
        root = etree.fromstring(xml_text)
    except etree.XMLSyntaxError as exc:
        logger.warning("Could not parse DASH manifest: %s", exc)
        return {"duration": 0, "id": None}
    # '{*}' matches the MPD element with or without the DASH namespace
    mpd = next(root.iter("{*}MPD"), None)
    if mpd is None:
        return {"duration": 0, "id": None}
    return {
        "duration": parse_duration(mpd.get("mediaPresentationDuration")),
        "id": mpd.get("id"),
    }


def _has_byte_ranges(stream: dict) -> bool:
    keys = ("init_start", "init_end", "index_start", "index_end")
    return all(isinstance(stream.get(k), int) and not isinstance(stream.get(k), bool) for k in keys)


def _segment_base(stream: dict, indent: str) -> list[str]:
    if not _has_byte_ranges(stream):
        return []
    return [
        f'{indent}<SegmentBase indexRange="{stream["index_start"]}-{stream["index_end"]}">',
        f'{indent}  <Initialization range="{stream["init_start"]}-{stream["init_end"]}"/>',
        f"{indent}</SegmentBase>",
    ]


def _video_adaptation_set(video_streams: list[dict]) -> list[str]:
    first = video_streams[0]
    mime_type = first.get("mime_type") or infer_mime_type(first.get("format"), first.get("codec"), True)
    lines = [
        f'    <AdaptationSet id="0" contentType="video" mimeType="{_esc(mime_type)}"'
        f' subsegmentAlignment="true" startWithSAP="1">',
    ]
    for index, stream in enumerate(video_streams, start=1):
        lines.append(
            f'      <Representation id="video-{index}"'
            f' bandwidth="{stream.get("bandwidth") or 1000000}"'
            f' codecs="{_esc(normalize_dash_codec(stream.get("codec") or ""))}"'
            f' width="{stream.get("width") or 1920}"'
            f' height="{stream.get("height") or 1080}"'
            f' frameRate="{stream.get("frame_rate") or 30}">'
        )
        lines.append(f"        <BaseURL>{_esc(stream['url'])}</BaseURL>")
        lines.extend(_segment_base(stream, "        "))
        lines.append("      </Representation>")
    lines.append("    </AdaptationSet>")
    return lines


def _audio_adaptation_sets(audio_streams: list[dict], first_id: int) -> list[str]:
    by_language: dict[str, list[dict]] = {}
    for stream in audio_streams:
        by_language.setdefault(normalize_language_code(stream.get("language")), []).append(stream)

    lines = []
    for set_id, (language, streams) in enumerate(by_language.items(), start=first_id):
        first = streams[0]
        mime_type = first.get("mime_type") or infer_mime_type(first.get("format"), first.get("codec"), False)
        label = first.get("language_name") or language
        lines.append(
            f'    <AdaptationSet id="{set_id}" contentType="audio" mimeType="{_esc(mime_type)}"'
            f' lang="{_esc(language)}" label="{_esc(label)}"'
            f' subsegmentAlignment="true" startWithSAP="1">'
        )
        if set_id == first_id:
            lines.append(f'      <Role schemeIdUri="{ROLE_SCHEME}" value="main"/>')
        for index, stream in enumerate(streams, start=1):
            lines.append(
                f'      <Representation id="audio-{set_id}-{index}"'
                f' bandwidth="{stream.get("bandwidth") or 128000}"'
                f' codecs="{_esc(normalize_dash_codec(stream.get("codec") or ""))}"'
                f' audioSamplingRate="{stream.get("audio_sample_rate") or 44100}">'
            )
            lines.append(
                f'        <AudioChannelConfiguration schemeIdUri="{AUDIO_CHANNEL_SCHEME}"'
                f' value="{stream.get("audio_channels") or 2}"/>'
            )
            lines.append(f"        <BaseURL>{_esc(stream['url'])}</BaseURL>")
            lines.extend(_segment_base(stream, "        "))
            lines.append("      </Representation>")
        lines.append("    </AdaptationSet>")
    return lines


def _text_adaptation_sets(subtitles: list[dict], first_id: int) -> list[str]:
    lines = []
    for set_id, sub in enumerate(subtitles, start=first_id):
        language = normalize_language_code(sub.get("language"))
        label = sub.get("language_name") or language
        lines.extend([
            f'    <AdaptationSet id="{set_id}" contentType="text"'
            f' mimeType="{_esc(sub.get("mime_type") or "text/vtt")}"'
            f' lang="{_esc(language)}" label="{_esc(label)}">',
            f'      <Role schemeIdUri="{ROLE_SCHEME}" value="{_esc(sub.get("kind") or "subtitles")}"/>',
            f'      <Representation id="text-{set_id}" bandwidth="256">',
            f"        <BaseURL>{_esc(sub['url'])}</BaseURL>",
            "      </Representation>",
            "    </AdaptationSet>",
        ])
    return lines


def generate_dash_manifest(video_streams=None, audio_streams=None, duration=0, subtitles=None) -> str:
    """
    Generate a static DASH MPD using SegmentBase byte-range addressing.

    Video streams share one AdaptationSet. Audio streams get one
    AdaptationSet per language, the first being marked as main. Each
    subtitle track gets its own text AdaptationSet. SegmentBase is only
    emitted for streams with both initialization and index ranges.

    Args:
        video_streams (list[dict] | None): Video stream metadata, best first.
        audio_streams (list[dict] | None): Audio stream metadata.
        duration (float): Presentation duration in seconds.
        subtitles (list[dict] | None): Subtitle metadata from select_subtitles.

    Returns:
        str: The MPD XML document.

    Raises:
        ValueError: If neither video nor audio streams are provided.
    """
    video_streams = [s for s in video_streams or [] if s]
    audio_streams = [s for s in audio_streams or [] if s]
    subtitles = [s for s in subtitles or [] if s and s.get("url")]
    if not video_streams and not audio_streams:
        raise ValueError("At least one stream (video or audio) must be provided")
    if not duration:
        logger.warning("Duration is 0 or undefined, this will likely cause playback issues")

    duration_str = format_duration(duration)
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<MPD xmlns="{MPD_NAMESPACE}" type="static" mediaPresentationDuration="{duration_str}"'
        f' minBufferTime="{MIN_BUFFER_TIME}" profiles="{ON_DEMAND_PROFILE}">',
        f'  <Period duration="{duration_str}">',
    ]
    next_id = 0
    if video_streams:
        lines.extend(_video_adaptation_set(video_streams))
        next_id = 1
    if audio_streams:
        lines.extend(_audio_adaptation_sets(audio_streams, next_id))
        next_id += len({normalize_language_code(s.get("language")) for s in audio_streams})
    lines.extend(_text_adaptation_sets(subtitles, next_id))
    lines.extend(["  </Period>", "</MPD>"])
    return "\n".join(lines) + "\n"
