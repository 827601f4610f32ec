import pytest

from videos.codecs import infer_mime_type, normalize_dash_codec


@pytest.mark.parametrize("codec", ["avc1.640028", "vp09.00.40.08", "av01.0.08M.08", "mp4a.40.2"])
def test_dash_codecs_are_kept(codec):
    assert normalize_dash_codec(codec) == codec


@pytest.mark.parametrize("codec,expected", [
    ("h264", "avc1.42E01E"),
    ("VP9", "vp09.00.10.08"),
    ("av1", "av01.0.05M.08"),
    ("aac", "mp4a.40.2"),
    ("opus", "opus"),
])
def test_short_codec_names_are_mapped(codec, expected):
    assert normalize_dash_codec(codec) == expected


def test_unknown_codec_is_returned_unchanged():
    assert normalize_dash_codec("theora") == "theora"
    assert normalize_dash_codec("") == ""


def test_mime_type_from_format_wins_over_codec():
    assert infer_mime_type("MPEG_4", "vp9", True) == "video/mp4"
    assert infer_mime_type("WEBM", "avc1.640028", True) == "video/webm"
    assert infer_mime_type("WEBMA_OPUS", None, False) == "audio/webm"
    assert infer_mime_type("m4a", None, False) == "audio/mp4"


def test_mime_type_from_codec():
    assert infer_mime_type(None, "opus", False) == "audio/webm"
    assert infer_mime_type("UNKNOWN", "vp09.00.40.08", True) == "video/webm"


def test_mime_type_fallback_depends_on_stream_kind():
    assert infer_mime_type(None, None, True) == "video/mp4"
    assert infer_mime_type("", "", False) == "audio/mp4"
