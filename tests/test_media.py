import pytest

from videos.media import (
    extract_video_id_from_url, select_best_avatar, select_best_thumbnail, select_best_uploader_avatar,
)

FALLBACK = "/static/fallback.jpg"


def images(*urls):
    return [{"url": u} for u in urls]


def test_thumbnail_prefers_medium_then_last():
    assert select_best_thumbnail(images("s", "m", "l"), FALLBACK) == "m"
    assert select_best_thumbnail(images("only"), FALLBACK) == "only"
    assert select_best_thumbnail([{"url": "first"}, {}], FALLBACK) == "first"


def test_thumbnail_fallback():
    assert select_best_thumbnail([], FALLBACK) == FALLBACK
    assert select_best_thumbnail(None, FALLBACK) == FALLBACK


def test_uploader_avatar_prefers_last():
    assert select_best_uploader_avatar(images("s", "l"), FALLBACK) == "l"
    assert select_best_uploader_avatar(None, FALLBACK) == FALLBACK


def test_avatar_prefers_index_two_then_first():
    assert select_best_avatar(images("48", "88", "176"), FALLBACK) == "176"
    assert select_best_avatar(images("48", "88"), FALLBACK) == "48"
    assert select_best_avatar([], FALLBACK) == FALLBACK


@pytest.mark.parametrize("url,expected", [
    ("https://www.youtube.com/watch?v=dQw4w9WgXcQ", "dQw4w9WgXcQ"),
    ("https://www.youtube.com/watch?list=PL1&v=abc123", "abc123"),
    ("https://youtu.be/abc123", "abc123"),
    ("https://www.youtube.com/shorts/short42", "short42"),
    ("/watch?v=xyz", "xyz"),
    ("/embed/emb1?autoplay=1", "emb1"),
    ("not a url", ""),
    ("", ""),
    (None, ""),
])
def test_extract_video_id_from_url(url, expected):
    assert extract_video_id_from_url(url) == expected
