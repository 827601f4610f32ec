from conftest import audio_stream, video_stream
from videos.adapters import (
    adapt_comments, adapt_player_config, adapt_related_videos, adapt_search_results, adapt_stream_metadata,
    adapt_video_metadata, calculate_duration, error_metadata, error_player_config, handle_negative_count,
)

THUMB = "/static/thumb.jpg"
AVATAR = "/static/avatar.jpg"


def test_handle_negative_count():
    assert handle_negative_count(-1) == 0
    assert handle_negative_count(None) == 0
    assert handle_negative_count(42) == 42


def test_adapt_video_metadata(details_payload):
    metadata = adapt_video_metadata(details_payload, AVATAR)
    assert metadata == {
        "title": "Big Buck Bunny",
        "description": "A giant rabbit.",
        "channel_name": "Blender",
        "channel_avatar": "https://img.test/a176.jpg",
        "view_count": 1234567,
        "upload_date": "2023-05-15",
        "upload_date_text": "May 15, 2023",
        "like_count": 4200,
        "dislike_count": 0,
        "subscriber_count": 98000,
    }


def test_adapt_video_metadata_defaults():
    metadata = adapt_video_metadata({}, AVATAR)
    assert metadata["title"] == "Untitled Video"
    assert metadata["description"] == "No description available"
    assert metadata["channel_name"] == "Unknown Channel"
    assert metadata["channel_avatar"] == AVATAR
    assert metadata["view_count"] == 0


def test_adapt_player_config():
    assert adapt_player_config("/manifest/abc.mpd", 596.5, "p.jpg") == {
        "manifest_url": "/manifest/abc.mpd",
        "duration": 596.5,
        "poster": "p.jpg",
    }


def test_adapt_related_videos(related_payload):
    related = adapt_related_videos(related_payload, THUMB, AVATAR)
    assert len(related) == 1
    video = related[0]
    assert video["id"] == "rel1"
    assert video["title"] == "Sintel"
    assert video["thumbnail"] == "https://img.test/r1-m.jpg"
    assert video["channel_avatar"] == "https://img.test/u-l.jpg"
    assert video["duration_text"] == "14:48"
    assert video["upload_date"] == "2 years ago"
    assert adapt_related_videos(None, THUMB, AVATAR) == []


def test_adapt_search_results():
    payload = {"items": [
        {
            "url": "https://www.youtube.com/watch?v=s1",
            "name": "Cats compilation",
            "thumbnailUrl": "https://img.test/s1.jpg",
            "uploaderName": "Cat TV",
            "uploaderUrl": "https://www.youtube.com/channel/UC1",
            "uploaderVerified": True,
            "viewCount": 1500,
            "duration": 61,
            "uploadDate": "1 day ago",
        },
        {"url": "https://www.youtube.com/watch?v=s2", "name": "No extras", "viewCount": -1},
        {"name": "Missing url"},
    ]}
    results = adapt_search_results(payload, THUMB, AVATAR)
    assert [r["id"] for r in results] == ["s1", "s2"]
    first, second = results
    assert first["verified"] is True
    assert first["view_count_text"] == "1,500"
    assert first["duration_text"] == "1:01"
    assert first["type"] == "stream"
    assert second["thumbnail"] == THUMB
    assert second["channel_avatar"] == AVATAR
    assert second["verified"] is False
    assert second["view_count"] == 0
    assert adapt_search_results(None, THUMB, AVATAR) == []


def test_adapt_comments():
    comments = adapt_comments([
        {
            "commentId": "c1",
            "commentText": {"content": "Great video"},
            "uploaderName": "alice",
            "uploaderAvatars": [{"url": "a1"}],
            "likeCount": 10,
            "textualLikeCount": "10",
            "pinned": True,
            "replyCount": 2,
            "replies": {"url": "https://api.test/replies/c1"},
        },
        {"commentId": "c2"},
        None,
    ], AVATAR)
    assert len(comments) == 2
    first, second = comments
    assert first["text"] == "Great video"
    assert first["author_avatar"] == "a1"
    assert first["is_pinned"] is True
    assert first["has_replies"] is True
    assert first["replies_url"] == "https://api.test/replies/c1"
    assert second["author"] == "Unknown User"
    assert second["author_avatar"] == AVATAR
    assert second["like_count_text"] == "0"
    assert second["has_replies"] is False


def test_adapt_video_stream_metadata():
    stream = video_stream(
        "137", "1080p", bitrate=4000000, width=1920, height=1080, fps=25,
        itagItem={"initStart": 0, "initEnd": 740, "indexStart": 741, "indexEnd": 1200},
    )
    metadata = adapt_stream_metadata(stream, True)
    assert metadata["mime_type"] == "video/mp4"
    assert metadata["bandwidth"] == 4000000
    assert (metadata["width"], metadata["height"], metadata["frame_rate"]) == (1920, 1080, 25)
    assert (metadata["init_start"], metadata["index_end"]) == (0, 1200)


def test_adapt_audio_stream_metadata_defaults():
    stream = audio_stream("251", fmt=None, codec="opus", bitrate=None, locale="fr")
    metadata = adapt_stream_metadata(stream, False)
    assert metadata["format"] == "M4A"
    assert metadata["mime_type"] == "audio/mp4"
    assert metadata["bandwidth"] == 128000
    assert metadata["audio_sample_rate"] == 44100
    assert metadata["audio_channels"] == 2
    assert metadata["language"] == "fr"
    assert metadata["language_name"] == "French"
    assert metadata["init_start"] is None


def test_calculate_duration():
    video = {"itagItem": {"approxDurationMs": 200500}}
    audio = {"itagItem": {"approxDurationMs": 1000}}
    assert calculate_duration(video, audio) == 200.5
    assert calculate_duration(None, audio) == 1.0
    assert calculate_duration({}, None) == 0


def test_error_payloads():
    assert error_player_config("p.jpg") == {"manifest_url": "", "duration": 0, "poster": "p.jpg"}
    metadata = error_metadata()
    assert metadata["title"] == "Error Loading Video"
    assert metadata["channel_avatar"] is None
