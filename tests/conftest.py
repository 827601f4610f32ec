import json
from http import HTTPStatus

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from django.core.cache import cache

SEGMENT_HOST = "rr1---sn-abc.googlevideo.com"

# Marks a response without a JSON body; None stands for a JSON null
NO_BODY = object()


class FakeResponse:
    """Stand-in for requests.Response covering what the code under test reads."""

    def __init__(self, payload=NO_BODY, status_code=200, text=None, headers=None, chunks=None):
        self._payload = payload
        self.status_code = status_code
        self.reason = HTTPStatus(status_code).phrase
        if text is None:
            text = "" if payload is NO_BODY else json.dumps(payload)
        self.text = text
        self.headers = CaseInsensitiveDict(headers or {})
        self._chunks = chunks or []

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._payload is NO_BODY:
            raise ValueError("No JSON object could be decoded")
        return self._payload

    def iter_content(self, chunk_size=1):
        yield from self._chunks


class FakeBackend:
    """
    Routes requests.get calls to canned responses.

    Backend API calls are keyed by the path below API_BASE_URL
    ('streams/details'), any other URL by its address without the query.
    A route may also hold an exception instance, which is raised, or a
    callable returning the response, which is called per request.
    """

    def __init__(self, api_base_url):
        self.api_base_url = api_base_url.rstrip("/") + "/"
        self.routes = {}
        self.calls = []

    def add(self, key, response):
        self.routes[key] = response

    def get(self, url, params=None, headers=None, stream=False, timeout=None):
        self.calls.append({"url": url, "params": params, "headers": headers, "stream": stream, "timeout": timeout})
        if url.startswith(self.api_base_url):
            key = url[len(self.api_base_url):]
        else:
            key = url.split("?", 1)[0]
        response = self.routes.get(key)
        if response is None:
            return FakeResponse(status_code=404)
        if callable(response):
            response = response()
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture(autouse=True)
def clear_manifest_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def backend(monkeypatch, settings):
    settings.PUBLIC_API_URL = "http://backend.test"
    settings.API_BASE_URL = "http://backend.test/api/v1"
    settings.PROXY_URL = "http://localhost:8000/proxy"
    settings.MANIFEST_SOURCE = "backend"
    fake = FakeBackend(settings.API_BASE_URL)
    monkeypatch.setattr(requests, "get", fake.get)
    return fake


def video_stream(itag, resolution, fmt="MPEG_4", codec="avc1.640028", bitrate=1000000, **extra):
    stream = {
        "id": itag,
        "url": f"https://{SEGMENT_HOST}/videoplayback?itag={itag}",
        "format": fmt,
        "codec": codec,
        "resolution": resolution,
        "bitrate": bitrate,
        "videoOnly": True,
    }
    stream.update(extra)
    return stream


def audio_stream(itag, fmt="M4A", codec="mp4a.40.2", bitrate=128000, locale=None, **extra):
    stream = {
        "id": itag,
        "url": f"https://{SEGMENT_HOST}/videoplayback?itag={itag}",
        "format": fmt,
        "codec": codec,
        "bitrate": bitrate,
        "videoOnly": False,
        "itagItem": {"audioLocale": locale} if locale else {},
    }
    stream.update(extra)
    return stream


@pytest.fixture
def details_payload():
    return {
        "videoTitle": "Big Buck Bunny",
        "description": {"content": "A giant rabbit."},
        "channelName": "Blender",
        "uploaderAvatars": [
            {"url": "https://img.test/a48.jpg"},
            {"url": "https://img.test/a88.jpg"},
            {"url": "https://img.test/a176.jpg"},
        ],
        "viewCount": 1234567,
        "uploadDate": "2023-05-15",
        "likeCount": 4200,
        "dislikeCount": -1,
        "channelSubscriberCount": 98000,
    }


@pytest.fixture
def thumbnails_payload():
    return [
        {"url": "https://img.test/default.jpg", "estimatedResolutionLevel": "LOW"},
        {"url": "https://img.test/hq.jpg", "estimatedResolutionLevel": "HIGH"},
        {"url": "https://img.test/mq.jpg", "estimatedResolutionLevel": "MEDIUM"},
    ]


@pytest.fixture
def related_payload():
    return [
        {
            "url": "https://www.youtube.com/watch?v=rel1",
            "name": "Sintel",
            "thumbnails": [{"url": "https://img.test/r1-s.jpg"}, {"url": "https://img.test/r1-m.jpg"}],
            "uploaderName": "Blender",
            "uploaderAvatars": [{"url": "https://img.test/u-s.jpg"}, {"url": "https://img.test/u-l.jpg"}],
            "viewCount": 1000,
            "duration": 888,
            "textualUploadDate": "2 years ago",
        },
        {"url": "", "name": "Broken item"},
    ]


@pytest.fixture
def dash_xml():
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<MPD xmlns="urn:mpeg:dash:schema:mpd:2011" id="bbb" type="static"'
        ' mediaPresentationDuration="PT9M56.5S" minBufferTime="PT2S">\n'
        '  <Period/>\n'
        '</MPD>\n'
    )
