"""
Django settings for the tubeview project.

Everything deployment specific is read from the environment. The project
keeps no database: the only state is the stored manifests, kept in the
Django cache. With more than one worker process, point TUBEVIEW_CACHE_BACKEND
at a shared backend (Redis, Memcached, file based) so every worker sees the
manifests the others stored.
"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


SECRET_KEY = os.environ.get("TUBEVIEW_SECRET_KEY", "django-insecure-tubeview-dev-key")

DEBUG = _env_bool("TUBEVIEW_DEBUG", False)

ALLOWED_HOSTS = [h.strip() for h in os.environ.get("TUBEVIEW_ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h.strip()]


# Application definition

INSTALLED_APPS = [
    "django.contrib.staticfiles",
    "videos",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "tubeview.urls"

WSGI_APPLICATION = "tubeview.wsgi.application"

DATABASES = {}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"

# Stored manifests live here; LocMemCache is per process
CACHES = {
    "default": {
        "BACKEND": os.environ.get("TUBEVIEW_CACHE_BACKEND", "django.core.cache.backends.locmem.LocMemCache"),
        "LOCATION": os.environ.get("TUBEVIEW_CACHE_LOCATION", "tubeview-manifests"),
    }
}


# Streams backend

PUBLIC_API_URL = os.environ.get("PUBLIC_API_URL", "http://localhost:8080").rstrip("/")
API_BASE_URL = f"{PUBLIC_API_URL}/api/v1"

# Prefix segment URLs are rewritten to; must route to videos.views.segment_proxy
PROXY_URL = os.environ.get("PUBLIC_PROXY_URL", "http://localhost:8000/proxy")

REQUEST_TIMEOUT = int(os.environ.get("TUBEVIEW_REQUEST_TIMEOUT", "8"))

# Seconds a stored manifest stays available to the player
MANIFEST_TTL = int(os.environ.get("TUBEVIEW_MANIFEST_TTL", "600"))

# 'backend' serves /streams/dash as is, 'generated' builds the MPD from the stream lists
MANIFEST_SOURCE = os.environ.get("TUBEVIEW_MANIFEST_SOURCE", "backend").strip().lower()

DEFAULT_THUMBNAIL = os.environ.get("TUBEVIEW_DEFAULT_THUMBNAIL", "/static/images/default-thumbnail.jpg")
DEFAULT_AVATAR = os.environ.get("TUBEVIEW_DEFAULT_AVATAR", "/static/images/default-avatar.jpg")


LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": os.environ.get("TUBEVIEW_LOG_LEVEL", "INFO").upper(),
    },
}
