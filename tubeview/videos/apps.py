"""
Django app configuration for the videos module.

The videos application holds the playback side of Tubeview: stream
selection, DASH manifest generation, view-model adapters and the views
serving the video page, manifests and proxied segments.
"""

from django.apps import AppConfig


class VideosConfig(AppConfig):
    """
    Django app configuration for the videos application.

    Attributes:
        name (str): The name of the Django app ('videos').
        verbose_name (str): Human readable app name.
    """
    name = 'videos'
    verbose_name = 'Videos'
