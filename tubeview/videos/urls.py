"""
URL configuration for the videos app.

Routes:
- 'video/<str:video_id>/' -> video_detail: Video page data (player config, metadata, related videos).
- 'video/<str:video_id>/comments/' -> video_comments: Adapted comments of a video.
- 'manifest/<str:token>.mpd' -> manifest: Serve a stored DASH manifest to the player.
- 'proxy/<path:path>' -> segment_proxy: Proxy media segments (expects query param 'host').
"""
from django.urls import path
from . import views

urlpatterns = [
    path('video/<str:video_id>/', views.video_detail, name='video_detail'),
    path('video/<str:video_id>/comments/', views.video_comments, name='video_comments'),

    # Playback
    path('manifest/<str:token>.mpd', views.manifest, name='manifest'),
    path('proxy/<path:path>', views.segment_proxy, name='segment_proxy'),
]
