"""
URL configuration for the tubeview project.

Routes:
- 'results/' -> results: Search results for the 'query' parameter.
- everything else -> videos.urls: Video page, comments, manifests and the segment proxy.
"""
from django.urls import include, path

from . import views

urlpatterns = [
    path('results/', views.results, name='results'),
    path('', include('videos.urls')),
]
