"""
Main views for the Tubeview application.

Contents
- results(request): Search results page data. Reads 'query' and 'sort' from
  the query string, calls the backend search endpoint and returns the adapted
  result cards as JSON.

Notes
- A blank query never reaches the backend.
- Backend failures do not raise: the payload carries an 'error' message and
  an empty result list instead.
"""
import logging

from django.conf import settings
from django.http import JsonResponse

from tubeview.services import get_search_results
from videos.adapters import adapt_search_results

logger = logging.getLogger(__name__)

DEFAULT_SORT_FILTER = "asc"


def results(request):
    """
    Return search results for the 'query' parameter.

    Args:
        request (HttpRequest): Incoming request with 'query' and optional 'sort'.

    Returns:
        JsonResponse: {'results', 'query', 'sort_filter', 'error'}. For a blank
        query only {'results': [], 'query': '', 'error': None}.
    """
    query = (request.GET.get("query") or "").strip()
    if not query:
        return JsonResponse({"results": [], "query": "", "error": None})

    sort_filter = request.GET.get("sort") or DEFAULT_SORT_FILTER
    try:
        data = get_search_results(query, sort_filter)
        items = adapt_search_results(data, settings.DEFAULT_THUMBNAIL, settings.DEFAULT_AVATAR)
    except Exception as e:
        logger.error("Error loading search results: %s", e)
        return JsonResponse({
            "results": [],
            "query": query,
            "sort_filter": sort_filter,
            "error": str(e) or "Failed to load search results",
        })
    return JsonResponse({"results": items, "query": query, "sort_filter": sort_filter, "error": None})
