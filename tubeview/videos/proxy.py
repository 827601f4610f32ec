"""
Segment URL rewriting for playback through the segment proxy.

Media segments served from googlevideo.com cannot be fetched directly by
the browser, so their URLs are rewritten to point at the proxy. The
original host travels in a ``host`` query parameter and a byte range in a
``range`` query parameter; the proxy view reverses the mapping.
"""
import re
from urllib.parse import urlencode, urlsplit, parse_qsl

PROXIED_HOST_SUFFIX = "googlevideo.com"

_RANGE_RE = re.compile(r"^\s*bytes=(\d*-\d*)\s*$", re.IGNORECASE)


def should_proxy(url: str) -> bool:
    """Whether url points at a googlevideo host and must go through the proxy."""
    host = urlsplit(url).hostname or ""
    return host == PROXIED_HOST_SUFFIX or host.endswith("." + PROXIED_HOST_SUFFIX)


def rewrite_segment_url(url: str, headers: dict | None = None, proxy_url: str = "") -> tuple[str, dict]:
    """
    Rewrite a segment URL so it is fetched through the proxy.

    'https://rr3---sn-x.googlevideo.com/videoplayback?id=1' with a
    'Range: bytes=0-999' header becomes
    '<proxy_url>/videoplayback?id=1&host=rr3---sn-x.googlevideo.com&range=0-999'
    and the Range header is removed. URLs on other hosts are returned
    unchanged.

    Args:
        url (str): Upstream segment URL.
        headers (dict | None): Request headers; not modified in place.
        proxy_url (str): Proxy prefix (scheme, host and optional path).

    Returns:
        tuple[str, dict]: The (possibly rewritten) URL and remaining headers.
    """
    headers = dict(headers or {})
    if not proxy_url or not should_proxy(url):
        return url, headers
    parts = urlsplit(url)
    params = parse_qsl(parts.query, keep_blank_values=True)
    params.append(("host", parts.hostname))
    for name in list(headers):
        if name.lower() == "range":
            match = _RANGE_RE.match(headers.pop(name))
            if match:
                params.append(("range", match.group(1)))
    return f"{proxy_url.rstrip('/')}{parts.path}?{urlencode(params)}", headers


def upstream_url_from_proxy(path: str, params) -> tuple[str, str | None]:
    """
    Rebuild the upstream URL from a proxied request.

    Args:
        path (str): Path below the proxy prefix (e.g. 'videoplayback').
        params: Query parameters of the proxied request (QueryDict or list of pairs).

    Returns:
        tuple[str, str | None]: Upstream URL and the byte range ('0-999') if any.

    Raises:
        ValueError: If the host parameter is missing or not a proxied host.
    """
    pairs = list(params.lists()) if hasattr(params, "lists") else [(k, [v]) for k, v in params]
    host = None
    byte_range = None
    query = []
    for key, values in pairs:
        if key == "host":
            host = values[-1]
        elif key == "range":
            byte_range = values[-1]
        else:
            query.extend((key, v) for v in values)
    if not host or not should_proxy(f"https://{host}/"):
        raise ValueError("Missing or unsupported host")
    url = f"https://{host}/{path.lstrip('/')}"
    if query:
        url += "?" + urlencode(query)
    return url, byte_range
