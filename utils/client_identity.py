"""
Best-effort client identification for rate limiting and duplicate detection.

The default strategy is IP based: the first non-empty value of
``x-forwarded-for`` (first hop), ``x-real-ip`` or ``cf-connecting-ip``, else
the sentinel ``"unknown"``. Shared NATs and rotating addresses make this a weak
identity; the ``header`` strategy lets a deployment key clients on an opaque
id set by its own frontend (e.g. a first-party cookie copied into a header)
and falls back to the IP when the header is missing.
"""
from typing import Optional

from fastapi import Request

UNKNOWN_CLIENT = "unknown"
PROXY_IP_HEADERS = ("x-forwarded-for", "x-real-ip", "cf-connecting-ip")


def client_ip(request: Request, extra_headers: tuple = ()) -> str:
    """Resolve client IP from proxy headers in priority order."""
    for name in PROXY_IP_HEADERS + tuple(extra_headers):
        raw = request.headers.get(name)
        if not raw:
            continue
        ip = raw.split(",")[0].strip()
        if ip:
            return ip
    return UNKNOWN_CLIENT


def resolve_client_key(request: Request, strategy: str = "ip", header: Optional[str] = None) -> str:
    """Return the identifier used for rate limiting and duplicate checks."""
    if strategy == "header" and header:
        value = (request.headers.get(header) or "").strip()
        if value:
            return value[:128]
    return client_ip(request)
