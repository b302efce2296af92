"""
Origin checks for the two browser trust boundaries:

- POST-time CSRF guard for the public submission endpoint
- embedding allow-list for forms served inside third-party iframes
"""
from typing import Optional, Tuple
from urllib.parse import urlsplit

from models.schema import EmbeddingSettings, parse_embedding


def _hostname(value: str) -> Optional[str]:
    """Hostname of an absolute URL, or None when it cannot be parsed as one."""
    try:
        parts = urlsplit(value.strip())
        if not parts.scheme or not parts.netloc:
            return None
        return parts.hostname
    except ValueError:
        return None


def is_same_site(origin: Optional[str], referer: Optional[str]) -> bool:
    """
    Compare Origin and Referer hostnames.

    When either header is missing the request is treated as a non-browser API
    call and allowed. Headers that are present but unparseable are rejected.
    """
    if not origin or not referer:
        return True
    origin_host = _hostname(origin)
    referer_host = _hostname(referer)
    if origin_host is None or referer_host is None:
        return False
    return origin_host == referer_host


def origin_from_url(url: Optional[str]) -> Optional[str]:
    """scheme://host[:port] of a URL such as a Referer header."""
    if not url:
        return None
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return None
    if not parts.scheme or not parts.netloc:
        return None
    return f"{parts.scheme}://{parts.netloc}".lower()


def resolve_embed_origin(origin_param: Optional[str], referer: Optional[str]) -> Optional[str]:
    """Explicit ?origin= wins over the Referer header."""
    if origin_param and origin_param.strip():
        return origin_param.strip()
    return origin_from_url(referer)


def matches_allowed_origin(origin: str, allowed: str) -> bool:
    """Exact match, or ``*.domain`` matching domain itself or any of its subdomains."""
    allowed = allowed.strip()
    if allowed.startswith("*."):
        domain = allowed[2:].lower().strip(".")
        host = (_hostname(origin) or origin).lower()
        return bool(domain) and (host == domain or host.endswith("." + domain))
    return origin == allowed


def check_embedding_origin(embedding, origin: Optional[str]) -> Tuple[bool, Optional[str]]:
    """
    Decide whether a form may render for the embedding page's origin.

    Args:
        embedding: EmbeddingSettings or the raw stored embedding blob
        origin: resolved origin of the embedding page, if any

    Returns:
        (allowed, reason); reason is a message for the restricted-access view
    """
    settings = embedding if isinstance(embedding, EmbeddingSettings) else parse_embedding(embedding)
    allowed_origins = [o for o in settings.allowed_origins if isinstance(o, str) and o.strip()]

    if not settings.require_origin or not allowed_origins:
        return True, None

    if not origin:
        return False, "Origin validation failed: No origin provided"

    if any(matches_allowed_origin(origin, allowed) for allowed in allowed_origins):
        return True, None

    return False, f"Origin validation failed: {origin} is not in the allowed list"
