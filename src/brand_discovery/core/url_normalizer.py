"""URL canonicalization for duplicate detection."""

import logging
import re
from urllib.parse import parse_qsl, urlencode, urlsplit

logger = logging.getLogger(__name__)

TRACKING_PARAMS = frozenset({
    "fbclid", "gclid", "msclkid", "mc_eid", "mc_cid", "_ga", "ref", "referrer",
})

_PROTOCOL_RE = re.compile(r"^[a-z][a-z0-9+.-]*://")
_WWW_RE = re.compile(r"^(?:www\.)+")


def _is_tracking_param(name: str) -> bool:
    return name.startswith("utm_") or name in TRACKING_PARAMS


def _strip_tracking_params(url: str) -> str:
    """Drop tracking parameters, keeping the others in their original order."""
    if "?" not in url:
        return url

    base, query = url.split("?", 1)
    kept = [
        (name, value)
        for name, value in parse_qsl(query, keep_blank_values=True)
        if not _is_tracking_param(name)
    ]
    if not kept:
        return base
    return f"{base}?{urlencode(kept)}"


def normalize_url(url: str) -> str:
    """Canonicalize a URL into a comparable key.

    Lowercases, strips protocol, leading ``www.``, tracking parameters and the
    fragment, collapses repeated slashes and drops the trailing slash. Never
    raises: malformed input falls back to a lowercase string.

    Args:
        url: Raw URL, with or without protocol

    Returns:
        Canonical form, e.g. ``example.com/a`` for
        ``HTTPS://WWW.Example.com/a/?utm_source=x#f``
    """
    try:
        normalized = url.lower().strip()
        normalized = _PROTOCOL_RE.sub("", normalized)
        normalized = _WWW_RE.sub("", normalized)
        normalized = normalized.split("#", 1)[0]
        normalized = _strip_tracking_params(normalized)
        normalized = re.sub(r"/{2,}", "/", normalized)

        # Trailing slash sits before the query string when there is one
        if "?" in normalized:
            path, query = normalized.split("?", 1)
            normalized = f"{path.rstrip('/')}?{query}"
        else:
            normalized = normalized.rstrip("/")

        return normalized
    except Exception:
        logger.warning("Could not normalize URL %r", url, exc_info=True)
        return str(url).lower()


def extract_domain(url: str) -> str:
    """Return the host of a URL without ``www.`` and port."""
    try:
        candidate = url.strip().lower()
        if not _PROTOCOL_RE.match(candidate):
            candidate = "http://" + candidate
        host = urlsplit(candidate).hostname or ""
        return _WWW_RE.sub("", host)
    except ValueError:
        stripped = _PROTOCOL_RE.sub("", url.strip().lower())
        return _WWW_RE.sub("", stripped).split("/", 1)[0].split(":", 1)[0]


def extract_path(url: str) -> str:
    """Return the path component of a URL, ``/`` when empty."""
    try:
        candidate = url.strip()
        if not _PROTOCOL_RE.match(candidate.lower()):
            candidate = "http://" + candidate
        return urlsplit(candidate).path or "/"
    except ValueError:
        parts = _PROTOCOL_RE.sub("", url.strip()).split("/", 1)
        return "/" + parts[1] if len(parts) > 1 else "/"
