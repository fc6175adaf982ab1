"""URL manipulation utilities for the PWA discovery job"""

import re
from typing import Optional
from urllib.parse import urljoin, urlparse

_ABSOLUTE_URL = re.compile(r"^https?://", re.IGNORECASE)


def ensure_scheme(url: str) -> str:
    """Prefix `https://` unless the input already starts with `http://` or `https://`."""
    url = url.strip()
    return url if _ABSOLUTE_URL.match(url) else f"https://{url}"


def is_https(url: str) -> bool:
    """Check whether the URL uses the https scheme."""
    try:
        return urlparse(url).scheme.lower() == "https"
    except ValueError:
        return False


def resolve_url(url: str, base: str) -> str:
    """Resolve a possibly relative URL against `base`.

    Absolute http(s) URLs are returned unchanged. Malformed input returns `url` as is;
    this function never raises.
    """
    if _ABSOLUTE_URL.match(url):
        return url
    try:
        return urljoin(base, url)
    except ValueError:
        return url


def get_base_url(url: str) -> str:
    """Extract base URL (e.g., "https://example.com" from "https://example.com/path")."""
    parsed_url = urlparse(url)
    return f"{parsed_url.scheme}://{parsed_url.netloc}"


def normalize_hostname(entry: str) -> str:
    """Return the dedup key of a candidate: its lowercase hostname without a `www.` prefix.

    Full URLs are reduced to their hostname, anything else is lowercased and trimmed.
    """
    hostname: Optional[str] = None
    if _ABSOLUTE_URL.match(entry):
        try:
            hostname = urlparse(entry).hostname
        except ValueError:
            hostname = None
    domain = hostname or entry.lower().strip()
    return domain.removeprefix("www.")


def is_candidate_domain(normalized: str) -> bool:
    """Reject bare hostnames such as `localhost`."""
    return "." in normalized
