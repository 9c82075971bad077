import re
from typing import Any, Iterable, Optional
from urllib.parse import ParseResult, urljoin, urlparse

SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")

# schemes that are meaningless without a host
HIERARCHICAL_SCHEMES = {"http", "https", "ws", "wss", "ftp"}


def parse_url(value: Any) -> Optional[ParseResult]:
    if not isinstance(value, str) or not value or value != value.strip():
        return None

    try:
        parsed = urlparse(value)
        parsed.port  # raises on a malformed port
    except ValueError:
        return None

    if not parsed.scheme or not SCHEME_RE.match(parsed.scheme):
        return None
    if parsed.scheme.lower() in HIERARCHICAL_SCHEMES and not parsed.netloc:
        return None
    if any(ch.isspace() for ch in parsed.netloc):
        return None
    if not parsed.netloc and not parsed.path:
        return None
    return parsed


def is_valid_url(value: Any) -> bool:
    return parse_url(value) is not None


def url_protocol(value: Any) -> Optional[str]:
    parsed = parse_url(value)
    return parsed.scheme.lower() if parsed else None


def is_allowed_url(value: Any, protocols: Iterable[str]) -> bool:
    protocol = url_protocol(value)
    return protocol is not None and protocol in {p.lower() for p in protocols}


def resolve_url(path: str, base_url: str) -> Optional[str]:
    """Join a '/'-relative path onto a base URL, or None if the result is not a URL."""
    if not is_valid_url(base_url):
        return None
    joined = urljoin(base_url, path)
    return joined if is_valid_url(joined) else None
