"""Input checks for link creation and edits."""

from typing import Tuple
from urllib.parse import urlparse

MAX_URL_LENGTH = 2048
ALLOWED_SCHEMES = ("http", "https")


def is_valid_url(url: str) -> Tuple[bool, str]:
    """Check that ``url`` is an absolute http(s) URL with a host.

    Surrounding whitespace is ignored.

    Returns:
        (True, "") when acceptable, otherwise (False, reason)
    """
    if not isinstance(url, str) or not url.strip():
        return False, "URL is required"

    candidate = url.strip()
    if len(candidate) > MAX_URL_LENGTH:
        return False, f"URL is too long (max {MAX_URL_LENGTH} characters)"

    try:
        parsed = urlparse(candidate)
        host = parsed.hostname
    except ValueError as e:
        return False, f"Invalid URL format: {e}"

    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        return False, "URL must use http or https protocol"
    if not host:
        return False, "URL must have a valid domain"

    return True, ""


def is_non_negative(value: int) -> bool:
    """True for ints >= 0 (bools rejected)."""
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0
