"""Open URLs in the local web browser."""

import logging
import webbrowser

logger = logging.getLogger(__name__)


def open_in_browser(url: str) -> bool:
    """Best-effort open of a URL in the default browser.

    Args:
        url: The URL to open

    Returns:
        True if a browser accepted the URL
    """
    try:
        opened = webbrowser.open(url)
    except webbrowser.Error as e:
        logger.warning(f"Could not open {url} in a browser: {e}")
        return False

    if not opened:
        logger.warning(f"No browser available to open {url}")
    return bool(opened)
