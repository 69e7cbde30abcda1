"""Typed exceptions for the short link service (no logic).

Not-found and forbidden outcomes are not exceptions: the service reports
them as ``False``/``None`` results.
"""


class ShortLinkError(Exception):
    """Base class for short link errors."""


class InvalidUrl(ShortLinkError, ValueError):
    """URL is missing, blank, or does not use http/https."""


class InvalidArgument(ShortLinkError, ValueError):
    """Negative TTL or click limit."""


class ExhaustedCodeSpace(ShortLinkError, RuntimeError):
    """No unique short code found within the retry bound."""


class PersistenceFailure(ShortLinkError, OSError):
    """Data file could not be read or written."""
