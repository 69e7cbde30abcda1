"""Short links with TTL and click-budget expiry, backed by a JSON file."""

from .shortcode import ShortCodeGenerator
from .service import LinkService, OpenResult, OpenStatus
from .reaper import Reaper
from .users import UserService

__all__ = [
    "ShortCodeGenerator",
    "LinkService",
    "OpenResult",
    "OpenStatus",
    "Reaper",
    "UserService",
]

__version__ = "1.0.0"
