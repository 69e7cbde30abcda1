"""Storage layer for short links."""

from .base import LinkStoreBase
from .json_store import JsonFileStore
from .models import Owner, ShortLink
from .schemas import LinkRecord, OwnerRecord, StoreSnapshot

__all__ = [
    "LinkStoreBase",
    "JsonFileStore",
    "Owner",
    "ShortLink",
    "LinkRecord",
    "OwnerRecord",
    "StoreSnapshot",
]
