"""Owner identity management."""

import logging
import uuid
from typing import Optional

from .database.base import LinkStoreBase
from .database.models import Owner


class UserService:
    """Resolve or register owner identities.

    The service holds no "current user": callers keep the identity and pass
    it to every link operation.
    """

    def __init__(self, store: LinkStoreBase, logger: Optional[logging.Logger] = None):
        self.store = store
        self.logger = logger or logging.getLogger(__name__)

    def ensure_user(self, owner_id: Optional[str] = None) -> str:
        """Return an owner id, registering the owner if needed.

        Args:
            owner_id: Requested id; a new UUID is generated when blank

        Returns:
            The owner id
        """
        if owner_id is None or not owner_id.strip():
            owner_id = str(uuid.uuid4())
            self.store.put_user(Owner(id=owner_id))
            self.logger.info(f"Registered new owner {owner_id}")
            return owner_id

        owner_id = owner_id.strip()
        if self.store.get_user(owner_id) is None:
            self.store.put_user(Owner(id=owner_id))
            self.logger.info(f"Registered owner {owner_id}")
        return owner_id

    def resolve_prefix(self, prefix: str) -> Optional[str]:
        """Find a known owner id by its leading characters."""
        if not prefix or not prefix.strip():
            return None
        return self.store.find_user_by_prefix(prefix.strip())

    def exists(self, owner_id: str) -> bool:
        return self.store.get_user(owner_id) is not None
