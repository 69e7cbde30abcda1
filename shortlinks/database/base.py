"""Abstract base class for short link store implementations."""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..errors import PersistenceFailure
from .models import Owner, ShortLink


class LinkStoreBase(ABC):
    """Abstract base class for link and owner storage.

    Implementations keep the code->link map and the owner->codes map
    consistent with each other: every stored code appears in exactly its
    owner's code list, and nowhere else.
    """

    #: Most recent read or write failure, None once persistence succeeds again
    last_error: Optional[PersistenceFailure] = None

    @abstractmethod
    def get(self, code: str) -> Optional[ShortLink]:
        """Get a link by code.

        Args:
            code: The short code to lookup

        Returns:
            A copy of the stored link, or None if not found
        """
        pass

    @abstractmethod
    def put(self, link: ShortLink) -> None:
        """Insert or replace a link and register its code with the owner.

        Args:
            link: The link to store
        """
        pass

    @abstractmethod
    def remove(self, code: str) -> bool:
        """Remove a link and drop its code from the owner.

        Args:
            code: The short code to remove

        Returns:
            True if removed, False if the code was not stored
        """
        pass

    @abstractmethod
    def all_links(self) -> List[ShortLink]:
        """Snapshot of all stored links.

        Returns:
            List of link copies, unaffected by later mutations
        """
        pass

    @abstractmethod
    def increment_clicks(self, code: str) -> Optional[ShortLink]:
        """Atomically count one click on a link.

        Args:
            code: The short code to update

        Returns:
            The updated link, or None if not found
        """
        pass

    @abstractmethod
    def get_user(self, owner_id: str) -> Optional[Owner]:
        """Get an owner record.

        Args:
            owner_id: Owner identifier

        Returns:
            A copy of the owner record, or None if unknown
        """
        pass

    @abstractmethod
    def put_user(self, owner: Owner) -> None:
        """Insert or replace an owner record.

        Args:
            owner: The owner to store
        """
        pass

    @abstractmethod
    def save(self) -> None:
        """Persist the current state."""
        pass

    @abstractmethod
    def find_user_by_prefix(self, prefix: str) -> Optional[str]:
        """Find the first owner id starting with a prefix.

        Args:
            prefix: Leading characters of the owner id

        Returns:
            Matching owner id or None
        """
        pass

    def links_for_owner(self, owner_id: str) -> List[ShortLink]:
        """List the links owned by an owner, in the owner's code order."""
        owner = self.get_user(owner_id)
        if owner is None:
            return []
        links = []
        for code in owner.codes:
            link = self.get(code)
            if link is not None:
                links.append(link)
        return links

    def __contains__(self, code: str) -> bool:
        return self.get(code) is not None

    def __len__(self) -> int:
        return len(self.all_links())
