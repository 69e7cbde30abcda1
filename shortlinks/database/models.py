"""Data models for short links and their owners."""

import time
from dataclasses import dataclass, field, replace
from typing import List, Optional

from .schemas import LinkRecord, OwnerRecord


@dataclass
class ShortLink:
    """A short code pointing at a URL, bounded by TTL and/or a click budget.

    ``ttl`` is in seconds and ``created_at`` is epoch seconds. A zero ``ttl``
    or ``max_clicks`` means the corresponding limit is disabled.
    """

    code: str
    original_url: str
    owner_id: str
    created_at: float = field(default_factory=time.time)
    ttl: int = 0
    max_clicks: int = 0
    click_count: int = 0

    def is_expired(self, now: Optional[float] = None) -> bool:
        """Check whether the TTL has elapsed.

        Args:
            now: Current epoch seconds (defaults to ``time.time()``)

        Returns:
            True if the link has a TTL and it has run out
        """
        if self.ttl == 0:
            return False
        if now is None:
            now = time.time()
        return now - self.created_at >= self.ttl

    def is_depleted(self) -> bool:
        """Check whether the click budget is used up."""
        return self.max_clicks > 0 and self.click_count >= self.max_clicks

    def increase_click(self) -> int:
        """Count one click and return the new total."""
        self.click_count += 1
        return self.click_count

    def remaining_ttl(self, now: Optional[float] = None) -> Optional[float]:
        """Seconds left before expiry, None when the TTL is unbounded."""
        if self.ttl == 0:
            return None
        if now is None:
            now = time.time()
        return max(0.0, self.ttl - (now - self.created_at))

    def copy(self) -> "ShortLink":
        """Return a detached copy."""
        return replace(self)

    def to_record(self) -> LinkRecord:
        """Convert to the persisted record."""
        return LinkRecord(
            code=self.code,
            original_url=self.original_url,
            owner_id=self.owner_id,
            created_at=self.created_at,
            ttl=self.ttl,
            max_clicks=self.max_clicks,
            click_count=self.click_count,
        )

    @classmethod
    def from_record(cls, record: LinkRecord) -> "ShortLink":
        """Create from a persisted record."""
        return cls(
            code=record.code,
            original_url=record.original_url,
            owner_id=record.owner_id,
            created_at=record.created_at,
            ttl=record.ttl,
            max_clicks=record.max_clicks,
            click_count=record.click_count,
        )


@dataclass
class Owner:
    """An owner identity and the codes it currently owns."""

    id: str
    codes: List[str] = field(default_factory=list)

    def add_code(self, code: str) -> None:
        if code not in self.codes:
            self.codes.append(code)

    def remove_code(self, code: str) -> None:
        if code in self.codes:
            self.codes.remove(code)

    def copy(self) -> "Owner":
        return Owner(id=self.id, codes=list(self.codes))

    def to_record(self) -> OwnerRecord:
        return OwnerRecord(id=self.id, codes=list(self.codes))

    @classmethod
    def from_record(cls, record: OwnerRecord) -> "Owner":
        owner = cls(id=record.id)
        for code in record.codes:
            owner.add_code(code)
        return owner
