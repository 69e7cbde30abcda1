"""Business logic service for short links."""

import logging
import threading
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, List, Optional

from .shortcode import ShortCodeGenerator
from .database.base import LinkStoreBase
from .database.models import ShortLink
from .common.validators import is_valid_url, is_non_negative
from .errors import ExhaustedCodeSpace, InvalidArgument, InvalidUrl
from .reaper import sweep_expired


class OpenStatus(str, Enum):
    """Outcome of following a short link."""

    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    DEPLETED = "depleted"
    OPENED = "opened"
    LAST_CLICK = "last_click"


@dataclass
class OpenResult:
    """Result of :meth:`LinkService.open` / :meth:`LinkService.resolve`."""

    status: OpenStatus
    code: str
    link: Optional[ShortLink] = None
    browser_opened: Optional[bool] = None

    @property
    def ok(self) -> bool:
        """True when the click was counted and the URL may be followed."""
        return self.status in (OpenStatus.OPENED, OpenStatus.LAST_CLICK)

    @property
    def url(self) -> Optional[str]:
        return self.link.original_url if self.link is not None else None


class LinkService:
    """Service layer for short link business rules.

    Every read-check-write sequence runs under ``self.lock`` so that edits,
    clicks and sweeps on the same link cannot interleave.
    """

    def __init__(
        self,
        store: LinkStoreBase,
        short_code_generator: Optional[ShortCodeGenerator] = None,
        logger: Optional[logging.Logger] = None,
        browser: Optional[Callable[[str], bool]] = None,
        clock: Callable[[], float] = time.time,
        max_collision_retries: int = 50,
    ):
        """Initialize link service.

        Args:
            store: Link store instance
            short_code_generator: Optional short code generator
            logger: Optional logger
            browser: Optional callable that opens a URL and reports success
            clock: Source of the current epoch time in seconds
            max_collision_retries: Attempts at finding an unused code
        """
        self.store = store
        self.generator = short_code_generator or ShortCodeGenerator()
        self.logger = logger or logging.getLogger(__name__)
        self.browser = browser
        self.clock = clock
        self.max_collision_retries = max_collision_retries
        self.lock = threading.RLock()

    def create(
        self,
        owner_id: str,
        url: str,
        max_clicks: int = 0,
        ttl_seconds: int = 0,
    ) -> ShortLink:
        """Create a new short link.

        Args:
            owner_id: Identifier of the owner
            url: The original URL (http or https)
            max_clicks: Click budget, 0 for unbounded
            ttl_seconds: Time to live in seconds, 0 for unbounded

        Returns:
            The stored link

        Raises:
            InvalidUrl: If the URL is blank or not http(s)
            InvalidArgument: If a limit is negative or the owner is missing
            ExhaustedCodeSpace: If no unused code was found
        """
        is_valid, error = is_valid_url(url)
        if not is_valid:
            raise InvalidUrl(f"Invalid URL: {error}")

        if not is_non_negative(max_clicks):
            raise InvalidArgument("Click limit must be a non-negative integer")

        if not is_non_negative(ttl_seconds):
            raise InvalidArgument("TTL must be a non-negative integer")

        if not owner_id or not str(owner_id).strip():
            raise InvalidArgument("Owner id is required")

        with self.lock:
            code = self._generate_unique_code()
            link = ShortLink(
                code=code,
                original_url=url.strip(),
                owner_id=owner_id,
                created_at=self.clock(),
                ttl=ttl_seconds,
                max_clicks=max_clicks,
                click_count=0,
            )
            self.store.put(link)

        self.logger.info(
            f"Created short link: {code} -> {link.original_url} "
            f"(max clicks: {max_clicks or 'unbounded'}, TTL: {f'{ttl_seconds}s' if ttl_seconds else 'unbounded'})"
        )
        return link

    def open(self, code: str) -> OpenResult:
        """Count a click on a link and open its URL in the browser.

        Args:
            code: The short code to follow

        Returns:
            OpenResult describing what happened
        """
        result = self.resolve(code)
        if result.ok and self.browser is not None:
            result.browser_opened = self.browser(result.link.original_url)
        return result

    def resolve(self, code: str) -> OpenResult:
        """Count a click on a link, evicting it if expired or depleted.

        The depletion check runs before the increment, so a link whose
        budget was used up earlier is removed without counting again. When
        this click uses up the budget, the incremented state is persisted
        first and the link is removed right after.

        Args:
            code: The short code to follow

        Returns:
            OpenResult describing what happened
        """
        with self.lock:
            link = self.store.get(code)
            if link is None:
                self.logger.info(f"Short link not found: {code}")
                return OpenResult(OpenStatus.NOT_FOUND, code)

            if link.is_expired(self.clock()):
                self.store.remove(code)
                self.logger.info(f"Short link {code} expired and was removed")
                return OpenResult(OpenStatus.EXPIRED, code, link)

            if link.is_depleted():
                self.store.remove(code)
                self.logger.info(f"Short link {code} ran out of clicks and was removed")
                return OpenResult(OpenStatus.DEPLETED, code, link)

            updated = self.store.increment_clicks(code)
            if updated is None:
                return OpenResult(OpenStatus.NOT_FOUND, code)

            if updated.is_depleted():
                self.store.remove(code)
                self.logger.info(f"Short link {code} reached its click limit and was removed")
                return OpenResult(OpenStatus.LAST_CLICK, code, updated)

        self.logger.debug(f"Opened {code} -> {updated.original_url} (clicks: {updated.click_count})")
        return OpenResult(OpenStatus.OPENED, code, updated)

    def info(self, code: str) -> Optional[ShortLink]:
        """Get a link without counting a click or evicting it.

        Args:
            code: The short code to lookup

        Returns:
            The link or None
        """
        return self.store.get(code)

    def delete(self, code: str, requester_id: str) -> bool:
        """Delete a link on behalf of its owner.

        Args:
            code: The short code to delete
            requester_id: Identifier of the caller

        Returns:
            True if deleted, False if not found or not owned by the caller
        """
        with self.lock:
            link = self.store.get(code)
            if link is None:
                self.logger.info(f"Delete failed, short link not found: {code}")
                return False

            if link.owner_id != requester_id:
                self.logger.warning(f"Delete of {code} refused for non-owner {requester_id}")
                return False

            self.store.remove(code)

        self.logger.info(f"Deleted short link: {code}")
        return True

    def edit_limit(self, code: str, requester_id: str, new_max_clicks: int) -> bool:
        """Change the click budget of a link. The click counter is kept.

        Args:
            code: The short code to edit
            requester_id: Identifier of the caller
            new_max_clicks: New click budget, 0 for unbounded

        Returns:
            True if changed
        """
        with self.lock:
            link = self._editable(code, requester_id, new_max_clicks, "click limit")
            if link is None:
                return False
            self.store.put(replace(link, max_clicks=new_max_clicks))

        self.logger.info(f"Click limit of {code} set to {new_max_clicks or 'unbounded'}")
        return True

    def edit_ttl(self, code: str, requester_id: str, new_ttl_seconds: int) -> bool:
        """Change the TTL of a link, restarting its expiration window now.

        Args:
            code: The short code to edit
            requester_id: Identifier of the caller
            new_ttl_seconds: New TTL in seconds, 0 for unbounded

        Returns:
            True if changed
        """
        with self.lock:
            link = self._editable(code, requester_id, new_ttl_seconds, "TTL")
            if link is None:
                return False
            self.store.put(replace(link, ttl=new_ttl_seconds, created_at=self.clock()))

        self.logger.info(f"TTL of {code} set to {f'{new_ttl_seconds}s' if new_ttl_seconds else 'unbounded'}")
        return True

    def list_links(self, owner_id: Optional[str] = None) -> List[ShortLink]:
        """List stored links, optionally only those of one owner."""
        if owner_id is not None:
            return self.store.links_for_owner(owner_id)
        return self.store.all_links()

    def purge_expired(self) -> List[str]:
        """Remove every link whose TTL has elapsed.

        Returns:
            Codes that were evicted
        """
        with self.lock:
            evicted = sweep_expired(self.store, self.clock(), self.logger)
        return [link.code for link in evicted]

    def remaining_ttl(self, link: ShortLink) -> Optional[float]:
        """Seconds until a link expires, None when unbounded."""
        return link.remaining_ttl(self.clock())

    def _editable(
        self,
        code: str,
        requester_id: str,
        value: int,
        what: str,
    ) -> Optional[ShortLink]:
        """Return the link if the caller may set ``what`` to ``value``."""
        link = self.store.get(code)
        if link is None:
            self.logger.info(f"Edit failed, short link not found: {code}")
            return None

        if not is_non_negative(value):
            self.logger.info(f"Edit of {code} refused: {what} must be non-negative")
            return None

        if link.owner_id != requester_id:
            self.logger.warning(f"Edit of {code} refused for non-owner {requester_id}")
            return None

        return link

    def _generate_unique_code(self) -> str:
        """Generate a code not currently stored.

        Raises:
            ExhaustedCodeSpace: If every attempt collided
        """
        for attempt in range(self.max_collision_retries):
            code = self.generator.generate_random()
            if self.store.get(code) is None:
                if attempt:
                    self.logger.debug(f"Generated code after {attempt + 1} attempts: {code}")
                return code

        raise ExhaustedCodeSpace(
            f"Unable to generate a unique short code after {self.max_collision_retries} attempts"
        )
