"""JSON flat-file implementation of the link store."""

import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import ValidationError

from ..errors import PersistenceFailure
from .base import LinkStoreBase
from .models import Owner, ShortLink
from .schemas import StoreSnapshot


class JsonFileStore(LinkStoreBase):
    """In-memory link store mirrored to a single JSON file.

    Both maps live behind one re-entrant lock. Every mutation rewrites the
    whole file while still holding the lock, so the file always reflects a
    single point in time. The rewrite goes to a temporary file in the same
    directory and is swapped in with ``os.replace``.
    """

    def __init__(
        self,
        path: Union[str, Path],
        logger: Optional[logging.Logger] = None,
        autoload: bool = True,
    ):
        """Initialize the store.

        Args:
            path: Data file path
            logger: Optional logger instance
            autoload: Load the data file on construction
        """
        self.path = Path(path)
        self.logger = logger or logging.getLogger(__name__)

        self._links: Dict[str, ShortLink] = {}
        self._users: Dict[str, Owner] = {}
        self._lock = threading.RLock()
        self.last_error: Optional[PersistenceFailure] = None

        if autoload:
            self.load()

    def load(self) -> None:
        """Load the data file, replacing the in-memory state.

        A missing or empty file leaves the store empty. A malformed file is
        logged and also leaves the store empty.
        """
        with self._lock:
            self._links.clear()
            self._users.clear()

            if not self.path.exists():
                self.logger.info(f"Data file {self.path} not found, starting with an empty store")
                return

            try:
                raw = self.path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                self.last_error = PersistenceFailure(f"Cannot read {self.path}: {e}")
                self.logger.error(f"{self.last_error}; starting with an empty store")
                return

            if not raw.strip():
                self.logger.info(f"Data file {self.path} is empty")
                return

            try:
                snapshot = StoreSnapshot.model_validate_json(raw)
            except (ValidationError, ValueError, RecursionError) as e:
                self.logger.error(
                    f"Data file {self.path} is malformed, starting with an empty store: {e}"
                )
                return

            for record in snapshot.links:
                self._links[record.code] = ShortLink.from_record(record)
            for record in snapshot.users:
                self._users[record.id] = Owner.from_record(record)
            self._reconcile()

            self.logger.info(
                f"Loaded {self.path} (links: {len(self._links)}, users: {len(self._users)})"
            )

    def _reconcile(self) -> None:
        """Make owner code lists match the loaded links."""
        for owner in self._users.values():
            owner.codes = [
                code for code in owner.codes
                if code in self._links and self._links[code].owner_id == owner.id
            ]
        for link in self._links.values():
            owner = self._users.setdefault(link.owner_id, Owner(id=link.owner_id))
            owner.add_code(link.code)

    def get(self, code: str) -> Optional[ShortLink]:
        with self._lock:
            link = self._links.get(code)
            return link.copy() if link is not None else None

    def put(self, link: ShortLink) -> None:
        with self._lock:
            previous = self._links.get(link.code)
            if previous is not None and previous.owner_id != link.owner_id:
                old_owner = self._users.get(previous.owner_id)
                if old_owner is not None:
                    old_owner.remove_code(link.code)

            self._links[link.code] = link.copy()
            owner = self._users.get(link.owner_id)
            if owner is None:
                owner = Owner(id=link.owner_id)
                self._users[owner.id] = owner
                self.logger.debug(f"Created owner record {owner.id}")
            owner.add_code(link.code)

            self.save()

    def remove(self, code: str) -> bool:
        with self._lock:
            removed = self._links.pop(code, None)
            if removed is not None:
                owner = self._users.get(removed.owner_id)
                if owner is not None:
                    owner.remove_code(code)
            self.save()
            return removed is not None

    def all_links(self) -> List[ShortLink]:
        with self._lock:
            return [link.copy() for link in self._links.values()]

    def increment_clicks(self, code: str) -> Optional[ShortLink]:
        with self._lock:
            link = self._links.get(code)
            if link is None:
                return None
            link.increase_click()
            self.save()
            return link.copy()

    def get_user(self, owner_id: str) -> Optional[Owner]:
        with self._lock:
            owner = self._users.get(owner_id)
            return owner.copy() if owner is not None else None

    def put_user(self, owner: Owner) -> None:
        with self._lock:
            stored = Owner(id=owner.id)
            # Codes always mirror the link map
            for link in self._links.values():
                if link.owner_id == owner.id:
                    stored.add_code(link.code)
            existing = self._users.get(owner.id)
            if existing is not None:
                order = [code for code in existing.codes if code in stored.codes]
                stored.codes = order + [code for code in stored.codes if code not in order]
            self._users[owner.id] = stored
            self.save()

    def find_user_by_prefix(self, prefix: str) -> Optional[str]:
        if not prefix:
            return None
        with self._lock:
            for owner_id in self._users:
                if owner_id.startswith(prefix):
                    return owner_id
        return None

    def snapshot(self) -> StoreSnapshot:
        """Build the persisted document from the current state."""
        with self._lock:
            return StoreSnapshot(
                links=[link.to_record() for link in self._links.values()],
                users=[owner.to_record() for owner in self._users.values()],
            )

    def save(self) -> None:
        """Rewrite the data file.

        Failures are logged and kept in ``last_error`` until the next
        successful write; the in-memory state stays authoritative.
        """
        with self._lock:
            payload = self.snapshot().model_dump_json(by_alias=True, indent=2)
            try:
                self._write_atomic(payload)
            except OSError as e:
                self.last_error = PersistenceFailure(f"Cannot write {self.path}: {e}")
                self.logger.error(str(self.last_error))
            else:
                self.last_error = None

    def _write_atomic(self, payload: str) -> None:
        directory = self.path.parent
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=str(directory)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except OSError:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
