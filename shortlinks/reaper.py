"""Background removal of expired short links."""

import logging
import threading
import time
from typing import Callable, List, Optional

from .database.base import LinkStoreBase
from .database.models import ShortLink


def sweep_expired(
    store: LinkStoreBase,
    now: float,
    logger: Optional[logging.Logger] = None,
) -> List[ShortLink]:
    """Remove every link whose TTL has elapsed at ``now``.

    Candidates are collected from a snapshot first and removed afterwards.
    A code that disappeared in between is skipped. A failed removal is
    logged and the sweep moves on to the next code.

    Args:
        store: Link store to sweep
        now: Current epoch seconds
        logger: Optional logger

    Returns:
        Links that were removed by this sweep
    """
    logger = logger or logging.getLogger(__name__)

    candidates = [link for link in store.all_links() if link.is_expired(now)]

    removed = []
    for link in candidates:
        try:
            if store.remove(link.code):
                removed.append(link)
                logger.info(f"Short link {link.code} expired and was removed (owner: {link.owner_id})")
        except Exception:
            logger.exception(f"Failed to remove expired link {link.code}")
    return removed


class Reaper:
    """Daemon thread that sweeps expired links at a fixed rate.

    Usage::

        with Reaper(store, interval=1.0):
            serve_forever()
    """

    def __init__(
        self,
        store: LinkStoreBase,
        interval: float = 1.0,
        logger: Optional[logging.Logger] = None,
        clock: Callable[[], float] = time.time,
        lock: Optional[threading.RLock] = None,
        on_evict: Optional[Callable[[ShortLink], None]] = None,
    ):
        """Initialize the reaper.

        Args:
            store: Link store to sweep
            interval: Seconds between sweeps
            logger: Optional logger
            clock: Source of the current epoch time in seconds
            lock: Optional lock held during each sweep (share the service's)
            on_evict: Optional callback invoked for each evicted link
        """
        if interval <= 0:
            raise ValueError("Reaper interval must be positive")

        self.store = store
        self.interval = interval
        self.logger = logger or logging.getLogger(__name__)
        self.clock = clock
        self.lock = lock
        self.on_evict = on_evict
        self.cycles = 0

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._state_lock = threading.Lock()

    def run_once(self) -> List[str]:
        """Run a single sweep in the calling thread.

        Returns:
            Codes that were evicted
        """
        if self.lock is not None:
            with self.lock:
                evicted = sweep_expired(self.store, self.clock(), self.logger)
        else:
            evicted = sweep_expired(self.store, self.clock(), self.logger)

        if self.on_evict is not None:
            for link in evicted:
                try:
                    self.on_evict(link)
                except Exception:
                    self.logger.exception(f"Eviction callback failed for {link.code}")

        return [link.code for link in evicted]

    def start(self) -> None:
        """Start the background thread (no-op if already running)."""
        with self._state_lock:
            if self._thread is not None and self._thread.is_alive():
                return
            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._run,
                name="shortlinks-reaper",
                daemon=True,
            )
            self._thread.start()
        self.logger.debug(f"Reaper started (interval: {self.interval}s)")

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop scheduling sweeps and wait for the thread to finish.

        Args:
            timeout: Maximum seconds to wait for the current sweep
        """
        self._stop_event.set()
        with self._state_lock:
            thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self.logger.debug("Reaper stopped")

    def is_alive(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def _run(self) -> None:
        next_run = time.monotonic()
        while not self._stop_event.is_set():
            try:
                self.run_once()
            except Exception:
                self.logger.exception("Error while removing expired links")
            self.cycles += 1

            next_run += self.interval
            delay = next_run - time.monotonic()
            if delay < 0:
                # Sweep overran the interval; resume from now
                next_run = time.monotonic()
                delay = 0
            if self._stop_event.wait(delay):
                break

    def __enter__(self) -> "Reaper":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
