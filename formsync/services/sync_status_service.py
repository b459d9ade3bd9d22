"""Single-flight guard and persistent out-of-sync flag for form sync passes."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncStatus:
    """Snapshot of the sync flags."""

    syncing: bool = False
    out_of_sync: bool = False


class SyncGate:
    """Allows at most one sync pass at a time.

    A rejected ``try_acquire`` is not queued: the caller must trigger again
    later. ``out_of_sync`` stays set from a failed pass until a later pass
    succeeds. Safe to share between threads.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._syncing = False
        self._out_of_sync = False

    def try_acquire(self) -> bool:
        """Mark a pass as running. Returns False if one already is."""
        with self._lock:
            if self._syncing:
                logger.debug("Sync already in progress; ignoring request")
                return False
            self._syncing = True
            return True

    def release(self, success: bool) -> None:
        """Mark the running pass as finished with the given outcome."""
        with self._lock:
            self._syncing = False
            self._out_of_sync = not success

    @property
    def is_syncing(self) -> bool:
        with self._lock:
            return self._syncing

    @property
    def is_out_of_sync(self) -> bool:
        with self._lock:
            return self._out_of_sync

    @property
    def status(self) -> SyncStatus:
        with self._lock:
            return SyncStatus(syncing=self._syncing, out_of_sync=self._out_of_sync)
