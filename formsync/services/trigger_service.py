"""Entry points that start match-exactly sync passes.

Manual requests and the recurring scheduler both go through ``SyncGate``; a
request that arrives while a pass is running is dropped.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from formsync.config import FormUpdateMode
from formsync.exceptions import SyncError

if TYPE_CHECKING:
    from concurrent.futures import Future

    from formsync.services.notification_service import Notifier
    from formsync.services.scheduler_service import Scheduler
    from formsync.services.sync_service import CatalogReconciler
    from formsync.services.sync_status_service import SyncGate

logger = logging.getLogger(__name__)

MATCH_EXACTLY_TAG = "match_exactly"


class FormSyncTrigger:
    """Starts sync passes on demand or on a schedule and reports their outcome."""

    def __init__(
        self,
        gate: SyncGate,
        reconciler: CatalogReconciler,
        scheduler: Scheduler,
        notifier: Notifier,
        form_update_mode: FormUpdateMode = FormUpdateMode.MANUAL,
    ) -> None:
        self.gate = gate
        self.reconciler = reconciler
        self.scheduler = scheduler
        self.notifier = notifier
        self.form_update_mode = form_update_mode

    def is_syncing_available(self) -> bool:
        return self.form_update_mode == FormUpdateMode.MATCH_EXACTLY

    def sync_with_server(self) -> Future[Any] | None:
        """Start a pass on a background worker.

        Returns the pass's future, or None if a pass is already running.
        """
        if not self.gate.try_acquire():
            return None
        return self.scheduler.immediate(self._run_acquired)

    def run_once(self) -> bool | None:
        """Run a pass on the calling thread.

        Returns the pass outcome, or None if a pass is already running.
        """
        if not self.gate.try_acquire():
            logger.info("Skipping form sync: another sync is in progress")
            return None
        return self._run_acquired()

    def _run_acquired(self) -> bool:
        try:
            self.reconciler.synchronize()
        except SyncError as exc:
            self.gate.release(False)
            self.notifier.on_sync_failure(exc)
            return False
        except BaseException:
            self.gate.release(False)
            raise
        self.gate.release(True)
        return True

    def apply_form_update_mode(self, mode: FormUpdateMode, interval_seconds: float) -> None:
        """Start or stop automatic syncing to follow the form update mode."""
        self.form_update_mode = mode
        if mode == FormUpdateMode.MATCH_EXACTLY:
            logger.info("Scheduling form sync every %.0f seconds", interval_seconds)
            self.scheduler.schedule_repeating(MATCH_EXACTLY_TAG, interval_seconds, self.run_once)
        else:
            self.scheduler.cancel(MATCH_EXACTLY_TAG)
