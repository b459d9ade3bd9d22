"""Match-exactly sync: make the device form catalog mirror the server's."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from formsync.exceptions import DownloadError, FetchError
from formsync.services.catalog_types import SyncPlan

if TYPE_CHECKING:
    from formsync.services.catalog_service import CatalogFetcher
    from formsync.services.catalog_types import FormRecord, ServerFormDetails
    from formsync.storage.base import FormStore

logger = logging.getLogger(__name__)


def compute_sync_plan(
    snapshot: list[ServerFormDetails],
    local_forms: list[FormRecord],
) -> SyncPlan:
    """Compute the deletions and downloads needed to match the server catalog.

    Local forms whose id is absent from the snapshot are deleted; remote forms
    that are new or updated are downloaded, in server order.
    """
    plan = SyncPlan()
    remote_ids = {details.form_id for details in snapshot}

    for form in local_forms:
        if form.form_id not in remote_ids:
            plan.to_delete.append(form)

    for details in snapshot:
        if details.needs_download:
            plan.to_download.append(details)
        else:
            plan.unchanged.append(details.form_id)

    return plan


class CatalogReconciler:
    """Runs one match-exactly pass: fetch, delete, then download."""

    def __init__(self, fetcher: CatalogFetcher, store: FormStore) -> None:
        self.fetcher = fetcher
        self.store = store

    def plan(self) -> SyncPlan:
        """Fetch the remote catalog and return what a pass would change.

        Nothing is deleted, downloaded or cached. Fetch errors propagate
        unchanged.
        """
        return self._plan(write_cache=False)

    def _plan(self, write_cache: bool) -> SyncPlan:
        snapshot = self.fetcher.fetch_catalog(write_cache=write_cache)
        return compute_sync_plan(snapshot, self.store.get_all())

    def synchronize(self) -> SyncPlan:
        """Bring the device catalog in line with the server.

        Raises TransportError or AuthError before touching the store if the
        catalog cannot be fetched. Every eligible download is attempted; if
        any of them fail, a single FetchError is raised at the end.
        """
        plan = self._plan(write_cache=True)

        for form in plan.to_delete:
            logger.info("Deleting form %s (no longer on server)", form.form_id)
            self.store.delete(form.form_id)

        failed: list[str] = []
        for details in plan.to_download:
            try:
                self.store.download_form(details)
            except DownloadError as exc:
                logger.warning("Failed to download form %s: %s", details.form_id, exc)
                failed.append(details.form_id)
            else:
                logger.info(
                    "Downloaded form %s (%s)",
                    details.form_id,
                    "new" if details.is_not_on_device else "updated",
                )

        if failed:
            raise FetchError(failed_form_ids=tuple(failed))

        logger.info(
            "Form sync complete: %d downloaded, %d deleted, %d unchanged",
            len(plan.to_download),
            len(plan.to_delete),
            len(plan.unchanged),
        )
        return plan
