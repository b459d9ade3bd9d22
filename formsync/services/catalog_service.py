"""Catalog fetcher: pull the remote catalog and annotate it against the device."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from formsync.services.catalog_types import ServerFormDetails
from formsync.services.diff_service import CatalogDiffer

if TYPE_CHECKING:
    from formsync.openrosa.base import FormListApi
    from formsync.services.catalog_types import ManifestSnapshot
    from formsync.storage.base import FormStore

logger = logging.getLogger(__name__)


class CatalogFetcher:
    """Fetches the form list plus manifests and diffs each form against the store."""

    def __init__(
        self,
        form_list_api: FormListApi,
        store: FormStore,
        differ: CatalogDiffer | None = None,
    ) -> None:
        self.form_list_api = form_list_api
        self.store = store
        self.differ = differ or CatalogDiffer(store)

    def fetch_catalog(self, *, write_cache: bool = True) -> list[ServerFormDetails]:
        """Return the annotated remote catalog in server order.

        ``write_cache=False`` diffs without updating cached version hashes.

        TransportError and AuthError from the list or any manifest call
        propagate immediately; no partial catalog is returned.
        """
        descriptors = self.form_list_api.fetch_form_list()
        local_forms = {form.form_id: form for form in self.store.get_all()}
        logger.debug(
            "Server lists %d form(s), device has %d", len(descriptors), len(local_forms)
        )

        details: list[ServerFormDetails] = []
        for descriptor in descriptors:
            manifest: ManifestSnapshot | None = None
            if descriptor.manifest_url:
                manifest = self.form_list_api.fetch_manifest(descriptor.manifest_url)

            is_not_on_device, is_updated = self.differ.diff(
                descriptor,
                manifest,
                local_forms.get(descriptor.form_id),
                write_cache=write_cache,
            )
            details.append(
                ServerFormDetails(
                    descriptor=descriptor,
                    is_not_on_device=is_not_on_device,
                    is_updated=is_updated,
                    manifest=manifest,
                )
            )
        return details
