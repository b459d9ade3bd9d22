"""Catalog differ: decide whether a server form is new, updated or unchanged."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from formsync.services.hash_service import composite_hash, strip_hash_prefix

if TYPE_CHECKING:
    from formsync.services.catalog_types import (
        FormRecord,
        ManifestSnapshot,
        MediaFileEntry,
        MediaFileRecord,
        RemoteFormDescriptor,
    )
    from formsync.storage.base import FormStore

logger = logging.getLogger(__name__)


def media_files_differ(
    server_files: tuple[MediaFileEntry, ...],
    device_files: list[MediaFileRecord],
) -> bool:
    """Return True if the device media set differs from the manifest by name or hash."""
    server = {f.file_name: strip_hash_prefix(f.content_hash) for f in server_files}
    device = {f.name: strip_hash_prefix(f.content_hash) for f in device_files}
    return server != device


class CatalogDiffer:
    """Compares one remote form against its local record.

    The composite hash of the last comparison is cached on the local record,
    so a form whose content and manifest hashes have not moved since the last
    pass is reported unchanged without hashing its media files again.
    """

    def __init__(self, store: FormStore) -> None:
        self.store = store

    def diff(
        self,
        remote: RemoteFormDescriptor,
        manifest: ManifestSnapshot | None,
        local: FormRecord | None,
        *,
        write_cache: bool = True,
    ) -> tuple[bool, bool]:
        """Return ``(is_not_on_device, is_updated)`` for a remote form.

        With ``write_cache=False`` the comparison leaves the store untouched,
        so a later pass still sees the cache miss.
        """
        if local is None:
            return True, False

        version_hash = composite_hash(
            remote.content_hash, manifest.manifest_hash if manifest is not None else None
        )
        if local.last_detected_version_hash == version_hash:
            return False, False

        is_updated = self._is_updated(remote, manifest, local)
        if write_cache:
            self.store.set_cached_version_hash(local.form_id, version_hash)
        if is_updated:
            logger.debug("Form %s has an update on the server", remote.form_id)
        return False, is_updated

    def _is_updated(
        self,
        remote: RemoteFormDescriptor,
        manifest: ManifestSnapshot | None,
        local: FormRecord,
    ) -> bool:
        if strip_hash_prefix(remote.content_hash) != strip_hash_prefix(local.content_hash):
            return True
        if manifest is None:
            return False
        device_files = self.store.get_media_files(remote.form_id, remote.version)
        return media_files_differ(manifest.media_files, device_files)
