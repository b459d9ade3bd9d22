"""Protocol for the device-local form catalog store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from formsync.services.catalog_types import FormRecord, MediaFileRecord, ServerFormDetails


@runtime_checkable
class FormStore(Protocol):
    """Read/write access to the blank forms stored on the device.

    ``form_id`` is the store key: at most one record exists per form id.
    """

    def get_all(self) -> list[FormRecord]:
        """Return every form on the device."""
        ...

    def delete(self, form_id: str) -> None:
        """Remove a form and its files. Unknown ids are ignored."""
        ...

    def download_form(self, details: ServerFormDetails) -> None:
        """Download a form and its media, replacing any existing copy.

        Raises DownloadError if the form could not be downloaded.
        """
        ...

    def get_media_files(self, form_id: str, version: str | None) -> list[MediaFileRecord]:
        """Return the media files stored for the given form version."""
        ...

    def get_cached_version_hash(self, form_id: str) -> str | None:
        """Return the composite hash recorded by the last catalog diff, if any."""
        ...

    def set_cached_version_hash(self, form_id: str, version_hash: str) -> None:
        """Record the composite hash computed by a catalog diff."""
        ...
