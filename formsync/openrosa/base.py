"""Protocols for the remote form list service and its payload codec."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from formsync.services.catalog_types import ManifestSnapshot, RemoteFormDescriptor


@runtime_checkable
class FormListApi(Protocol):
    """Remote catalog of blank forms.

    Both calls raise AuthError when the server rejects the credentials and
    TransportError on any other network or server fault.
    """

    def fetch_form_list(self) -> list[RemoteFormDescriptor]:
        """Return the forms advertised by the server, in server order."""
        ...

    def fetch_manifest(self, url: str) -> ManifestSnapshot:
        """Return the manifest published at ``url``."""
        ...


@runtime_checkable
class FormListParser(Protocol):
    """Decodes form list and manifest payloads into catalog types."""

    def parse_form_list(self, payload: bytes) -> list[RemoteFormDescriptor]: ...

    def parse_manifest(self, payload: bytes) -> ManifestSnapshot: ...
