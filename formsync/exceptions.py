"""Error types raised by the form catalog synchronization engine.

Convention:
- ``SyncError`` and its subclasses are the only errors that cross the
  reconciler boundary. Each carries a ``kind`` that callers branch on:
  ``AUTH_REQUIRED`` means the user must re-enter credentials, ``FETCH_ERROR``
  means a plain retry is the right response.
- ``DownloadError`` is raised per form by the local store. The reconciler
  catches it and folds it into a single ``FetchError`` once every eligible
  download has been attempted.
"""

from __future__ import annotations

from enum import StrEnum


class SyncErrorKind(StrEnum):
    """Coarse classification used to pick the user-facing action."""

    FETCH_ERROR = "fetch_error"
    AUTH_REQUIRED = "auth_required"


class SyncError(Exception):
    """Base class for errors that abort or fail a synchronization pass."""

    kind: SyncErrorKind = SyncErrorKind.FETCH_ERROR


class TransportError(SyncError):
    """Network or server fault while fetching the form list or a manifest."""


class AuthError(SyncError):
    """The server rejected the supplied credentials."""

    kind = SyncErrorKind.AUTH_REQUIRED


class FetchError(SyncError):
    """One or more form downloads failed during a pass.

    ``failed_form_ids`` is informational; the error is raised once per pass
    regardless of how many downloads failed.
    """

    def __init__(self, message: str = "", failed_form_ids: tuple[str, ...] = ()) -> None:
        super().__init__(message or "Failed to download one or more forms")
        self.failed_form_ids = failed_form_ids


class DownloadError(Exception):
    """A single form (definition or media) could not be downloaded."""

    def __init__(self, form_id: str, message: str) -> None:
        super().__init__(f"{form_id}: {message}")
        self.form_id = form_id
