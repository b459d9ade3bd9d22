"""Notification boundary for failed sync passes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from formsync.exceptions import SyncErrorKind

if TYPE_CHECKING:
    from formsync.exceptions import SyncError

logger = logging.getLogger(__name__)

FAILURE_TITLE = "Form update failed"
FAILURE_HINT = (
    "If you keep having this problem, report it to the person who asked you to collect data."
)


@dataclass(frozen=True)
class SyncFailureNotice:
    """User-facing description of a failed pass."""

    title: str
    message: str
    action: str


def describe_failure(error: SyncError) -> SyncFailureNotice:
    """Pick the action offered to the user for a failed pass."""
    if error.kind == SyncErrorKind.AUTH_REQUIRED:
        action = "Server Requires Authentication"
    else:
        action = "Fill Blank Form"
    return SyncFailureNotice(title=FAILURE_TITLE, message=FAILURE_HINT, action=action)


@runtime_checkable
class Notifier(Protocol):
    """Receives one call per failed sync pass."""

    def on_sync_failure(self, error: SyncError) -> None: ...


class LoggingNotifier:
    """Notifier that reports failures through the log."""

    def __init__(self) -> None:
        self.last_error: SyncError | None = None
        self.last_notice: SyncFailureNotice | None = None

    def on_sync_failure(self, error: SyncError) -> None:
        notice = describe_failure(error)
        self.last_error = error
        self.last_notice = notice
        if error.kind == SyncErrorKind.AUTH_REQUIRED:
            logger.error("%s: %s (%s)", notice.title, error, notice.action)
        else:
            logger.warning("%s: %s (%s)", notice.title, error, notice.action)
