"""Downloads form definitions and their media files into the forms directory."""

from __future__ import annotations

import logging
import re
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from formsync.exceptions import DownloadError, SyncError
from formsync.services.hash_service import md5_hex, strip_hash_prefix

if TYPE_CHECKING:
    from formsync.services.catalog_types import ServerFormDetails

logger = logging.getLogger(__name__)

MEDIA_SUFFIX = "-media"
_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9_.-]")


class ContentSource(Protocol):
    """Anything that can fetch the bytes behind a URL."""

    def download(self, url: str) -> bytes: ...


@dataclass
class DownloadedForm:
    """Where a downloaded form landed on disk."""

    form_path: Path
    media_path: Path | None
    content_hash: str


def form_basename(form_id: str) -> str:
    """Map a form id to a filesystem-safe base name."""
    return _UNSAFE_CHARS_RE.sub("_", form_id) or "_"


def _is_safe_local_path(base_dir: Path, file_path: str) -> Path | None:
    """Resolve a server-provided path within base_dir, returning None on traversal."""
    local_path = (base_dir / file_path).resolve()
    if not local_path.is_relative_to(base_dir.resolve()):
        return None
    return local_path


class FormDownloader:
    """Fetches a form and its media, then moves them into place.

    Media files are staged in a temporary directory and only replace the
    existing media once every file has arrived, so a failed download leaves
    the previous copy of the form untouched.
    """

    def __init__(self, source: ContentSource, forms_dir: Path) -> None:
        self.source = source
        self.forms_dir = forms_dir

    def form_path(self, form_id: str) -> Path:
        return self.forms_dir / f"{form_basename(form_id)}.xml"

    def media_path(self, form_id: str) -> Path:
        return self.forms_dir / f"{form_basename(form_id)}{MEDIA_SUFFIX}"

    def download(self, details: ServerFormDetails) -> DownloadedForm:
        """Download ``details`` into the forms directory.

        Raises DownloadError on any network or filesystem failure.
        """
        form_id = details.form_id
        self.forms_dir.mkdir(parents=True, exist_ok=True)
        try:
            definition = self.source.download(details.descriptor.download_url)
            media_path = self._download_media(details)
            form_path = self.form_path(form_id)
            form_path.write_bytes(definition)
        except SyncError as exc:
            raise DownloadError(form_id, str(exc)) from exc
        except OSError as exc:
            raise DownloadError(form_id, f"could not write files: {exc}") from exc

        content_hash = md5_hex(definition)
        reported = strip_hash_prefix(details.descriptor.content_hash)
        if reported != content_hash:
            logger.warning(
                "Form %s hash %s does not match server-reported %s",
                form_id,
                content_hash,
                reported,
            )
        return DownloadedForm(form_path=form_path, media_path=media_path, content_hash=content_hash)

    def _download_media(self, details: ServerFormDetails) -> Path | None:
        media_path = self.media_path(details.form_id)
        if details.manifest is None:
            if media_path.exists():
                shutil.rmtree(media_path)
            return None

        staging = Path(tempfile.mkdtemp(prefix=".staging-", dir=self.forms_dir))
        try:
            for media in details.media_files:
                target = _is_safe_local_path(staging, media.file_name)
                if target is None:
                    raise DownloadError(
                        details.form_id, f"unsafe media file name: {media.file_name}"
                    )
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(self.source.download(media.download_url))

            if media_path.exists():
                shutil.rmtree(media_path)
            staging.replace(media_path)
        finally:
            if staging.exists():
                shutil.rmtree(staging, ignore_errors=True)
        return media_path

    def remove(self, form_id: str) -> None:
        """Delete a form's definition file and media directory."""
        self.form_path(form_id).unlink(missing_ok=True)
        media_path = self.media_path(form_id)
        if media_path.exists():
            shutil.rmtree(media_path)
