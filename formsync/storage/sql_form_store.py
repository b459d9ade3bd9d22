"""Form store backed by SQLAlchemy metadata and files in the forms directory."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import select

from formsync.exceptions import DownloadError
from formsync.models.form import Form
from formsync.services.catalog_types import FormRecord, MediaFileRecord
from formsync.services.hash_service import composite_hash, hash_file

if TYPE_CHECKING:
    from sqlalchemy.orm import Session, sessionmaker

    from formsync.services.catalog_types import ServerFormDetails
    from formsync.storage.form_downloader import FormDownloader

logger = logging.getLogger(__name__)


def _to_record(form: Form) -> FormRecord:
    return FormRecord(
        form_id=form.form_id,
        content_hash=form.content_hash,
        version=form.version,
        title=form.title,
        last_detected_version_hash=form.last_detected_version_hash,
    )


class SqlFormStore:
    """Device form catalog: one ``forms`` row per form id plus files on disk."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        downloader: FormDownloader,
    ) -> None:
        self.session_factory = session_factory
        self.downloader = downloader

    def _get(self, session: Session, form_id: str) -> Form | None:
        return session.scalar(select(Form).where(Form.form_id == form_id))

    def get_all(self) -> list[FormRecord]:
        with self.session_factory() as session:
            forms = session.scalars(select(Form).order_by(Form.form_id)).all()
            return [_to_record(form) for form in forms]

    def get(self, form_id: str) -> FormRecord | None:
        with self.session_factory() as session:
            form = self._get(session, form_id)
            return _to_record(form) if form is not None else None

    def delete(self, form_id: str) -> None:
        with self.session_factory() as session:
            form = self._get(session, form_id)
            if form is None:
                return
            session.delete(form)
            session.commit()
        self.downloader.remove(form_id)

    def download_form(self, details: ServerFormDetails) -> None:
        """Download a form and record it, replacing any previous version.

        On failure the form's cached version hash is cleared so the next
        catalog diff compares it in full again.
        """
        try:
            downloaded = self.downloader.download(details)
        except DownloadError:
            self._clear_cached_version_hash(details.form_id)
            raise

        descriptor = details.descriptor
        manifest_hash = details.manifest.manifest_hash if details.manifest is not None else None
        with self.session_factory() as session:
            form = self._get(session, descriptor.form_id)
            if form is None:
                form = Form(form_id=descriptor.form_id)
                session.add(form)
            form.version = descriptor.version
            form.title = descriptor.title
            form.content_hash = downloaded.content_hash
            form.form_path = str(downloaded.form_path)
            form.media_path = str(downloaded.media_path) if downloaded.media_path else None
            form.last_detected_version_hash = composite_hash(
                descriptor.content_hash, manifest_hash
            )
            form.downloaded_at = datetime.now(UTC).isoformat()
            session.commit()

    def get_media_files(self, form_id: str, version: str | None) -> list[MediaFileRecord]:
        """Hash the media files on disk for a form version."""
        with self.session_factory() as session:
            form = self._get(session, form_id)
            if form is None or form.version != version or form.media_path is None:
                return []
            media_dir = Path(form.media_path)

        if not media_dir.is_dir():
            return []
        return [
            MediaFileRecord(
                name=path.relative_to(media_dir).as_posix(),
                content_hash=hash_file(path),
            )
            for path in sorted(media_dir.rglob("*"))
            if path.is_file()
        ]

    def get_cached_version_hash(self, form_id: str) -> str | None:
        with self.session_factory() as session:
            form = self._get(session, form_id)
            return form.last_detected_version_hash if form is not None else None

    def set_cached_version_hash(self, form_id: str, version_hash: str) -> None:
        with self.session_factory() as session:
            form = self._get(session, form_id)
            if form is None:
                return
            form.last_detected_version_hash = version_hash
            session.commit()

    def _clear_cached_version_hash(self, form_id: str) -> None:
        with self.session_factory() as session:
            form = self._get(session, form_id)
            if form is None or form.last_detected_version_hash is None:
                return
            form.last_detected_version_hash = None
            session.commit()
        logger.debug("Cleared cached version hash for %s after failed download", form_id)
