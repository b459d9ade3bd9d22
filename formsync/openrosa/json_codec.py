"""JSON form list and manifest payloads.

Form list::

    {"forms": [{"form_id": "...", "version": "...", "hash": "md5:...",
                "name": "...", "download_url": "...", "manifest_url": null}]}

Manifest::

    {"media_files": [{"filename": "...", "hash": "md5:...", "download_url": "..."}]}

The manifest hash is the MD5 of the payload bytes as received.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, ValidationError

from formsync.services.catalog_types import (
    ManifestSnapshot,
    MediaFileEntry,
    RemoteFormDescriptor,
)
from formsync.services.hash_service import md5_hex


class FormListItem(BaseModel):
    """One entry of the server form list."""

    form_id: str = Field(min_length=1)
    version: str | None = None
    hash: str = Field(min_length=1)
    name: str = ""
    download_url: str = Field(min_length=1)
    manifest_url: str | None = None


class FormListPayload(BaseModel):
    forms: list[FormListItem] = Field(default_factory=list)


class ManifestItem(BaseModel):
    """One media file entry of a form manifest."""

    filename: str = Field(min_length=1)
    hash: str = Field(min_length=1)
    download_url: str = Field(min_length=1)


class ManifestPayload(BaseModel):
    media_files: list[ManifestItem] = Field(default_factory=list)


class JsonFormListParser:
    """Decodes JSON form list and manifest payloads.

    Raises ValueError on malformed payloads.
    """

    def parse_form_list(self, payload: bytes) -> list[RemoteFormDescriptor]:
        try:
            parsed = FormListPayload.model_validate_json(payload)
        except ValidationError as exc:
            raise ValueError(f"Malformed form list: {exc.error_count()} error(s)") from exc
        return [
            RemoteFormDescriptor(
                form_id=item.form_id,
                content_hash=item.hash,
                version=item.version,
                title=item.name,
                download_url=item.download_url,
                manifest_url=item.manifest_url or None,
            )
            for item in parsed.forms
        ]

    def parse_manifest(self, payload: bytes) -> ManifestSnapshot:
        try:
            parsed = ManifestPayload.model_validate_json(payload)
        except ValidationError as exc:
            raise ValueError(f"Malformed manifest: {exc.error_count()} error(s)") from exc
        return ManifestSnapshot(
            manifest_hash=md5_hex(payload),
            media_files=tuple(
                MediaFileEntry(
                    file_name=item.filename,
                    content_hash=item.hash,
                    download_url=item.download_url,
                )
                for item in parsed.media_files
            ),
        )
