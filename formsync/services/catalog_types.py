"""Value types shared by the catalog differ, fetcher and reconciler."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class FormRecord:
    """A blank form stored on the device."""

    form_id: str
    content_hash: str
    version: str | None = None
    title: str = ""
    last_detected_version_hash: str | None = None


@dataclass(frozen=True)
class MediaFileRecord:
    """A media file stored on the device for one form version."""

    name: str
    content_hash: str


@dataclass(frozen=True)
class RemoteFormDescriptor:
    """A form as advertised by the server's form list."""

    form_id: str
    content_hash: str
    version: str | None = None
    title: str = ""
    download_url: str = ""
    manifest_url: str | None = None


@dataclass(frozen=True)
class MediaFileEntry:
    """One media file listed in a form manifest."""

    file_name: str
    content_hash: str
    download_url: str


@dataclass(frozen=True)
class ManifestSnapshot:
    """A form manifest: its own hash plus the media files it lists, in order."""

    manifest_hash: str
    media_files: tuple[MediaFileEntry, ...] = ()


@dataclass(frozen=True)
class ServerFormDetails:
    """A remote form annotated with how it relates to the device catalog."""

    descriptor: RemoteFormDescriptor
    is_not_on_device: bool
    is_updated: bool
    manifest: ManifestSnapshot | None = None

    @property
    def form_id(self) -> str:
        return self.descriptor.form_id

    @property
    def media_files(self) -> tuple[MediaFileEntry, ...]:
        if self.manifest is None:
            return ()
        return self.manifest.media_files

    @property
    def needs_download(self) -> bool:
        return self.is_not_on_device or self.is_updated


@dataclass
class SyncPlan:
    """What a match-exactly pass would change on the device."""

    to_download: list[ServerFormDetails] = field(default_factory=list)
    to_delete: list[FormRecord] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.to_download and not self.to_delete
