"""MD5 helpers for comparing device content against server-reported hashes."""

from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

MD5_PREFIX = "md5:"


def md5_hex(content: str | bytes) -> str:
    """Compute the MD5 hex digest of content."""
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.md5(content, usedforsecurity=False).hexdigest()


def hash_file(path: Path) -> str:
    """Compute MD5 hash of a file."""
    md5 = hashlib.md5(usedforsecurity=False)
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            md5.update(chunk)
    return md5.hexdigest()


def strip_hash_prefix(value: str) -> str:
    """Drop the ``md5:`` prefix servers put in front of reported hashes."""
    if value.startswith(MD5_PREFIX):
        return value[len(MD5_PREFIX) :]
    return value


def composite_hash(content_hash: str, manifest_hash: str | None) -> str:
    """Combine a form's content hash and its manifest hash into one cache key.

    A form without a manifest contributes an empty manifest hash.
    """
    return md5_hex(strip_hash_prefix(content_hash)) + (manifest_hash or "")
