"""Tests for JSON form list and manifest decoding."""

from __future__ import annotations

import pytest

from formsync.openrosa.base import FormListParser
from formsync.openrosa.json_codec import JsonFormListParser


class TestJsonFormListParser:
    def test_satisfies_parser_protocol(self) -> None:
        assert isinstance(JsonFormListParser(), FormListParser)

    def test_parses_forms_in_order(self) -> None:
        payload = b"""{"forms": [
            {"form_id": "b", "hash": "md5:2", "download_url": "http://x/b"},
            {"form_id": "a", "version": "7", "hash": "md5:1", "name": "Alpha",
             "download_url": "http://x/a", "manifest_url": "http://x/a/manifest"}
        ]}"""
        forms = JsonFormListParser().parse_form_list(payload)
        assert [f.form_id for f in forms] == ["b", "a"]
        assert forms[0].version is None
        assert forms[0].manifest_url is None
        assert forms[1].title == "Alpha"
        assert forms[1].content_hash == "md5:1"

    def test_empty_manifest_url_means_no_manifest(self) -> None:
        payload = (
            b'{"forms": [{"form_id": "a", "hash": "h", "download_url": "u", "manifest_url": ""}]}'
        )
        assert JsonFormListParser().parse_form_list(payload)[0].manifest_url is None

    @pytest.mark.parametrize(
        "payload",
        [
            b"not json",
            b'{"forms": [{"form_id": "a"}]}',
            b'{"forms": [{"form_id": "", "hash": "h", "download_url": "u"}]}',
            b'{"forms": {}}',
        ],
    )
    def test_malformed_form_list(self, payload: bytes) -> None:
        with pytest.raises(ValueError, match="Malformed form list"):
            JsonFormListParser().parse_form_list(payload)

    def test_manifest(self) -> None:
        payload = b'{"media_files": [{"filename": "a.png", "hash": "md5:1", "download_url": "u"}]}'
        manifest = JsonFormListParser().parse_manifest(payload)
        assert manifest.media_files[0].file_name == "a.png"
        assert manifest.media_files[0].content_hash == "md5:1"

    def test_manifest_hash_changes_with_payload(self) -> None:
        parser = JsonFormListParser()
        first = parser.parse_manifest(b'{"media_files": []}')
        second = parser.parse_manifest(b'{"media_files": [] }')
        assert first.manifest_hash != second.manifest_hash

    def test_malformed_manifest(self) -> None:
        with pytest.raises(ValueError, match="Malformed manifest"):
            JsonFormListParser().parse_manifest(b'{"media_files": [{"filename": "a"}]}')
