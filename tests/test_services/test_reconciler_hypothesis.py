"""Property-based tests for match-exactly reconciliation."""

from __future__ import annotations

import string

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from formsync.services.catalog_service import CatalogFetcher
from formsync.services.catalog_types import FormRecord, ManifestSnapshot, MediaFileEntry
from formsync.services.sync_service import CatalogReconciler
from tests.test_services._catalog_fakes import FakeFormListApi, InMemFormStore, descriptor

PROPERTY_SETTINGS = settings(
    max_examples=200,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)

_FORM_ID = st.text(alphabet=string.ascii_lowercase + string.digits, min_size=1, max_size=6)
_HASH = st.text(alphabet="0123456789abcdef", min_size=1, max_size=8)
_MEDIA = st.dictionaries(
    keys=st.sampled_from(["a.png", "b.csv", "c.mp3"]),
    values=_HASH,
    max_size=3,
)
_REMOTE = st.dictionaries(keys=_FORM_ID, values=st.tuples(_HASH, st.none() | _MEDIA), max_size=8)
_LOCAL = st.dictionaries(keys=_FORM_ID, values=_HASH, max_size=8)


def _build(
    remote: dict[str, tuple[str, dict[str, str] | None]],
    local: dict[str, str],
) -> tuple[CatalogReconciler, InMemFormStore]:
    forms = []
    manifests: dict[str, ManifestSnapshot] = {}
    for form_id, (content_hash, media) in remote.items():
        manifest_url = None
        if media is not None:
            manifest_url = f"http://example.com/{form_id}/manifest"
            manifests[manifest_url] = ManifestSnapshot(
                manifest_hash="|".join(f"{name}={h}" for name, h in sorted(media.items())),
                media_files=tuple(
                    MediaFileEntry(name, f"md5:{h}", f"http://example.com/{form_id}/{name}")
                    for name, h in sorted(media.items())
                ),
            )
        forms.append(descriptor(form_id, f"md5:{content_hash}", manifest_url=manifest_url))

    store = InMemFormStore(
        [
            FormRecord(form_id=form_id, content_hash=content_hash, version="server")
            for form_id, content_hash in local.items()
        ]
    )
    api = FakeFormListApi(forms, manifests)
    return CatalogReconciler(CatalogFetcher(api, store), store), store


class TestReconcilerProperties:
    @PROPERTY_SETTINGS
    @given(remote=_REMOTE, local=_LOCAL)
    def test_device_catalog_matches_server_after_pass(
        self,
        remote: dict[str, tuple[str, dict[str, str] | None]],
        local: dict[str, str],
    ) -> None:
        reconciler, store = _build(remote, local)
        reconciler.synchronize()
        assert set(store.forms) == set(remote)
        for form_id, (content_hash, _media) in remote.items():
            assert store.forms[form_id].content_hash == content_hash

    @PROPERTY_SETTINGS
    @given(remote=_REMOTE, local=_LOCAL)
    def test_second_pass_is_a_no_op(
        self,
        remote: dict[str, tuple[str, dict[str, str] | None]],
        local: dict[str, str],
    ) -> None:
        reconciler, store = _build(remote, local)
        reconciler.synchronize()
        calls_after_first = list(store.calls)
        media_calls_after_first = store.media_calls

        plan = reconciler.synchronize()
        assert plan.is_empty
        assert store.calls == calls_after_first
        assert store.media_calls == media_calls_after_first

    @PROPERTY_SETTINGS
    @given(remote=_REMOTE, local=_LOCAL)
    def test_only_local_forms_missing_from_server_are_deleted(
        self,
        remote: dict[str, tuple[str, dict[str, str] | None]],
        local: dict[str, str],
    ) -> None:
        reconciler, store = _build(remote, local)
        reconciler.synchronize()
        assert set(store.deleted) == set(local) - set(remote)
