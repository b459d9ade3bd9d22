"""Wires the sync engine to its bundled collaborators."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING

from formsync.config import Settings
from formsync.database import create_engine
from formsync.openrosa.http_api import HttpFormListApi
from formsync.openrosa.json_codec import JsonFormListParser
from formsync.services.catalog_service import CatalogFetcher
from formsync.services.notification_service import LoggingNotifier
from formsync.services.scheduler_service import ThreadScheduler
from formsync.services.sync_service import CatalogReconciler
from formsync.services.sync_status_service import SyncGate
from formsync.services.trigger_service import FormSyncTrigger
from formsync.storage.form_downloader import FormDownloader
from formsync.storage.sql_form_store import SqlFormStore

if TYPE_CHECKING:
    import httpx
    from sqlalchemy import Engine

    from formsync.services.notification_service import Notifier

logger = logging.getLogger(__name__)


def configure_logging(debug: bool) -> None:
    """Configure application logging."""
    level = logging.DEBUG if debug else logging.INFO
    fmt = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
    logging.basicConfig(
        level=level,
        format=fmt,
        stream=sys.stdout,
        force=True,
    )
    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.INFO if debug else logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if debug else logging.WARNING)


@dataclass
class FormSyncApp:
    """The assembled sync engine and the resources it owns."""

    settings: Settings
    engine: Engine
    api: HttpFormListApi
    store: SqlFormStore
    reconciler: CatalogReconciler
    gate: SyncGate
    scheduler: ThreadScheduler
    trigger: FormSyncTrigger

    def close(self) -> None:
        self.scheduler.shutdown()
        self.api.close()
        self.engine.dispose()

    def __enter__(self) -> FormSyncApp:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def create_app(
    settings: Settings | None = None,
    *,
    notifier: Notifier | None = None,
    transport: httpx.BaseTransport | None = None,
) -> FormSyncApp:
    """Build the sync engine from settings."""
    if settings is None:
        settings = Settings()

    engine, session_factory = create_engine(settings)
    api = HttpFormListApi.from_settings(settings, JsonFormListParser(), transport=transport)
    downloader = FormDownloader(api, settings.forms_dir)
    store = SqlFormStore(session_factory, downloader)
    reconciler = CatalogReconciler(CatalogFetcher(api, store), store)
    gate = SyncGate()
    scheduler = ThreadScheduler(max_workers=settings.sync_workers)
    trigger = FormSyncTrigger(
        gate,
        reconciler,
        scheduler,
        notifier or LoggingNotifier(),
        form_update_mode=settings.form_update_mode,
    )
    logger.debug(
        "Form sync configured for %s (mode=%s)", settings.server_url, settings.form_update_mode
    )
    return FormSyncApp(
        settings=settings,
        engine=engine,
        api=api,
        store=store,
        reconciler=reconciler,
        gate=gate,
        scheduler=scheduler,
        trigger=trigger,
    )
