"""CLI for match-exactly blank form sync."""

from __future__ import annotations

import argparse
import getpass
import logging
import sys
import time
from typing import TYPE_CHECKING, Any

from formsync.config import FormUpdateMode, Settings
from formsync.exceptions import SyncError, SyncErrorKind
from formsync.main import configure_logging, create_app
from formsync.services.notification_service import LoggingNotifier

if TYPE_CHECKING:
    from concurrent.futures import Future

    from formsync.main import FormSyncApp

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_AUTH = 2


def _exit_code(error: SyncError) -> int:
    return EXIT_AUTH if error.kind == SyncErrorKind.AUTH_REQUIRED else EXIT_FAILED


def _report_error(error: SyncError) -> int:
    print(f"Error: {error}")
    if error.kind == SyncErrorKind.AUTH_REQUIRED:
        print("The server requires authentication. Re-run with --username to enter credentials.")
    return _exit_code(error)


def build_settings(args: argparse.Namespace) -> Settings:
    """Merge command line overrides into settings loaded from the environment."""
    overrides: dict[str, Any] = {}
    if args.server:
        overrides["server_url"] = args.server
    if args.allow_insecure_http:
        overrides["allow_insecure_http"] = True
    if args.debug:
        overrides["debug"] = True
    if args.username:
        overrides["username"] = args.username
        password = args.password
        if password is None:
            password = getpass.getpass("Password: ")
        overrides["password"] = password
    if args.command == "watch":
        overrides["form_update_mode"] = FormUpdateMode.MATCH_EXACTLY
    return Settings(_env_file=args.env_file, **overrides)


def cmd_status(app: FormSyncApp) -> int:
    try:
        plan = app.reconciler.plan()
    except SyncError as exc:
        return _report_error(exc)

    print("Sync Status:")
    print(f"  To download: {len(plan.to_download)}")
    print(f"  To delete:   {len(plan.to_delete)}")
    print(f"  Unchanged:   {len(plan.unchanged)}")
    for details in plan.to_download:
        reason = "new" if details.is_not_on_device else "updated"
        print(f"    < {details.form_id} ({reason})")
    for form in plan.to_delete:
        print(f"    - {form.form_id} (delete)")
    return EXIT_OK


def cmd_sync(app: FormSyncApp, notifier: LoggingNotifier) -> int:
    outcome = app.trigger.run_once()
    if outcome is None:
        print("A sync is already in progress.")
        return EXIT_FAILED
    if not outcome:
        if notifier.last_error is None:
            return EXIT_FAILED
        return _report_error(notifier.last_error)
    print("Sync complete.")
    return EXIT_OK


def log_pass_failure(future: Future[Any]) -> None:
    """Log an exception that escaped a background sync pass."""
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        logger.error("Background form sync crashed: %s", exc, exc_info=exc)


def cmd_watch(app: FormSyncApp) -> int:
    interval = app.settings.sync_interval_minutes * 60
    app.trigger.apply_form_update_mode(FormUpdateMode.MATCH_EXACTLY, interval)
    future = app.trigger.sync_with_server()
    if future is not None:
        future.add_done_callback(log_pass_failure)
    print(f"Syncing every {app.settings.sync_interval_minutes} minute(s). Press Ctrl+C to stop.")
    try:
        while True:
            time.sleep(0.5)
    except KeyboardInterrupt:
        print("Stopping...")
    finally:
        app.trigger.apply_form_update_mode(FormUpdateMode.MANUAL, interval)
    return EXIT_OK


def cmd_forms(app: FormSyncApp) -> int:
    forms = app.store.get_all()
    if not forms:
        print("No forms on device.")
        return EXIT_OK
    for form in forms:
        version = f" v{form.version}" if form.version else ""
        print(f"  {form.form_id}{version}  {form.title}")
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="formsync",
        description="Keep the device's blank forms matching the server exactly",
    )
    parser.add_argument("--env-file", default=".env", help="Settings file (default: .env)")
    parser.add_argument("--server", "-s", help="Server URL")
    parser.add_argument(
        "--allow-insecure-http",
        action="store_true",
        help="Allow http:// server URLs for non-localhost hosts",
    )
    parser.add_argument("--username", "-u", help="Username for authentication")
    parser.add_argument("--password", help="Password (prompted if omitted)")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("status", help="Show what a sync would change")
    subparsers.add_parser("sync", help="Run one sync pass")
    subparsers.add_parser("watch", help="Sync periodically until interrupted")
    subparsers.add_parser("forms", help="List forms on the device")

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return EXIT_FAILED

    try:
        settings = build_settings(args)
        if args.command != "forms":
            settings.validate_runtime_settings()
    except ValueError as exc:
        print(f"Error: {exc}")
        return EXIT_FAILED

    configure_logging(settings.debug)
    notifier = LoggingNotifier()
    with create_app(settings, notifier=notifier) as app:
        if args.command == "status":
            return cmd_status(app)
        if args.command == "sync":
            return cmd_sync(app, notifier)
        if args.command == "watch":
            return cmd_watch(app)
        return cmd_forms(app)


if __name__ == "__main__":
    sys.exit(main())
