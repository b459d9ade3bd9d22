"""Tests for sync triggers, failure reporting and the match-exactly schedule."""

from __future__ import annotations

from concurrent.futures import Future
from typing import TYPE_CHECKING, Any

import pytest

from formsync.config import FormUpdateMode
from formsync.exceptions import AuthError, FetchError, TransportError
from formsync.services.sync_status_service import SyncGate
from formsync.services.trigger_service import MATCH_EXACTLY_TAG, FormSyncTrigger

if TYPE_CHECKING:
    from collections.abc import Callable

    from formsync.exceptions import SyncError


class InlineScheduler:
    """Runs immediate work on the calling thread and records recurring tasks."""

    def __init__(self) -> None:
        self.repeating: dict[str, tuple[float, Callable[[], Any]]] = {}
        self.cancelled: list[str] = []

    def immediate(self, task: Callable[[], Any]) -> Future[Any]:
        future: Future[Any] = Future()
        try:
            future.set_result(task())
        except Exception as exc:
            future.set_exception(exc)
        return future

    def schedule_repeating(
        self, tag: str, interval_seconds: float, task: Callable[[], Any]
    ) -> None:
        self.repeating[tag] = (interval_seconds, task)

    def cancel(self, tag: str) -> None:
        self.cancelled.append(tag)
        self.repeating.pop(tag, None)

    def is_scheduled(self, tag: str) -> bool:
        return tag in self.repeating


class RecordingNotifier:
    def __init__(self, gate: SyncGate | None = None) -> None:
        self.errors: list[SyncError] = []
        self.gate = gate
        self.syncing_when_notified: list[bool] = []

    def on_sync_failure(self, error: SyncError) -> None:
        self.errors.append(error)
        if self.gate is not None:
            self.syncing_when_notified.append(self.gate.is_syncing)


class StubReconciler:
    def __init__(self, error: BaseException | None = None) -> None:
        self.error = error
        self.calls = 0
        self.on_call: Callable[[], None] | None = None

    def synchronize(self) -> None:
        self.calls += 1
        if self.on_call is not None:
            self.on_call()
        if self.error is not None:
            raise self.error


def _trigger(
    reconciler: StubReconciler | None = None,
) -> tuple[FormSyncTrigger, SyncGate, InlineScheduler, RecordingNotifier]:
    gate = SyncGate()
    scheduler = InlineScheduler()
    notifier = RecordingNotifier(gate)
    trigger = FormSyncTrigger(gate, reconciler or StubReconciler(), scheduler, notifier)
    return trigger, gate, scheduler, notifier


class TestRunOnce:
    def test_successful_pass(self) -> None:
        trigger, gate, _scheduler, notifier = _trigger()
        assert trigger.run_once() is True
        assert not gate.is_syncing
        assert not gate.is_out_of_sync
        assert notifier.errors == []

    @pytest.mark.parametrize(
        "error",
        [AuthError("401"), TransportError("offline"), FetchError(failed_form_ids=("f",))],
    )
    def test_failed_pass_notifies_once_and_marks_out_of_sync(self, error: SyncError) -> None:
        trigger, gate, _scheduler, notifier = _trigger(StubReconciler(error))
        assert trigger.run_once() is False
        assert notifier.errors == [error]
        assert gate.is_out_of_sync
        assert not gate.is_syncing

    def test_gate_is_released_before_notifying(self) -> None:
        trigger, _gate, _scheduler, notifier = _trigger(StubReconciler(TransportError("x")))
        trigger.run_once()
        assert notifier.syncing_when_notified == [False]

    def test_unexpected_error_releases_gate_and_propagates(self) -> None:
        trigger, gate, _scheduler, notifier = _trigger(StubReconciler(RuntimeError("boom")))
        with pytest.raises(RuntimeError, match="boom"):
            trigger.run_once()
        assert not gate.is_syncing
        assert gate.is_out_of_sync
        assert notifier.errors == []

    def test_success_after_failure_clears_out_of_sync(self) -> None:
        reconciler = StubReconciler(TransportError("offline"))
        trigger, gate, _scheduler, _notifier = _trigger(reconciler)
        trigger.run_once()
        reconciler.error = None
        assert trigger.run_once() is True
        assert not gate.is_out_of_sync

    def test_request_during_running_pass_is_rejected(self) -> None:
        reconciler = StubReconciler()
        trigger, _gate, _scheduler, _notifier = _trigger(reconciler)
        nested: list[bool | None] = []
        reconciler.on_call = lambda: nested.append(trigger.run_once())

        assert trigger.run_once() is True
        assert nested == [None]
        assert reconciler.calls == 1


class TestSyncWithServer:
    def test_runs_pass_on_scheduler(self) -> None:
        trigger, _gate, _scheduler, _notifier = _trigger()
        future = trigger.sync_with_server()
        assert future is not None
        assert future.result() is True

    def test_rejected_while_gate_held(self) -> None:
        trigger, gate, _scheduler, _notifier = _trigger()
        gate.try_acquire()
        assert trigger.sync_with_server() is None


class TestFormUpdateMode:
    def test_syncing_available_only_in_match_exactly(self) -> None:
        trigger, _gate, _scheduler, _notifier = _trigger()
        assert not trigger.is_syncing_available()
        trigger.apply_form_update_mode(FormUpdateMode.MATCH_EXACTLY, 60)
        assert trigger.is_syncing_available()

    def test_match_exactly_schedules_recurring_pass(self) -> None:
        trigger, _gate, scheduler, _notifier = _trigger()
        trigger.apply_form_update_mode(FormUpdateMode.MATCH_EXACTLY, 900)
        interval, task = scheduler.repeating[MATCH_EXACTLY_TAG]
        assert interval == 900
        assert task() is True

    @pytest.mark.parametrize(
        "mode", [FormUpdateMode.MANUAL, FormUpdateMode.PREVIOUSLY_DOWNLOADED_ONLY]
    )
    def test_leaving_match_exactly_cancels_recurring_pass(self, mode: FormUpdateMode) -> None:
        trigger, _gate, scheduler, _notifier = _trigger()
        trigger.apply_form_update_mode(FormUpdateMode.MATCH_EXACTLY, 900)
        trigger.apply_form_update_mode(mode, 900)
        assert not scheduler.is_scheduled(MATCH_EXACTLY_TAG)
        assert scheduler.cancelled == [MATCH_EXACTLY_TAG]
