"""Tests for specview.debounce."""

from __future__ import annotations

import threading

import pytest

from specview.debounce import Debouncer


class _Recorder:
    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.event = threading.Event()

    def __call__(self, *args) -> None:
        self.calls.append(args)
        self.event.set()


class TestDebouncer:

    def test_only_last_call_runs(self) -> None:
        recorder = _Recorder()
        debouncer = Debouncer(0.05, recorder)
        for i in range(5):
            debouncer.call(i)
        assert recorder.event.wait(2.0)
        debouncer.cancel()
        assert recorder.calls == [(4,)]

    def test_pending_until_fired(self) -> None:
        recorder = _Recorder()
        debouncer = Debouncer(0.05, recorder)
        assert not debouncer.pending
        debouncer.call("x")
        assert debouncer.pending
        assert recorder.event.wait(2.0)
        assert not debouncer.pending

    def test_flush_runs_immediately(self) -> None:
        recorder = _Recorder()
        debouncer = Debouncer(60.0, recorder)
        debouncer.call("a")
        assert debouncer.flush() is True
        assert recorder.calls == [("a",)]
        assert not debouncer.pending
        assert debouncer.flush() is False

    def test_flush_passes_keyword_arguments(self) -> None:
        seen: dict = {}
        debouncer = Debouncer(60.0, lambda **kwargs: seen.update(kwargs))
        debouncer.call(text="t")
        debouncer.flush()
        assert seen == {"text": "t"}

    def test_cancel_drops_call(self) -> None:
        recorder = _Recorder()
        debouncer = Debouncer(0.05, recorder)
        debouncer.call("x")
        debouncer.cancel()
        assert not recorder.event.wait(0.2)
        assert recorder.calls == []

    def test_negative_delay_rejected(self) -> None:
        with pytest.raises(ValueError):
            Debouncer(-1, lambda: None)
