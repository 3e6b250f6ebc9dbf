from __future__ import annotations

import logging
from unittest.mock import patch

import pytest

from scatterview.debouncing import ResizeDebouncer


class _FakeThreadTimer:
    created: list["_FakeThreadTimer"] = []

    def __init__(self, delay: float, callback):
        self.delay = delay
        self.callback = callback
        self.daemon = False
        self.started = False
        self.cancelled = False
        _FakeThreadTimer.created.append(self)

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True


class _FakeLoopHandle:
    def __init__(self, callback):
        self._callback = callback
        self.cancelled = False

    def fire(self) -> None:
        self._callback()

    def cancel(self) -> None:
        self.cancelled = True


class _FakeAsyncLoop:
    def __init__(self) -> None:
        self.handles: list[_FakeLoopHandle] = []

    def call_later(self, _delay: float, callback):
        handle = _FakeLoopHandle(callback)
        self.handles.append(handle)
        return handle


def test_burst_is_coalesced_to_latest_call_threading() -> None:
    seen = []
    _FakeThreadTimer.created.clear()

    with patch("scatterview.debouncing.threading.Timer", _FakeThreadTimer):
        debouncer = ResizeDebouncer(lambda w, h: seen.append((w, h)), wait_ms=50)
        debouncer(800, 900)
        debouncer(640, 900)
        debouncer(400, 700)
        assert len(_FakeThreadTimer.created) == 1
        assert _FakeThreadTimer.created[0].delay == pytest.approx(0.05)
        assert _FakeThreadTimer.created[0].daemon

        _FakeThreadTimer.created[0].callback()

    assert seen == [(400, 700)]
    assert debouncer.calls == 3
    assert debouncer.runs == 1
    assert not debouncer.pending


def test_debouncer_logs_and_keeps_processing_after_callback_error_asyncio(caplog) -> None:
    state = {"n": 0}

    def _callback(_payload):
        state["n"] += 1
        if state["n"] == 1:
            raise RuntimeError("boom")

    fake_loop = _FakeAsyncLoop()

    with patch("scatterview.debouncing.asyncio.get_running_loop", return_value=fake_loop):
        debouncer = ResizeDebouncer(_callback, wait_ms=1)
        with caplog.at_level(logging.ERROR, logger="scatterview.debouncing"):
            debouncer("first")
            fake_loop.handles[0].fire()
            debouncer("second")
            assert len(fake_loop.handles) == 2
            fake_loop.handles[1].fire()

    assert state["n"] == 2
    assert "ResizeDebouncer callback failed" in caplog.text


def test_flush_runs_pending_call_and_cancels_timer() -> None:
    seen = []
    fake_loop = _FakeAsyncLoop()

    with patch("scatterview.debouncing.asyncio.get_running_loop", return_value=fake_loop):
        debouncer = ResizeDebouncer(seen.append, wait_ms=10)
        debouncer("a")
        debouncer.flush()
        debouncer.flush()

    assert seen == ["a"]
    assert fake_loop.handles[0].cancelled


def test_cancel_drops_pending_call() -> None:
    seen = []
    fake_loop = _FakeAsyncLoop()

    with patch("scatterview.debouncing.asyncio.get_running_loop", return_value=fake_loop):
        debouncer = ResizeDebouncer(seen.append, wait_ms=10)
        debouncer("a")
        debouncer.cancel()
        fake_loop.handles[0].fire()

    assert seen == []
    assert not debouncer.pending


def test_wait_must_be_positive() -> None:
    with pytest.raises(ValueError):
        ResizeDebouncer(print, wait_ms=0)
