"""Trailing-edge debouncing for frontend size reports."""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


@dataclass
class _PendingCall:
    args: Tuple[Any, ...]
    kwargs: dict[str, Any]


class ResizeDebouncer:
    """Coalesce bursts of calls and run the callback once with the latest one.

    Every call replaces the pending arguments; the callback runs
    ``wait_ms`` after the first call of a burst. A report arriving while the
    callback is running starts a new burst.

    Outside a running asyncio loop the callback runs on a timer thread, so
    it must do its own locking (``ScatterChart.resize`` does).

    Parameters
    ----------
    callback:
        Callable receiving the latest call's arguments.
    wait_ms:
        Delay in milliseconds between the first call of a burst and execution.
    """

    def __init__(self, callback: Callable[..., Any], *, wait_ms: int) -> None:
        if wait_ms <= 0:
            raise ValueError("wait_ms must be > 0")
        self._callback = callback
        self._wait_s = wait_ms / 1000.0
        self._pending: Optional[_PendingCall] = None
        self._lock = threading.Lock()
        self._timer: Optional[Any] = None
        self.calls = 0
        self.runs = 0

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            self.calls += 1
            self._pending = _PendingCall(args=args, kwargs=dict(kwargs))
            if self._timer is None:
                self._schedule_locked()

    def _schedule_locked(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            timer = threading.Timer(self._wait_s, self._on_tick)
            timer.daemon = True
            self._timer = timer
            timer.start()
            return

        self._timer = loop.call_later(self._wait_s, self._on_tick)

    def _take_locked(self) -> Optional[_PendingCall]:
        call = self._pending
        self._pending = None
        return call

    def _on_tick(self) -> None:
        with self._lock:
            self._timer = None
            call = self._take_locked()
        self._run(call)

    def _run(self, call: Optional[_PendingCall]) -> None:
        if call is None:
            return
        self.runs += 1
        try:
            self._callback(*call.args, **call.kwargs)
        except Exception:
            logger.exception("ResizeDebouncer callback failed")

    def flush(self) -> None:
        """Run the pending call now, if any."""
        with self._lock:
            self._cancel_timer_locked()
            call = self._take_locked()
        self._run(call)

    def cancel(self) -> None:
        """Drop the pending call without running it."""
        with self._lock:
            self._cancel_timer_locked()
            self._pending = None

    def _cancel_timer_locked(self) -> None:
        timer = self._timer
        self._timer = None
        if timer is not None:
            timer.cancel()


__all__ = ["ResizeDebouncer"]
