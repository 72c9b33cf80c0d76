"""Trailing-edge debouncing for re-parse triggers."""

from __future__ import annotations

import threading
from typing import Any, Callable, Optional


class Debouncer:
    """Run *callback* once the calls to :meth:`call` have been quiet for *delay* seconds.

    Each :meth:`call` cancels the pending one, so only the arguments of the
    last call inside the window are used. The callback runs on a
    :class:`threading.Timer` thread, or on the caller's thread for
    :meth:`flush`.

    Args:
        delay: Quiescence window in seconds. ``0`` still defers to a timer.
        callback: Function invoked with the arguments of the last call.
    """

    def __init__(self, delay: float, callback: Callable[..., Any]) -> None:
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got {delay}")
        self.delay = delay
        self.callback = callback
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._args: tuple[Any, ...] = ()
        self._kwargs: dict[str, Any] = {}

    @property
    def pending(self) -> bool:
        """True while a call is waiting for the window to pass."""
        with self._lock:
            return self._timer is not None

    def call(self, *args: Any, **kwargs: Any) -> None:
        """Schedule the callback, replacing any pending call."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._args, self._kwargs = args, kwargs
            timer = threading.Timer(self.delay, self._fire, args=(None,))
            timer.args = (timer,)
            timer.daemon = True
            self._timer = timer
            timer.start()

    def cancel(self) -> None:
        """Drop the pending call, if any."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def flush(self) -> bool:
        """Run the pending call now on the current thread.

        Returns:
            True if a call was pending and has run.
        """
        with self._lock:
            if self._timer is None:
                return False
            self._timer.cancel()
            self._timer = None
            args, kwargs = self._args, self._kwargs
        self.callback(*args, **kwargs)
        return True

    def _fire(self, timer: threading.Timer) -> None:
        with self._lock:
            # A newer call or a flush may have replaced this timer.
            if self._timer is not timer:
                return
            self._timer = None
            args, kwargs = self._args, self._kwargs
        self.callback(*args, **kwargs)
