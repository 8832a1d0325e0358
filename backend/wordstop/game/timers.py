from __future__ import annotations

import threading
from typing import Any, Callable, Protocol

from flask_socketio import SocketIO


class Timer:
    """Handle to a scheduled callback.

    Create it up front and pass it as `timer=` when the callback needs to
    know its own handle.
    """

    __slots__ = ("_cancelled",)

    def __init__(self) -> None:
        # Eventlet's monkey patching turns this into a green event.
        self._cancelled = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()

    def wait(self, timeout: float) -> bool:
        """Sleep up to `timeout` seconds; True if cancelled meanwhile."""
        return self._cancelled.wait(timeout)


class Scheduler(Protocol):
    def call_later(
        self, delay: float, callback: Callable[..., Any], *args: Any, timer: Timer | None = None
    ) -> Timer: ...

    def call_every(
        self, interval: float, callback: Callable[..., Any], *args: Any, timer: Timer | None = None
    ) -> Timer: ...


class SocketIOScheduler:
    """Runs timers as Socket.IO background tasks.

    Cancelling a timer wakes its task, which then exits without calling
    back. A callback that already woke up may still be waiting to get into
    its room, so callers re-check the handle once the room runs it.
    """

    def __init__(self, socketio: SocketIO) -> None:
        self._socketio = socketio

    def call_later(
        self, delay: float, callback: Callable[..., Any], *args: Any, timer: Timer | None = None
    ) -> Timer:
        timer = timer or Timer()

        def _runner() -> None:
            if not timer.wait(delay):
                callback(*args)

        self._socketio.start_background_task(_runner)
        return timer

    def call_every(
        self, interval: float, callback: Callable[..., Any], *args: Any, timer: Timer | None = None
    ) -> Timer:
        timer = timer or Timer()

        def _runner() -> None:
            while not timer.wait(interval):
                callback(*args)

        self._socketio.start_background_task(_runner)
        return timer
