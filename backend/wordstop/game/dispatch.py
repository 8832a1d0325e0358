from __future__ import annotations

import functools
import logging
import threading
from collections import deque
from typing import Any, Callable, TypeVar

from .errors import RoomError


_logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class Dispatcher:
    """Runs the events of one room one at a time.

    An event submitted with `call` from another thread or greenlet waits for
    the running event and then runs. Submitted from inside a running event
    (for example a connection closing while a removal is being broadcast),
    it is queued and runs right after the current event, before the room is
    released. `run` is the same except that inside an event it runs inline,
    which is what room operations calling each other want.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._owner: int | None = None
        self._pending: deque[tuple[Callable[..., Any], tuple[Any, ...]]] = deque()

    def in_event(self) -> bool:
        return self._owner == threading.get_ident()

    def call(self, fn: Callable[..., Any], *args: Any) -> Any:
        if self.in_event():
            self._pending.append((fn, args))
            return None
        return self._execute(fn, args)

    def run(self, fn: Callable[..., Any], *args: Any) -> Any:
        if self.in_event():
            return fn(*args)
        return self._execute(fn, args)

    def _execute(self, fn: Callable[..., Any], args: tuple[Any, ...]) -> Any:
        with self._lock:
            self._owner = threading.get_ident()
            try:
                return fn(*args)
            finally:
                try:
                    self._drain()
                finally:
                    self._owner = None

    def _drain(self) -> None:
        while self._pending:
            fn, args = self._pending.popleft()
            try:
                fn(*args)
            except RoomError as exc:
                _logger.warning("Queued room event %s rejected: %s", getattr(fn, "__name__", fn), exc)


def room_event(method: F) -> F:
    """Run a room method through the room's dispatcher."""

    @functools.wraps(method)
    def wrapper(self, *args: Any, **kwargs: Any) -> Any:
        return self._dispatcher.run(functools.partial(method, self, *args, **kwargs))

    return wrapper  # type: ignore[return-value]
