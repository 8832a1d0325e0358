from __future__ import annotations

from typing import Any, Callable

from flask_socketio import SocketIO


class SocketConnection:
    """A player's Socket.IO session.

    Outbound messages go out as `message` events to the session. Closing
    emits a `close` event with the code and reason, then disconnects it.
    """

    def __init__(self, socketio: SocketIO, sid: str, namespace: str = "/") -> None:
        self._socketio = socketio
        self.sid = sid
        self.namespace = namespace
        self.closed = False
        self._on_message: Callable[[Any], None] | None = None
        self._on_close: Callable[[], None] | None = None

    def bind(self, on_message: Callable[[Any], None], on_close: Callable[[], None]) -> None:
        self._on_message = on_message
        self._on_close = on_close

    def send(self, message: dict) -> None:
        if self.closed:
            return
        self._socketio.emit("message", message, to=self.sid, namespace=self.namespace)

    def close(self, code: int, reason: str) -> None:
        if self.closed:
            return
        self.closed = True
        self._socketio.emit(
            "close",
            {"code": int(code), "reason": reason},
            to=self.sid,
            namespace=self.namespace,
        )
        self._socketio.server.disconnect(self.sid, namespace=self.namespace)

    def deliver(self, data: Any) -> None:
        if self._on_message is not None:
            self._on_message(data)

    def lost(self) -> None:
        self.closed = True
        if self._on_close is not None:
            self._on_close()
