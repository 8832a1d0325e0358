from __future__ import annotations

import logging
from typing import Any

from flask import request
from flask_socketio import SocketIO
from pydantic import ValidationError

from ..game.errors import DuplicateNameError, RoomClosedError
from ..game.models import CloseCode
from ..game.registry import RoomRegistry
from ..messages import JoinQuery
from .connection import SocketConnection


_logger = logging.getLogger(__name__)


def _refuse(code: CloseCode, reason: str) -> ConnectionRefusedError:
    _logger.info("Refused connection %s: %s", request.sid, reason)
    return ConnectionRefusedError({"code": int(code), "reason": reason})


def _join_params(auth: Any) -> dict[str, Any]:
    params: dict[str, Any] = dict(request.args.items())
    if isinstance(auth, dict):
        params.update(auth)
    return params


def register_socketio_handlers(socketio: SocketIO, rooms: RoomRegistry) -> None:
    connections: dict[str, SocketConnection] = {}

    @socketio.on("connect")
    def on_connect(auth=None):
        try:
            query = JoinQuery.model_validate(_join_params(auth))
        except ValidationError as exc:
            raise _refuse(CloseCode.POLICY_VIOLATION, f"Malformed join request: {exc.error_count()} error(s)")

        room = rooms.get(query.room_id)
        if room is None:
            raise _refuse(CloseCode.NO_ROOM_WITH_ID, "No room with the given ID")

        if not room.check_password(query.room_password):
            raise _refuse(CloseCode.WRONG_ROOM_PASSWORD, "Wrong password")

        connection = SocketConnection(socketio, request.sid)
        connections[request.sid] = connection
        try:
            room.add_player(query.nickname, connection)
        except DuplicateNameError:
            connections.pop(request.sid, None)
            raise _refuse(CloseCode.NICKNAME_ALREADY_IN_ROOM, "Name already in use")
        except RoomClosedError:
            connections.pop(request.sid, None)
            raise _refuse(CloseCode.NO_ROOM_WITH_ID, "No room with the given ID")

    @socketio.on("message")
    def on_message(data):
        connection = connections.get(request.sid)
        if connection is None:
            return
        connection.deliver(data)

    @socketio.on("disconnect")
    def on_disconnect(*_args):
        connection = connections.pop(request.sid, None)
        if connection is None:
            return
        _logger.debug("Connection %s closed", request.sid)
        connection.lost()
