from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Protocol

from pydantic import ValidationError

from .. import messages
from .errors import RoomError
from .models import CloseCode
from .timers import Scheduler, Timer

if TYPE_CHECKING:
    from .registry import RoomRegistry
    from .room import Room


_logger = logging.getLogger(__name__)


class Connection(Protocol):
    """Transport to one player client."""

    def bind(self, on_message: Callable[[Any], None], on_close: Callable[[], None]) -> None: ...

    def send(self, message: dict) -> None: ...

    def close(self, code: int, reason: str) -> None: ...


class Player:
    """A player connected to a room.

    Inbound messages are validated and run as room events. The player only
    keeps the room id and resolves it through the registry, so a closed room
    is gone for its players too.
    """

    def __init__(
        self,
        name: str,
        room_id: str,
        rooms: RoomRegistry,
        connection: Connection,
        scheduler: Scheduler,
        inactivity_timeout: float,
    ) -> None:
        self._name = name
        self._room_id = room_id
        self._rooms = rooms
        self._connection = connection
        self._scheduler = scheduler
        self._inactivity_timeout = inactivity_timeout
        self._inactivity_timer: Timer | None = None

        self.answers: dict[str, str] = {}
        self.votes: set[str] = set()

        self._connection.bind(self.receive, self.handle_close)
        self._reset_inactivity_timer()

    @property
    def name(self) -> str:
        return self._name

    @property
    def room_id(self) -> str:
        return self._room_id

    @property
    def room(self) -> Room | None:
        return self._rooms.get(self._room_id)

    def __repr__(self) -> str:
        return f"<Player {self._name!r} room={self._room_id}>"

    # --- Outbound ----------------------------------------------------------

    def send(self, message: dict) -> None:
        """Send a message to the client and apply its local side effects.

        A failed delivery is logged and otherwise ignored; the room carries on
        and the side effects still apply.
        """
        kind = message.get("type")
        try:
            self._connection.send(message)
        except Exception:
            _logger.exception("Couldn't deliver %s to %s", kind, self)

        if kind == "round-starting":
            self.answers = {}
        elif kind == "category-vote-started":
            self.votes = set(message["content"]["answers"])
        elif kind == "player-removed" and message["content"]["name"] == self._name:
            self._clear_inactivity_timer()
            self._connection.close(CloseCode.PLAYER_REMOVED, message["content"]["reason"])

    # --- Inbound -----------------------------------------------------------

    def receive(self, data: Any) -> None:
        try:
            message = messages.parse_inbound(data)
        except ValidationError as exc:
            _logger.info("Malformed message from %s: %s", self, exc.errors(include_url=False))
            self._connection.close(CloseCode.POLICY_VIOLATION, f"Malformed message: {exc.error_count()} error(s)")
            return

        room = self.room
        if room is None:
            return
        room.call(self._handle, room, message)

    def handle_close(self) -> None:
        """The connection went away; leave the room if still in it."""
        self._clear_inactivity_timer()

        room = self.room
        if room is None:
            return
        room.call(self._leave_if_member, room, "left")

    def _handle(self, room: Room, message: messages.InboundMessage) -> None:
        if not room.has_player(self):
            return

        if isinstance(message, messages.Heartbeat):
            self._reset_inactivity_timer()
        elif isinstance(message, messages.StartRound):
            try:
                room.start_round()
            except RoomError as exc:
                _logger.warning("Couldn't request round start for %s: %s", self, exc)
        elif isinstance(message, messages.StopRound):
            try:
                room.stop_round(self)
            except RoomError as exc:
                _logger.warning("Couldn't request round stop for %s: %s", self, exc)
        elif isinstance(message, messages.ChangeAnswer):
            category = message.content.category
            if category not in room.categories:
                _logger.warning("%s answered unknown category %r", self, category)
            self.answers[category] = message.content.answer
        elif isinstance(message, messages.ChangeAnswerVote):
            if message.content.accepted:
                self.votes.add(message.content.answer)
            else:
                self.votes.discard(message.content.answer)
        elif isinstance(message, messages.LeaveRoom):
            room.remove_player(self, "left")

    def _leave_if_member(self, room: Room, reason: str) -> None:
        if room.has_player(self):
            room.remove_player(self, reason)

    # --- Liveness ----------------------------------------------------------

    def _clear_inactivity_timer(self) -> None:
        if self._inactivity_timer is not None:
            self._inactivity_timer.cancel()
            self._inactivity_timer = None

    def _reset_inactivity_timer(self) -> None:
        self._clear_inactivity_timer()

        timer = Timer()
        self._inactivity_timer = timer

        def _expired() -> None:
            room = self.room
            if room is not None:
                room.call(self._time_out, room, timer)

        self._scheduler.call_later(self._inactivity_timeout, _expired, timer=timer)

    def _time_out(self, room: Room, timer: Timer) -> None:
        if timer is not self._inactivity_timer or timer.cancelled:
            return
        self._inactivity_timer = None
        _logger.info("%s timed out", self)
        self._leave_if_member(room, "timed-out")
