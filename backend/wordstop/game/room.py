"""Room session state machine.

A room moves through

    lobby -> round_starting -> answering -> stopping -> voting

and then either closes or waits on the leaderboard for another round,
depending on `RoomSettings.close_room_after_voting`. Every operation, timer
fire and player message runs through the room's `Dispatcher`, so room state
is only ever touched by one event at a time.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from .. import messages
from .dispatch import Dispatcher, room_event
from .errors import (
    AlreadyStoppingError,
    DuplicateNameError,
    NoRoundInProgressError,
    NotAMemberError,
    RoomClosedError,
    RoundInProgressError,
    StopNotAvailableError,
)
from .models import IDLE_STATES, ROUND_STATES, RemovalReason, RoomParameters, RoomSettings, RoomState
from .player import Connection, Player
from .timers import Scheduler, Timer
from .voting import VoteCycle

if TYPE_CHECKING:
    from .registry import RoomRegistry


_logger = logging.getLogger(__name__)

# Timer slots
_EMPTY_ROOM = "empty_room"
_ROUND_START = "round_start"
_ROUND_STOP = "round_stop"
_STOP_AVAILABLE = "stop_available"
_STOP_GRACE = "stop_grace"


class Room:
    def __init__(
        self,
        room_id: str,
        parameters: RoomParameters,
        registry: RoomRegistry,
        scheduler: Scheduler,
        settings: RoomSettings,
    ) -> None:
        if not parameters.letters:
            raise ValueError("A room needs at least one letter")
        if not parameters.categories:
            raise ValueError("A room needs at least one category")

        self.id = room_id
        self._password = parameters.password
        self._letters = frozenset(parameters.letters)
        self._categories = tuple(parameters.categories)

        self._registry = registry
        self._scheduler = scheduler
        self._settings = settings
        self._dispatcher = Dispatcher()

        self._state: RoomState = "lobby"
        self._stop_available = False
        self._players: list[Player] = []
        self._timers: dict[str, Timer] = {}
        self._vote_cycle: VoteCycle | None = None
        self._letter: str | None = None
        self._totals: dict[str, int] = {}

    # --- Read-only views ---------------------------------------------------

    @property
    def password(self) -> str:
        return self._password

    @property
    def letters(self) -> frozenset[str]:
        return self._letters

    @property
    def categories(self) -> list[str]:
        return list(self._categories)

    @property
    def state(self) -> RoomState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._state == "closed"

    @property
    def round_in_progress(self) -> bool:
        return self._state in ROUND_STATES

    @property
    def voting_in_progress(self) -> bool:
        return self._state == "voting"

    @property
    def stop_available(self) -> bool:
        return self._stop_available

    @property
    def letter(self) -> str | None:
        return self._letter

    @property
    def players(self) -> list[Player]:
        return list(self._players)

    @property
    def player_names(self) -> list[str]:
        return [p.name for p in self._players]

    @property
    def totals(self) -> dict[str, int]:
        return dict(self._totals)

    @property
    def armed_timers(self) -> list[str]:
        return sorted(self._timers)

    def has_player(self, player: Player) -> bool:
        return player in self._players

    def check_password(self, password: str) -> bool:
        return password == self._password

    def public_state(self) -> dict:
        return {
            "id": self.id,
            "state": self._state,
            "categories": list(self._categories),
            "players": self.player_names,
            "totals": dict(self._totals),
        }

    def __repr__(self) -> str:
        return f"<Room {self.id} state={self._state} players={len(self._players)}>"

    # --- Event dispatch ----------------------------------------------------

    def call(self, fn: Callable[..., Any], *args: Any) -> Any:
        """Run `fn(*args)` as a room event."""
        return self._dispatcher.call(fn, *args)

    # --- Lifecycle ---------------------------------------------------------

    @room_event
    def open(self) -> None:
        """Start the room's clock once it is reachable through the registry.

        Closes the room if nobody joins in time.
        """
        if self.closed or self._players:
            return
        self._arm(_EMPTY_ROOM, self._settings.empty_room_ttl, self._on_empty_room_timeout)

    # --- Players -----------------------------------------------------------

    @room_event
    def add_player(self, name: str, connection: Connection) -> Player:
        if self.closed:
            raise RoomClosedError("Room is closed")
        if any(p.name == name for p in self._players):
            raise DuplicateNameError(f"Player with the name {name!r} already in the room")

        self._disarm(_EMPTY_ROOM)

        player = Player(
            name,
            self.id,
            self._registry,
            connection,
            self._scheduler,
            self._settings.inactivity_timeout,
        )
        self._players.append(player)
        player.send(messages.room_players(self.player_names))
        player.send(messages.room_categories(self._categories))

        self._broadcast(messages.player_joined(name))
        _logger.info("Room %s: %r joined (%d player(s))", self.id, name, len(self._players))
        return player

    @room_event
    def remove_player(self, player: Player, reason: RemovalReason) -> None:
        """Remove a player, telling everyone (the player included) why."""
        if player not in self._players:
            raise NotAMemberError(f"{player.name!r} is not in the room")

        # Closing the removed player's connection queues its close handling,
        # which runs after this and finds the player already gone.
        self._broadcast(messages.player_removed(player.name, reason))
        self._players.remove(player)
        _logger.info("Room %s: %r removed (%s)", self.id, player.name, reason)

        if not self._players and self._state in IDLE_STATES:
            self._arm(_EMPTY_ROOM, self._settings.empty_room_ttl, self._on_empty_room_timeout)

    # --- Round -------------------------------------------------------------

    @room_event
    def start_round(self) -> None:
        if self._state not in IDLE_STATES:
            raise RoundInProgressError(f"Can't start a round while {self._state}")

        if not self._letters:
            raise RuntimeError("No letters available to start a round")
        letter = random.choice(sorted(self._letters))
        duration = self._settings.round_duration(len(self._categories))

        self._broadcast(messages.round_starting())

        self._state = "round_starting"
        self._stop_available = False
        self._letter = letter
        _logger.info("Room %s: round starting", self.id)

        self._arm(
            _ROUND_START,
            self._settings.round_start_delay,
            lambda: self._begin_answering(letter, duration),
        )

    def _begin_answering(self, letter: str, duration: float) -> None:
        if self._state != "round_starting":
            raise RuntimeError(f"Round start fired while {self._state}")

        self._state = "answering"
        self._broadcast(messages.round_started(letter, duration))
        _logger.info("Room %s: round started with %r for %ss", self.id, letter, duration)

        self._arm(_ROUND_STOP, duration, self._on_round_timeout)
        self._arm(_STOP_AVAILABLE, duration / 2, self._enable_stop)

    def _enable_stop(self) -> None:
        if self._state != "answering":
            raise RuntimeError(f"Stop window opened while {self._state}")

        self._stop_available = True
        self._broadcast(messages.stop_available())

    def _on_round_timeout(self) -> None:
        self.stop_round()

    @room_event
    def stop_round(self, requester: Player | None = None) -> None:
        """Begin stopping the round, by request of a player or on timeout."""
        if self._state in ("stopping", "voting"):
            raise AlreadyStoppingError("Round is already stopping")
        if self._state not in ROUND_STATES:
            raise NoRoundInProgressError("No round in progress")
        if requester is not None and requester not in self._players:
            raise NotAMemberError(f"{requester.name!r} is not in the room")
        if requester is not None and not self._stop_available:
            raise StopNotAvailableError("Requesting a stop is not available yet")
        if self._state != "answering":
            raise StopNotAvailableError("Round hasn't started yet")

        self._disarm(_ROUND_STOP)
        self._disarm(_STOP_AVAILABLE)
        self._stop_available = False
        self._state = "stopping"

        requester_name = requester.name if requester is not None else None
        self._broadcast(messages.round_stopping(requester_name))
        _logger.info("Room %s: round stopping (requested by %s)", self.id, requester_name or "timer")

        self._arm(_STOP_GRACE, self._settings.round_stop_grace, self._begin_voting)

    # --- Voting ------------------------------------------------------------

    def _begin_voting(self) -> None:
        if self._state != "stopping":
            raise RuntimeError(f"Voting began while {self._state}")

        self._state = "voting"
        vote_cycle = VoteCycle(
            self._players,
            self._categories,
            self._scheduler,
            self._settings.category_vote_duration,
            run=self._run_vote_step,
        )
        self._vote_cycle = vote_cycle
        _logger.info("Room %s: voting on %d categories", self.id, len(self._categories))
        vote_cycle.start()

    def _run_vote_step(self, step: Callable[[], None]) -> None:
        self.call(self._vote_step, step)

    def _vote_step(self, step: Callable[[], None]) -> None:
        vote_cycle = self._vote_cycle
        if vote_cycle is None or self.closed:
            return

        step()

        completion = vote_cycle.completion
        if completion.done() and not completion.cancelled():
            self._vote_cycle = None
            self._on_voting_ended(completion.result())

    def _on_voting_ended(self, results: dict[Player, int]) -> None:
        scores = {player.name: score for player, score in results.items()}
        for name, score in scores.items():
            self._totals[name] = self._totals.get(name, 0) + score

        self._state = "leaderboard"
        self._broadcast(messages.voting_ended(scores))
        _logger.info("Room %s: voting ended %s", self.id, scores)

        if self._settings.close_room_after_voting:
            self.close()
        elif not self._players:
            self._arm(_EMPTY_ROOM, self._settings.empty_room_ttl, self._on_empty_room_timeout)

    # --- Teardown ----------------------------------------------------------

    def _on_empty_room_timeout(self) -> None:
        if self._players:
            return
        _logger.info("Room %s: closing, nobody joined in time", self.id)
        self.close()

    @room_event
    def close(self) -> None:
        """Close the room, removing every player and deregistering it."""
        if self.closed:
            return

        self._state = "closed"
        self._stop_available = False
        for name in list(self._timers):
            self._disarm(name)

        if self._vote_cycle is not None:
            self._vote_cycle.stop()
            self._vote_cycle = None

        for player in list(self._players):
            self._broadcast(messages.player_removed(player.name, "room-closed"))
        self._players = []

        self._registry.remove(self)
        _logger.info("Room %s: closed", self.id)

    # --- Helpers -----------------------------------------------------------

    def _broadcast(self, message: dict) -> None:
        for player in list(self._players):
            player.send(message)

    def _arm(self, name: str, delay: float, callback: Callable[[], None]) -> None:
        self._disarm(name)

        timer = Timer()
        self._timers[name] = timer

        def _fire() -> None:
            self.call(self._on_timer, name, timer, callback)

        self._scheduler.call_later(delay, _fire, timer=timer)

    def _disarm(self, name: str) -> None:
        timer = self._timers.pop(name, None)
        if timer is not None:
            timer.cancel()

    def _on_timer(self, name: str, timer: Timer, callback: Callable[[], None]) -> None:
        if timer.cancelled or self._timers.get(name) is not timer or self.closed:
            return
        del self._timers[name]
        callback()
