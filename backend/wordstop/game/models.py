from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Literal


RoomState = Literal[
    "lobby",
    "round_starting",
    "answering",
    "stopping",
    "voting",
    "leaderboard",
    "closed",
]

ROUND_STATES: frozenset[RoomState] = frozenset({"round_starting", "answering", "stopping"})
IDLE_STATES: frozenset[RoomState] = frozenset({"lobby", "leaderboard"})

RemovalReason = Literal["room-closed", "left", "timed-out"]


class CloseCode(IntEnum):
    """Connection close codes sent to player clients."""

    POLICY_VIOLATION = 1008
    NO_ROOM_WITH_ID = 4000
    WRONG_ROOM_PASSWORD = 4001
    NICKNAME_ALREADY_IN_ROOM = 4002
    PLAYER_REMOVED = 4003


@dataclass(frozen=True)
class RoomParameters:
    password: str
    letters: frozenset[str]
    categories: tuple[str, ...]

    @classmethod
    def build(cls, password: str, letters: Iterable[str], categories: Iterable[str]) -> RoomParameters:
        return cls(password=password, letters=frozenset(letters), categories=tuple(categories))


@dataclass(frozen=True)
class RoomSettings:
    """Timings and policies shared by every room, all durations in seconds."""

    round_start_delay: float = 5.0
    seconds_per_category: float = 5.0
    round_stop_grace: float = 3.0
    category_vote_duration: float = 7.5
    empty_room_ttl: float = 10.0
    inactivity_timeout: float = 30.0
    close_room_after_voting: bool = True

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> RoomSettings:
        defaults = cls()
        return cls(
            round_start_delay=float(config.get("ROUND_START_DELAY_SEC", defaults.round_start_delay)),
            seconds_per_category=float(config.get("SECONDS_PER_CATEGORY", defaults.seconds_per_category)),
            round_stop_grace=float(config.get("ROUND_STOP_GRACE_SEC", defaults.round_stop_grace)),
            category_vote_duration=float(
                config.get("CATEGORY_VOTE_DURATION_SEC", defaults.category_vote_duration)
            ),
            empty_room_ttl=float(config.get("EMPTY_ROOM_TTL_SEC", defaults.empty_room_ttl)),
            inactivity_timeout=float(
                config.get("PLAYER_INACTIVITY_TIMEOUT_SEC", defaults.inactivity_timeout)
            ),
            close_room_after_voting=bool(
                config.get("CLOSE_ROOM_AFTER_VOTING", defaults.close_room_after_voting)
            ),
        )

    def round_duration(self, category_count: int) -> float:
        return category_count * self.seconds_per_category
