"""Wire messages exchanged with player clients.

Inbound messages are validated with pydantic; outbound messages are plain
`{"type": ..., "content": ...}` dicts built by the helpers below.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, StringConstraints, TypeAdapter


MAX_LETTERS = 26
MAX_CATEGORIES = 32


# --- Inbound ---------------------------------------------------------------


class Heartbeat(BaseModel):
    type: Literal["heartbeat"]


class StartRound(BaseModel):
    type: Literal["start-round"]


class StopRound(BaseModel):
    type: Literal["stop-round"]


class ChangeAnswerContent(BaseModel):
    category: str
    answer: str


class ChangeAnswer(BaseModel):
    type: Literal["change-answer"]
    content: ChangeAnswerContent


class ChangeAnswerVoteContent(BaseModel):
    answer: str
    accepted: bool


class ChangeAnswerVote(BaseModel):
    type: Literal["change-answer-vote"]
    content: ChangeAnswerVoteContent


class LeaveRoom(BaseModel):
    type: Literal["leave-room"]


InboundMessage = Annotated[
    Union[Heartbeat, StartRound, StopRound, ChangeAnswer, ChangeAnswerVote, LeaveRoom],
    Field(discriminator="type"),
]

_inbound_adapter: TypeAdapter[InboundMessage] = TypeAdapter(InboundMessage)


def parse_inbound(data: Any) -> InboundMessage:
    """Validate a raw inbound payload. Raises `pydantic.ValidationError`."""
    if isinstance(data, (str, bytes, bytearray)):
        return _inbound_adapter.validate_json(data)
    return _inbound_adapter.validate_python(data)


# --- Requests --------------------------------------------------------------

Letter = Annotated[str, StringConstraints(min_length=1, max_length=1)]


class CreateRoomRequest(BaseModel):
    password: str
    letters: list[Letter] = Field(min_length=1, max_length=MAX_LETTERS)
    categories: list[str] = Field(min_length=1, max_length=MAX_CATEGORIES)


class JoinQuery(BaseModel):
    nickname: str
    room_id: str
    room_password: str


# --- Outbound --------------------------------------------------------------


def player_joined(name: str) -> dict:
    return {"type": "player-joined", "content": {"name": name}}


def room_players(names: Iterable[str]) -> dict:
    return {"type": "room-players", "content": list(names)}


def room_categories(categories: Iterable[str]) -> dict:
    return {"type": "room-categories", "content": list(categories)}


def round_starting() -> dict:
    return {"type": "round-starting"}


def round_started(letter: str, duration_sec: float) -> dict:
    return {
        "type": "round-started",
        "content": {"letter": letter, "duration": _ms(duration_sec)},
    }


def round_stopping(requester: str | None = None) -> dict:
    content: dict[str, str] = {}
    if requester is not None:
        content["requester"] = requester
    return {"type": "round-stopping", "content": content}


def stop_available() -> dict:
    return {"type": "stop-available"}


def category_vote_started(category: str, answers: Iterable[str], duration_sec: float) -> dict:
    return {
        "type": "category-vote-started",
        "content": {
            "category": category,
            "answers": list(answers),
            "duration": _ms(duration_sec),
        },
    }


def voting_ended(scores: Mapping[str, int]) -> dict:
    return {"type": "voting-ended", "content": {"scores": dict(scores)}}


def player_removed(name: str, reason: str) -> dict:
    return {"type": "player-removed", "content": {"name": name, "reason": reason}}


def _ms(seconds: float) -> int:
    return int(round(seconds * 1000))
