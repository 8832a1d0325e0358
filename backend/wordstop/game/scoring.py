from __future__ import annotations

from collections.abc import Iterable, Mapping, Set
from typing import Protocol


class Voter(Protocol):
    answers: Mapping[str, str]
    votes: Set[str]


def category_answers(players: Iterable[Voter], category: str) -> list[str]:
    """Distinct non-empty answers for a category, in first-submitted order."""
    answers = (player.answers.get(category) for player in players)
    return list(dict.fromkeys(answer for answer in answers if answer))


def score_category(players: Iterable[Voter], category: str) -> dict[Voter, int]:
    """Score every player for one category.

    An answer is worth one point per player whose accepted votes contain that
    exact string, the author's own vote included. Players without an answer
    for the category score 0.
    """
    players = list(players)
    answer_votes: dict[str, int] = {}
    for player in players:
        for vote in player.votes:
            answer_votes[vote] = answer_votes.get(vote, 0) + 1

    scores: dict[Voter, int] = {}
    for player in players:
        answer = player.answers.get(category)
        scores[player] = answer_votes.get(answer, 0) if answer else 0
    return scores
