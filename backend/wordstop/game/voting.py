from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import Future
from typing import TYPE_CHECKING, Any, Callable

from .. import messages
from .scoring import category_answers, score_category
from .timers import Scheduler, Timer

if TYPE_CHECKING:
    from .player import Player


_logger = logging.getLogger(__name__)


def _call_now(fn: Callable[..., Any], *args: Any) -> Any:
    return fn(*args)


class VoteCycle:
    """Runs a timed vote on each category in turn and totals the scores.

    Every `duration` seconds the previous category is scored and the next one
    is announced. One tick after the last category, `completion` resolves with
    the `Player -> score` totals of the players still in the room.
    """

    def __init__(
        self,
        players: list[Player],
        categories: Sequence[str],
        scheduler: Scheduler,
        duration: float,
        run: Callable[..., Any] = _call_now,
    ) -> None:
        # Live list owned by the room; players may leave mid-vote.
        self._players = players
        self._categories = tuple(categories)
        self._scheduler = scheduler
        self._duration = duration
        self._run = run

        self._cursor = 0
        self._scores: dict[Player, int] = {}
        self._timer: Timer | None = None

        self.completion: Future[dict[Player, int]] = Future()

    @property
    def running(self) -> bool:
        return self._timer is not None

    @property
    def category_index(self) -> int:
        return self._cursor

    def start(self) -> None:
        if self._timer is not None or self.completion.done():
            raise RuntimeError("Vote cycle can only be started once")

        self._scores = {player: 0 for player in self._players}
        timer = Timer()
        self._timer = timer
        self._scheduler.call_every(self._duration, self._run, self._tick, timer=timer)

    def stop(self) -> None:
        """Interrupt voting without resolving `completion` with scores."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self.completion.cancel()

    def _tick(self) -> None:
        if self._timer is None or self._timer.cancelled:
            return

        if self._cursor > 0:
            previous = self._categories[self._cursor - 1]
            for player, score in score_category(self._players, previous).items():
                self._scores[player] = self._scores.get(player, 0) + score

        if self._cursor >= len(self._categories):
            self._timer.cancel()
            self._timer = None
            totals = {player: self._scores.get(player, 0) for player in self._players}
            self.completion.set_result(totals)
            return

        self._begin_voting_for(self._categories[self._cursor])
        self._cursor += 1

    def _begin_voting_for(self, category: str) -> None:
        answers = category_answers(self._players, category)
        _logger.debug("Voting on %r with %d answer(s)", category, len(answers))

        message = messages.category_vote_started(category, answers, self._duration)
        for player in list(self._players):
            player.send(message)
