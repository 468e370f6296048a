"""Randomized, no-repeat quiz rounds.

A round starts ``Active`` over a snapshot of the store's ids with score 0.
Each step draws one remaining id uniformly at random and removes it, so no
quiz is asked twice. A correct answer bumps the score and keeps the round
going; the first wrong answer finishes it. Running out of ids finishes it
as ``exhausted``.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from . import view
from .errors import SessionClosed
from .session import Session
from .store import Quiz, QuizStore

__all__ = [
    "Outcome",
    "RoundResult",
    "PlayRound",
    "answers_match",
    "run_play_round",
]


class Outcome(str, Enum):
    EXHAUSTED = "exhausted"
    WRONG = "wrong"
    ABORTED = "aborted"


@dataclass(frozen=True)
class RoundResult:
    """Terminal state of a round."""

    score: int
    outcome: Outcome
    asked: tuple[int, ...]


def answers_match(given: str, expected: str) -> bool:
    """Exact match after trimming and case-folding both sides."""

    return given.strip().casefold() == expected.strip().casefold()


class PlayRound:
    """State machine for one play round."""

    def __init__(
        self,
        quizzes: Sequence[Quiz],
        *,
        rng: random.Random | None = None,
    ) -> None:
        self._quizzes = {quiz.id: quiz for quiz in quizzes}
        self._remaining = set(self._quizzes)
        self._rng = rng or random.Random()
        self._asked: list[int] = []
        self._current: Quiz | None = None
        self.score = 0
        self.result: RoundResult | None = None

    @property
    def remaining(self) -> frozenset[int]:
        return frozenset(self._remaining)

    @property
    def is_active(self) -> bool:
        return self.result is None

    @property
    def current(self) -> Quiz | None:
        return self._current

    def next_quiz(self) -> Quiz | None:
        """Draw the next quiz, or finish as exhausted when none remain."""

        if self.result is not None:
            return None
        if self._current is not None:
            raise RuntimeError("Answer the current quiz before drawing.")
        if not self._remaining:
            self._finish(Outcome.EXHAUSTED)
            return None
        # Sorted so a seeded rng yields a reproducible order.
        quiz_id = self._rng.choice(sorted(self._remaining))
        self._remaining.discard(quiz_id)
        self._asked.append(quiz_id)
        self._current = self._quizzes[quiz_id]
        return self._current

    def submit(self, answer: str) -> bool:
        """Grade ``answer`` against the current quiz."""

        if self._current is None:
            raise RuntimeError("No quiz has been drawn.")
        quiz, self._current = self._current, None
        if answers_match(answer, quiz.answer):
            self.score += 1
            return True
        self._finish(Outcome.WRONG)
        return False

    def abort(self) -> RoundResult:
        self._current = None
        if self.result is None:
            self._finish(Outcome.ABORTED)
        assert self.result is not None
        return self.result

    def _finish(self, outcome: Outcome) -> None:
        self.result = RoundResult(self.score, outcome, tuple(self._asked))


def run_play_round(
    store: QuizStore,
    session: Session,
    *,
    rng: random.Random | None = None,
) -> RoundResult:
    """Play one round against ``session`` and report the final score."""

    game = PlayRound(store.list(), rng=rng)
    try:
        quiz = game.next_quiz()
        while quiz is not None:
            answer = session.ask(view.question_prompt(quiz))
            if game.submit(answer):
                view.log(
                    session,
                    f" CORRECT - {game.score} correct answer(s) so far.",
                    "green",
                )
                quiz = game.next_quiz()
            else:
                view.log(session, " INCORRECT.", "red")
                quiz = None
    except SessionClosed:
        game.abort()
        raise

    result = game.result
    assert result is not None
    if result.outcome is Outcome.EXHAUSTED:
        view.log(session, " No more questions.", "magenta")
    view.log(session, " End of the quiz. Correct answers:")
    view.banner(session, str(result.score), "magenta")
    return result
