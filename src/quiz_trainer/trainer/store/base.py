"""Quiz record and the storage contract every backend satisfies."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..errors import ValidationError

__all__ = [
    "Quiz",
    "QuizStore",
    "SAMPLE_QUIZZES",
    "clean_fields",
]


@dataclass(frozen=True)
class Quiz:
    """A question/answer pair identified by a store-assigned id."""

    id: int
    question: str
    answer: str


SAMPLE_QUIZZES: tuple[tuple[str, str], ...] = (
    ("Capital of Italy", "Rome"),
    ("Capital of France", "Paris"),
    ("Capital of Spain", "Madrid"),
    ("Capital of Portugal", "Lisbon"),
)


def clean_fields(question: str | None, answer: str | None) -> tuple[str, str]:
    """Trim both fields, collecting one message per empty field."""

    q = (question or "").strip()
    a = (answer or "").strip()
    messages: list[str] = []
    if not q:
        messages.append("question: the question must not be empty.")
    if not a:
        messages.append("answer: the answer must not be empty.")
    if messages:
        raise ValidationError(messages)
    return q, a


class QuizStore(ABC):
    """Create/read/update/delete over an ordered id -> Quiz mapping.

    Every operation is atomic with respect to other threads sharing the
    store. Ids are never reused, even after deletion.
    """

    @abstractmethod
    def create(self, question: str, answer: str) -> Quiz:
        """Persist a new quiz and return it with its fresh id."""

    @abstractmethod
    def list(self) -> list[Quiz]:
        """Return every quiz in listing order."""

    @abstractmethod
    def get(self, quiz_id: int) -> Quiz:
        """Return the quiz for ``quiz_id`` or raise ``NotFound``."""

    @abstractmethod
    def update(self, quiz_id: int, question: str, answer: str) -> Quiz:
        """Replace question and answer of an existing quiz."""

    @abstractmethod
    def delete(self, quiz_id: int) -> None:
        """Remove the quiz or raise ``NotFound``."""

    def seed(self, pairs=SAMPLE_QUIZZES) -> int:
        """Create ``pairs`` when the store is empty; return how many."""

        if self.list():
            return 0
        for question, answer in pairs:
            self.create(question, answer)
        return len(pairs)

    def close(self) -> None:
        """Release backend resources. No-op by default."""
