"""Volatile, process-lifetime quiz store."""

from __future__ import annotations

import logging
import threading

from ..errors import NotFound
from .base import Quiz, QuizStore, clean_fields

__all__ = ["MemoryQuizStore"]

logger = logging.getLogger(__name__)


class MemoryQuizStore(QuizStore):
    """Dict-backed store with a monotonic id counter.

    Insertion order of the dict is the listing order. A single re-entrant
    lock guards the mapping and the counter, so concurrent sessions see each
    operation as a whole.
    """

    def __init__(self) -> None:
        self._quizzes: dict[int, Quiz] = {}
        self._next_id = 1
        self._lock = threading.RLock()

    def create(self, question: str, answer: str) -> Quiz:
        q, a = clean_fields(question, answer)
        with self._lock:
            quiz = Quiz(self._next_id, q, a)
            self._quizzes[quiz.id] = quiz
            self._next_id += 1
        logger.info("Quiz created", extra={"quiz_id": quiz.id})
        return quiz

    def list(self) -> list[Quiz]:
        with self._lock:
            return list(self._quizzes.values())

    def get(self, quiz_id: int) -> Quiz:
        with self._lock:
            try:
                return self._quizzes[quiz_id]
            except KeyError:
                raise NotFound(quiz_id) from None

    def update(self, quiz_id: int, question: str, answer: str) -> Quiz:
        q, a = clean_fields(question, answer)
        with self._lock:
            if quiz_id not in self._quizzes:
                raise NotFound(quiz_id)
            quiz = Quiz(quiz_id, q, a)
            self._quizzes[quiz_id] = quiz
        logger.info("Quiz updated", extra={"quiz_id": quiz_id})
        return quiz

    def delete(self, quiz_id: int) -> None:
        with self._lock:
            try:
                del self._quizzes[quiz_id]
            except KeyError:
                raise NotFound(quiz_id) from None
        logger.info("Quiz deleted", extra={"quiz_id": quiz_id})

    def __len__(self) -> int:
        with self._lock:
            return len(self._quizzes)
