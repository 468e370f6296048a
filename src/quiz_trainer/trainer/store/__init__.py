"""Quiz storage backends and the factory that picks one at startup."""

from __future__ import annotations

import logging

from sqlalchemy.exc import ArgumentError

from ..errors import StoreUnavailable
from .base import SAMPLE_QUIZZES, Quiz, QuizStore, clean_fields
from .memory import MemoryQuizStore
from .sql import QuizRow, SqlQuizStore

__all__ = [
    "BACKENDS",
    "Quiz",
    "QuizStore",
    "QuizRow",
    "MemoryQuizStore",
    "SqlQuizStore",
    "SAMPLE_QUIZZES",
    "build_store",
    "clean_fields",
]

logger = logging.getLogger(__name__)

BACKENDS = ("memory", "sql")


def build_store(
    backend: str,
    *,
    database_url: str | None = None,
    seed: bool = False,
) -> QuizStore:
    """Construct the store shared by every session of this process."""

    if backend == "memory":
        store: QuizStore = MemoryQuizStore()
    elif backend == "sql":
        try:
            store = SqlQuizStore(database_url)
        except (ArgumentError, ValueError) as exc:
            raise StoreUnavailable(
                f"Invalid database URL {database_url!r}: {exc}"
            ) from exc
    else:
        raise ValueError(
            "Unknown store backend '{0}'. Choose one of: {1}.".format(
                backend, ", ".join(BACKENDS)
            )
        )
    if seed:
        added = store.seed(SAMPLE_QUIZZES)
        if added:
            logger.info("Seeded sample quizzes", extra={"count": added})
    logger.info("Quiz store ready", extra={"backend": backend})
    return store
