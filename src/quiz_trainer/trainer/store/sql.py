"""Durable quiz store backed by a relational ``quizzes`` table."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from sqlalchemy import Integer, Text, create_engine, delete, make_url, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    Session,
    mapped_column,
    sessionmaker,
)
from sqlalchemy.pool import StaticPool

from ..errors import NotFound, StoreUnavailable
from .base import Quiz, QuizStore, clean_fields

__all__ = ["QuizRow", "SqlQuizStore"]

logger = logging.getLogger(__name__)

# SQLite INTEGER is a signed 64-bit value; larger ids cannot exist.
_MAX_ID = 2**63 - 1


class Base(DeclarativeBase):
    pass


class QuizRow(Base):
    __tablename__ = "quizzes"
    # AUTOINCREMENT keeps SQLite from handing out the id of a deleted row.
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    question: Mapped[str] = mapped_column(Text, nullable=False)
    answer: Mapped[str] = mapped_column(Text, nullable=False)

    def to_quiz(self) -> Quiz:
        return Quiz(self.id, self.question, self.answer)


class SqlQuizStore(QuizStore):
    """SQLAlchemy adapter satisfying the :class:`QuizStore` contract.

    Each operation runs in its own transaction. Writes are additionally
    serialized in-process so that SQLite's single-writer rule never
    surfaces as a "database is locked" failure between sessions.
    """

    def __init__(
        self,
        url: str | None = None,
        *,
        engine: Engine | None = None,
        create_schema: bool = True,
    ) -> None:
        if engine is None:
            if not url:
                raise ValueError("Either 'url' or 'engine' is required.")
            engine = _create_engine(url)
        self._engine = engine
        self._sessions = sessionmaker(engine, expire_on_commit=False)
        self._lock = threading.RLock()
        if create_schema:
            with self._guard():
                Base.metadata.create_all(engine)

    @property
    def engine(self) -> Engine:
        return self._engine

    @contextmanager
    def _guard(self) -> Iterator[None]:
        try:
            yield
        except DBAPIError as exc:
            logger.error(
                "Quiz database unavailable",
                extra={"url": self._engine.url.render_as_string()},
                exc_info=True,
            )
            raise StoreUnavailable(
                f"The quiz database is unavailable: {exc.orig}"
            ) from exc

    @contextmanager
    def _transaction(self) -> Iterator[Session]:
        with self._lock, self._guard():
            with self._sessions.begin() as session:
                yield session

    def create(self, question: str, answer: str) -> Quiz:
        q, a = clean_fields(question, answer)
        with self._transaction() as session:
            row = QuizRow(question=q, answer=a)
            session.add(row)
            session.flush()
            quiz = row.to_quiz()
        logger.info("Quiz created", extra={"quiz_id": quiz.id})
        return quiz

    def list(self) -> list[Quiz]:
        with self._transaction() as session:
            rows = session.scalars(select(QuizRow).order_by(QuizRow.id))
            return [row.to_quiz() for row in rows]

    def get(self, quiz_id: int) -> Quiz:
        _require_storable(quiz_id)
        with self._transaction() as session:
            row = session.get(QuizRow, quiz_id)
            if row is None:
                raise NotFound(quiz_id)
            return row.to_quiz()

    def update(self, quiz_id: int, question: str, answer: str) -> Quiz:
        q, a = clean_fields(question, answer)
        _require_storable(quiz_id)
        with self._transaction() as session:
            row = session.get(QuizRow, quiz_id, with_for_update=True)
            if row is None:
                raise NotFound(quiz_id)
            row.question = q
            row.answer = a
            quiz = row.to_quiz()
        logger.info("Quiz updated", extra={"quiz_id": quiz_id})
        return quiz

    def delete(self, quiz_id: int) -> None:
        _require_storable(quiz_id)
        with self._transaction() as session:
            result = session.execute(
                delete(QuizRow).where(QuizRow.id == quiz_id)
            )
            # Only the transaction that actually removed the row succeeds.
            if result.rowcount == 0:
                raise NotFound(quiz_id)
        logger.info("Quiz deleted", extra={"quiz_id": quiz_id})

    def close(self) -> None:
        self._engine.dispose()


def _require_storable(quiz_id: int) -> None:
    if not 1 <= quiz_id <= _MAX_ID:
        raise NotFound(quiz_id)


def _create_engine(url: str) -> Engine:
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite" and parsed.database in (
        None,
        "",
        ":memory:",
    ):
        # One shared connection, otherwise every thread sees its own
        # empty in-memory database.
        return create_engine(
            parsed,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if parsed.get_backend_name() == "sqlite" and parsed.database:
        database = Path(parsed.database).expanduser()
        try:
            database.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreUnavailable(
                f"Cannot create the database directory: {exc}"
            ) from exc
        parsed = parsed.set(database=str(database))
    return create_engine(parsed)
