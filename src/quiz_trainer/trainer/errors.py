"""Error taxonomy shared by the store, the validator and the dispatcher."""

from __future__ import annotations

from typing import Sequence

__all__ = [
    "TrainerError",
    "MissingParameter",
    "InvalidParameter",
    "NotFound",
    "ValidationError",
    "StoreUnavailable",
    "SessionClosed",
]


class TrainerError(RuntimeError):
    """Base class for failures rendered to a session as ``Error: ...``."""


class MissingParameter(TrainerError):
    def __init__(self, name: str = "id") -> None:
        super().__init__(f"Missing parameter <{name}>.")
        self.name = name


class InvalidParameter(TrainerError):
    def __init__(self, raw: str, name: str = "id") -> None:
        super().__init__(f"The value of parameter <{name}> is not a number.")
        self.name = name
        self.raw = raw


class NotFound(TrainerError):
    def __init__(self, quiz_id: int) -> None:
        super().__init__(f"There is no quiz with id={quiz_id}.")
        self.quiz_id = quiz_id


class ValidationError(TrainerError):
    """One or more quiz fields were rejected.

    ``messages`` holds one entry per invalid field, in field order.
    """

    def __init__(self, messages: Sequence[str]) -> None:
        self.messages = tuple(messages)
        super().__init__("; ".join(self.messages))


class StoreUnavailable(TrainerError):
    """The durable backend cannot be reached; no command can progress."""


class SessionClosed(Exception):
    """The session's line source is exhausted (EOF or dropped connection)."""
