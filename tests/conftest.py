from __future__ import annotations

import logging
import random
import sys
from pathlib import Path
from typing import Callable, Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

# Ensure src/ is importable when the package is not installed
ROOT = TESTS_DIR.parent
for extra in (ROOT / "src",):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from fixtures import ScriptedSession  # noqa: E402
from quiz_trainer.core import shutdown_logger  # noqa: E402
from quiz_trainer.trainer.dispatcher import CommandDispatcher  # noqa: E402
from quiz_trainer.trainer.store import (  # noqa: E402
    MemoryQuizStore,
    QuizStore,
    SqlQuizStore,
)


@pytest.fixture(autouse=True)
def _reset_trainer_logger() -> Iterator[None]:
    yield
    shutdown_logger(logging.getLogger("quiz_trainer"))


@pytest.fixture
def memory_store() -> MemoryQuizStore:
    return MemoryQuizStore()


@pytest.fixture
def sql_store(tmp_path: Path) -> Iterator[SqlQuizStore]:
    store = SqlQuizStore(f"sqlite:///{tmp_path / 'quizzes.db'}")
    yield store
    store.close()


@pytest.fixture(params=["memory", "sql"])
def store(request, tmp_path: Path) -> Iterator[QuizStore]:
    """Run a test once per backend: both must honour the same contract."""

    if request.param == "memory":
        backend: QuizStore = MemoryQuizStore()
    else:
        backend = SqlQuizStore(f"sqlite:///{tmp_path / 'contract.db'}")
    yield backend
    backend.close()


@pytest.fixture
def make_session() -> Callable[..., ScriptedSession]:
    def _make(*lines: str) -> ScriptedSession:
        return ScriptedSession(lines)

    return _make


@pytest.fixture
def dispatcher(memory_store: MemoryQuizStore) -> CommandDispatcher:
    return CommandDispatcher(
        memory_store,
        rng=random.Random(1234),
        credits=("Ada Lovelace",),
    )
