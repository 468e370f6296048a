from .config import ConfigError, TrainerConfig, load_config
from .dispatcher import COMMANDS, CommandDispatcher, CommandSpec
from .errors import (
    InvalidParameter,
    MissingParameter,
    NotFound,
    SessionClosed,
    StoreUnavailable,
    TrainerError,
    ValidationError,
)
from .play import Outcome, PlayRound, RoundResult, run_play_round
from .server import QuizServer, serve
from .session import ConsoleSession, Session, StreamSession
from .store import (
    MemoryQuizStore,
    Quiz,
    QuizStore,
    SqlQuizStore,
    build_store,
)
from .validate import validate_id

__all__ = [
    "ConfigError",
    "TrainerConfig",
    "load_config",
    "COMMANDS",
    "CommandDispatcher",
    "CommandSpec",
    "InvalidParameter",
    "MissingParameter",
    "NotFound",
    "SessionClosed",
    "StoreUnavailable",
    "TrainerError",
    "ValidationError",
    "Outcome",
    "PlayRound",
    "RoundResult",
    "run_play_round",
    "QuizServer",
    "serve",
    "ConsoleSession",
    "Session",
    "StreamSession",
    "MemoryQuizStore",
    "Quiz",
    "QuizStore",
    "SqlQuizStore",
    "build_store",
    "validate_id",
]
