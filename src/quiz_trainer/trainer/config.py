"""Configuration for the quiz trainer REPL and server.

Settings live in a TOML file grouped by concern. Values from the file are
merged over the built-in defaults; unknown keys are rejected so typos do
not silently fall back to defaults.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from ..core.config import (
    TomlConfigError,
    find_config,
    load_toml,
    merge_defaults,
)
from ..core.workspace import WorkspaceLayout
from .store import BACKENDS

__all__ = [
    "CONFIG_PATH_ENV",
    "ConfigError",
    "CreditsConfig",
    "LoggingConfig",
    "ServerConfig",
    "StoreConfig",
    "TrainerConfig",
    "load_config",
]

CONFIG_PATH_ENV = "QUIZ_TRAINER_CONFIG"


class ConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class StoreConfig:
    backend: str
    database_url: str
    seed: bool


@dataclass(frozen=True)
class ServerConfig:
    host: str
    port: int


@dataclass(frozen=True)
class LoggingConfig:
    level: str
    verbose: bool


@dataclass(frozen=True)
class CreditsConfig:
    authors: tuple[str, ...]


@dataclass(frozen=True)
class TrainerConfig:
    store: StoreConfig
    server: ServerConfig
    logging: LoggingConfig
    credits: CreditsConfig
    source: Optional[Path] = None


_DEFAULTS: Dict[str, Any] = {
    "store": {
        "backend": "memory",
        "database_url": "",
        "seed": True,
    },
    "server": {
        "host": "127.0.0.1",
        "port": 3030,
    },
    "logging": {
        "level": "INFO",
        "verbose": False,
    },
    "credits": {
        "authors": ["Quiz Trainer contributors"],
    },
}

_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def load_config(
    path: Path | None = None,
    *,
    layout: WorkspaceLayout,
    env: Mapping[str, str] | None = None,
) -> TrainerConfig:
    """Resolve, read and validate the trainer configuration."""

    try:
        source = find_config(
            path,
            env_var=CONFIG_PATH_ENV,
            default=layout.config_file,
            env=env,
        )
        merged = copy.deepcopy(_DEFAULTS)
        if source is not None:
            merge_defaults(merged, load_toml(source))
    except TomlConfigError as exc:
        raise ConfigError(str(exc)) from exc
    return _build_config(merged, layout=layout, source=source)


def _build_config(
    data: Mapping[str, Any],
    *,
    layout: WorkspaceLayout,
    source: Optional[Path],
) -> TrainerConfig:
    return TrainerConfig(
        store=_build_store(data["store"], layout=layout),
        server=_build_server(data["server"]),
        logging=_build_logging(data["logging"]),
        credits=_build_credits(data["credits"]),
        source=source,
    )


def _build_store(
    section: Mapping[str, Any], *, layout: WorkspaceLayout
) -> StoreConfig:
    backend = _require_string(section.get("backend"), field="store.backend")
    backend = backend.lower()
    if backend not in BACKENDS:
        raise ConfigError(
            "store.backend must be one of: {0}.".format(", ".join(BACKENDS))
        )
    url = section.get("database_url")
    if not isinstance(url, str):
        raise ConfigError("'store.database_url' must be a string.")
    url = url.strip() or f"sqlite:///{layout.database_file}"
    seed = _require_bool(section.get("seed"), field="store.seed")
    return StoreConfig(backend=backend, database_url=url, seed=seed)


def _build_server(section: Mapping[str, Any]) -> ServerConfig:
    host = _require_string(section.get("host"), field="server.host")
    port = section.get("port")
    if (
        not isinstance(port, int)
        or isinstance(port, bool)
        or not 0 <= port <= 65535
    ):
        raise ConfigError("'server.port' must be an integer in 0..65535.")
    return ServerConfig(host=host, port=port)


def _build_logging(section: Mapping[str, Any]) -> LoggingConfig:
    level = _require_string(section.get("level"), field="logging.level")
    if level.upper() not in _LEVELS:
        raise ConfigError(
            "logging.level must be one of: {0}.".format(
                ", ".join(sorted(_LEVELS))
            )
        )
    verbose = _require_bool(section.get("verbose"), field="logging.verbose")
    return LoggingConfig(level=level.upper(), verbose=verbose)


def _build_credits(section: Mapping[str, Any]) -> CreditsConfig:
    authors = section.get("authors")
    if not isinstance(authors, list) or not authors:
        raise ConfigError("'credits.authors' must be a non-empty list.")
    return CreditsConfig(
        authors=tuple(
            _require_string(item, field="credits.authors") for item in authors
        )
    )


def _require_bool(value: Any, *, field: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"'{field}' must be a boolean.")
    return value


def _require_string(value: Any, *, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"'{field}' must be a non-empty string.")
    return value.strip()
