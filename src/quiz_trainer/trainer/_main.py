import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console

from ..core import (
    WorkspaceError,
    configure_logger,
    ensure_workspace,
    load_env,
    shutdown_logger,
)
from .config import ConfigError, TrainerConfig, load_config
from .dispatcher import CommandDispatcher
from .errors import StoreUnavailable
from .server import QuizServer, serve
from .session import ConsoleSession
from .store import BACKENDS, QuizStore, build_store

LOGGER_NAME = "quiz_trainer"


def _add_common_options(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--config",
        type=Path,
        help="TOML config file (defaults to the workspace config)",
    )
    p.add_argument(
        "--workspace",
        type=Path,
        help="Workspace root (defaults to QUIZ_TRAINER_DATA_HOME)",
    )
    p.add_argument("--backend", choices=BACKENDS)
    p.add_argument(
        "--database-url",
        help="SQLAlchemy URL used by the sql backend",
    )
    p.add_argument(
        "--no-seed",
        dest="seed",
        action="store_false",
        default=None,
        help="Do not add sample quizzes to an empty store",
    )
    p.add_argument(
        "--verbose",
        action="store_true",
        default=None,
        help="Mirror log records to stderr",
    )


def build_arg_parser(prog: str = "quiz repl") -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog=prog,
        description="Interactive quiz trainer on this terminal",
    )
    _add_common_options(p)
    return p


def build_server_arg_parser(
    prog: str = "quiz serve",
) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog=prog,
        description="Serve the quiz trainer over newline-delimited TCP",
    )
    _add_common_options(p)
    p.add_argument("--host")
    p.add_argument("--port", type=int)
    return p


def _resolve_config(args: argparse.Namespace) -> TrainerConfig:
    load_env()
    layout = ensure_workspace(path=args.workspace)
    cfg = load_config(args.config, layout=layout)
    store = cfg.store
    if args.backend is not None:
        store = replace(store, backend=args.backend)
    if args.database_url:
        store = replace(store, database_url=args.database_url)
    if args.seed is not None:
        store = replace(store, seed=args.seed)
    log_cfg = cfg.logging
    if args.verbose is not None:
        log_cfg = replace(log_cfg, verbose=args.verbose)
    server = cfg.server
    if getattr(args, "host", None):
        server = replace(server, host=args.host)
    if getattr(args, "port", None) is not None:
        server = replace(server, port=args.port)
    configure_logger(
        LOGGER_NAME,
        log_dir=layout.log_dir,
        level=log_cfg.level,
        verbose=log_cfg.verbose,
    )
    return replace(cfg, store=store, logging=log_cfg, server=server)


def _open_store(cfg: TrainerConfig) -> QuizStore:
    return build_store(
        cfg.store.backend,
        database_url=cfg.store.database_url,
        seed=cfg.store.seed,
    )


def _prepare(
    args: argparse.Namespace,
) -> tuple[Optional[TrainerConfig], Optional[QuizStore], int]:
    try:
        cfg = _resolve_config(args)
    except (ConfigError, WorkspaceError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return None, None, 2
    try:
        store = _open_store(cfg)
    except StoreUnavailable as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return cfg, None, 1
    return cfg, store, 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run a single local session against the configured store."""

    args = build_arg_parser().parse_args(argv)
    cfg, store, code = _prepare(args)
    if store is None or cfg is None:
        return code
    logger = logging.getLogger(LOGGER_NAME)
    dispatcher = CommandDispatcher(store, credits=cfg.credits.authors)
    try:
        dispatcher.run(ConsoleSession(Console()))
    finally:
        store.close()
        shutdown_logger(logger)
    return 0


def serve_main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the socket server until interrupted."""

    args = build_server_arg_parser().parse_args(argv)
    cfg, store, code = _prepare(args)
    if store is None or cfg is None:
        return code
    logger = logging.getLogger(LOGGER_NAME)
    dispatcher = CommandDispatcher(store, credits=cfg.credits.authors)
    console = Console(stderr=True)

    def _announce(server: QuizServer) -> None:
        host, port = server.address
        console.print(f"Quiz server listening on [bold]{host}:{port}[/]")

    try:
        serve(
            dispatcher,
            cfg.server.host,
            cfg.server.port,
            on_ready=_announce,
        )
    except KeyboardInterrupt:
        console.print("Shutting down.")
    except OSError as exc:
        print(f"Error: cannot listen: {exc}", file=sys.stderr)
        return 1
    finally:
        store.close()
        shutdown_logger(logger)
    return 0
