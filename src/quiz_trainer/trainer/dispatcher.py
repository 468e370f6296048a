"""Command table and the dispatcher shared by the REPL and the server."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Sequence

from ..core.logging import bind_session
from . import view
from .errors import (
    SessionClosed,
    StoreUnavailable,
    TrainerError,
    ValidationError,
)
from .play import answers_match, run_play_round
from .session import Session
from .store import QuizStore
from .validate import validate_id

__all__ = [
    "COMMANDS",
    "CommandContext",
    "CommandDispatcher",
    "CommandSpec",
    "DEFAULT_PROMPT",
    "format_command_help",
    "parse_command_line",
]

logger = logging.getLogger(__name__)

DEFAULT_PROMPT = "[bold blue]quiz >[/] "
DEFAULT_CREDITS: tuple[str, ...] = ("Quiz Trainer contributors",)


@dataclass(frozen=True)
class CommandContext:
    """Everything a handler may touch while serving one command."""

    store: QuizStore
    session: Session
    rng: random.Random
    credits: Sequence[str]


# Returning ``False`` ends the session; anything else re-prompts.
CommandHandler = Callable[[CommandContext, Optional[str]], Optional[bool]]


@dataclass(frozen=True)
class CommandSpec:
    """Represents one interpreter command."""

    name: str
    summary: str
    handler: CommandHandler
    aliases: tuple[str, ...] = ()
    usage: str = ""

    @property
    def label(self) -> str:
        names = "|".join((*self.aliases, self.name))
        return f"{names} {self.usage}".rstrip()


def _cmd_help(ctx: CommandContext, arg: Optional[str]) -> None:
    view.log(ctx.session, "Commands:")
    ctx.session.console.print(format_command_help(), markup=False)


def _cmd_list(ctx: CommandContext, arg: Optional[str]) -> None:
    quizzes = ctx.store.list()
    if not quizzes:
        view.log(ctx.session, " There are no quizzes yet.", "yellow")
        return
    for quiz in quizzes:
        view.quiz_line(ctx.session, quiz, with_answer=False)


def _cmd_show(ctx: CommandContext, arg: Optional[str]) -> None:
    quiz = ctx.store.get(validate_id(arg))
    view.quiz_line(ctx.session, quiz, with_answer=True)


def _cmd_add(ctx: CommandContext, arg: Optional[str]) -> None:
    question = ctx.session.ask("[red] Enter a question:[/] ")
    answer = ctx.session.ask("[red] Enter the answer:[/] ")
    quiz = ctx.store.create(question, answer)
    ctx.session.console.print(" [magenta]Added[/]:", end="")
    view.quiz_line(ctx.session, quiz, with_answer=True)


def _cmd_delete(ctx: CommandContext, arg: Optional[str]) -> None:
    quiz_id = validate_id(arg)
    ctx.store.delete(quiz_id)
    view.log(ctx.session, f" Deleted quiz [{quiz_id}].", "magenta")


def _cmd_edit(ctx: CommandContext, arg: Optional[str]) -> None:
    quiz = ctx.store.get(validate_id(arg))
    question = ctx.session.ask(
        "[red] Enter the question:[/] ", prefill=quiz.question
    )
    answer = ctx.session.ask(
        "[red] Enter the answer:[/] ", prefill=quiz.answer
    )
    updated = ctx.store.update(quiz.id, question, answer)
    ctx.session.console.print(" [magenta]Quiz changed to[/]:", end="")
    view.quiz_line(ctx.session, updated, with_answer=True)


def _cmd_test(ctx: CommandContext, arg: Optional[str]) -> None:
    quiz = ctx.store.get(validate_id(arg))
    answer = ctx.session.ask(view.question_prompt(quiz))
    if answers_match(answer, quiz.answer):
        view.log(ctx.session, " Your answer is correct.", "magenta")
        view.banner(ctx.session, "Correct", "green")
    else:
        view.log(ctx.session, " Your answer is incorrect.", "magenta")
        view.banner(ctx.session, "Incorrect", "red")


def _cmd_play(ctx: CommandContext, arg: Optional[str]) -> None:
    run_play_round(ctx.store, ctx.session, rng=ctx.rng)


def _cmd_credits(ctx: CommandContext, arg: Optional[str]) -> None:
    view.log(ctx.session, "Authors:")
    for author in ctx.credits:
        view.log(ctx.session, f" {author}", "green")


def _cmd_quit(ctx: CommandContext, arg: Optional[str]) -> bool:
    view.log(ctx.session, " Bye!", "magenta")
    return False


_COMMAND_SPECS: Sequence[CommandSpec] = (
    CommandSpec("help", "Show this help.", _cmd_help, aliases=("h",)),
    CommandSpec("list", "List the existing quizzes.", _cmd_list),
    CommandSpec(
        "show",
        "Show the question and the answer of a quiz.",
        _cmd_show,
        usage="<id>",
    ),
    CommandSpec("add", "Add a new quiz interactively.", _cmd_add),
    CommandSpec("delete", "Delete a quiz.", _cmd_delete, usage="<id>"),
    CommandSpec("edit", "Edit a quiz.", _cmd_edit, usage="<id>"),
    CommandSpec("test", "Try to answer a quiz.", _cmd_test, usage="<id>"),
    CommandSpec(
        "play",
        "Answer every quiz in random order until the first mistake.",
        _cmd_play,
        aliases=("p",),
    ),
    CommandSpec("credits", "Show the authors.", _cmd_credits),
    CommandSpec("quit", "Leave the program.", _cmd_quit, aliases=("q",)),
)

COMMANDS: Mapping[str, CommandSpec] = {
    token: spec
    for spec in _COMMAND_SPECS
    for token in (spec.name, *spec.aliases)
}


def format_command_help() -> str:
    width = max(len(spec.label) for spec in _COMMAND_SPECS)
    return "\n".join(
        f"    {spec.label.ljust(width)}  {spec.summary}"
        for spec in _COMMAND_SPECS
    )


def parse_command_line(line: str) -> tuple[str, Optional[str]] | None:
    """Split ``line`` into a lower-cased command token and optional id."""

    words = line.split()
    if not words:
        return None
    return words[0].lower(), (words[1] if len(words) > 1 else None)


class CommandDispatcher:
    """Read-eval-print loop over a :class:`Session`.

    One instance is shared by every session of the process; it holds no
    per-session state, so handlers only see the session passed to them.
    """

    def __init__(
        self,
        store: QuizStore,
        *,
        rng: random.Random | None = None,
        credits: Sequence[str] = DEFAULT_CREDITS,
        prompt: str = DEFAULT_PROMPT,
    ) -> None:
        self.store = store
        self.rng = rng or random.Random()
        self.credits = tuple(credits)
        self.prompt = prompt

    def run(self, session: Session) -> None:
        """Serve ``session`` until it quits, disconnects or loses the store."""

        log = bind_session(logger, {"session": session.describe()})
        log.info("Session started")
        try:
            while True:
                line = session.read_line(self.prompt)
                if not self.handle(session, line):
                    break
        except SessionClosed:
            log.info("Session input closed")
        finally:
            session.close()
            log.info("Session ended")

    def handle(self, session: Session, line: str) -> bool:
        """Execute one command line; return ``False`` to end the session."""

        parsed = parse_command_line(line)
        if parsed is None:
            return True
        token, arg = parsed
        spec = COMMANDS.get(token)
        if spec is None:
            view.error(session, f"Unknown command: '{token}'")
            view.log(session, "Use 'help' to see every available command.")
            return True

        logger.debug(
            "Dispatching command",
            extra={"command": spec.name, "session": session.describe()},
        )
        ctx = CommandContext(self.store, session, self.rng, self.credits)
        try:
            return spec.handler(ctx, arg) is not False
        except SessionClosed:
            raise
        except ValidationError as exc:
            view.error(session, "The quiz is invalid:")
            view.errors(session, exc.messages)
        except StoreUnavailable as exc:
            view.error(session, str(exc))
            logger.error(
                "Ending session: store unavailable",
                extra={"session": session.describe()},
            )
            return False
        except TrainerError as exc:
            logger.warning(
                "Command failed: %s",
                exc,
                extra={"command": spec.name, "session": session.describe()},
            )
            view.error(session, str(exc))
        except Exception as exc:
            logger.exception(
                "Unexpected failure in command",
                extra={"command": spec.name, "session": session.describe()},
            )
            view.error(session, str(exc) or exc.__class__.__name__)
        return True
