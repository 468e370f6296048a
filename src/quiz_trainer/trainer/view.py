"""Rich rendering helpers used by command handlers.

User-supplied text is always escaped before it reaches Rich markup, so a
question containing ``[brackets]`` prints verbatim.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from .store import Quiz

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .session import Session


def log(session: "Session", message: str, style: str | None = None) -> None:
    if style:
        session.console.print(Text(message, style=style))
    else:
        session.console.print(Text(message))


def error(session: "Session", message: str) -> None:
    session.console.print(f"[bold red]Error[/]: [red]{escape(message)}[/]")


def errors(session: "Session", messages: Iterable[str]) -> None:
    for message in messages:
        error(session, message)


def quiz_line(session: "Session", quiz: Quiz, *, with_answer: bool) -> None:
    text = f" [magenta][{quiz.id}][/]: {escape(quiz.question)}"
    if with_answer:
        text += f" [magenta]=>[/] {escape(quiz.answer)}"
    session.console.print(text)


def banner(session: "Session", message: str, style: str = "green") -> None:
    session.console.print(
        Panel(
            Text(message, justify="center", style=f"bold {style}"),
            border_style=style,
            expand=False,
        )
    )


def question_prompt(quiz: Quiz) -> str:
    """Markup prompt asking ``quiz``'s question."""

    question = quiz.question
    if not question.endswith("?"):
        question += "?"
    return f"[red]{escape(question)}[/] "
