"""Interactive actors consumed by the command dispatcher.

A session is a line source, an output sink (a Rich ``Console``) and a
best-effort way to pre-fill the next answer. The local REPL uses
:class:`ConsoleSession`; each socket connection gets a
:class:`StreamSession`.
"""

from __future__ import annotations

import io
import sys
from abc import ABC, abstractmethod
from typing import BinaryIO, Callable

from rich.console import Console

from .errors import SessionClosed

try:  # readline is unavailable on some platforms (e.g. Windows).
    import readline
except ImportError:  # pragma: no cover - platform dependent
    readline = None  # type: ignore[assignment]

__all__ = [
    "InputProvider",
    "Session",
    "ConsoleSession",
    "StreamSession",
]

InputProvider = Callable[[], str]


class Session(ABC):
    """One interactive actor: local run or socket connection."""

    kind = "session"

    def __init__(self, console: Console) -> None:
        self.console = console

    @abstractmethod
    def read_line(self, prompt: str, *, prefill: str | None = None) -> str:
        """Show ``prompt`` (Rich markup) and return the next input line.

        Raises :class:`SessionClosed` when no more input will arrive.
        """

    def ask(self, prompt: str, *, prefill: str | None = None) -> str:
        return self.read_line(prompt, prefill=prefill).strip()

    def describe(self) -> str:
        return self.kind

    def close(self) -> None:
        """Release transport resources. No-op by default."""


class ConsoleSession(Session):
    """Session bound to the process's terminal."""

    kind = "console"

    def __init__(
        self,
        console: Console | None = None,
        *,
        input_provider: InputProvider | None = None,
        interactive: bool | None = None,
    ) -> None:
        super().__init__(console or Console())
        self._input = input_provider or input
        if interactive is None:
            interactive = input_provider is None and sys.stdin.isatty()
        self._prefill_enabled = bool(interactive and readline is not None)

    @property
    def supports_prefill(self) -> bool:
        return self._prefill_enabled

    def read_line(self, prompt: str, *, prefill: str | None = None) -> str:
        self.console.print(prompt, end="")
        use_hook = self._prefill_enabled and bool(prefill)
        if use_hook:
            readline.set_startup_hook(lambda: readline.insert_text(prefill))
        try:
            return self._input()
        except (EOFError, KeyboardInterrupt, StopIteration) as exc:
            self.console.print()
            raise SessionClosed("Console input closed.") from exc
        finally:
            if use_hook:
                readline.set_startup_hook(None)


class _PeerWriter(io.TextIOWrapper):
    """Text writer that reports a vanished peer as :class:`SessionClosed`."""

    def __init__(self, buffer: BinaryIO, *, peer: str) -> None:
        super().__init__(
            buffer,  # type: ignore[arg-type]
            encoding="utf-8",
            errors="replace",
            newline="\n",
            write_through=True,
        )
        self.peer = peer

    def write(self, text: str) -> int:
        try:
            return super().write(text)
        except (OSError, ValueError) as exc:
            raise SessionClosed(f"Connection to {self.peer} lost.") from exc

    def flush(self) -> None:
        try:
            super().flush()
        except (OSError, ValueError) as exc:
            raise SessionClosed(f"Connection to {self.peer} lost.") from exc

    def close(self) -> None:
        try:
            super().close()
        except SessionClosed:
            pass


class StreamSession(Session):
    """Session over a pair of binary streams (one socket connection).

    Text is newline-delimited UTF-8. Output is rendered without ANSI styling
    and without hard wrapping. Pre-filling is not supported over a plain
    stream, so ``prefill`` is ignored.
    """

    kind = "stream"

    def __init__(
        self,
        rfile: BinaryIO,
        wfile: BinaryIO,
        *,
        peer: str = "unknown",
        width: int = 100,
    ) -> None:
        self._rfile = rfile
        self._writer = _PeerWriter(wfile, peer=peer)
        console = Console(
            file=self._writer,
            force_terminal=False,
            color_system=None,
            highlight=False,
            soft_wrap=True,
            width=width,
        )
        super().__init__(console)
        self.peer = peer

    def read_line(self, prompt: str, *, prefill: str | None = None) -> str:
        try:
            self.console.print(prompt, end="")
            self._writer.flush()
            raw = self._rfile.readline()
        except (OSError, ValueError) as exc:
            raise SessionClosed(f"Connection from {self.peer} lost.") from exc
        if not raw:
            raise SessionClosed(f"Connection from {self.peer} closed.")
        return raw.decode("utf-8", errors="replace").rstrip("\r\n")

    def describe(self) -> str:
        return f"{self.kind}:{self.peer}"

    def close(self) -> None:
        try:
            self._writer.flush()
        except SessionClosed:
            return
        # Leave the underlying socket file to the server, which closes it.
        self._writer.detach()
