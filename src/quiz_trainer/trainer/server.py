"""Line-oriented TCP server: one session per connection, one shared store."""

from __future__ import annotations

import logging
import socketserver
from typing import Callable, Optional

from .dispatcher import CommandDispatcher
from .session import StreamSession

__all__ = ["QuizRequestHandler", "QuizServer", "serve"]

logger = logging.getLogger(__name__)


class QuizRequestHandler(socketserver.StreamRequestHandler):
    """Run the dispatcher against a single connection."""

    server: "QuizServer"

    def handle(self) -> None:
        host, port = self.client_address[:2]
        peer = f"{host}:{port}"
        logger.info("Connection opened", extra={"peer": peer})
        session = StreamSession(self.rfile, self.wfile, peer=peer)
        try:
            self.server.dispatcher.run(session)
        finally:
            logger.info("Connection closed", extra={"peer": peer})


class QuizServer(socketserver.ThreadingTCPServer):
    """Threaded server sharing one dispatcher (and thus one store).

    Each connection is served on its own daemon thread, so a session that
    waits for input never holds up the others.
    """

    allow_reuse_address = True
    daemon_threads = True

    def __init__(
        self,
        address: tuple[str, int],
        dispatcher: CommandDispatcher,
        *,
        bind_and_activate: bool = True,
    ) -> None:
        self.dispatcher = dispatcher
        super().__init__(
            address,
            QuizRequestHandler,
            bind_and_activate=bind_and_activate,
        )

    @property
    def address(self) -> tuple[str, int]:
        host, port = self.server_address[:2]
        return str(host), int(port)


def serve(
    dispatcher: CommandDispatcher,
    host: str,
    port: int,
    *,
    on_ready: Optional[Callable[[QuizServer], None]] = None,
) -> None:
    """Serve until interrupted; ``on_ready`` sees the bound server."""

    with QuizServer((host, port), dispatcher) as server:
        bound_host, bound_port = server.address
        logger.info(
            "Quiz server listening",
            extra={"host": bound_host, "port": bound_port},
        )
        if on_ready is not None:
            on_ready(server)
        try:
            server.serve_forever()
        finally:
            logger.info("Quiz server stopped")
