from __future__ import annotations

import socket
import threading
from typing import Iterator

import pytest

from quiz_trainer.trainer.dispatcher import CommandDispatcher
from quiz_trainer.trainer.server import QuizServer
from quiz_trainer.trainer.store import MemoryQuizStore

PROMPT = b"quiz > "


class LineClient:
    """Tiny blocking client speaking the prompt/line protocol."""

    def __init__(self, address: tuple[str, int]) -> None:
        self.sock = socket.create_connection(address, timeout=10)
        self._buffer = b""

    def read_until_prompt(self) -> str:
        while not self._buffer.endswith(PROMPT):
            chunk = self.sock.recv(4096)
            if not chunk:
                raise ConnectionError("server closed the connection")
            self._buffer += chunk
        text = self._buffer[: -len(PROMPT)].decode("utf-8")
        self._buffer = b""
        return text

    def send(self, line: str) -> None:
        self.sock.sendall(line.encode("utf-8") + b"\n")

    def command(self, line: str) -> str:
        self.send(line)
        return self.read_until_prompt()

    def read_to_end(self) -> str:
        chunks = [self._buffer]
        while True:
            chunk = self.sock.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
        self._buffer = b""
        return b"".join(chunks).decode("utf-8")

    def close(self) -> None:
        self.sock.close()


@pytest.fixture
def shared_store() -> MemoryQuizStore:
    return MemoryQuizStore()


@pytest.fixture
def server(shared_store) -> Iterator[QuizServer]:
    dispatcher = CommandDispatcher(shared_store, credits=("Ada Lovelace",))
    quiz_server = QuizServer(("127.0.0.1", 0), dispatcher)
    thread = threading.Thread(target=quiz_server.serve_forever, daemon=True)
    thread.start()
    try:
        yield quiz_server
    finally:
        quiz_server.shutdown()
        quiz_server.server_close()
        thread.join(timeout=10)


@pytest.fixture
def connect(server) -> Iterator:
    clients: list[LineClient] = []

    def _connect() -> LineClient:
        client = LineClient(server.address)
        clients.append(client)
        client.read_until_prompt()
        return client

    yield _connect
    for client in clients:
        client.close()


def test_server_binds_ephemeral_port(server):
    host, port = server.address
    assert host == "127.0.0.1"
    assert port > 0


def test_output_is_plain_text(connect):
    client = connect()

    output = client.command("frobnicate")

    assert "Error: Unknown command: 'frobnicate'" in output
    assert "\x1b[" not in output


def test_sessions_share_the_store(connect, shared_store):
    alice = connect()
    bob = connect()

    alice.send("add")
    _wait_for(alice, b"Enter a question: ")
    alice.send("Capital of Peru")
    _wait_for(alice, b"Enter the answer: ")
    alice.send("Lima")
    added = alice.read_until_prompt()

    listing = bob.command("list")

    assert "Added: [1]: Capital of Peru => Lima" in added
    assert "[1]: Capital of Peru" in listing
    # Bob's connection never sees Alice's confirmation.
    assert "Added" not in listing
    assert [quiz.question for quiz in shared_store.list()] == [
        "Capital of Peru"
    ]


def test_quit_closes_only_that_connection(connect):
    leaving = connect()
    staying = connect()

    leaving.send("quit")
    farewell = leaving.read_to_end()

    assert "Bye!" in farewell
    assert "There are no quizzes yet." in staying.command("list")


def test_waiting_session_does_not_block_others(connect, shared_store):
    shared_store.create("Slow question", "answer")
    waiting = connect()
    other = connect()

    waiting.send("test 1")
    _wait_for(waiting, b"Slow question? ")

    # The first connection is parked on its answer prompt.
    assert "[1]: Slow question" in other.command("list")

    waiting.send("answer")
    assert "Your answer is correct." in waiting.read_until_prompt()


def test_concurrent_deletes_over_sockets(connect, shared_store):
    quiz = shared_store.create("Q", "A")
    first = connect()
    second = connect()

    first.send(f"delete {quiz.id}")
    second.send(f"delete {quiz.id}")
    outputs = [first.read_until_prompt(), second.read_until_prompt()]

    deleted = [text for text in outputs if "Deleted quiz" in text]
    missing = [text for text in outputs if "There is no quiz" in text]
    assert len(deleted) == 1
    assert len(missing) == 1
    assert shared_store.list() == []


def test_disconnect_mid_edit_writes_nothing(connect, shared_store):
    quiz = shared_store.create("Question", "Answer")
    client = connect()

    client.send(f"edit {quiz.id}")
    _wait_for(client, b"Enter the question: ")
    client.send("Changed")
    _wait_for(client, b"Enter the answer: ")
    client.close()

    # A fresh connection proves the server kept running.
    fresh = connect()
    assert "[1]: Question => Answer" in fresh.command(f"show {quiz.id}")
    assert shared_store.get(quiz.id).question == "Question"


def _wait_for(client: LineClient, marker: bytes) -> str:
    buffer = b""
    while not buffer.endswith(marker):
        chunk = client.sock.recv(1)
        if not chunk:
            raise ConnectionError("server closed the connection")
        buffer += chunk
    return buffer.decode("utf-8")
