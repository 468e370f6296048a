import sys
import types

import pytest

from quiz_trainer import cli


@pytest.fixture(autouse=True)
def reset_metadata(monkeypatch):
    """Ensure metadata.version is controllable during tests."""

    def fake_version(name: str) -> str:
        assert name == "quiz-trainer"
        return "0.0-test"

    monkeypatch.setattr(cli.metadata, "version", fake_version)
    yield


def _stub_module(monkeypatch, expected: str, **attrs):
    def fake_import(module_name: str):
        assert module_name == expected
        return types.SimpleNamespace(**attrs)

    monkeypatch.setattr(cli, "import_module", fake_import)


def test_version_command_handles_missing_package(monkeypatch, capsys):
    monkeypatch.setattr(
        cli.metadata,
        "version",
        lambda name: (_ for _ in ()).throw(cli.metadata.PackageNotFoundError()),
    )
    code = cli.main(["version"])
    captured = capsys.readouterr()
    assert code == 0
    assert captured.out.strip() == "unknown"


def test_no_args_prints_usage_and_returns_error(capsys):
    code = cli.main([])
    captured = capsys.readouterr()
    assert code == 2
    assert "Usage: quiz" in captured.out
    assert "Available commands:" in captured.out


@pytest.mark.parametrize("argv", [["--help"], ["-h"], ["help"]])
def test_help_shows_usage(argv, capsys):
    code = cli.main(argv)
    captured = capsys.readouterr()
    assert code == 0
    assert "Usage: quiz" in captured.out


def test_list_outputs_command_table(capsys):
    code = cli.main(["list"])
    captured = capsys.readouterr()
    assert code == 0
    assert "Available commands:" in captured.out
    assert "init" in captured.out
    assert "serve" in captured.out
    repl_line = next(
        line for line in captured.out.splitlines() if "repl" in line
    )
    assert repl_line.endswith("(interactive)")


def test_help_known_command(capsys):
    code = cli.main(["help", "serve"])
    captured = capsys.readouterr()
    assert code == 0
    assert captured.out.startswith("serve: ")
    assert "Run `quiz serve --help`" in captured.out


def test_help_unknown_command(capsys):
    code = cli.main(["help", "does-not-exist"])
    captured = capsys.readouterr()
    assert code == 2
    assert "Unknown command" in captured.err
    assert "Available commands:" in captured.err


@pytest.mark.parametrize("flag", ["version", "--version", "-V"])
def test_version_variants(flag, capsys):
    code = cli.main([flag])
    captured = capsys.readouterr()
    assert code == 0
    assert captured.out.strip() == "0.0-test"


def test_unknown_command_errors(capsys):
    code = cli.main(["bogus"])
    captured = capsys.readouterr()
    assert code == 2
    assert "Unknown command" in captured.err
    assert "Available commands:" in captured.err


def test_dispatch_invokes_module_main_with_passthrough(monkeypatch):
    before = list(sys.argv)
    captured: dict[str, list[str]] = {}

    def stub_main(argv):
        captured["argv"] = list(argv)
        captured["sys_argv"] = list(sys.argv)
        return 7

    _stub_module(monkeypatch, "quiz_trainer.trainer._main", main=stub_main)
    code = cli.main(["repl", "--backend", "sql"])
    assert code == 7
    assert captured["argv"] == ["--backend", "sql"]
    assert captured["sys_argv"] == ["quiz repl", "--backend", "sql"]
    assert list(sys.argv) == before


def test_serve_dispatches_to_serve_main(monkeypatch):
    calls = []

    def stub_serve(argv):
        calls.append(list(argv))
        return 0

    _stub_module(
        monkeypatch, "quiz_trainer.trainer._main", serve_main=stub_serve
    )
    assert cli.main(["serve", "--port", "0"]) == 0
    assert calls == [["--port", "0"]]


def test_dispatch_supports_main_without_parameters(monkeypatch):
    called = {"count": 0}

    def stub_main():
        called["count"] += 1
        assert sys.argv[0] == "quiz init"

    _stub_module(monkeypatch, "quiz_trainer.workspace.cli", main=stub_main)
    code = cli.main(["init"])
    assert code == 0
    assert called["count"] == 1


@pytest.mark.parametrize(
    ("payload", "expected"), [(5, 5), (None, 0), ("boom", 1)]
)
def test_dispatch_normalizes_system_exit(
    monkeypatch, capsys, payload, expected
):
    def stub_main(argv):
        raise SystemExit(payload)

    _stub_module(monkeypatch, "quiz_trainer.workspace.cli", main=stub_main)
    code = cli.main(["init"])
    assert code == expected
    if payload == "boom":
        assert capsys.readouterr().err.strip() == "boom"


def test_dispatch_normalizes_non_int_return(monkeypatch):
    _stub_module(
        monkeypatch, "quiz_trainer.workspace.cli", main=lambda argv: "done"
    )
    assert cli.main(["init"]) == 0


def test_dispatch_supports_varargs_main(monkeypatch):
    captured = {}

    def stub_main(*received):
        captured["received"] = received
        return 3

    _stub_module(monkeypatch, "quiz_trainer.workspace.cli", main=stub_main)
    code = cli.main(["init", "--foo", "bar"])
    assert code == 3
    assert captured["received"] == (["--foo", "bar"],)


def test_accepts_argv_handles_signature_failure(monkeypatch):
    def boom(_func):
        raise TypeError("no signature")

    monkeypatch.setattr(cli.inspect, "signature", boom)

    assert cli._accepts_argv(lambda: None) is False


def test_quiz_cli_runs_init_end_to_end(tmp_path, capsys):
    target = tmp_path / "workspace"

    code = cli.main(["init", "--path", str(target)])

    captured = capsys.readouterr()
    assert code == 0
    assert "Workspace ready" in captured.out
    assert (target / "config" / "quiz-trainer.toml").is_file()


def test_command_table_is_sorted_by_name(monkeypatch, capsys):
    extra = cli.CommandSpec(name="audit", summary="Extra command.")
    monkeypatch.setattr(cli, "_COMMAND_SPECS", (*cli._COMMAND_SPECS, extra))

    cli.main(["list"])

    rows = capsys.readouterr().out.splitlines()[1:]
    names = [row.split()[0] for row in rows]
    assert names == ["audit", "init", "repl", "serve"]
