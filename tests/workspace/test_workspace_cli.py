from __future__ import annotations

from quiz_trainer.workspace import cli


def test_quiz_init_creates_workspace(tmp_path, capsys, monkeypatch):
    target = tmp_path / "workspace"
    monkeypatch.setenv("QUIZ_TRAINER_DATA_HOME", str(target))

    code = cli.main([])

    captured = capsys.readouterr()
    assert code == 0
    assert "Workspace ready" in captured.out
    assert target.is_dir()
    config_file = target / "config" / "quiz-trainer.toml"
    assert config_file.is_file()
    assert "(written)" in captured.out


def test_quiz_init_keeps_existing_config(tmp_path, capsys):
    target = tmp_path / "custom"
    cli.main(["--path", str(target), "--quiet"])
    config_file = target / "config" / "quiz-trainer.toml"
    config_file.write_text("[server]\nport = 4000\n", encoding="utf-8")

    code = cli.main(["--path", str(target)])

    captured = capsys.readouterr()
    assert code == 0
    assert str(target) in captured.out
    assert "(exists)" in captured.out.splitlines()[-1]
    assert "port = 4000" in config_file.read_text(encoding="utf-8")


def test_quiz_init_force_rewrites_config(tmp_path):
    target = tmp_path / "forced"
    cli.main(["--path", str(target), "--quiet"])
    config_file = target / "config" / "quiz-trainer.toml"
    config_file.write_text("", encoding="utf-8")

    code = cli.main(["--path", str(target), "--force", "--quiet"])

    assert code == 0
    assert "[store]" in config_file.read_text(encoding="utf-8")


def test_quiz_init_quiet_mode(tmp_path, capsys, monkeypatch):
    target = tmp_path / "quiet"
    monkeypatch.setenv("QUIZ_TRAINER_DATA_HOME", str(target))

    code = cli.main(["--quiet"])

    captured = capsys.readouterr()
    assert code == 0
    assert captured.out == ""


def test_quiz_init_reports_file_in_the_way(tmp_path, capsys):
    target = tmp_path / "blocked"
    target.write_text("not a directory", encoding="utf-8")

    code = cli.main(["--path", str(target)])

    assert code == 1
    assert "Error:" in capsys.readouterr().err
