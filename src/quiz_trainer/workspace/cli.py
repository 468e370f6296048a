"""``quiz init``: bootstrap the workspace and its config file."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Mapping, Sequence

from quiz_trainer.core import config_templates
from quiz_trainer.core import workspace as workspace_mod


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quiz init",
        description=(
            "Bootstrap the quiz trainer workspace (config, logs, database "
            "directories) and write a starter configuration file."
        ),
    )
    parser.add_argument(
        "--path",
        type=Path,
        help=(
            "Override the workspace root (defaults to QUIZ_TRAINER_DATA_HOME "
            "or ~/.quiz-trainer-data)."
        ),
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing configuration file.",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress informational output on success.",
    )
    return parser


def _format_created(created: Mapping[str, bool], key: str) -> str:
    return "created" if created.get(key, False) else "exists"


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        layout = workspace_mod.ensure_workspace(path=args.path)
    except workspace_mod.WorkspaceError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 1

    template = config_templates.get_template("trainer")
    config_path = layout.config_file
    config_status = "exists"
    if args.force or not config_path.exists():
        try:
            template.write(config_path, overwrite=args.force)
        except config_templates.ConfigTemplateError as exc:
            sys.stderr.write(f"Error: {exc}\n")
            return 1
        config_status = "written"

    if args.quiet:
        return 0

    lines = [
        f"Workspace ready at {layout.home} "
        f"({_format_created(layout.created, 'home')})"
    ]
    width = max(len(name) for name in layout.directories)
    lines.append("Subdirectories:")
    for name, directory in layout.items():
        status = _format_created(layout.created, name)
        lines.append(f"  {name.ljust(width)}  {directory} ({status})")
    lines.append(f"Config: {config_path} ({config_status})")

    sys.stdout.write("\n".join(lines) + "\n")
    return 0


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
