"""Shared TOML configuration helpers for the quiz trainer."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping, MutableMapping

try:  # Python >= 3.11 ships ``tomllib`` in the stdlib.
    import tomllib
except ModuleNotFoundError as exc:  # pragma: no cover
    raise RuntimeError("Python 3.11+ is required for tomllib support.") from exc

from dotenv import load_dotenv

__all__ = [
    "TomlConfigError",
    "find_config",
    "load_env",
    "load_toml",
    "merge_defaults",
    "write_toml_template",
]


class TomlConfigError(RuntimeError):
    """Raised when TOML config IO or validation fails."""


def load_env(dotenv_path: Path | None = None) -> None:
    """Populate ``os.environ`` from a ``.env`` file without overriding."""

    if dotenv_path is not None:
        load_dotenv(dotenv_path, override=False)
    else:
        load_dotenv(override=False)


def find_config(
    explicit: Path | None,
    *,
    env_var: str,
    default: Path | None,
    env: Mapping[str, str] | None = None,
) -> Path | None:
    """Resolve which config file to read.

    ``explicit`` wins and must exist. Otherwise ``env_var`` is consulted and
    must point at an existing file when set. Finally ``default`` is used if
    present on disk; a missing default simply means "use built-in values".
    """

    env_map = os.environ if env is None else env
    if explicit is not None:
        path = explicit.expanduser()
        if not path.is_file():
            raise TomlConfigError(f"Config file not found: {path}")
        return path
    custom = (env_map.get(env_var) or "").strip()
    if custom:
        path = Path(custom).expanduser()
        if not path.is_file():
            raise TomlConfigError(
                f"Config file from {env_var} not found: {path}"
            )
        return path
    if default is not None and default.is_file():
        return default
    return None


def load_toml(path: Path) -> Mapping[str, Any]:
    """Load a TOML document from ``path``.

    Errors are surfaced as :class:`TomlConfigError` instances so callers can
    translate them into domain-specific exceptions.
    """

    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except FileNotFoundError as exc:
        raise TomlConfigError(f"Config file not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise TomlConfigError(f"Failed to parse config TOML: {exc}") from exc


def merge_defaults(
    base: MutableMapping[str, Any],
    override: Mapping[str, Any],
    *,
    path: str = "",
) -> None:
    """Recursively merge ``override`` into ``base`` enforcing known keys."""

    for key, value in override.items():
        dotted = f"{path}{key}" if path else key
        if key not in base:
            raise TomlConfigError(f"Unknown configuration key '{dotted}'.")
        base_value = base[key]
        if isinstance(base_value, MutableMapping):
            if not isinstance(value, Mapping):
                raise TomlConfigError(
                    "Expected table for '{0}', found {1}.".format(
                        dotted,
                        type(value).__name__,
                    )
                )
            merge_defaults(base_value, value, path=f"{dotted}.")
            continue
        base[key] = value


def write_toml_template(
    path: Path,
    *,
    template: str,
    overwrite: bool = False,
    mode: int = 0o600,
) -> Path:
    """Write ``template`` to ``path`` honouring ``overwrite`` semantics."""

    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists() and not overwrite:
        raise TomlConfigError(f"Config already exists: {path}")
    with path.open("w", encoding="utf-8") as handle:
        handle.write(template)
    try:
        path.chmod(mode)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass
    return path
