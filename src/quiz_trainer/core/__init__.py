"""Core shared helpers for quiz trainer commands."""

from __future__ import annotations

from .config import (
    TomlConfigError,
    find_config,
    load_env,
    load_toml,
    merge_defaults,
    write_toml_template,
)
from .config_templates import (
    ConfigTemplate,
    ConfigTemplateError,
    get_template,
    iter_templates,
)
from .logging import (
    JsonLogFormatter,
    bind_session,
    configure_logger,
    shutdown_logger,
)
from .workspace import (
    WORKSPACE_ENV,
    WorkspaceError,
    WorkspaceLayout,
    ensure_workspace,
)

__all__ = [
    "TomlConfigError",
    "find_config",
    "load_env",
    "load_toml",
    "merge_defaults",
    "write_toml_template",
    "ConfigTemplate",
    "ConfigTemplateError",
    "get_template",
    "iter_templates",
    "JsonLogFormatter",
    "bind_session",
    "configure_logger",
    "shutdown_logger",
    "WORKSPACE_ENV",
    "WorkspaceError",
    "WorkspaceLayout",
    "ensure_workspace",
]
