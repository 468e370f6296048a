"""Shared testing fixtures for the quiz trainer test suite."""

from .sessions import ScriptedSession  # noqa: F401

__all__ = ["ScriptedSession"]
