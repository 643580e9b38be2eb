"""Exception types raised by nsrules."""

from __future__ import annotations

from pathlib import Path


class NsRulesError(Exception):
    """Base class for errors that abort an nsrules run."""


class InvalidPattern(NsRulesError, ValueError):
    """A namespace pattern string could not be compiled."""

    def __init__(self, pattern: str, detail: str):
        super().__init__(detail)
        self.pattern = pattern
        self.detail = detail


class ConfigError(NsRulesError, ValueError):
    """The configuration file could not be turned into rules.

    The message names the problem; ``path`` names the file so that callers can
    point the user at it.
    """

    def __init__(self, path: Path, problem: str):
        super().__init__(f"there was a problem loading the configuration file: {problem}")
        self.path = path
        self.problem = problem

    @property
    def help(self) -> str:
        return f"the configuration file is at {self.path}"
