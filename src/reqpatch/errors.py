"""Exception hierarchy raised while patching a Luau source tree."""

from __future__ import annotations

from typing import Any, Mapping


class PatchError(RuntimeError):
    """Raised when the Luau tree cannot be patched safely."""

    def __init__(self, message: str, *, details: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = dict(details or {})


class MissingRootError(PatchError):
    """The configured Luau root directory does not exist."""


class MissingFileError(PatchError):
    """An expected target file is absent from the Luau root."""


class PatternMismatchError(PatchError):
    """None of a descriptor's known shapes matched the target file."""


class ConfigError(PatchError):
    """The configuration file could not be loaded or validated."""


class TargetIOError(PatchError):
    """A target file could not be decoded as UTF-8, read, or written."""


class InvalidNameError(PatchError, ValueError):
    """A requested function name is not a valid identifier."""
