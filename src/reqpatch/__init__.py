"""Idempotent source patcher that adds require-like functions to Luau's analysis."""

from .conditions import BASE_NAME, DEFAULT_FUNCTIONS, conjunction, disjunction, normalise_names
from .engine import PatchOutcome, PatchState, inspect_content, patch_content
from .errors import (
    ConfigError,
    InvalidNameError,
    MissingFileError,
    MissingRootError,
    PatchError,
    PatternMismatchError,
    TargetIOError,
)
from .orchestrator import FileReport, PatchRunSummary, apply_registry, inspect_registry, resolve_root
from .registry import DEFAULT_REGISTRY, PatchContext, PatchDescriptor, get_descriptor, validate_registry

__all__ = [
    "BASE_NAME",
    "DEFAULT_FUNCTIONS",
    "DEFAULT_REGISTRY",
    "ConfigError",
    "FileReport",
    "InvalidNameError",
    "MissingFileError",
    "MissingRootError",
    "PatchContext",
    "PatchDescriptor",
    "PatchError",
    "PatchOutcome",
    "PatchRunSummary",
    "PatchState",
    "PatternMismatchError",
    "TargetIOError",
    "apply_registry",
    "conjunction",
    "disjunction",
    "get_descriptor",
    "inspect_content",
    "inspect_registry",
    "normalise_names",
    "patch_content",
    "resolve_root",
    "validate_registry",
]
