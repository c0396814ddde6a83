"""Three-tier patch state machine applied to a single file's text."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Pattern

from .errors import PatternMismatchError
from .registry import PatchContext, PatchDescriptor

LOGGER = logging.getLogger(__name__)


class PatchState(str, Enum):
    """Shape detected for a descriptor in a file's current text."""

    PRISTINE = "pristine"
    MERGEABLE = "mergeable"
    PATCHED = "patched"
    MISMATCH = "mismatch"


@dataclass(slots=True)
class PatchOutcome:
    """Result of running one descriptor against one file."""

    descriptor: PatchDescriptor
    state: PatchState
    content: str
    original: str = field(repr=False, default="")
    added: tuple[str, ...] = ()

    @property
    def changed(self) -> bool:
        return self.content != self.original


@dataclass(slots=True)
class _Classification:
    state: PatchState
    match: re.Match[str] | None = None
    missing: tuple[str, ...] = ()


def _find_single(
    pattern: Pattern[str],
    content: str,
    descriptor: PatchDescriptor,
    kind: str,
) -> re.Match[str] | None:
    """Return the unique match of ``pattern`` or ``None``; several matches are fatal."""
    matches = list(pattern.finditer(content))
    if not matches:
        return None
    if len(matches) > 1:
        raise PatternMismatchError(
            f"Ambiguous {kind} pattern in {descriptor.relative_path}: {len(matches)} matches.",
            details={"path": descriptor.relative_path, "descriptor": descriptor.name, "matches": len(matches)},
        )
    return matches[0]


def _classify(descriptor: PatchDescriptor, content: str, names: Sequence[str]) -> _Classification:
    match = _find_single(descriptor.pattern, content, descriptor, "pristine")
    if match is not None:
        # Without extra names the pristine guard already encodes the base-only condition.
        if not names:
            return _Classification(PatchState.PATCHED, match)
        return _Classification(PatchState.PRISTINE, match, tuple(descriptor.required_checks(names)))

    if descriptor.merge_pattern is not None:
        match = _find_single(descriptor.merge_pattern, content, descriptor, "merge")
        if match is not None:
            condition = match.group("condition")
            missing = tuple(check for check in descriptor.required_checks(names) if check not in condition)
            if not missing:
                return _Classification(PatchState.PATCHED, match)
            return _Classification(PatchState.MERGEABLE, match, missing)

    if all(token in content for token in descriptor.idempotency_tokens(names)):
        return _Classification(PatchState.PATCHED)
    return _Classification(PatchState.MISMATCH)


def inspect_content(descriptor: PatchDescriptor, content: str, names: Sequence[str]) -> PatchState:
    """Classify ``content`` without modifying it; ambiguity counts as a mismatch."""
    try:
        return _classify(descriptor, content, names).state
    except PatternMismatchError:
        return PatchState.MISMATCH


def patch_content(descriptor: PatchDescriptor, content: str, names: Sequence[str]) -> PatchOutcome:
    """Rewrite ``content`` so every name in ``names`` is handled at the descriptor's site.

    Raises ``PatternMismatchError`` when the file matches none of the shapes the
    descriptor understands.
    """
    result = _classify(descriptor, content, names)

    if result.state is PatchState.PRISTINE and result.match is not None:
        start, end = result.match.span()
        replacement = descriptor.build_replacement(PatchContext.from_match(result.match), names)
        patched = content[:start] + replacement + content[end:]
        LOGGER.debug("Rewrote pristine site %s in %s", descriptor.name, descriptor.relative_path)
        return PatchOutcome(descriptor, result.state, patched, content, result.missing)

    if result.state is PatchState.MERGEABLE and result.match is not None:
        start, end = result.match.span("condition")
        condition = result.match.group("condition")
        merged = descriptor.connective.join([condition, *result.missing])
        patched = content[:start] + merged + content[end:]
        LOGGER.debug(
            "Merged %d check(s) into %s in %s",
            len(result.missing),
            descriptor.name,
            descriptor.relative_path,
        )
        return PatchOutcome(descriptor, result.state, patched, content, result.missing)

    if result.state is PatchState.PATCHED:
        return PatchOutcome(descriptor, result.state, content, content)

    raise PatternMismatchError(
        f"Could not find expected pattern in {descriptor.relative_path}. Upstream layout changed.",
        details={"path": descriptor.relative_path, "descriptor": descriptor.name},
    )
