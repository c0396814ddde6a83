"""Drive the patch engine across every registered Luau source file."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from .conditions import BASE_NAME, normalise_names
from .engine import PatchState, inspect_content, patch_content
from .errors import MissingFileError, MissingRootError, PatternMismatchError, TargetIOError
from .registry import DEFAULT_REGISTRY, PatchDescriptor, validate_registry
from .telemetry import emit_patch_event

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class FileReport:
    """Per-file outcome of a run or status pass."""

    relative_path: str
    state: PatchState
    changed: bool = False
    added: tuple[str, ...] = ()


@dataclass(slots=True)
class PatchRunSummary:
    """Aggregate outcome of applying the registry to a Luau root."""

    root: Path
    names: tuple[str, ...]
    reports: list[FileReport] = field(default_factory=list)
    dry_run: bool = False

    @property
    def files_changed(self) -> int:
        return sum(1 for report in self.reports if report.changed)

    def format_summary(self) -> str:
        lines = []
        for report in self.reports:
            suffix = f" (+{len(report.added)} check(s))" if report.added else ""
            lines.append(f"- {report.relative_path}: {report.state.value}{suffix}")
        return "\n".join(lines)


def resolve_root(value: str | Path, cwd: Path | None = None) -> Path:
    """Resolve ``value`` against ``cwd`` and ensure the directory exists."""
    candidate = Path(value).expanduser()
    if not candidate.is_absolute():
        candidate = (cwd or Path.cwd()) / candidate
    candidate = candidate.resolve()
    if not candidate.is_dir():
        raise MissingRootError(f"Luau root not found: {candidate}", details={"root": candidate})
    return candidate


def _target_path(root: Path, descriptor: PatchDescriptor) -> Path:
    return root / descriptor.relative_path


def _read_target(root: Path, descriptor: PatchDescriptor) -> str:
    path = _target_path(root, descriptor)
    details = {"path": path, "descriptor": descriptor.name}
    try:
        with path.open("r", encoding="utf-8", newline="") as handle:
            return handle.read()
    except FileNotFoundError as error:
        raise MissingFileError(f"File not found: {path}", details=details) from error
    except UnicodeDecodeError as error:
        raise TargetIOError(f"File is not valid UTF-8: {path} ({error.reason})", details=details) from error
    except OSError as error:
        raise TargetIOError(f"Failed to read {path}: {error}", details=details) from error


def _write_target(root: Path, descriptor: PatchDescriptor, content: str) -> None:
    path = _target_path(root, descriptor)
    try:
        with path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(content)
    except OSError as error:
        raise TargetIOError(
            f"Failed to write {path}: {error}",
            details={"path": path, "descriptor": descriptor.name},
        ) from error


def _load_targets(root: Path, registry: Sequence[PatchDescriptor]) -> list[str]:
    """Read every target before any write so a missing or undecodable file refuses the run."""
    for descriptor in registry:
        path = _target_path(root, descriptor)
        if not path.is_file():
            raise MissingFileError(
                f"File not found: {path}",
                details={"path": path, "descriptor": descriptor.name},
            )
    return [_read_target(root, descriptor) for descriptor in registry]


_STATE_EVENTS = {
    PatchState.PRISTINE: "patch.applied",
    PatchState.MERGEABLE: "patch.merged",
    PatchState.PATCHED: "patch.unchanged",
}


def apply_registry(
    root: Path,
    names: Sequence[str],
    *,
    registry: Sequence[PatchDescriptor] = DEFAULT_REGISTRY,
    dry_run: bool = False,
) -> PatchRunSummary:
    """Patch every descriptor's file under ``root`` in registry order.

    Files written before a fatal error stay written; there is no rollback.
    """
    validate_registry(registry)
    names = normalise_names(names)
    summary = PatchRunSummary(root=root, names=names, dry_run=dry_run)
    sources = _load_targets(root, registry)

    for descriptor, source in zip(registry, sources):
        try:
            outcome = patch_content(descriptor, source, names)
        except PatternMismatchError as error:
            emit_patch_event("patch.mismatch", path=descriptor.relative_path, reason=str(error))
            raise

        if outcome.changed and not dry_run:
            _write_target(root, descriptor, outcome.content)

        emit_patch_event(
            _STATE_EVENTS[outcome.state],
            path=descriptor.relative_path,
            added=outcome.added,
            dry_run=dry_run,
        )
        summary.reports.append(
            FileReport(
                relative_path=descriptor.relative_path,
                state=outcome.state,
                changed=outcome.changed,
                added=outcome.added,
            )
        )

    LOGGER.info(
        "Processed %d file(s) for %s; %d changed%s",
        len(summary.reports),
        ", ".join([BASE_NAME, *names]),
        summary.files_changed,
        " (dry run)" if dry_run else "",
    )
    return summary


def inspect_registry(
    root: Path,
    names: Sequence[str],
    *,
    registry: Sequence[PatchDescriptor] = DEFAULT_REGISTRY,
) -> list[FileReport]:
    """Report the state of every target without writing anything."""
    validate_registry(registry)
    names = normalise_names(names)
    sources = _load_targets(root, registry)
    return [
        FileReport(relative_path=descriptor.relative_path, state=inspect_content(descriptor, source, names))
        for descriptor, source in zip(registry, sources)
    ]
