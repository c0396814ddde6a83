"""CLI commands for patching require-like functions into a Luau source tree."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer

from .conditions import BASE_NAME
from .config import PatcherSettings, load_settings
from .engine import PatchState
from .errors import PatchError
from .orchestrator import apply_registry, inspect_registry, resolve_root

APP_HELP = "Teach Luau's require tracing to accept additional require-like functions."
LOG_PREFIX = "[patch]"

app = typer.Typer(help=APP_HELP)

LUAU_ROOT_OPTION = typer.Option(
    None,
    "--luau-root",
    "-r",
    envvar="REQPATCH_LUAU_ROOT",
    help="Path to the Luau source tree (default: ./luau).",
)
FUNCTIONS_OPTION = typer.Option(
    None,
    "--functions",
    "-f",
    envvar="REQPATCH_FUNCTIONS",
    help="Comma-separated function names to treat like require (default: sharedRequire).",
)
CONFIG_OPTION = typer.Option(
    None,
    "--config",
    "-c",
    help="Path to a YAML settings file (default: ./reqpatch.yaml when present).",
)
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Enable debug logging and telemetry.")


@dataclass(slots=True)
class _Invocation:
    settings: PatcherSettings
    root: Path
    names: tuple[str, ...]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _fail(error: PatchError) -> typer.Exit:
    typer.echo(f"{LOG_PREFIX} {error}", err=True)
    return typer.Exit(code=1)


def _prepare(
    luau_root: Optional[str],
    functions: Optional[str],
    config: Optional[str],
    dry_run: Optional[bool] = None,
) -> _Invocation:
    """Layer CLI/env values over the config file and resolve the Luau root."""
    settings = load_settings(Path(config) if config else None, explicit=config is not None)
    settings = settings.merged(luau_root=luau_root, functions=functions, dry_run=dry_run)
    root = resolve_root(settings.luau_root)
    return _Invocation(settings=settings, root=root, names=tuple(settings.functions))


@app.command()
def apply(
    luau_root: Optional[str] = LUAU_ROOT_OPTION,
    functions: Optional[str] = FUNCTIONS_OPTION,
    config: Optional[str] = CONFIG_OPTION,
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Report the files that would change without writing them.",
    ),
    verbose: bool = VERBOSE_OPTION,
    legacy_file: Optional[str] = typer.Option(None, "--file", hidden=True),
) -> None:
    """Patch the Luau tree so every listed function is traced like require."""
    _configure_logging(verbose)
    if legacy_file is not None:
        logging.getLogger(__name__).debug("Ignoring legacy --file %s", legacy_file)

    try:
        invocation = _prepare(luau_root, functions, config, dry_run or None)
        summary = apply_registry(invocation.root, invocation.names, dry_run=invocation.settings.dry_run)
    except PatchError as error:
        raise _fail(error) from error

    if summary.files_changed == 0:
        typer.echo(f"{LOG_PREFIX} No changes applied (already patched).")
        return

    functions_label = ", ".join([BASE_NAME, *summary.names])
    if summary.dry_run:
        typer.echo(f"{LOG_PREFIX} Dry run for: {functions_label}")
        typer.echo(f"{LOG_PREFIX} Would update files: {summary.files_changed}")
        typer.echo(summary.format_summary())
    else:
        typer.echo(f"{LOG_PREFIX} Applied require-like patch for: {functions_label}")
        typer.echo(f"{LOG_PREFIX} Updated files: {summary.files_changed}")


@app.command()
def status(
    luau_root: Optional[str] = LUAU_ROOT_OPTION,
    functions: Optional[str] = FUNCTIONS_OPTION,
    config: Optional[str] = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Show whether each target file is already patched; exit 1 otherwise."""
    _configure_logging(verbose)
    try:
        invocation = _prepare(luau_root, functions, config)
        reports = inspect_registry(invocation.root, invocation.names)
    except PatchError as error:
        raise _fail(error) from error

    for report in reports:
        typer.echo(f"{LOG_PREFIX} {report.relative_path}: {report.state.value}")

    if any(report.state is not PatchState.PATCHED for report in reports):
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
