"""Static registry of the Luau source sites rewritten by the patcher.

Each ``PatchDescriptor`` pins one mutation site to the textual shapes it can
take in the upstream snapshot:

``pattern``
    The pristine, unpatched fragment. Named groups ``indent`` and
    ``body_indent`` capture the whitespace reused by ``build_replacement``.

``merge_pattern``
    A fragment already rewritten by an earlier run, possibly with a different
    set of names. The ``condition`` group is the boolean expression that new
    checks are appended to.

``base_token`` / ``check_template``
    The literal checks whose joint presence proves a file is fully patched
    when neither structural pattern matches.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Pattern

from .conditions import BASE_NAME, conjunction, disjunction


@dataclass(frozen=True, slots=True)
class PatchContext:
    """Whitespace captured from a pristine match."""

    indent: str = ""
    body_indent: str = ""

    @classmethod
    def from_match(cls, match: re.Match[str]) -> "PatchContext":
        groups = match.groupdict()
        return cls(indent=groups.get("indent") or "", body_indent=groups.get("body_indent") or "")


ReplacementBuilder = Callable[[PatchContext, Sequence[str]], str]


@dataclass(frozen=True, slots=True)
class PatchDescriptor:
    """Immutable description of one file-level rewrite."""

    name: str
    relative_path: str
    pattern: Pattern[str]
    build_replacement: ReplacementBuilder = field(repr=False)
    check_template: str
    base_token: str
    connective: str = " || "
    merge_pattern: Pattern[str] | None = None

    def required_checks(self, names: Sequence[str]) -> list[str]:
        return [self.check_template.format(name=name) for name in names]

    def idempotency_tokens(self, names: Sequence[str]) -> list[str]:
        return [self.base_token, *self.required_checks(names)]


_TRACER_PATTERN = re.compile(
    r"^(?P<indent>[ \t]*)if\s*\(\s*global\s*&&\s*global->name\s*==\s*\"require\"\s*&&\s*"
    r"expr->args\.size\s*>=\s*1\s*\)[ \t]*\n"
    r"(?P<body_indent>[ \t]*)requireCalls\.push_back\(expr\);\n",
    re.MULTILINE,
)
_TRACER_MERGE_PATTERN = re.compile(
    r"^[ \t]*if\s*\(\s*global\s*&&\s*expr->args\.size\s*>=\s*1\s*&&\s*\((?P<condition>[^)]+)\)\s*\)[ \t]*\n"
    r"[ \t]*requireCalls\.push_back\(expr\);\n",
    re.MULTILINE,
)

_NULLOPT_PATTERN = re.compile(
    r"^(?P<indent>[ \t]*)if\s*\(\s*!funcAsGlobal\s*\|\|\s*funcAsGlobal->name\s*!=\s*require\s*\)[ \t]*\n"
    r"(?P<body_indent>[ \t]*)return std::nullopt;\n",
    re.MULTILINE,
)
_NULLOPT_MERGE_PATTERN = re.compile(
    r"^[ \t]*if\s*\(\s*!funcAsGlobal\s*\|\|\s*\("
    r"(?P<condition>funcAsGlobal->name\s*!=\s*require(?:\s*&&\s*funcAsGlobal->name\s*!=\s*\"[^\"\n]*\")*)"
    r"\s*\)\s*\)[ \t]*\n"
    r"[ \t]*return std::nullopt;\n",
    re.MULTILINE,
)

_LINTER_PATTERN = re.compile(
    r"^(?P<indent>[ \t]*)return\s+glob->name\s*==\s*\"require\"\s*;\n",
    re.MULTILINE,
)
_LINTER_MERGE_PATTERN = re.compile(
    r"^[ \t]*return\s+"
    r"(?P<condition>glob->name\s*==\s*\"require\"(?:\s*\|\|\s*glob->name\s*==\s*\"[^\"\n]*\")+)"
    r"\s*;\n",
    re.MULTILINE,
)


def _build_tracer(context: PatchContext, names: Sequence[str]) -> str:
    condition = disjunction("global->name", names)
    return (
        f"{context.indent}if (global && expr->args.size >= 1 && ({condition}))\n"
        f"{context.body_indent}requireCalls.push_back(expr);\n"
    )


def _build_nullopt_guard(context: PatchContext, names: Sequence[str]) -> str:
    # ``require`` is the upstream local holding the builtin name, so it stays unquoted.
    condition = conjunction("funcAsGlobal->name", names, base=BASE_NAME, base_quoted=False)
    return (
        f"{context.indent}if (!funcAsGlobal || ({condition}))\n"
        f"{context.body_indent}return std::nullopt;\n"
    )


def _build_linter(context: PatchContext, names: Sequence[str]) -> str:
    return f"{context.indent}return {disjunction('glob->name', names)};\n"


def _nullopt_descriptor(name: str, relative_path: str) -> PatchDescriptor:
    return PatchDescriptor(
        name=name,
        relative_path=relative_path,
        pattern=_NULLOPT_PATTERN,
        build_replacement=_build_nullopt_guard,
        check_template='funcAsGlobal->name != "{name}"',
        base_token="funcAsGlobal->name != require",
        connective=" && ",
        merge_pattern=_NULLOPT_MERGE_PATTERN,
    )


DEFAULT_REGISTRY: tuple[PatchDescriptor, ...] = (
    PatchDescriptor(
        name="require-tracer",
        relative_path="Analysis/src/RequireTracer.cpp",
        pattern=_TRACER_PATTERN,
        build_replacement=_build_tracer,
        check_template='global->name == "{name}"',
        base_token='global->name == "require"',
        merge_pattern=_TRACER_MERGE_PATTERN,
    ),
    _nullopt_descriptor("constraint-generator", "Analysis/src/ConstraintGenerator.cpp"),
    _nullopt_descriptor("type-infer", "Analysis/src/TypeInfer.cpp"),
    PatchDescriptor(
        name="linter",
        relative_path="Analysis/src/Linter.cpp",
        pattern=_LINTER_PATTERN,
        build_replacement=_build_linter,
        check_template='glob->name == "{name}"',
        base_token='glob->name == "require"',
        merge_pattern=_LINTER_MERGE_PATTERN,
    ),
)


def validate_registry(registry: Iterable[PatchDescriptor]) -> None:
    """Raise ``ValueError`` when two descriptors target the same file."""
    seen: set[str] = set()
    for descriptor in registry:
        if descriptor.relative_path in seen:
            raise ValueError(f"Duplicate patch target: {descriptor.relative_path}")
        seen.add(descriptor.relative_path)


def get_descriptor(
    relative_path: str,
    registry: Iterable[PatchDescriptor] = DEFAULT_REGISTRY,
) -> PatchDescriptor:
    for descriptor in registry:
        if descriptor.relative_path == relative_path:
            return descriptor
    raise KeyError(relative_path)
