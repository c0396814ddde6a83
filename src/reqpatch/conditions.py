"""Builders for the boolean condition fragments spliced into Luau sources."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from .errors import InvalidNameError

BASE_NAME = "require"
DEFAULT_FUNCTIONS: tuple[str, ...] = ("sharedRequire",)
_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def normalise_names(values: str | Iterable[str] | None) -> tuple[str, ...]:
    """Return the ordered, de-duplicated extra names derived from ``values``.

    ``values`` may be a comma-separated string or an iterable whose entries may
    themselves contain commas. Blank entries and ``BASE_NAME`` are discarded;
    anything that is not a C identifier raises ``InvalidNameError``.
    """
    if values is None:
        return ()
    if isinstance(values, str):
        raw_items: Iterable[str] = [values]
    else:
        raw_items = values

    seen: dict[str, None] = {}
    for raw in raw_items:
        if not isinstance(raw, str):
            continue
        for item in raw.split(","):
            name = item.strip()
            if not name or name == BASE_NAME:
                continue
            if not _IDENTIFIER.fullmatch(name):
                raise InvalidNameError(f"Invalid function name: {name!r}", details={"name": name})
            seen.setdefault(name, None)
    return tuple(seen)


def _operand(name: str, quoted: bool) -> str:
    return f'"{name}"' if quoted else name


def equality_check(field: str, name: str, *, quoted: bool = True) -> str:
    return f"{field} == {_operand(name, quoted)}"


def inequality_check(field: str, name: str, *, quoted: bool = True) -> str:
    return f"{field} != {_operand(name, quoted)}"


def disjunction(field: str, names: Sequence[str], *, base: str | None = BASE_NAME) -> str:
    """Join equality checks for ``base`` and every name with ``||``."""
    checks = [equality_check(field, base)] if base is not None else []
    checks.extend(equality_check(field, name) for name in names)
    return " || ".join(checks)


def conjunction(
    field: str,
    names: Sequence[str],
    *,
    base: str | None = None,
    base_quoted: bool = True,
) -> str:
    """Join inequality checks for ``base`` (when given) and every name with ``&&``."""
    checks = [inequality_check(field, base, quoted=base_quoted)] if base is not None else []
    checks.extend(inequality_check(field, name) for name in names)
    return " && ".join(checks)
