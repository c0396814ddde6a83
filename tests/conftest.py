from __future__ import annotations

import sys
import textwrap
from dataclasses import dataclass
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


REQUIRE_TRACER_SOURCE = textwrap.dedent(
    """
    // This file is part of the Luau programming language and is licensed under MIT License
    #include "Luau/RequireTracer.h"

    namespace Luau
    {

    struct RequireTracer : AstVisitor
    {
        bool visit(AstExprCall* expr) override
        {
            AstExprGlobal* global = expr->func->as<AstExprGlobal>();

            if (global && global->name == "require" && expr->args.size >= 1)
                requireCalls.push_back(expr);

            return true;
        }

        std::vector<AstExprCall*> requireCalls;
    };

    } // namespace Luau
    """
).lstrip()

NULLOPT_GUARD_SOURCE = textwrap.dedent(
    """
    // This file is part of the Luau programming language and is licensed under MIT License
    #include "Luau/Ast.h"

    static std::optional<AstExpr*> matchRequire(const AstExprCall& call)
    {
        const char* require = "require";

        if (call.args.size != 1)
            return std::nullopt;

        const AstExprGlobal* funcAsGlobal = call.func->as<AstExprGlobal>();
        if (!funcAsGlobal || funcAsGlobal->name != require)
            return std::nullopt;

        return call.args.data[0];
    }
    """
).lstrip()

LINTER_SOURCE = textwrap.dedent(
    """
    // This file is part of the Luau programming language and is licensed under MIT License
    #include "Luau/Linter.h"

    static bool isRequire(AstExpr* expr)
    {
        if (AstExprGlobal* glob = expr->as<AstExprGlobal>())
            return glob->name == "require";

        return false;
    }
    """
).lstrip()

PRISTINE_SOURCES: dict[str, str] = {
    "Analysis/src/RequireTracer.cpp": REQUIRE_TRACER_SOURCE,
    "Analysis/src/ConstraintGenerator.cpp": NULLOPT_GUARD_SOURCE,
    "Analysis/src/TypeInfer.cpp": NULLOPT_GUARD_SOURCE,
    "Analysis/src/Linter.cpp": LINTER_SOURCE,
}


@dataclass(slots=True)
class LuauTree:
    """Synthetic Luau checkout containing only the patched sources."""

    root: Path

    def path(self, relative: str) -> Path:
        return self.root / relative

    def read(self, relative: str) -> str:
        return self.path(relative).read_text(encoding="utf-8")

    def write(self, relative: str, content: str) -> None:
        self.path(relative).write_text(content, encoding="utf-8")

    def snapshot(self) -> dict[str, str]:
        return {relative: self.read(relative) for relative in PRISTINE_SOURCES}


@pytest.fixture()
def luau_tree(tmp_path: Path) -> LuauTree:
    """Create a pristine Luau tree with the four known mutation sites."""

    root = tmp_path / "luau"
    for relative, content in PRISTINE_SOURCES.items():
        target = root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    return LuauTree(root=root)
