"""Python detective using the ast module."""

from __future__ import annotations

import ast
import sys

from dep_tree.models import DetectiveOptions
from dep_tree.detective.base import BaseDetective

_CORE_MODULES: frozenset[str] = frozenset(sys.stdlib_module_names)


def _is_type_checking_guard(test: ast.expr) -> bool:
    if isinstance(test, ast.Name):
        return test.id == "TYPE_CHECKING"
    if isinstance(test, ast.Attribute):
        return test.attr == "TYPE_CHECKING"
    return False


class _ImportCollector(ast.NodeVisitor):
    """Collect import specifiers in source order."""

    def __init__(self, options: DetectiveOptions):
        self.options = options
        self.specifiers: list[str] = []

    def visit_If(self, node: ast.If) -> None:
        if self.options.skip_type_imports and _is_type_checking_guard(node.test):
            # Only the guarded body is typing-only; the else branch runs.
            for child in node.orelse:
                self.visit(child)
            return
        self.generic_visit(node)

    def visit_Import(self, node: ast.Import) -> None:
        for alias in node.names:
            self._add(alias.name)

    def visit_ImportFrom(self, node: ast.ImportFrom) -> None:
        package = "." * node.level + (node.module or "")
        if node.module:
            self._add(package)
        # each imported name may itself be a submodule of the package
        prefix = package + "." if node.module else package
        for alias in node.names:
            if alias.name != "*":
                self._add(prefix + alias.name)

    def _add(self, specifier: str) -> None:
        if not self.options.include_core and not specifier.startswith("."):
            if specifier.split(".")[0] in _CORE_MODULES:
                return
        self.specifiers.append(specifier)


class PythonDetective(BaseDetective):
    extensions = (".py", ".pyi")

    def detect(self, source: str, options: DetectiveOptions) -> list[str]:
        tree = ast.parse(source)
        collector = _ImportCollector(options)
        collector.visit(tree)
        return collector.specifiers
