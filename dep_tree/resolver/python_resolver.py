"""Python module resolver."""

from __future__ import annotations

from pathlib import Path

from dep_tree.models import ResolveOptions
from dep_tree.resolver.base import BaseResolver


def import_root(filename: Path) -> Path:
    """Return the directory that holds ``filename``'s top-most package."""
    directory = filename.parent
    while (directory / "__init__.py").is_file() and directory.parent != directory:
        directory = directory.parent
    return directory


class PythonResolver(BaseResolver):

    def resolve(self, specifier: str, filename: Path, options: ResolveOptions) -> Path | None:
        module = specifier.lstrip(".")
        level = len(specifier) - len(module)

        if level:
            base = filename.parent
            for _ in range(level - 1):
                base = base.parent
            roots = [base]
        else:
            roots = self._search_roots(filename, options)

        parts = [p for p in module.split(".") if p]
        found = self._find_in_roots(roots, parts)
        if found is None and parts and (level or len(parts) > 1):
            # ``from pkg import name`` where ``name`` is defined in the package
            found = self._find_in_roots(roots, parts[:-1])
        return found

    def _find_in_roots(self, roots: list[Path], parts: list[str]) -> Path | None:
        for root in roots:
            found = self._find_module(root, parts)
            if found is not None:
                return found
        return None

    def _search_roots(self, filename: Path, options: ResolveOptions) -> list[Path]:
        roots: list[Path] = []
        if options.directory is not None:
            roots.append(Path(options.directory))
        roots.extend(Path(p) for p in options.python_paths)
        roots.append(import_root(filename))
        return list(dict.fromkeys(roots))

    def _find_module(self, root: Path, parts: list[str]) -> Path | None:
        if not parts:
            return self._first_file([root / "__init__.py"])
        target = root.joinpath(*parts)
        return self._first_file([
            target / "__init__.py",
            target.with_name(parts[-1] + ".py"),
            target.with_name(parts[-1] + ".pyi"),
        ])
