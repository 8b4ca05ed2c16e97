"""JavaScript/TypeScript resolver: relative paths, aliases and node_modules."""

from __future__ import annotations

import json
import os
from pathlib import Path

from dep_tree.models import ResolveOptions
from dep_tree.resolver.base import BaseResolver

_TS_SOURCES = (".ts", ".tsx", ".mts", ".cts")


def _is_relative(specifier: str) -> bool:
    return specifier in (".", "..") or specifier.startswith(("./", "../"))


def _apply_alias(specifier: str, options: ResolveOptions) -> str | None:
    """Rewrite ``specifier`` through the longest matching alias prefix."""
    for name in sorted(options.aliases, key=len, reverse=True):
        if specifier == name or specifier.startswith(name.rstrip("/") + "/"):
            target = options.aliases[name]
            rest = specifier[len(name):].lstrip("/")
            base = Path(target)
            if not base.is_absolute() and options.directory is not None:
                base = Path(options.directory) / base
            return str(base / rest) if rest else str(base)
    return None


class JsResolver(BaseResolver):

    def resolve(self, specifier: str, filename: Path, options: ResolveOptions) -> Path | None:
        # Drop query strings and loader prefixes (e.g. "raw!./file.txt?inline")
        specifier = specifier.split("!")[-1].split("?")[0]
        if not specifier:
            return None

        aliased = _apply_alias(specifier, options)
        if aliased is not None:
            return self._resolve_path(Path(aliased), filename, options)
        if _is_relative(specifier):
            return self._resolve_path(filename.parent / specifier, filename, options)
        if os.path.isabs(specifier):
            return self._resolve_path(Path(specifier), filename, options)
        return self._resolve_package(specifier, filename, options)

    def _extensions(self, options: ResolveOptions) -> list[str]:
        if options.no_type_definitions:
            return [ext for ext in options.extensions if ext != ".d.ts"]
        return list(options.extensions)

    def _resolve_path(self, target: Path, filename: Path, options: ResolveOptions) -> Path | None:
        extensions = self._extensions(options)
        found = self._resolve_file(target, filename, extensions)
        if found is not None:
            return found
        if target.is_dir():
            return self._resolve_directory(target, filename, extensions)
        return None

    def _resolve_file(self, target: Path, filename: Path, extensions: list[str]) -> Path | None:
        candidates = [target]
        if target.name:
            candidates.extend(target.with_name(target.name + ext) for ext in extensions)
        # TypeScript sources import their siblings with the emitted .js name
        if filename.suffix in _TS_SOURCES and target.suffix == ".js":
            candidates.extend(target.with_suffix(ext) for ext in (".ts", ".tsx"))
        return self._first_file(candidates)

    def _resolve_directory(self, directory: Path, filename: Path, extensions: list[str]) -> Path | None:
        manifest = directory / "package.json"
        if manifest.is_file():
            try:
                main = json.loads(manifest.read_text(encoding="utf-8")).get("main")
            except (OSError, ValueError):
                main = None
            if isinstance(main, str) and main:
                found = self._resolve_file(directory / main, filename, extensions)
                if found is None and (directory / main).is_dir():
                    found = self._first_file(
                        (directory / main / ("index" + ext) for ext in extensions)
                    )
                if found is not None:
                    return found
        return self._first_file(directory / ("index" + ext) for ext in extensions)

    def _resolve_package(self, specifier: str, filename: Path, options: ResolveOptions) -> Path | None:
        for directory in (filename.parent, *filename.parent.parents):
            modules = directory / "node_modules"
            if not modules.is_dir():
                continue
            found = self._resolve_path(modules / specifier, filename, options)
            if found is not None:
                return found
        return None
