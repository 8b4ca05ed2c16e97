"""Resolver registry."""

from __future__ import annotations

from pathlib import Path

from dep_tree.models import Language, ResolveOptions
from dep_tree.detective.language_map import language_for
from dep_tree.resolver.base import BaseResolver
from dep_tree.resolver.js_resolver import JsResolver
from dep_tree.resolver.python_resolver import PythonResolver

_RESOLVERS: dict[Language, BaseResolver] = {
    Language.PYTHON: PythonResolver(),
    Language.JAVASCRIPT: JsResolver(),
    Language.TYPESCRIPT: JsResolver(),
}


def resolve_dependency(
    specifier: str,
    filename: Path,
    options: ResolveOptions | None = None,
) -> Path | None:
    """Resolve ``specifier`` as written in ``filename``.

    The resolver is chosen by the language of the importing file.
    Returns ``None`` when the specifier cannot be resolved.
    """
    filename = Path(filename)
    language = language_for(filename.suffix)
    resolver = _RESOLVERS.get(language) if language else None
    if resolver is None:
        return None
    return resolver.resolve(specifier, filename, options or ResolveOptions())


__all__ = [
    "BaseResolver",
    "JsResolver",
    "PythonResolver",
    "resolve_dependency",
]
