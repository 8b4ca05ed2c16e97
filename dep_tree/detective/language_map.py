"""Shared extension-to-language mapping for detectives and resolvers."""

from __future__ import annotations

from dep_tree.models import Language

# Maps file extension -> (Language enum, tree-sitter grammar name)
EXT_TO_LANGUAGE: dict[str, tuple[Language, str]] = {
    ".py": (Language.PYTHON, "python"),
    ".pyi": (Language.PYTHON, "python"),
    ".js": (Language.JAVASCRIPT, "javascript"),
    ".jsx": (Language.JAVASCRIPT, "javascript"),
    ".mjs": (Language.JAVASCRIPT, "javascript"),
    ".cjs": (Language.JAVASCRIPT, "javascript"),
    ".ts": (Language.TYPESCRIPT, "typescript"),
    ".mts": (Language.TYPESCRIPT, "typescript"),
    ".cts": (Language.TYPESCRIPT, "typescript"),
    ".tsx": (Language.TYPESCRIPT, "tsx"),
}

# Extensions handled by tree-sitter (Python uses stdlib ast)
TREESITTER_EXTENSIONS: set[str] = {
    ext for ext, (lang, _) in EXT_TO_LANGUAGE.items()
    if lang != Language.PYTHON
}


def language_for(suffix: str) -> Language | None:
    entry = EXT_TO_LANGUAGE.get(suffix)
    return entry[0] if entry else None
