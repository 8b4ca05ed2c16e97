"""Detective registry and dispatcher."""

from __future__ import annotations

import logging
from pathlib import Path

from dep_tree.models import DetectiveOptions
from dep_tree.detective.base import BaseDetective
from dep_tree.detective.python_detective import PythonDetective
from dep_tree.detective.treesitter_detective import TreeSitterDetective

logger = logging.getLogger(__name__)

_DETECTIVES: list[BaseDetective] = [PythonDetective(), TreeSitterDetective()]

_BY_EXTENSION: dict[str, BaseDetective] = {
    ext: detective for detective in _DETECTIVES for ext in detective.extensions
}


def get_detective(file_path: Path) -> BaseDetective | None:
    return _BY_EXTENSION.get(Path(file_path).suffix)


def get_dependencies(file_path: Path, options: DetectiveOptions | None = None) -> list[str]:
    """Return the raw dependency specifiers of ``file_path``.

    Never raises: unreadable or unparsable files, and files with no
    registered detective, have no dependencies.
    """
    file_path = Path(file_path)
    detective = get_detective(file_path)
    if detective is None:
        return []
    try:
        return detective.dependencies(file_path, options or DetectiveOptions())
    except Exception as e:
        logger.debug("Could not parse %s: %s", file_path, e)
        return []


__all__ = [
    "BaseDetective",
    "PythonDetective",
    "TreeSitterDetective",
    "get_detective",
    "get_dependencies",
]
