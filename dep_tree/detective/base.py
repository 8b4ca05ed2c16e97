"""Abstract base detective."""

from __future__ import annotations

import abc
from pathlib import Path

from dep_tree.models import DetectiveOptions


class BaseDetective(abc.ABC):
    """Base class for language-specific dependency detectives.

    A detective reads one file and returns the raw specifiers it imports,
    in source order and without duplicates. Specifiers are opaque strings
    that only a resolver knows how to turn into paths.
    """

    extensions: tuple[str, ...]

    @abc.abstractmethod
    def detect(self, source: str, options: DetectiveOptions) -> list[str]:
        """Return the specifiers found in ``source``."""

    def dependencies(self, file_path: Path, options: DetectiveOptions) -> list[str]:
        source = self._read_source(file_path)
        return list(dict.fromkeys(self.detect(source, options)))

    def _read_source(self, file_path: Path) -> str:
        return file_path.read_text(encoding="utf-8", errors="replace")
