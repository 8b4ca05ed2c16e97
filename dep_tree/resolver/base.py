"""Abstract base resolver."""

from __future__ import annotations

import abc
from pathlib import Path

from dep_tree.models import ResolveOptions


class BaseResolver(abc.ABC):
    """Turns a specifier written in ``filename`` into an absolute path."""

    @abc.abstractmethod
    def resolve(self, specifier: str, filename: Path, options: ResolveOptions) -> Path | None:
        """Return the resolved file, or ``None`` when nothing matches."""

    @staticmethod
    def _first_file(candidates) -> Path | None:
        for candidate in candidates:
            if candidate.is_file():
                return candidate.absolute()
        return None
