"""Concurrent, cycle-safe dependency traversal.

Starting from a set of seed files, every reachable file is parsed once,
its specifiers are resolved to files, and the resolved files are traversed
in turn. The result is an adjacency map of canonical paths plus the list of
specifiers that could not be resolved.

A file is claimed in the shared :class:`VisitedTable` before any work is
done for it, so fan-in and import cycles never cause a second parse.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from dep_tree.models import DetectiveOptions, ResolveOptions

logger = logging.getLogger(__name__)

ParseFn = Callable[[Path, DetectiveOptions], list[str]]
ResolveFn = Callable[[str, Path, ResolveOptions], "Path | str | None"]
EdgeFilter = Callable[[Path, Path], bool]


@dataclass(frozen=True)
class TraversalContext:
    """Read-only settings shared by every traversal step."""
    parse: ParseFn
    resolve: ResolveFn
    resolve_options: ResolveOptions = field(default_factory=ResolveOptions)
    detective_options: DetectiveOptions = field(default_factory=DetectiveOptions)
    edge_filter: EdgeFilter | None = None
    max_concurrency: int | None = None


class VisitedTable:
    """Node -> dependency list, with claim-then-fill reservations.

    ``claim`` inserts an empty slot if the node is absent and reports
    whether the caller won it. Only the winner parses the node and later
    ``fill``s the slot.
    """

    def __init__(self):
        self._entries: dict[Path, list[Path] | None] = {}
        self._lock = threading.Lock()

    def claim(self, node: Path) -> bool:
        with self._lock:
            if node in self._entries:
                return False
            self._entries[node] = None
            return True

    def fill(self, node: Path, dependencies: list[Path]) -> None:
        with self._lock:
            self._entries[node] = dependencies

    def __contains__(self, node: Path) -> bool:
        return node in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def pending(self) -> list[Path]:
        return [node for node, deps in self._entries.items() if deps is None]

    def as_dict(self) -> dict[Path, list[Path]]:
        return {node: list(deps or []) for node, deps in self._entries.items()}


def _canonical(path: Path | str) -> Path:
    return Path(path).resolve()


class _Traversal:
    """State for one traversal run."""

    def __init__(self, context: TraversalContext):
        self.context = context
        self.visited = VisitedTable()
        self.unresolved: list[str] = []
        self._semaphore = (
            asyncio.Semaphore(context.max_concurrency) if context.max_concurrency else None
        )

    async def _blocking(self, func, *args):
        if self._semaphore is None:
            return await asyncio.to_thread(func, *args)
        async with self._semaphore:
            return await asyncio.to_thread(func, *args)

    async def visit(self, node: Path) -> None:
        if not self.visited.claim(node):
            return

        dependencies = await self._dependencies(node)
        if self.context.edge_filter is not None:
            dependencies = [d for d in dependencies if self.context.edge_filter(d, node)]

        await asyncio.gather(*(
            self.visit(dependency) for dependency in dependencies
            if dependency not in self.visited
        ))
        self.visited.fill(node, dependencies)

    async def _dependencies(self, node: Path) -> list[Path]:
        try:
            specifiers = await self._blocking(
                self.context.parse, node, self.context.detective_options,
            )
        except Exception as e:
            logger.debug("Could not parse %s: %s", node, e)
            return []

        resolved = await asyncio.gather(*(self._resolve(s, node) for s in specifiers))

        dependencies: list[Path] = []
        for specifier, path in zip(specifiers, resolved):
            if path is None:
                logger.debug("Unresolved %r in %s", specifier, node)
                self.unresolved.append(specifier)
                continue
            dependencies.append(path)
        return list(dict.fromkeys(dependencies))

    async def _resolve(self, specifier: str, node: Path) -> Path | None:
        def resolve_existing():
            result = self.context.resolve(specifier, node, self.context.resolve_options)
            if not result:
                return None
            path = Path(result)
            if not path.exists():
                return None
            return _canonical(path)

        try:
            return await self._blocking(resolve_existing)
        except Exception as e:
            logger.debug("Resolver failed for %r in %s: %s", specifier, node, e)
            return None


async def traverse(
    files: list[Path | str],
    context: TraversalContext,
) -> tuple[dict[Path, list[Path]], list[str]]:
    """Traverse every file reachable from ``files``.

    Seeds that do not exist are skipped. Returns the visited map (file ->
    ordered, deduplicated dependencies) and the unresolved specifiers,
    deduplicated once across the whole run.
    """
    run = _Traversal(context)
    seeds = [_canonical(f) for f in files if Path(f).exists()]
    await asyncio.gather(*(run.visit(seed) for seed in seeds))

    unresolved = list(dict.fromkeys(run.unresolved))
    logger.info("Traversed %d file(s), %d unresolved specifier(s)", len(run.visited), len(unresolved))
    return run.visited.as_dict(), unresolved


def dependency_map(
    files: list[Path | str],
    context: TraversalContext,
) -> tuple[dict[Path, list[Path]], list[str]]:
    """Synchronous wrapper around :func:`traverse`."""
    return asyncio.run(traverse(files, context))
