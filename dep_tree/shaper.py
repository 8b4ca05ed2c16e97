"""Closure shaper: turns a traversed adjacency map into the output graph."""

from __future__ import annotations

import os
import re
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path

# Marks a node whose deep dependencies are being computed
_IN_PROGRESS = object()


@dataclass
class ShapeOptions:
    base_dir: Path
    depth: int | None = None
    exclude: list[re.Pattern] = field(default_factory=list)
    package_edges: dict[Path, list[Path]] = field(default_factory=dict)


class PathNormalizer:
    """Absolute path -> ``/``-separated path relative to ``base_dir``."""

    def __init__(self, base_dir: Path):
        self.base_dir = str(base_dir)
        self._cache: dict[Path, str] = {}

    def __call__(self, path: Path) -> str:
        if path not in self._cache:
            relative = os.path.relpath(path, self.base_dir)
            self._cache[path] = relative.replace(os.sep, "/")
        return self._cache[path]


def compute_frontier(
    modules: dict[Path, list[Path]],
    seeds: list[Path],
    depth: int,
) -> set[Path]:
    """Nodes reachable from ``seeds`` within ``depth`` hops (seeds are hop 0)."""
    frontier: set[Path] = set()
    queue = deque((seed, 0) for seed in seeds if seed in modules)

    while queue:
        node, hops = queue.popleft()
        if node in frontier:
            continue
        frontier.add(node)
        if hops < depth:
            for dependency in modules.get(node, []):
                if dependency not in frontier:
                    queue.append((dependency, hops + 1))

    return frontier


def _collapse(
    node: Path,
    modules: dict[Path, list[Path]],
    frontier: set[Path],
    memo: dict[Path, object],
) -> list[Path]:
    """Frontier members reached from ``node`` through non-frontier nodes.

    Iterative form of the recursive expansion: each stack frame holds a
    node, the iterator over its dependencies and what it has collected so
    far. A node re-entered while in progress contributes nothing.
    """
    state = memo.get(node)
    if state is _IN_PROGRESS:
        return []
    if state is not None:
        return state

    memo[node] = _IN_PROGRESS
    stack = [(node, iter(modules.get(node, [])), [])]

    while stack:
        current, dependencies, collected = stack[-1]
        for dependency in dependencies:
            if dependency in frontier:
                collected.append(dependency)
                continue
            if dependency not in memo:
                memo[dependency] = _IN_PROGRESS
                stack.append((dependency, iter(modules.get(dependency, [])), []))
                break
            done = memo[dependency]
            if done is not _IN_PROGRESS:
                collected.extend(done)
        else:
            stack.pop()
            result = list(dict.fromkeys(collected))
            memo[current] = result
            if stack:
                stack[-1][2].extend(result)

    return memo[node]


def deep_dependencies(
    modules: dict[Path, list[Path]],
    frontier: set[Path],
) -> dict[Path, list[Path]]:
    """Map every frontier member to its deep dependencies.

    A dependency inside the frontier is kept as is. One outside it is
    replaced by the frontier members it reaches, or kept as a boundary
    leaf when it reaches none.

    Only a frontier member's direct dependencies become boundary leaves.
    Dead ends deeper in the collapse contribute nothing, so with
    ``A -> B, B -> C, B -> A`` and only A in the frontier, A maps to
    ``[A]`` and C is dropped.
    """
    memo: dict[Path, object] = {}
    result: dict[Path, list[Path]] = {}

    for node in sorted(frontier):
        deep: list[Path] = []
        for dependency in modules.get(node, []):
            if dependency in frontier:
                deep.append(dependency)
                continue
            collapsed = _collapse(dependency, modules, frontier, memo)
            deep.extend(collapsed or [dependency])
        result[node] = list(dict.fromkeys(deep))

    return result


def _excluded(path: str, patterns: list[re.Pattern]) -> bool:
    return any(p.search(path) for p in patterns)


def shape(
    modules: dict[Path, list[Path]],
    seeds: list[Path],
    options: ShapeOptions,
) -> dict[str, list[str]]:
    """Build the sorted, relative-path output graph."""
    normalize = PathNormalizer(options.base_dir)

    if options.depth is None:
        edges = modules
    else:
        frontier = compute_frontier(modules, seeds, options.depth)
        edges = deep_dependencies(modules, frontier)

    tree: dict[str, list[str]] = {
        normalize(node): [normalize(d) for d in dependencies]
        for node, dependencies in edges.items()
    }

    for traversed, package_paths in options.package_edges.items():
        key = normalize(traversed)
        if key in tree:
            tree[key].extend(normalize(p) for p in package_paths)

    patterns = options.exclude
    return {
        key: sorted({d for d in tree[key] if not _excluded(d, patterns)})
        for key in sorted(tree)
        if not _excluded(key, patterns)
    }
