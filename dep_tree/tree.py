"""Dependency tree orchestrator: find files -> traverse -> shape."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import replace
from pathlib import Path

from dep_tree.config import validate_config
from dep_tree.detective import get_dependencies
from dep_tree.finder import base_directory, find_files, is_git_path, is_package_path
from dep_tree.models import TreeConfig
from dep_tree.resolver import resolve_dependency
from dep_tree.shaper import ShapeOptions, shape
from dep_tree.traversal import TraversalContext, traverse

logger = logging.getLogger(__name__)


class DependencyTree:
    """The shaped graph of a run plus the specifiers that were skipped."""

    def __init__(self, tree: dict[str, list[str]], skipped: list[str], base_dir: Path):
        self.tree = tree
        self.skipped = skipped
        self.base_dir = base_dir

    def obj(self) -> dict[str, list[str]]:
        return self.tree

    def warnings(self) -> dict[str, list[str]]:
        return {"skipped": self.skipped}

    def circular(self) -> list[list[str]]:
        """Find import cycles with a depth-first search over sorted keys.

        Each cycle starts at the module that was re-entered and lists the
        path back to it, without repeating the first module.
        """
        cycles: list[list[str]] = []
        resolved: set[str] = set()

        for start in self.tree:
            if start in resolved:
                continue
            path = [start]
            on_path = {start}
            # One dependency iterator per module on ``path``
            stack = [iter(self.tree.get(start, []))]

            while stack:
                for dependency in stack[-1]:
                    if dependency in resolved:
                        continue
                    if dependency in on_path:
                        cycles.append(path[path.index(dependency):])
                        continue
                    path.append(dependency)
                    on_path.add(dependency)
                    stack.append(iter(self.tree.get(dependency, [])))
                    break
                else:
                    stack.pop()
                    module_id = path.pop()
                    on_path.discard(module_id)
                    resolved.add(module_id)

        return cycles

    def depends(self, module_id: str) -> list[str]:
        """Modules that import ``module_id`` directly."""
        return sorted(
            key for key, dependencies in self.tree.items()
            if module_id in dependencies
        )

    def orphans(self) -> list[str]:
        """Modules no other module depends on."""
        imported = {d for dependencies in self.tree.values() for d in dependencies}
        return [key for key in self.tree if key not in imported]

    def leaves(self) -> list[str]:
        """Modules without dependencies."""
        return [key for key, dependencies in self.tree.items() if not dependencies]

    def to_dict(self) -> dict:
        return {"tree": self.tree, "skipped": self.skipped}

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.tree, indent=indent)


async def generate_tree(files: list[Path], base_dir: Path, config: TreeConfig) -> DependencyTree:
    """Traverse ``files`` and shape the result according to ``config``."""
    exclude = validate_config(config)
    package_edges: dict[Path, list[Path]] = {}

    def edge_filter(dependency: Path, traversed: Path) -> bool:
        if is_git_path(dependency):
            return False

        keep = True
        if config.dependency_filter is not None:
            result = config.dependency_filter(str(dependency), str(traversed), str(base_dir))
            keep = result is None or bool(result)

        internal = is_package_path(dependency)
        if config.include_npm and internal:
            package_edges.setdefault(traversed, []).append(dependency)

        return keep and not internal

    resolve_options = config.resolve_options
    if resolve_options.directory is None:
        resolve_options = replace(resolve_options, directory=base_dir)

    context = TraversalContext(
        parse=config.parser or get_dependencies,
        resolve=config.resolver or resolve_dependency,
        resolve_options=resolve_options,
        detective_options=config.detective_options,
        edge_filter=edge_filter,
        max_concurrency=config.max_concurrency,
    )
    modules, unresolved = await traverse(files, context)

    seeds = [Path(f).resolve() for f in files]
    tree = shape(modules, seeds, ShapeOptions(
        base_dir=base_dir,
        depth=config.depth,
        exclude=exclude,
        package_edges=package_edges,
    ))
    return DependencyTree(tree, unresolved, base_dir)


async def build_tree(src_paths: list[Path | str], config: TreeConfig | None = None) -> DependencyTree:
    """Build the dependency tree for files and directories in ``src_paths``."""
    config = config or TreeConfig()
    validate_config(config)

    base_dir = await asyncio.to_thread(base_directory, src_paths, config.base_dir)
    files = await asyncio.to_thread(find_files, src_paths, config.file_extensions, config.skip_dirs)
    logger.info("Found %d source file(s) under %s", len(files), base_dir)
    return await generate_tree(files, base_dir, config)


def dependency_tree(src_paths: list[Path | str], config: TreeConfig | None = None) -> DependencyTree:
    """Synchronous entry point; see :func:`build_tree`."""
    return asyncio.run(build_tree(src_paths, config))
