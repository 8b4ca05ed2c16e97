"""dep-tree: build deterministic file dependency graphs."""

from dep_tree.config import ConfigError, load_config
from dep_tree.models import DetectiveOptions, ResolveOptions, TreeConfig
from dep_tree.tree import DependencyTree, build_tree, dependency_tree

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "DependencyTree",
    "DetectiveOptions",
    "ResolveOptions",
    "TreeConfig",
    "build_tree",
    "dependency_tree",
    "load_config",
]
