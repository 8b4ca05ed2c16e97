"""Data models for the dep-tree pipeline."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Callable

# (dependency_path, traversed_path, base_dir) -> keep?  ``None`` means keep.
DependencyFilter = Callable[[str, str, str], "bool | None"]


class Language(enum.Enum):
    PYTHON = "python"
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"


@dataclass
class DetectiveOptions:
    """Options handed unmodified to every detective call."""
    include_core: bool = False
    skip_type_imports: bool = False
    skip_async_imports: bool = False


@dataclass
class ResolveOptions:
    """Options handed unmodified to every resolver call."""
    directory: Path | None = None
    aliases: dict[str, str] = field(default_factory=dict)
    python_paths: list[Path] = field(default_factory=list)
    extensions: tuple[str, ...] = (
        ".js", ".jsx", ".mjs", ".cjs", ".ts", ".tsx", ".mts", ".cts", ".d.ts", ".json",
    )
    no_type_definitions: bool = False


@dataclass
class TreeConfig:
    """Configuration for a dependency tree run."""
    base_dir: Path | None = None
    depth: int | None = None
    exclude: list[str] = field(default_factory=list)
    include_npm: bool = False
    dependency_filter: DependencyFilter | None = None
    file_extensions: list[str] = field(default_factory=lambda: [
        "py", "pyi", "js", "jsx", "mjs", "cjs", "ts", "mts", "cts", "tsx",
    ])
    skip_dirs: list[str] = field(default_factory=lambda: [
        "node_modules", ".git", "__pycache__", ".dart_tool",
        "build", "dist", ".next", ".venv", "venv", "env",
        ".eggs", "*.egg-info",
    ])
    detective_options: DetectiveOptions = field(default_factory=DetectiveOptions)
    resolve_options: ResolveOptions = field(default_factory=ResolveOptions)
    parser: Callable | None = None
    resolver: Callable | None = None
    max_concurrency: int | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "TreeConfig":
        """Build a config from plain JSON data (e.g. a ``.deptreerc`` file).

        Raises:
            ValueError: for keys that are not config fields.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config option(s): {', '.join(unknown)}")

        values = dict(data)
        if values.get("base_dir") is not None:
            values["base_dir"] = Path(values["base_dir"])
        if isinstance(values.get("detective_options"), dict):
            values["detective_options"] = DetectiveOptions(**values["detective_options"])
        if isinstance(values.get("resolve_options"), dict):
            resolve = dict(values["resolve_options"])
            if resolve.get("directory") is not None:
                resolve["directory"] = Path(resolve["directory"])
            if "python_paths" in resolve:
                resolve["python_paths"] = [Path(p) for p in resolve["python_paths"]]
            if "extensions" in resolve:
                resolve["extensions"] = tuple(resolve["extensions"])
            values["resolve_options"] = ResolveOptions(**resolve)
        return cls(**values)
