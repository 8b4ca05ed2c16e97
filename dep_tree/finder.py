"""Source file enumeration and path classification."""

from __future__ import annotations

import fnmatch
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

PACKAGE_DIRS = ("node_modules", "site-packages", "dist-packages")


def is_git_path(path: Path | str) -> bool:
    return ".git" in Path(path).parts


def is_package_path(path: Path | str) -> bool:
    """True for files owned by a package manager (npm, pip)."""
    parts = Path(path).parts
    return any(name in parts for name in PACKAGE_DIRS)


def _should_skip(path: Path, skip_dirs: list[str]) -> bool:
    for part in path.parts:
        for pattern in skip_dirs:
            if fnmatch.fnmatch(part, pattern):
                return True
    return False


def find_files(
    src_paths: list[Path | str],
    extensions: list[str],
    skip_dirs: list[str] | None = None,
) -> list[Path]:
    """Expand ``src_paths`` into the absolute source files to traverse.

    Files given explicitly are kept whatever their extension, unless they
    live in a ``.git`` directory. Directories are walked recursively and
    only files with one of ``extensions`` (without the dot) are kept.
    """
    wanted = {"." + ext.lstrip(".") for ext in extensions}
    skip_dirs = skip_dirs if skip_dirs is not None else [".git", "node_modules"]
    files: list[Path] = []

    for src in src_paths:
        src_path = Path(src).absolute()
        if not src_path.exists():
            logger.warning("Skipping missing path: %s", src_path)
            continue

        if src_path.is_file():
            if not is_git_path(src_path):
                files.append(src_path)
            continue

        for path in sorted(src_path.rglob("*")):
            if not path.is_file():
                continue
            relative = path.relative_to(src_path)
            if is_git_path(relative) or _should_skip(relative, skip_dirs):
                continue
            if path.suffix in wanted or "".join(path.suffixes[-2:]) in wanted:
                files.append(path)

    return list(dict.fromkeys(files))


def base_directory(src_paths: list[Path | str], base_dir: Path | str | None = None) -> Path:
    """Directory that output keys are made relative to.

    Defaults to the deepest directory shared by all ``src_paths`` (a file
    contributes its parent directory).
    """
    if base_dir is not None:
        return Path(base_dir).resolve()

    dirs: list[str] = []
    for src in src_paths:
        path = Path(src).resolve()
        dirs.append(str(path if path.is_dir() else path.parent))
    if not dirs:
        return Path.cwd().resolve()
    return Path(os.path.commonpath(dirs))
