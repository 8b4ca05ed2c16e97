"""Config file loading and validation."""

from __future__ import annotations

import json
import re
from pathlib import Path

from dep_tree.models import TreeConfig

CONFIG_NAME = ".deptreerc"


class ConfigError(ValueError):
    """Invalid configuration. Raised before any traversal starts."""


def compile_exclusions(patterns: list[str] | None) -> list[re.Pattern]:
    compiled: list[re.Pattern] = []
    for pattern in patterns or []:
        try:
            compiled.append(re.compile(pattern))
        except re.error as e:
            raise ConfigError(f"Invalid exclude pattern {pattern!r}: {e}") from e
    return compiled


def validate_config(config: TreeConfig) -> list[re.Pattern]:
    """Check ``config`` and return its compiled exclusion patterns."""
    depth = config.depth
    if depth is not None and (isinstance(depth, bool) or not isinstance(depth, int) or depth < 0):
        raise ConfigError(f"depth must be a non-negative integer, got {depth!r}")
    if config.max_concurrency is not None and config.max_concurrency < 1:
        raise ConfigError(f"max_concurrency must be at least 1, got {config.max_concurrency!r}")
    return compile_exclusions(config.exclude)


def _default_locations() -> list[Path]:
    return [Path.cwd() / CONFIG_NAME, Path.home() / CONFIG_NAME]


def load_config(path: Path | None = None) -> TreeConfig:
    """Load a ``.deptreerc`` JSON file into a :class:`TreeConfig`.

    With no ``path`` the current directory is tried first, then the home
    directory. When neither exists the defaults are returned.
    """
    if path is None:
        path = next((p for p in _default_locations() if p.is_file()), None)
        if path is None:
            return TreeConfig()

    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Malformed config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")

    try:
        return TreeConfig.from_dict(data)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e
