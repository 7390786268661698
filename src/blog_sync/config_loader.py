"""
YAML config file discovery and loading for blog_sync.

Config files are found by convention, may pull in other files with
``!include``, may reference environment variables as ``${VAR}`` or
``${VAR:-default}``, and are merged so that the most specific file wins.

Usage:
    from blog_sync.config_loader import load_hierarchical_config

    raw = load_hierarchical_config()
"""

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "BLOG_SYNC_CONFIG"

# ${VAR} or ${VAR:-default}
_ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+?)(?::-(.*?))?\}")


# ---------------------------------------------------------------------------
# Env var interpolation
# ---------------------------------------------------------------------------


def interpolate_env_vars(value: str) -> str:
    """Expand ``${VAR}`` and ``${VAR:-default}`` in ``value``.

    An unset or empty variable expands to its default, or to "" when no
    default is given.  An unterminated ``${`` is left as is.
    """

    def _expand(match: re.Match) -> str:
        env_val = os.environ.get(match.group(1))
        if env_val:
            return env_val
        return match.group(2) or ""

    return _ENV_VAR_PATTERN.sub(_expand, value)


def _interpolate(obj: Any) -> Any:
    if isinstance(obj, str):
        return interpolate_env_vars(obj)
    if isinstance(obj, dict):
        return {key: _interpolate(val) for key, val in obj.items()}
    if isinstance(obj, list):
        return [_interpolate(item) for item in obj]
    return obj


# ---------------------------------------------------------------------------
# !include support
# ---------------------------------------------------------------------------


class IncludeLoader(yaml.SafeLoader):
    """``yaml.SafeLoader`` that understands ``!include <path>``.

    A subclass keeps the tag away from the global ``SafeLoader``.  Each
    loader carries the chain of files being loaded so that include cycles
    are reported instead of recursing forever.
    """

    include_chain: list[Path]


def _construct_include(loader: IncludeLoader, node: yaml.ScalarNode) -> Any:
    target = Path(loader.construct_scalar(node)).expanduser()
    if not target.is_absolute():
        # Relative to the including file
        target = Path(loader.name).resolve().parent / target
    target = target.resolve()

    if target in loader.include_chain:
        chain = " -> ".join(str(p) for p in [*loader.include_chain, target])
        raise ValueError(f"Circular include detected: {chain}")
    if not target.exists():
        raise FileNotFoundError(
            f"Include file not found: {target} (referenced from {loader.name})"
        )

    return load_yaml_file(target, _chain=[*loader.include_chain, target])


IncludeLoader.add_constructor("!include", _construct_include)


def load_yaml_file(path: Path, *, _chain: list[Path] | None = None) -> Any:
    """Load one YAML file, resolving ``!include`` directives."""
    path = path.resolve()
    with open(path, encoding="utf-8") as fh:
        loader = IncludeLoader(fh)
        loader.include_chain = _chain or [path]
        try:
            return loader.get_single_data()
        finally:
            loader.dispose()


# ---------------------------------------------------------------------------
# Discovery and merge
# ---------------------------------------------------------------------------


def discover_config_files() -> list[Path]:
    """Return the existing config files, most specific first.

    Search order:
        1. The file named by ``BLOG_SYNC_CONFIG``
        2. ``.blog_sync/config.yml`` in the current directory
        3. ``.blog_sync/config.yaml`` in the current directory
        4. ``~/.config/blog_sync/config.yml``
    """
    candidates: list[Path] = []

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        candidates.append(Path(env_path).expanduser().resolve())

    project_dir = Path.cwd() / ".blog_sync"
    candidates.append(project_dir / "config.yml")
    candidates.append(project_dir / "config.yaml")
    candidates.append(Path.home() / ".config" / "blog_sync" / "config.yml")

    return [p for p in candidates if p.exists()]


def load_hierarchical_config() -> dict[str, Any]:
    """Load and merge all discovered config files.

    Files are applied from the least to the most specific; top-level keys
    of a more specific file replace (not deep-merge) earlier ones.  Env
    var interpolation runs on the merged result.

    Returns an empty dict when there is no config file.
    """
    paths = discover_config_files()
    if not paths:
        logger.debug("No config files found, using defaults")
        return {}

    merged: dict[str, Any] = {}
    for path in reversed(paths):
        logger.debug("Loading config: %s", path)
        data = load_yaml_file(path)
        if isinstance(data, dict):
            merged.update(data)
        elif data is not None:
            logger.warning(
                "Config file %s has a non-mapping root (%s), skipping",
                path,
                type(data).__name__,
            )

    return _interpolate(merged)
