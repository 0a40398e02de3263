"""
Workspace configuration for Kconfig scanning.

Provides:
- ScanConfig dataclass holding the directory sets and bounds used by scans
- load_scan_config() to parse <workspace>/.mcp-zephyr.json overrides
- WorkspaceHandle, the resolved component trees of a West workspace
- resolve_workspace() to validate a root and build its handle
"""

import configparser
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from .errors import WorkspaceRootInvalid

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".mcp-zephyr.json"

# Component trees searched when building the definition-file index.
# "{zephyr}" is replaced by the Zephyr base from .west/config.
DEFAULT_PRIORITY_DIRS = [
    "{zephyr}",
    "nrf",
    "modules",
    "bootloader",
    "mbedtls",
    "trusted-firmware-m",
]

# Directories pruned by the index scan (no relevant Kconfig in them)
DEFAULT_EXCLUDE_NAMES = ["build", "doc", "scripts", "tools", "west", "cmake"]

# Directories pruned by the exhaustive scan
DEFAULT_DEEP_EXCLUDE_NAMES = [
    "node_modules",
    "build",
    "dist",
    "__pycache__",
    "cmake-build",
]

DEFAULT_INDEX_PATTERNS = ["Kconfig", "Kconfig.*", "*.kconfig"]

DEFAULT_DEEP_PATTERNS = DEFAULT_INDEX_PATTERNS + [
    "*.Kconfig",
    "*[Kk][Cc][Oo][Nn][Ff][Ii][Gg]*.[Tt][Xx][Tt]",
]

DEFAULT_SEMANTIC_PATHS = ["west.yml", "{zephyr}/doc", "nrf/doc"]

# Documents read when a semantic path is a directory
DEFAULT_SEMANTIC_PATTERNS = ["*.rst", "*.md", "*.txt", "*.yml", "*.yaml"]

# Per-project files added to the semantic set from the West manifest
PROJECT_SEMANTIC_FILES = ["README.rst", "README.md", "zephyr/module.yml"]

# Symbol prefix -> path fragments of the files most likely to declare it
DEFAULT_SUBSYSTEM_HINTS = {
    "BT_": ["bluetooth", "/bt/"],
    "MCUMGR": ["mcumgr", "mgmt"],
}

# Symbol prefix -> subsystem root symbol that has to be enabled first
DEFAULT_SUBSYSTEM_ROOTS = {"BT_": "BT"}


@dataclass
class ScanConfig:
    """Directory sets and bounds for Kconfig scans."""

    priority_dirs: list[str] = field(default_factory=lambda: DEFAULT_PRIORITY_DIRS.copy())
    exclude_names: list[str] = field(default_factory=lambda: DEFAULT_EXCLUDE_NAMES.copy())
    deep_exclude_names: list[str] = field(
        default_factory=lambda: DEFAULT_DEEP_EXCLUDE_NAMES.copy()
    )
    index_patterns: list[str] = field(default_factory=lambda: DEFAULT_INDEX_PATTERNS.copy())
    deep_patterns: list[str] = field(default_factory=lambda: DEFAULT_DEEP_PATTERNS.copy())
    index_depth: int = 4
    deep_depth: int = 6
    semantic_paths: list[str] = field(default_factory=lambda: DEFAULT_SEMANTIC_PATHS.copy())
    semantic_patterns: list[str] = field(default_factory=lambda: DEFAULT_SEMANTIC_PATTERNS.copy())
    semantic_depth: int = 3
    max_semantic_files: int = 500
    max_deep_files: int = 20000
    deep_time_budget: float | None = None
    subsystem_hints: dict[str, list[str]] = field(
        default_factory=lambda: {k: v.copy() for k, v in DEFAULT_SUBSYSTEM_HINTS.items()}
    )
    subsystem_roots: dict[str, str] = field(default_factory=lambda: DEFAULT_SUBSYSTEM_ROOTS.copy())
    alternatives_file: str | None = None


# JSON key -> (attribute, expected type)
_CONFIG_KEYS = {
    "priorityDirs": ("priority_dirs", list),
    "excludeNames": ("exclude_names", list),
    "deepExcludeNames": ("deep_exclude_names", list),
    "indexPatterns": ("index_patterns", list),
    "deepPatterns": ("deep_patterns", list),
    "indexDepth": ("index_depth", int),
    "deepDepth": ("deep_depth", int),
    "semanticPaths": ("semantic_paths", list),
    "semanticPatterns": ("semantic_patterns", list),
    "semanticDepth": ("semantic_depth", int),
    "maxSemanticFiles": ("max_semantic_files", int),
    "maxDeepFiles": ("max_deep_files", int),
    "deepTimeBudget": ("deep_time_budget", (int, float)),
    "subsystemHints": ("subsystem_hints", dict),
    "subsystemRoots": ("subsystem_roots", dict),
    "alternativesFile": ("alternatives_file", str),
}


def load_scan_config(workspace_root: Union[str, Path]) -> ScanConfig:
    """
    Load scan configuration from <workspace>/.mcp-zephyr.json.

    Args:
        workspace_root: Root directory of the West workspace

    Returns:
        ScanConfig with file values merged over the defaults.
        Returns defaults if the file is missing or invalid.
    """
    config_file = Path(workspace_root) / CONFIG_FILENAME
    config = ScanConfig()

    if not config_file.exists():
        return config

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Ignoring unreadable scan config %s: %s", config_file, e)
        return config

    if not isinstance(data, dict):
        logger.warning("Ignoring scan config %s: top level is not an object", config_file)
        return config

    for key, (attr, expected) in _CONFIG_KEYS.items():
        if key not in data:
            continue
        value = data[key]
        if not isinstance(value, expected) or isinstance(value, bool):
            logger.warning("Ignoring %s in %s: unexpected type %s", key, config_file, type(value).__name__)
            continue
        setattr(config, attr, value)

    return config


def read_west_config(west_path: Union[str, Path]) -> dict[str, dict[str, str]]:
    """Parse .west/config (INI) into {section: {key: value}}.

    Returns an empty dict when the file is missing or unreadable.
    """
    config_path = Path(west_path) / "config"
    parser = configparser.ConfigParser(interpolation=None, strict=False)
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            parser.read_file(f)
    except FileNotFoundError:
        return {}
    except (OSError, configparser.Error) as e:
        logger.warning("Could not parse %s: %s", config_path, e)
        return {}

    return {section: dict(parser.items(section)) for section in parser.sections()}


@dataclass(frozen=True)
class WorkspaceHandle:
    """Resolved component trees of a West workspace."""

    root: Path
    zephyr_base: Path
    west_config: dict = field(default_factory=dict, compare=False, hash=False)

    @property
    def zephyr_dir_name(self) -> str:
        try:
            return self.zephyr_base.relative_to(self.root).as_posix()
        except ValueError:
            return str(self.zephyr_base)

    def expand(self, template: str) -> Path:
        """Resolve a configured path template ("{zephyr}/doc") against the root."""
        return self.root / template.replace("{zephyr}", self.zephyr_dir_name)

    def priority_dirs(self, config: ScanConfig) -> list[Path]:
        """Existing priority directories, in configured order, without duplicates."""
        seen: set[Path] = set()
        dirs: list[Path] = []
        for template in config.priority_dirs:
            path = self.expand(template)
            if path in seen or not path.is_dir():
                continue
            seen.add(path)
            dirs.append(path)
        return dirs

    def relative(self, path: Union[str, Path]) -> str:
        """Workspace-relative POSIX path, as reported in results."""
        path = Path(path)
        try:
            return path.relative_to(self.root).as_posix()
        except ValueError:
            return path.as_posix()


def resolve_workspace(
    root: Union[str, Path],
    west_path: Union[str, Path, None] = None,
) -> WorkspaceHandle:
    """Validate a workspace root and resolve its component trees.

    Raises:
        WorkspaceRootInvalid: If root is empty, missing or not a directory
    """
    if not root or not str(root).strip():
        raise WorkspaceRootInvalid(str(root), "path is empty")

    root_path = Path(root).expanduser()
    if not root_path.exists():
        raise WorkspaceRootInvalid(str(root), "does not exist")
    if not root_path.is_dir():
        raise WorkspaceRootInvalid(str(root), "is not a directory")
    root_path = root_path.resolve()

    west_dir = Path(west_path) if west_path else root_path / ".west"
    west_config = read_west_config(west_dir)
    zephyr_base = west_config.get("zephyr", {}).get("base") or "zephyr"

    return WorkspaceHandle(
        root=root_path,
        zephyr_base=root_path / zephyr_base,
        west_config=west_config,
    )
