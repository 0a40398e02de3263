"""West workspace metadata: config, manifest, versions, modules, boards, build files.

Every extraction is a single pass over a known location. Missing files leave
the corresponding field empty; only a missing ``.west/config`` makes the
whole analysis fail.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ..core.walker import walk_many
from ..core.workspace import ScanConfig, WorkspaceHandle, load_scan_config, read_west_config

logger = logging.getLogger(__name__)

DEFAULT_MANIFEST_FILE = "west.yml"

TOOLCHAIN_FILES = [
    "toolchain/zephyr/generic.cmake",
    "toolchain/gnuarmemb/generic.cmake",
    "toolchain/xtools/generic.cmake",
]

PACKAGE_CONFIG = "share/zephyr-package/cmake/ZephyrConfig.cmake"

NCS_SDK_NAME = "nRF Connect SDK"

# Presence of this header marks a vendored Cirrus Logic HAL
CIRRUS_SDK_MARKER = "modules/hal/cirrus-logic/sdk_version.h"


@dataclass
class WorkspaceAnalysis:
    """Everything :meth:`WestWorkspaceAnalyzer.analyze_workspace` collects."""

    is_valid: bool = False
    west_config: dict[str, dict[str, str]] = field(default_factory=dict)
    manifest: dict[str, Any] | None = None
    zephyr_version: dict[str, str | None] | None = None
    sdk_version: dict[str, str] | None = None
    projects: list[dict[str, Any]] = field(default_factory=list)
    modules: list[dict[str, Any]] = field(default_factory=list)
    boards: list[dict[str, str]] = field(default_factory=list)
    kconfig_files: list[str] = field(default_factory=list)
    cmake_modules: list[str] = field(default_factory=list)
    toolchains: list[str] = field(default_factory=list)
    package_config: str | None = None
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "west_config": self.west_config,
            "manifest": self.manifest,
            "zephyr_version": self.zephyr_version,
            "sdk_version": self.sdk_version,
            "projects": self.projects,
            "modules": self.modules,
            "boards": self.boards,
            "kconfig": {"files": self.kconfig_files},
            "cmake": {
                "modules": self.cmake_modules,
                "toolchains": self.toolchains,
                "package_config": self.package_config,
            },
            "warnings": self.warnings,
        }


def _sorted_dirs(path: Path) -> list[Path]:
    """Non-hidden subdirectories of ``path`` in name order; [] if unreadable."""
    try:
        with os.scandir(path) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        logger.debug("Cannot list %s: %s", path, e)
        return []
    return [
        Path(entry.path)
        for entry in entries
        if not entry.name.startswith(".") and entry.is_dir()
    ]


def _read_key_values(path: Path) -> dict[str, str]:
    """Parse ``KEY = value`` lines, ignoring everything else."""
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return {}
    values: dict[str, str] = {}
    for line in text.splitlines():
        if "=" not in line:
            continue
        key, _, value = line.partition("=")
        values[key.strip()] = value.strip()
    return values


class WestWorkspaceAnalyzer:
    """Collects metadata for one West workspace.

    Each ``parse_*``/``find_*`` method can be called on its own; results
    accumulate on ``self.analysis``. Methods that depend on earlier steps
    (the manifest needs ``.west/config``) run those steps on demand.
    """

    def __init__(
        self,
        workspace_path: str | Path,
        west_path: str | Path | None = None,
        config: ScanConfig | None = None,
    ) -> None:
        self.root = Path(workspace_path).expanduser()
        self.west_path = Path(west_path) if west_path else self.root / ".west"
        self.config = config or load_scan_config(self.root)
        self.analysis = WorkspaceAnalysis()
        self._config_parsed = False
        self._manifest_parsed = False

    # === West config and manifest ===

    @property
    def zephyr_base(self) -> Path:
        self.parse_west_config()
        base = self.analysis.west_config.get("zephyr", {}).get("base") or "zephyr"
        return self.root / base

    def handle(self) -> WorkspaceHandle:
        return WorkspaceHandle(
            root=self.root.resolve(),
            zephyr_base=self.zephyr_base.resolve(),
            west_config=self.analysis.west_config,
        )

    def parse_west_config(self) -> dict[str, dict[str, str]]:
        if not self._config_parsed:
            self.analysis.west_config = read_west_config(self.west_path)
            self._config_parsed = True
        return self.analysis.west_config

    def manifest_path(self) -> Path:
        manifest = self.parse_west_config().get("manifest", {})
        return self.root / manifest.get("path", "") / (manifest.get("file") or DEFAULT_MANIFEST_FILE)

    def parse_manifest(self) -> dict[str, Any] | None:
        """Parse the YAML manifest named by ``[manifest]`` in ``.west/config``.

        Returns:
            The raw manifest document, or None when there is no ``[manifest]``
            section or the file is missing, not valid YAML or has no
            ``manifest`` mapping.
        """
        if self._manifest_parsed:
            return self.analysis.manifest
        self._manifest_parsed = True

        if "manifest" not in self.parse_west_config():
            return None

        path = self.manifest_path()
        try:
            document = yaml.safe_load(path.read_text(encoding="utf-8"))
        except OSError as e:
            logger.debug("No manifest at %s: %s", path, e)
            return None
        except yaml.YAMLError as e:
            message = f"Failed to parse manifest {path}: {e}"
            logger.warning(message)
            self.analysis.warnings.append(message)
            return None

        body = document.get("manifest") if isinstance(document, dict) else None
        if not isinstance(body, dict):
            message = f"Ignoring manifest {path}: no 'manifest' mapping"
            logger.warning(message)
            self.analysis.warnings.append(message)
            return None
        self.analysis.manifest = document

        defaults = body.get("defaults")
        if not isinstance(defaults, dict):
            defaults = {}
        projects = []
        raw_projects = body.get("projects")
        for project in raw_projects if isinstance(raw_projects, list) else []:
            if not isinstance(project, dict) or "name" not in project:
                continue
            projects.append({
                "name": project["name"],
                "path": project.get("path") or project["name"],
                "revision": project.get("revision"),
                "remote": project.get("remote") or defaults.get("remote"),
                "repo_path": project.get("repo-path"),
                "has_imports": bool(project.get("import")),
            })
        self.analysis.projects = projects
        return document

    # === Versions ===

    def get_zephyr_version(self) -> dict[str, str | None] | None:
        values = _read_key_values(self.zephyr_base / "VERSION")
        if not values.get("VERSION_MAJOR"):
            return None

        major = values["VERSION_MAJOR"]
        minor = values.get("VERSION_MINOR")
        patch = values.get("PATCHLEVEL")
        extra = values.get("EXTRAVERSION") or ""
        self.analysis.zephyr_version = {
            "major": major,
            "minor": minor,
            "patch": patch,
            "tweak": values.get("VERSION_TWEAK"),
            "extra": extra,
            "full": f"{major}.{minor or 0}.{patch or 0}{extra}",
        }
        return self.analysis.zephyr_version

    def get_sdk_versions(self) -> dict[str, str] | None:
        try:
            ncs = (self.root / "nrf" / "VERSION").read_text(encoding="utf-8").strip()
        except OSError:
            return None
        if not ncs:
            return None

        sdk = {"ncs": ncs, "type": NCS_SDK_NAME}
        if (self.root / CIRRUS_SDK_MARKER).is_file():
            sdk["additional"] = "Cirrus Logic SDK detected"
        self.analysis.sdk_version = sdk
        return sdk

    # === Modules ===

    def discover_modules(self) -> list[dict[str, Any]]:
        """``modules/<category>/<module>`` directories plus manifest projects."""
        modules: list[dict[str, Any]] = []
        for category in _sorted_dirs(self.root / "modules"):
            for module_dir in _sorted_dirs(category):
                modules.append({
                    "name": module_dir.name,
                    "category": category.name,
                    "path": module_dir.relative_to(self.root).as_posix(),
                    "has_cmake": (module_dir / "CMakeLists.txt").is_file(),
                    "has_kconfig": (module_dir / "Kconfig").is_file(),
                })

        self.parse_manifest()
        known = {m["name"] for m in modules}
        for project in self.analysis.projects:
            if project["name"] in known or not (self.root / project["path"]).exists():
                continue
            known.add(project["name"])
            modules.append({
                "name": project["name"],
                "path": project["path"],
                "from_manifest": True,
                "revision": project.get("revision"),
            })

        self.analysis.modules = modules
        return modules

    # === Build system ===

    def find_kconfig_files(self) -> list[str]:
        handle = self.handle()
        walk = walk_many(
            handle.priority_dirs(self.config),
            self.config.exclude_names,
            self.config.index_depth,
            self.config.index_patterns,
        )
        self.analysis.kconfig_files = [str(path) for path in walk.files]
        self.analysis.warnings.extend(walk.warnings)
        return self.analysis.kconfig_files

    def find_cmake_configs(self) -> dict[str, Any]:
        cmake_dir = self.zephyr_base / "cmake"
        modules_dir = cmake_dir / "modules"
        try:
            names = sorted(os.listdir(modules_dir))
        except OSError:
            names = []
        self.analysis.cmake_modules = [
            f"cmake/modules/{name}" for name in names if name.endswith(".cmake")
        ]
        self.analysis.toolchains = [
            f"cmake/{rel}" for rel in TOOLCHAIN_FILES if (cmake_dir / rel).is_file()
        ]
        if (self.zephyr_base / PACKAGE_CONFIG).is_file():
            self.analysis.package_config = PACKAGE_CONFIG

        return {
            "modules": self.analysis.cmake_modules,
            "toolchains": self.analysis.toolchains,
            "package_config": self.analysis.package_config,
        }

    # === Boards ===

    def find_boards(self) -> list[dict[str, str]]:
        """Board directories with a ``<board>.yaml`` or ``<board>.dtsi`` (Zephyr)
        or ``<board>.yaml`` / ``<board>.dts`` (nRF)."""
        boards: list[dict[str, str]] = []
        for arch_dir in _sorted_dirs(self.zephyr_base / "boards"):
            for board_dir in _sorted_dirs(arch_dir):
                board = board_dir.name
                if (board_dir / f"{board}.yaml").is_file() or (board_dir / f"{board}.dtsi").is_file():
                    boards.append({
                        "name": board,
                        "arch": arch_dir.name,
                        "path": f"boards/{arch_dir.name}/{board}",
                    })

        for board_dir in _sorted_dirs(self.root / "nrf" / "boards"):
            board = board_dir.name
            if (board_dir / f"{board}.yaml").is_file() or (board_dir / f"{board}.dts").is_file():
                boards.append({
                    "name": board,
                    "path": f"nrf/boards/{board}",
                    "vendor": "nordic",
                })

        self.analysis.boards = boards
        return boards

    # === Full analysis ===

    def is_west_workspace(self) -> bool:
        return (self.west_path / "config").is_file()

    def analyze_workspace(self) -> WorkspaceAnalysis | dict[str, str]:
        """Run every extraction step.

        Returns:
            The populated WorkspaceAnalysis, or ``{"error": ...}`` when the
            directory is not a West workspace.
        """
        if not self.is_west_workspace():
            return {"error": "Not a valid West workspace (missing .west/config)"}

        self.analysis.is_valid = True
        self.parse_west_config()
        self.parse_manifest()
        self.get_zephyr_version()
        self.get_sdk_versions()
        self.discover_modules()
        self.find_kconfig_files()
        self.find_cmake_configs()
        self.find_boards()
        logger.debug(
            "Analyzed %s: %d projects, %d modules, %d boards, %d Kconfig files",
            self.root,
            len(self.analysis.projects),
            len(self.analysis.modules),
            len(self.analysis.boards),
            len(self.analysis.kconfig_files),
        )
        return self.analysis
