"""Markdown report formatting for verification results and workspace metadata."""

from __future__ import annotations

import json
from typing import Any, Iterable

from .cascade import VerificationResult

# Listing caps for summaries
MAX_SUMMARY_PROJECTS = 10
MAX_MANIFEST_PROJECTS = 20
MAX_CMAKE_MODULES = 20
MAX_BOARDS_PER_GROUP = 5


def _dedupe_preserve(items: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    deduped: list[str] = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        deduped.append(item)
    return deduped


def _group(items: Iterable[dict], key) -> dict[str, list[dict]]:
    grouped: dict[str, list[dict]] = {}
    for item in items:
        grouped.setdefault(key(item), []).append(item)
    return grouped


# === Verification ===


def format_verification_report(results: list[VerificationResult]) -> str:
    """Render verification results as the Markdown report shown to agents."""
    available = [r for r in results if r.available]
    missing = [r for r in results if not r.available]
    warned = [r for r in results if r.warning]

    lines = ["# Kconfig Verification Report", "", "## Summary"]
    lines.append(f"- ✅ Available: {len(available)}")
    lines.append(f"- ❌ Missing: {len(missing)}")
    if warned:
        lines.append(f"- ⚠️ Warnings: {len(warned)}")
    lines.append("")

    if available:
        lines.append("## ✅ Available Kconfigs")
        for result in available:
            lines.append(f"### CONFIG_{result.name}")
            lines.append(f"- **Status**: Available ({result.confidence} confidence, {result.search_method})")
            lines.append(f"- **Source**: {result.source}")
            if result.description:
                lines.append(f"- **Description**: {result.description}")
            if result.dependencies:
                lines.append(f"- **Dependencies**: {', '.join(result.dependencies)}")
            if result.note:
                lines.append(f"- **Note**: {result.note}")
            if result.warning:
                lines.append(f"- **Warning**: {result.warning}")
            lines.append("")

    if missing:
        lines.append("## ❌ Missing Kconfigs")
        for result in missing:
            lines.append(f"### CONFIG_{result.name}")
            lines.append("- **Status**: Not found in workspace")
            if result.suggestions:
                lines.append(f"- **Suggestions**: {', '.join(result.suggestions)}")
            if result.alternatives:
                lines.append(f"- **Alternatives**: {', '.join(result.alternatives)}")
            lines.append("")

    lines.append("## 📋 Implementation Recommendations")
    lines.append("")
    if not missing:
        lines.append("✅ All requested Kconfigs are available. You can proceed with implementation.")
        lines.append("")
        deps = _dedupe_preserve(dep for r in available for dep in r.dependencies)
        if deps:
            lines.append("**Required Dependencies:**")
            lines.extend(f"- CONFIG_{dep}=y" for dep in deps)
            lines.append("")
    else:
        lines.append(f"⚠️ {len(missing)} Kconfig(s) are missing from your workspace.")
        lines.append("")
        lines.append("**Options:**")
        lines.append("1. Remove missing Kconfigs from your configuration")
        lines.append("2. Implement missing functionality manually")
        lines.append("3. Use alternative Kconfigs where suggested")
        lines.append("4. Check if missing Kconfigs are available in samples or applications")
        lines.append("")

    if warned:
        lines.append("## ⚠️ Warnings")
        lines.extend(f"- **CONFIG_{r.name}**: {r.warning}" for r in warned)
        lines.append("")

    return "\n".join(lines)


def format_verification_json(results: list[VerificationResult], indent: int | None = 2) -> str:
    return json.dumps([r.to_dict() for r in results], indent=indent)


# === Workspace metadata ===


def format_workspace_summary(analysis: dict[str, Any]) -> str:
    """Markdown overview of ``WorkspaceAnalysis.to_dict()`` output."""
    lines = ["# West Workspace Analysis", ""]
    if not analysis.get("is_valid"):
        lines.append("⚠️ Not a valid West workspace")
        return "\n".join(lines) + "\n"

    west_config = analysis.get("west_config") or {}
    lines.append("## West Configuration")
    manifest_cfg = west_config.get("manifest")
    if manifest_cfg:
        lines.append(f"- Manifest Path: {manifest_cfg.get('path', '')}/{manifest_cfg.get('file', 'west.yml')}")
    if west_config.get("zephyr"):
        lines.append(f"- Zephyr Base: {west_config['zephyr'].get('base')}")
    lines.append("")

    version = analysis.get("zephyr_version")
    if version:
        lines.append("## Zephyr Version")
        lines.append(f"- Version: {version['full']}")
        lines.append(f"- Major: {version['major']}, Minor: {version['minor']}, Patch: {version['patch']}")
        lines.append("")

    sdk = analysis.get("sdk_version")
    if sdk:
        lines.append("## SDK Information")
        lines.append(f"- {sdk['type']}: v{sdk['ncs']}")
        if sdk.get("additional"):
            lines.append(f"- Additional: {sdk['additional']}")
        lines.append("")

    projects = analysis.get("projects") or []
    if projects:
        lines.append(f"## Projects ({len(projects)})")
        for project in projects[:MAX_SUMMARY_PROJECTS]:
            lines.append(f"- {project['name']} ({project.get('revision') or 'no-revision'})")
        if len(projects) > MAX_SUMMARY_PROJECTS:
            lines.append(f"... and {len(projects) - MAX_SUMMARY_PROJECTS} more")
        lines.append("")

    modules = analysis.get("modules") or []
    if modules:
        lines.append(f"## Modules ({len(modules)})")
        for category, group in _group(modules, lambda m: m.get("category") or "other").items():
            lines.append(f"- {category}: {', '.join(m['name'] for m in group)}")
        lines.append("")

    boards = analysis.get("boards") or []
    if boards:
        lines.append(f"## Boards ({len(boards)})")
        grouped = _group(boards, lambda b: b.get("arch") or b.get("vendor") or "other")
        for arch, group in grouped.items():
            line = f"- {arch}: {', '.join(b['name'] for b in group[:MAX_BOARDS_PER_GROUP])}"
            if len(group) > MAX_BOARDS_PER_GROUP:
                line += f" ... ({len(group)} total)"
            lines.append(line)
        lines.append("")

    lines.append("## Build System")
    kconfig_files = (analysis.get("kconfig") or {}).get("files") or []
    cmake = analysis.get("cmake") or {}
    if kconfig_files:
        lines.append(f"- Kconfig files: {len(kconfig_files)} found")
    if cmake.get("modules"):
        lines.append(f"- CMake modules: {len(cmake['modules'])} found")
    if cmake.get("toolchains"):
        lines.append(f"- Toolchains: {len(cmake['toolchains'])} configured")
    if cmake.get("package_config"):
        lines.append("- Zephyr package config: Available")

    return "\n".join(lines) + "\n"


def format_module_list(modules: list[dict[str, Any]]) -> str:
    if not modules:
        return "No modules found in workspace"
    lines = [f"Found {len(modules)} modules:", ""]
    for module in modules:
        lines.append(f"- {module['name']} ({module.get('category') or 'manifest'})")
        lines.append(f"  Path: {module['path']}")
        if module.get("has_cmake"):
            lines.append("  ✓ CMake support")
        if module.get("has_kconfig"):
            lines.append("  ✓ Kconfig support")
        if module.get("revision"):
            lines.append(f"  Revision: {module['revision']}")
        lines.append("")
    return "\n".join(lines)


def format_board_list(boards: list[dict[str, str]]) -> str:
    if not boards:
        return "No boards found in workspace"
    lines = [f"Found {len(boards)} boards:", ""]
    grouped = _group(boards, lambda b: b.get("arch") or b.get("vendor") or "other")
    for group_name, group in grouped.items():
        lines.append(f"## {group_name} ({len(group)})")
        for board in group:
            lines.append(f"- {board['name']}")
            lines.append(f"  Path: {board['path']}")
        lines.append("")
    return "\n".join(lines)


def format_manifest_info(manifest: dict[str, Any] | None, projects: list[dict[str, Any]]) -> str:
    if not manifest:
        return "No manifest found in workspace"

    body = manifest.get("manifest") or {}
    lines = ["# West Manifest Information", ""]
    if body.get("version"):
        lines.append(f"Version: {body['version']}")
        lines.append("")

    remotes = [r for r in body.get("remotes") or [] if isinstance(r, dict)]
    if remotes:
        lines.append(f"## Remotes ({len(remotes)})")
        lines.extend(f"- {r.get('name')}: {r.get('url-base')}" for r in remotes)
        lines.append("")

    defaults = body.get("defaults")
    if isinstance(defaults, dict) and defaults:
        lines.append("## Defaults")
        lines.append(f"- Remote: {defaults.get('remote')}")
        if defaults.get("revision"):
            lines.append(f"- Revision: {defaults['revision']}")
        lines.append("")

    if projects:
        lines.append(f"## Projects ({len(projects)})")
        for project in projects[:MAX_MANIFEST_PROJECTS]:
            lines.append(f"- {project['name']}")
            lines.append(f"  Path: {project['path']}")
            lines.append(f"  Revision: {project.get('revision') or 'default'}")
            if project.get("repo_path"):
                lines.append(f"  Repo: {project['repo_path']}")
        if len(projects) > MAX_MANIFEST_PROJECTS:
            lines.append("")
            lines.append(f"... and {len(projects) - MAX_MANIFEST_PROJECTS} more projects")

    return "\n".join(lines) + "\n"


def format_build_info(kconfig_files: list[str], cmake: dict[str, Any]) -> str:
    lines = ["# Build System Information", "", "## Kconfig Files"]
    if kconfig_files:
        lines.extend(f"- {path}" for path in kconfig_files)
    else:
        lines.append("No Kconfig files found")
    lines.append("")

    lines.append("## CMake Modules")
    modules = cmake.get("modules") or []
    if modules:
        lines.extend(f"- {m}" for m in modules[:MAX_CMAKE_MODULES])
        if len(modules) > MAX_CMAKE_MODULES:
            lines.append(f"... and {len(modules) - MAX_CMAKE_MODULES} more")
    else:
        lines.append("No CMake modules found")
    lines.append("")

    lines.append("## Toolchain Configurations")
    toolchains = cmake.get("toolchains") or []
    if toolchains:
        lines.extend(f"- {t}" for t in toolchains)
    else:
        lines.append("No toolchain configurations found")
    lines.append("")

    if cmake.get("package_config"):
        lines.append("## Zephyr Package")
        lines.append(f"- Config: {cmake['package_config']}")

    return "\n".join(lines) + "\n"
