"""
Zephyr MCP Server - Model Context Protocol interface for West workspaces.

Exposes workspace analysis and Kconfig verification to AI tools
(Claude Desktop, Claude Code, OpenCode) over stdio.

Usage:
    zephyr-mcp-server [--workspace /path/to/west-workspace]
"""

import json
import logging
import sys

from mcp.server.fastmcp import FastMCP

from . import settings
from .cascade import KconfigVerifier
from .errors import ZephyrMCPError
from .output_formats import (
    format_board_list,
    format_build_info,
    format_manifest_info,
    format_module_list,
    format_verification_report,
    format_workspace_summary,
)
from ..west.analyzer import WestWorkspaceAnalyzer

logger = logging.getLogger(__name__)

mcp = FastMCP("mcp-zephyr")

NO_WORKSPACE_MESSAGE = (
    "Error: No workspace path provided and no default path configured. "
    "Use set_workspace_path first or provide path parameter."
)


def _analyzer(path: str | None, west_path: str | None) -> WestWorkspaceAnalyzer | None:
    effective = settings.effective_workspace(path)
    if not effective:
        return None
    return WestWorkspaceAnalyzer(effective, west_path=west_path)


# === WORKSPACE TOOLS ===


@mcp.tool()
def analyze_workspace(path: str | None = None, west_path: str | None = None) -> str:
    """Analyze a West workspace: config, manifest, versions, modules, boards, build files.

    Args:
        path: West workspace root (defaults to the configured workspace)
        west_path: Custom .west directory (defaults to <path>/.west)
    """
    analyzer = _analyzer(path, west_path)
    if analyzer is None:
        return NO_WORKSPACE_MESSAGE
    result = analyzer.analyze_workspace()
    if isinstance(result, dict):
        return f"Error analyzing workspace: {result['error']}"
    return format_workspace_summary(result.to_dict())


@mcp.tool()
def get_zephyr_version(path: str | None = None, west_path: str | None = None) -> str:
    """Get the Zephyr version of a workspace as JSON.

    Args:
        path: West workspace root (defaults to the configured workspace)
        west_path: Custom .west directory
    """
    analyzer = _analyzer(path, west_path)
    if analyzer is None:
        return NO_WORKSPACE_MESSAGE
    version = analyzer.get_zephyr_version()
    if version is None:
        return "Zephyr version not found in workspace"
    return json.dumps(version, indent=2)


@mcp.tool()
def list_modules(path: str | None = None, west_path: str | None = None) -> str:
    """List modules under modules/ and from the West manifest.

    Args:
        path: West workspace root (defaults to the configured workspace)
        west_path: Custom .west directory
    """
    analyzer = _analyzer(path, west_path)
    if analyzer is None:
        return NO_WORKSPACE_MESSAGE
    return format_module_list(analyzer.discover_modules())


@mcp.tool()
def get_manifest_info(path: str | None = None, west_path: str | None = None) -> str:
    """Show remotes, defaults and projects of the West manifest.

    Args:
        path: West workspace root (defaults to the configured workspace)
        west_path: Custom .west directory
    """
    analyzer = _analyzer(path, west_path)
    if analyzer is None:
        return NO_WORKSPACE_MESSAGE
    manifest = analyzer.parse_manifest()
    return format_manifest_info(manifest, analyzer.analysis.projects)


@mcp.tool()
def list_boards(path: str | None = None, west_path: str | None = None) -> str:
    """List board definitions grouped by architecture or vendor.

    Args:
        path: West workspace root (defaults to the configured workspace)
        west_path: Custom .west directory
    """
    analyzer = _analyzer(path, west_path)
    if analyzer is None:
        return NO_WORKSPACE_MESSAGE
    return format_board_list(analyzer.find_boards())


@mcp.tool()
def get_build_info(path: str | None = None, west_path: str | None = None) -> str:
    """List Kconfig files, CMake modules and toolchain files.

    Args:
        path: West workspace root (defaults to the configured workspace)
        west_path: Custom .west directory
    """
    analyzer = _analyzer(path, west_path)
    if analyzer is None:
        return NO_WORKSPACE_MESSAGE
    kconfig_files = analyzer.find_kconfig_files()
    return format_build_info(kconfig_files, analyzer.find_cmake_configs())


# === VERIFICATION ===


@mcp.tool()
def verify_kconfigs(
    kconfigs: list[str],
    path: str | None = None,
    west_path: str | None = None,
) -> str:
    """Check whether Kconfig symbols exist in the workspace before using them.

    Searches the Kconfig index, then the whole workspace, then documentation.
    Missing symbols come back with known alternatives where available.

    Args:
        kconfigs: Symbol names, with or without the CONFIG_ prefix (e.g., ["BT_HRS", "CONFIG_BT_SCAN"])
        path: West workspace root (defaults to the configured workspace)
        west_path: Custom .west directory
    """
    analyzer = _analyzer(path, west_path)
    if analyzer is None:
        return NO_WORKSPACE_MESSAGE
    try:
        analyzer.parse_manifest()
        verifier = KconfigVerifier(
            analyzer.root,
            config=analyzer.config,
            manifest_projects=analyzer.analysis.projects,
            west_path=west_path,
        )
        results = verifier.verify_symbols(kconfigs)
    except ZephyrMCPError as e:
        return f"Error: {e}"
    return format_verification_report(results)


# === SETTINGS ===


@mcp.tool()
def set_workspace_path(path: str) -> str:
    """Set the default West workspace used when tools get no path.

    Args:
        path: West workspace root (must contain .west/config)
    """
    try:
        stored = settings.set_default_workspace(path)
    except (ValueError, OSError) as e:
        return f"Error: {e}"
    return f"✅ Default West workspace path set to: {stored}"


@mcp.tool()
def get_workspace_path() -> str:
    """Get the currently configured default West workspace path."""
    current = settings.get_default_workspace()
    if current:
        return f"Current default workspace path: {current}"
    return "No default workspace path configured. Use set_workspace_path to configure one."


def main():
    """Entry point for zephyr-mcp-server command."""
    import argparse

    parser = argparse.ArgumentParser(description="Zephyr West workspace MCP Server")
    parser.add_argument("--workspace", default=None, help="Persist this path as the default workspace")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")
    args = parser.parse_args()

    # stdout carries the protocol
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.workspace:
        try:
            settings.set_default_workspace(args.workspace)
        except (ValueError, OSError) as e:
            parser.error(str(e))

    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
