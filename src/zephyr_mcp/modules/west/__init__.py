"""
West: workspace metadata extraction.

Reads `.west/config`, the YAML manifest, Zephyr/nRF version files and the
module, board and CMake layout of a West workspace.
"""

from .analyzer import WestWorkspaceAnalyzer, WorkspaceAnalysis

__all__ = ["WestWorkspaceAnalyzer", "WorkspaceAnalysis"]
