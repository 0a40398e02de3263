"""
mcp-zephyr: West workspace analysis for coding agents

Answers "does this Kconfig symbol exist in my workspace, and what does it
depend on?" for Zephyr RTOS / nRF Connect SDK West workspaces, and exposes
workspace metadata (versions, manifest, modules, boards) over MCP.

Modules:
- core: Kconfig verification engine, MCP server, report formatting
- west: West workspace metadata extraction
"""

try:
    from importlib.metadata import version
    __version__ = version("mcp-zephyr")
except Exception:
    __version__ = "0.1.0"

from .modules.core import (
    KconfigVerifier,
    VerificationResult,
    verify_kconfigs,
)

# Module access
from . import modules

__all__ = [
    "modules",
    "KconfigVerifier",
    "VerificationResult",
    "verify_kconfigs",
    "__version__",
]
