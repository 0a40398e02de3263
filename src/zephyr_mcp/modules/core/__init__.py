"""
Core: Kconfig symbol verification engine.

Provides the bounded definition-file walk, the single-file symbol locator,
the multi-tier verification cascade and the alternatives knowledge base.

Key features:
- `zephyr-mcp verify BT_SCAN BT_HRS -w /path/to/ws` - Verify symbols from the CLI
- `verify_kconfigs` MCP tool - Same check for coding agents
"""

from .errors import (
    ZephyrMCPError,
    WorkspaceRootInvalid,
    MalformedDefinitionFile,
    make_error,
)
from .workspace import ScanConfig, WorkspaceHandle, load_scan_config, resolve_workspace
from .walker import WalkResult, walk_definition_files, walk_many
from .locator import DefinitionFile, LocatorResult, locate_symbol
from .alternatives import AlternativesKnowledgeBase, KnownAlternative, default_knowledge_base
from .cascade import (
    KconfigVerifier,
    VerificationResult,
    normalize_symbol_name,
    verify_kconfigs,
)

__all__ = [
    # Errors
    "ZephyrMCPError",
    "WorkspaceRootInvalid",
    "MalformedDefinitionFile",
    "make_error",
    # Workspace
    "ScanConfig",
    "WorkspaceHandle",
    "load_scan_config",
    "resolve_workspace",
    # Tree walker
    "WalkResult",
    "walk_definition_files",
    "walk_many",
    # Symbol locator
    "DefinitionFile",
    "LocatorResult",
    "locate_symbol",
    # Knowledge base
    "AlternativesKnowledgeBase",
    "KnownAlternative",
    "default_knowledge_base",
    # Cascade
    "KconfigVerifier",
    "VerificationResult",
    "normalize_symbol_name",
    "verify_kconfigs",
]
