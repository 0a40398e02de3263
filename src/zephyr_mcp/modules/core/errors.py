"""
Structured errors for agent-parseable failures.

Error codes that agents can programmatically handle:
- ZMCP_ERR_WORKSPACE: Workspace root is missing or not a directory
- ZMCP_ERR_NO_WORKSPACE: No path given and no default workspace configured
- ZMCP_ERR_NOT_FOUND: File or workspace component not found
- ZMCP_ERR_INTERNAL: Anything else

Non-fatal filesystem conditions met while scanning are Python's own
PermissionError (access denied) and FileNotFoundError (entry vanished
between listing and reading); scanners skip those and keep going.
"""

from dataclasses import dataclass, field
from typing import Any

# Error codes
ERR_WORKSPACE = "ZMCP_ERR_WORKSPACE"
ERR_NO_WORKSPACE = "ZMCP_ERR_NO_WORKSPACE"
ERR_NOT_FOUND = "ZMCP_ERR_NOT_FOUND"
ERR_INTERNAL = "ZMCP_ERR_INTERNAL"


class ZephyrMCPError(Exception):
    """Base class for errors raised by mcp-zephyr."""


class WorkspaceRootInvalid(ZephyrMCPError, ValueError):
    """Raised when a workspace root does not exist or is not a directory.

    Fatal for the whole verification call: it is raised before any
    symbol is looked at.
    """

    def __init__(self, root: str, reason: str = "does not exist") -> None:
        self.root = root
        self.reason = reason
        super().__init__(f"Invalid workspace root '{root}': {reason}")


class MalformedDefinitionFile(ZephyrMCPError):
    """Raised when a definition file holds content that is not Kconfig text."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Malformed definition file {path}: {reason}")


@dataclass
class ZephyrMCPErrorInfo:
    """Structured error response for machine parsing."""

    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "error": True,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


def make_error(code: str, message: str, **details) -> dict:
    """Create a structured error response dict."""
    return ZephyrMCPErrorInfo(code=code, message=message, details=details).to_dict()


def make_workspace_error(root: str, reason: str) -> dict:
    """Create an invalid workspace error."""
    return make_error(
        ERR_WORKSPACE,
        f"Invalid workspace root '{root}': {reason}",
        root=root,
    )


def make_no_workspace_error() -> dict:
    """Create a missing workspace path error."""
    return make_error(
        ERR_NO_WORKSPACE,
        "No workspace path provided and no default path configured.",
        hint="zephyr-mcp workspace set /path/to/west-workspace",
    )


def make_not_found_error(item_type: str, name: str) -> dict:
    """Create a not found error."""
    return make_error(
        ERR_NOT_FOUND,
        f"{item_type} '{name}' not found",
        type=item_type,
        name=name,
    )
