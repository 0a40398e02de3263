"""Persisted default workspace path shared by the CLI and the MCP server."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

SETTINGS_ENV = "ZEPHYR_MCP_CONFIG"
_WORKSPACE_KEY = "workspacePath"


def settings_path() -> Path:
    override = os.environ.get(SETTINGS_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "mcp-zephyr" / "config.json"


def _load() -> dict:
    path = settings_path()
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Ignoring unreadable settings %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


def get_default_workspace() -> str | None:
    value = _load().get(_WORKSPACE_KEY)
    return value if isinstance(value, str) and value else None


def set_default_workspace(workspace_path: str | Path) -> str:
    """Validate and persist the default workspace path.

    Returns:
        The stored (absolute) path.

    Raises:
        ValueError: If the path does not exist or has no ``.west/config``
        OSError: If the settings file cannot be written
    """
    path = Path(workspace_path).expanduser()
    if not path.exists():
        raise ValueError(f"Path does not exist: {workspace_path}")
    if not (path / ".west" / "config").is_file():
        raise ValueError(f"Not a valid West workspace. Missing .west/config at: {workspace_path}")

    stored = str(path.resolve())
    data = _load()
    data[_WORKSPACE_KEY] = stored

    target = settings_path()
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(data, indent=2), encoding="utf-8")
    logger.info("Default workspace set to %s", stored)
    return stored


def effective_workspace(provided: str | None) -> str | None:
    """The explicitly provided path, else the persisted default."""
    return provided or get_default_workspace()
