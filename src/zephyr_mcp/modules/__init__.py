"""mcp-zephyr modules.

Modules:
- core: Kconfig symbol verification engine, MCP server and report formatting
- west: West workspace metadata (manifest, versions, modules, boards)
"""

# Lazy imports so the CLI can start without loading the MCP stack
def __getattr__(name: str):
    if name == "core":
        from . import core
        return core
    elif name == "west":
        from . import west
        return west
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

__all__ = ["core", "west"]
