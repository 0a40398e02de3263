#!/usr/bin/env python3
"""
mcp-zephyr CLI - West workspace analysis and Kconfig verification.

Usage:
    zephyr-mcp verify <symbol>... [--workspace PATH]   Verify Kconfig symbols
    zephyr-mcp analyze [PATH]                           Summarize a West workspace
    zephyr-mcp index [PATH]                             List indexed Kconfig files
    zephyr-mcp workspace set <PATH>                     Persist the default workspace
    zephyr-mcp workspace get                            Show the default workspace
    zephyr-mcp serve                                    Run the MCP server on stdio
"""
import argparse
import json
import logging
import sys

from . import __version__
from .modules.core import settings
from .modules.core.errors import (
    ERR_INTERNAL,
    WorkspaceRootInvalid,
    make_error,
    make_no_workspace_error,
    make_not_found_error,
    make_workspace_error,
)


def _machine_output(result: dict | list, args) -> None:
    """Print result in machine-readable format if --machine flag is set.

    For --machine mode, wraps result in success envelope:
    {"success": true, "result": <result>}

    Otherwise prints with standard indentation.
    """
    if getattr(args, "machine", False):
        wrapped = {"success": True, "result": result}
        print(json.dumps(wrapped, separators=(",", ":"), ensure_ascii=False))
    else:
        print(json.dumps(result, indent=2))


def _fail(args, error: dict) -> None:
    if getattr(args, "machine", False):
        print(json.dumps(error))
    else:
        print(f"Error: {error['message']}", file=sys.stderr)
    sys.exit(1)


def _require_workspace(args) -> str:
    workspace = settings.effective_workspace(getattr(args, "workspace", None))
    if not workspace:
        _fail(args, make_no_workspace_error())
    return workspace


def _build_index(verifier, show_progress: bool) -> list:
    """Build the Kconfig index, with a spinner when attached to a terminal."""
    console = None
    if show_progress and sys.stdout.isatty():
        from rich.console import Console
        console = Console(stderr=True)

    if console is None:
        return verifier.build_index()

    from rich.progress import Progress, SpinnerColumn, TextColumn
    with Progress(
        SpinnerColumn(), TextColumn("[bold]{task.description}"), console=console, transient=True,
    ) as progress:
        progress.add_task("Indexing Kconfig files...", total=None)
        return verifier.build_index()


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        prog="zephyr-mcp",
        description="West workspace analysis and Kconfig verification",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Version: %(prog)s """ + __version__ + """

Examples:
    zephyr-mcp workspace set ~/ncs                 # Remember the workspace
    zephyr-mcp verify BT_SCAN CONFIG_BT_HRS        # Check symbols before using them
    zephyr-mcp verify BT_SCAN --workspace ~/ncs    # Explicit workspace
    zephyr-mcp --machine verify BT_SCAN            # JSON for agents
    zephyr-mcp analyze ~/ncs                       # Versions, modules, boards

Scan configuration:
    <workspace>/.mcp-zephyr.json overrides priority directories, exclusions,
    depth limits and the alternatives table (camelCase keys).
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--machine",
        action="store_true",
        help="Machine-readable output (forces JSON with consistent schema and error codes)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log scan progress to stderr",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # zephyr-mcp verify SYMBOL...
    verify_p = subparsers.add_parser("verify", help="Verify Kconfig symbols exist")
    verify_p.add_argument("symbols", nargs="+", help="Symbol names (CONFIG_ prefix optional)")
    verify_p.add_argument("--workspace", "-w", default=None, help="West workspace root")
    verify_p.add_argument("--west-path", default=None, help="Custom .west directory")
    verify_p.add_argument(
        "--format",
        choices=["markdown", "json"],
        default="markdown",
        help="Report format (default: markdown)",
    )
    verify_p.add_argument("--jobs", "-j", type=int, default=1, help="Verify symbols in parallel")

    # zephyr-mcp analyze [PATH]
    analyze_p = subparsers.add_parser("analyze", help="Summarize a West workspace")
    analyze_p.add_argument("workspace", nargs="?", default=None, help="West workspace root")
    analyze_p.add_argument("--west-path", default=None, help="Custom .west directory")
    analyze_p.add_argument("--json", action="store_true", help="Print the raw analysis as JSON")

    # zephyr-mcp index [PATH]
    index_p = subparsers.add_parser("index", help="List the Kconfig files the verifier indexes")
    index_p.add_argument("workspace", nargs="?", default=None, help="West workspace root")
    index_p.add_argument("--west-path", default=None, help="Custom .west directory")

    # zephyr-mcp workspace set|get
    ws_p = subparsers.add_parser("workspace", help="Manage the default workspace path")
    ws_sub = ws_p.add_subparsers(dest="action", required=True)
    ws_set_p = ws_sub.add_parser("set", help="Persist the default workspace path")
    ws_set_p.add_argument("path", help="West workspace root (must contain .west/config)")
    ws_sub.add_parser("get", help="Show the default workspace path")

    # zephyr-mcp serve
    subparsers.add_parser("serve", help="Run the MCP server on stdio")

    args = parser.parse_args(argv)

    logging.basicConfig(
        stream=sys.stderr,
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "verify":
            from .modules.core.cascade import KconfigVerifier
            from .modules.core.output_formats import format_verification_json, format_verification_report
            from .modules.west.analyzer import WestWorkspaceAnalyzer

            workspace = _require_workspace(args)
            analyzer = WestWorkspaceAnalyzer(workspace, west_path=args.west_path)
            analyzer.parse_manifest()
            verifier = KconfigVerifier(
                workspace,
                config=analyzer.config,
                manifest_projects=analyzer.analysis.projects,
                west_path=args.west_path,
            )
            _build_index(verifier, show_progress=not args.machine)
            results = verifier.verify_symbols(args.symbols, jobs=max(1, args.jobs))

            if args.machine:
                _machine_output([r.to_dict() for r in results], args)
            elif args.format == "json":
                print(format_verification_json(results))
            else:
                print(format_verification_report(results))

        elif args.command == "analyze":
            from .modules.core.output_formats import format_workspace_summary
            from .modules.west.analyzer import WestWorkspaceAnalyzer

            workspace = _require_workspace(args)
            analysis = WestWorkspaceAnalyzer(workspace, west_path=args.west_path).analyze_workspace()
            if isinstance(analysis, dict):
                _fail(args, make_not_found_error("West config", f"{workspace}/.west/config"))

            if args.machine or args.json:
                _machine_output(analysis.to_dict(), args)
            else:
                print(format_workspace_summary(analysis.to_dict()))

        elif args.command == "index":
            from .modules.core.cascade import KconfigVerifier

            workspace = _require_workspace(args)
            verifier = KconfigVerifier(workspace, west_path=args.west_path)
            files = _build_index(verifier, show_progress=not args.machine)
            relative = [verifier.workspace.relative(path) for path in files]

            if args.machine:
                _machine_output({"files": relative, "warnings": verifier.index_warnings}, args)
            else:
                for path in relative:
                    print(path)
                print(f"\n{len(relative)} Kconfig files indexed", file=sys.stderr)
                for warning in verifier.index_warnings:
                    print(f"Warning: {warning}", file=sys.stderr)

        elif args.command == "workspace":
            if args.action == "set":
                stored = settings.set_default_workspace(args.path)
                if args.machine:
                    _machine_output({"workspace_path": stored}, args)
                else:
                    print(f"Default West workspace path set to: {stored}")
            elif args.action == "get":
                current = settings.get_default_workspace()
                if args.machine:
                    _machine_output({"workspace_path": current}, args)
                elif current:
                    print(current)
                else:
                    print("No default workspace path configured. Use `zephyr-mcp workspace set PATH`.")

        elif args.command == "serve":
            from .modules.core.mcp_server import mcp

            mcp.run(transport="stdio")

    except WorkspaceRootInvalid as e:
        _fail(args, make_workspace_error(e.root, e.reason))
    except ValueError as e:
        _fail(args, make_error(ERR_INTERNAL, str(e)))
    except OSError as e:
        _fail(args, make_error(ERR_INTERNAL, str(e)))


if __name__ == "__main__":
    main()
