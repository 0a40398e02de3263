"""Bounded, exclusion-aware discovery of Kconfig definition files."""

from __future__ import annotations

import fnmatch
import logging
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)


@dataclass
class WalkResult:
    """Definition files found by a walk plus any non-fatal problems."""

    files: list[Path] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    truncated: bool = False

    def extend(self, other: "WalkResult") -> None:
        self.files.extend(other.files)
        self.warnings.extend(other.warnings)
        self.truncated = self.truncated or other.truncated


def is_definition_file(name: str, patterns: Iterable[str]) -> bool:
    """Check a file name against definition-file glob patterns (case-sensitive)."""
    return any(fnmatch.fnmatchcase(name, pattern) for pattern in patterns)


def walk_definition_files(
    root: str | Path,
    exclude_names: Iterable[str],
    max_depth: int,
    file_patterns: Iterable[str],
    max_files: int = 0,
    deadline: float | None = None,
) -> WalkResult:
    """Collect definition files below root, depth-first.

    Args:
        root: Directory to walk (depth 0)
        exclude_names: Directory names pruned without descending
        max_depth: Directories at this depth or deeper are not listed
        file_patterns: Glob patterns selecting definition files by name
        max_files: Stop after this many files (0 = unlimited)
        deadline: time.monotonic() value after which the walk stops

    Returns:
        WalkResult. Unreadable or vanished directories are skipped
        silently; other OS errors are recorded in ``warnings``.
    """
    excluded = frozenset(exclude_names)
    patterns = tuple(file_patterns)
    result = WalkResult()

    def _stop() -> bool:
        if max_files > 0 and len(result.files) >= max_files:
            return True
        return deadline is not None and time.monotonic() >= deadline

    def _walk(dir_path: Path, depth: int) -> None:
        if depth >= max_depth:
            return

        try:
            with os.scandir(dir_path) as it:
                entries = sorted(it, key=lambda e: e.name)
        except (PermissionError, FileNotFoundError, NotADirectoryError) as e:
            logger.debug("Skipping unreadable directory %s: %s", dir_path, e)
            return
        except OSError as e:
            message = f"Error reading directory {dir_path}: {e}"
            logger.warning(message)
            result.warnings.append(message)
            return

        for entry in entries:
            if _stop():
                result.truncated = True
                return
            try:
                if entry.is_dir(follow_symlinks=False):
                    if entry.name.startswith(".") or entry.name in excluded:
                        continue
                    _walk(Path(entry.path), depth + 1)
                elif entry.is_file() and is_definition_file(entry.name, patterns):
                    result.files.append(Path(entry.path))
            except (PermissionError, FileNotFoundError) as e:
                logger.debug("Skipping %s: %s", entry.path, e)
            except OSError as e:
                message = f"Error reading {entry.path}: {e}"
                logger.warning(message)
                result.warnings.append(message)

    _walk(Path(root), 0)
    if result.truncated:
        message = f"Scan of {root} stopped early after {len(result.files)} files"
        logger.warning(message)
        result.warnings.append(message)
    return result


def walk_many(
    roots: Iterable[str | Path],
    exclude_names: Iterable[str],
    max_depth: int,
    file_patterns: Iterable[str],
) -> WalkResult:
    """Walk several roots and merge results, dropping duplicate paths."""
    exclude_names = list(exclude_names)
    file_patterns = list(file_patterns)
    merged = WalkResult()
    for root in roots:
        merged.extend(walk_definition_files(root, exclude_names, max_depth, file_patterns))

    seen: set[Path] = set()
    unique: list[Path] = []
    for path in merged.files:
        if path not in seen:
            seen.add(path)
            unique.append(path)
    merged.files = unique
    return merged
