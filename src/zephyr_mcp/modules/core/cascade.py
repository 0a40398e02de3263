"""Kconfig symbol verification cascade.

Each requested symbol goes through an ordered set of search tiers; the
first tier that reports the symbol as available ends the search:

1. indexed               Symbol Locator over the priority-directory index
2. deep-workspace        Full workspace walk with weighted strategies; a
                         Locator-confirmed declaration is high confidence
3. semantic              Textual reference in documentation/manifests (medium)
4. deep-workspace-fuzzy  Best unconfirmed match from the walk in (2) (low)
5. indexed-broad         Loose line patterns over the index (low)

Any Locator-confirmed declaration in the workspace outranks every loose
match.

When every tier fails, the alternatives knowledge base and the subsystem
heuristic annotate the (still unavailable) result.
"""

from __future__ import annotations

import logging
import re
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Iterator

from .alternatives import AlternativesKnowledgeBase, default_knowledge_base
from .locator import DefinitionFile, LocatorResult, locate_symbol
from .walker import walk_definition_files, walk_many
from .workspace import (
    PROJECT_SEMANTIC_FILES,
    ScanConfig,
    WorkspaceHandle,
    load_scan_config,
    resolve_workspace,
)

logger = logging.getLogger(__name__)

CONFIDENCE_HIGH = "high"
CONFIDENCE_MEDIUM = "medium"
CONFIDENCE_LOW = "low"

METHOD_INDEXED = "indexed"
METHOD_INDEXED_BROAD = "indexed-broad"
METHOD_DEEP = "deep-workspace"
METHOD_DEEP_FUZZY = "deep-workspace-fuzzy"
METHOD_SEMANTIC = "semantic"
METHOD_NOT_FOUND = "not-found"


@dataclass
class VerificationResult:
    """Verification outcome for one symbol."""

    name: str
    available: bool = False
    source: str | None = None  # workspace-relative path
    description: str | None = None
    dependencies: list[str] = field(default_factory=list)
    alternatives: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)
    warning: str | None = None
    confidence: str | None = None
    search_method: str | None = None
    note: str | None = None
    declaration_kind: str | None = None

    def finalize(self) -> "VerificationResult":
        """Deduplicate lists and drop the source of unavailable results."""
        self.dependencies = list(dict.fromkeys(d for d in self.dependencies if d))
        self.alternatives = list(dict.fromkeys(self.alternatives))
        self.suggestions = list(dict.fromkeys(self.suggestions))
        if not self.available:
            self.source = None
        return self

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "available": self.available,
            "source": self.source,
            "description": self.description,
            "dependencies": list(self.dependencies),
            "alternatives": list(self.alternatives),
            "suggestions": list(self.suggestions),
            "warning": self.warning,
            "confidence": self.confidence,
            "search_method": self.search_method,
            "note": self.note,
            "declaration_kind": self.declaration_kind,
        }


@dataclass
class SymbolMatch:
    """A loose match of a symbol name in one file during the deep scan."""

    file: Path
    matched_text: str
    offset: int
    line: int
    weight: int


@dataclass(frozen=True)
class MatchStrategy:
    name: str
    pattern: re.Pattern
    weight: int


def deep_strategies(name: str) -> list[MatchStrategy]:
    """Deep-scan strategies for ``name`` in descending weight."""
    n = re.escape(name)
    return [
        MatchStrategy("exact", re.compile(rf"^[ \t]*(?:menuconfig|config)[ \t]+{n}(?=\s|$)", re.M), 10),
        MatchStrategy(
            "exact-nocase",
            re.compile(rf"^[ \t]*(?:menuconfig|config)[ \t]+{n}(?=\s|$)", re.M | re.I),
            8,
        ),
        MatchStrategy("infix", re.compile(rf"config[ \t]+\w*{n}\w*", re.I), 6),
        MatchStrategy("prefix", re.compile(rf"config[ \t]+{n}\w+", re.I), 5),
        MatchStrategy("suffix", re.compile(rf"config[ \t]+\w+{n}", re.I), 5),
        MatchStrategy("mention", re.compile(n, re.I), 2),
    ]


def broad_patterns(name: str) -> list[re.Pattern]:
    """Loose line patterns for the broad in-file tier, strongest first."""
    parts = [re.escape(p) for p in name.split("_") if p]
    return [
        re.compile(rf"{re.escape(name)}(?:\s|$)", re.I),
        re.compile(rf"config.*{'.*'.join(parts)}", re.I),
        re.compile(re.escape(name.lower()), re.I),
    ]


def normalize_symbol_name(name: str) -> str:
    """Strip whitespace and a leading ``CONFIG_`` from a requested name."""
    name = name.strip()
    if name.startswith("CONFIG_") and len(name) > len("CONFIG_"):
        name = name[len("CONFIG_"):]
    return name


def _line_number(text: str, offset: int) -> int:
    return text.count("\n", 0, offset) + 1


class KconfigVerifier:
    """Verifies Kconfig symbols against one West workspace.

    The priority-directory index is built on first use and reused for the
    lifetime of the verifier. File text is cached only for the duration of
    one ``verify_symbols`` call.
    """

    def __init__(
        self,
        workspace: WorkspaceHandle | str | Path,
        config: ScanConfig | None = None,
        knowledge_base: AlternativesKnowledgeBase | None = None,
        manifest_projects: list[dict] | None = None,
        west_path: str | Path | None = None,
    ) -> None:
        if isinstance(workspace, WorkspaceHandle):
            self.workspace = workspace
        else:
            self.workspace = resolve_workspace(workspace, west_path=west_path)
        self.config = config or load_scan_config(self.workspace.root)
        if knowledge_base is None:
            if self.config.alternatives_file:
                knowledge_base = AlternativesKnowledgeBase.load(
                    self.workspace.root / self.config.alternatives_file
                )
            else:
                knowledge_base = default_knowledge_base()
        self.knowledge_base = knowledge_base
        self.manifest_projects = manifest_projects or []

        self._index: list[Path] | None = None
        self.index_warnings: list[str] = []
        self._files: dict[Path, DefinitionFile] = {}
        self._caching = False
        self._root_memo: dict[str, VerificationResult] = {}
        self._memo_lock = threading.Lock()
        self._checking = threading.local()

    # === Index ===

    def build_index(self) -> list[Path]:
        """Walk the priority directories and cache the definition files found."""
        roots = self.workspace.priority_dirs(self.config)
        walk = walk_many(
            roots,
            self.config.exclude_names,
            self.config.index_depth,
            self.config.index_patterns,
        )
        self._index = walk.files
        self.index_warnings = walk.warnings
        logger.debug("Indexed %d definition files under %d directories", len(walk.files), len(roots))
        return self._index

    @property
    def index_files(self) -> list[Path]:
        if self._index is None:
            self.build_index()
        return self._index or []

    # === Entry points ===

    def verify_symbols(self, names: Iterable[str], jobs: int = 1) -> list[VerificationResult]:
        """Verify each name; results are returned in request order."""
        names = [normalize_symbol_name(n) for n in names]
        if self._index is None:
            self.build_index()
        self._caching = True
        try:
            if jobs > 1 and len(names) > 1:
                with ThreadPoolExecutor(max_workers=jobs) as executor:
                    return list(executor.map(self._verify_single, names))
            return [self._verify_single(name) for name in names]
        finally:
            self._caching = False
            self._files = {}
            self._root_memo = {}

    def verify_symbol(self, name: str) -> VerificationResult:
        return self.verify_symbols([name])[0]

    def _stages(self, name: str) -> Iterator[VerificationResult | None]:
        """Stage results in cascade order, each computed only when reached."""
        yield self._search_indexed(name)
        declared, fuzzy = self._search_workspace(name)
        yield declared
        yield self._search_semantic(name)
        yield fuzzy
        yield self._search_indexed_broad(name)

    def _verify_single(self, name: str) -> VerificationResult:
        if not name:
            return VerificationResult(
                name=name,
                search_method=METHOD_NOT_FOUND,
                warning="Empty symbol name",
            )

        for result in self._stages(name):
            if result is not None and result.available:
                return result.finalize()

        result = VerificationResult(name=name, search_method=METHOD_NOT_FOUND)
        self._apply_knowledge_base(result)
        self._apply_subsystem_heuristic(result)
        return result.finalize()

    # === Helpers ===

    def _read(self, path: Path, cache: bool = True) -> str | None:
        definition = self._files.get(path)
        if definition is None:
            definition = DefinitionFile(path)
            if cache and self._caching:
                self._files[path] = definition
        return definition.read_or_none()

    def _relevance_ordered(self, name: str, files: list[Path]) -> list[Path]:
        """Files whose path hints at the symbol's subsystem first, then the rest."""
        hints = [
            hint.lower()
            for prefix, fragments in self.config.subsystem_hints.items()
            if name.startswith(prefix)
            for hint in fragments
        ]
        parts = [p.lower() for p in name.split("_") if len(p) > 2]

        def rank(path: Path) -> int:
            lowered = self.workspace.relative(path).lower()
            if hints and any(h in lowered for h in hints):
                return 0
            if parts and any(p in lowered for p in parts):
                return 1
            return 2

        return sorted(files, key=rank)

    def _confirmed(
        self,
        name: str,
        path: Path,
        located: LocatorResult,
        method: str,
        fallback_description: str | None = None,
    ) -> VerificationResult:
        return VerificationResult(
            name=name,
            available=True,
            source=self.workspace.relative(path),
            description=located.description or fallback_description,
            dependencies=list(located.dependencies),
            confidence=CONFIDENCE_HIGH,
            search_method=method,
            declaration_kind=located.declaration_kind,
        )

    # === Indexed files ===

    def _search_indexed(self, name: str) -> VerificationResult | None:
        for path in self._relevance_ordered(name, self.index_files):
            text = self._read(path)
            if text is None:
                continue
            located = locate_symbol(text, name)
            if located.found:
                return self._confirmed(name, path, located, METHOD_INDEXED)
        return None

    # === Broad patterns over indexed files ===

    def _search_indexed_broad(self, name: str) -> VerificationResult | None:
        files = self.index_files
        for pattern in broad_patterns(name):
            for path in files:
                text = self._read(path)
                if text is None or not pattern.search(text):
                    continue
                for line in text.splitlines():
                    if pattern.search(line):
                        return VerificationResult(
                            name=name,
                            available=True,
                            source=self.workspace.relative(path),
                            description=f"Found potential match: {line.strip()}",
                            confidence=CONFIDENCE_LOW,
                            search_method=METHOD_INDEXED_BROAD,
                            note=f"Loose textual match; no declaration of {name} was confirmed",
                        )
        return None

    # === Exhaustive workspace search ===

    def _search_workspace(
        self, name: str
    ) -> tuple[VerificationResult | None, VerificationResult | None]:
        """Walk the whole workspace.

        Returns:
            (confirmed declaration, best unconfirmed match); either may be None
        """
        logger.info("Performing deep workspace search for %s", name)
        deadline = None
        if self.config.deep_time_budget:
            deadline = time.monotonic() + self.config.deep_time_budget

        walk = walk_definition_files(
            self.workspace.root,
            self.config.deep_exclude_names,
            self.config.deep_depth,
            self.config.deep_patterns,
            max_files=self.config.max_deep_files,
            deadline=deadline,
        )

        strategies = deep_strategies(name)
        candidates: list[SymbolMatch] = []
        for path in walk.files:
            text = self._read(path, cache=False)
            if text is None:
                continue
            for strategy in strategies:
                match = strategy.pattern.search(text)
                if not match:
                    continue
                located = locate_symbol(text, name)
                if located.found:
                    declared = self._confirmed(
                        name,
                        path,
                        located,
                        METHOD_DEEP,
                        fallback_description=f"Found via deep search: {match.group(0).strip()}",
                    )
                    return declared, None
                candidates.append(
                    SymbolMatch(
                        file=path,
                        matched_text=match.group(0),
                        offset=match.start(),
                        line=_line_number(text, match.start()),
                        weight=strategy.weight,
                    )
                )
                break

        if not candidates:
            return None, None

        best = min(candidates, key=lambda c: (-c.weight, self.workspace.relative(c.file)))
        return None, VerificationResult(
            name=name,
            available=True,
            source=self.workspace.relative(best.file),
            description=f"Potential match found: {best.matched_text.strip()} (line {best.line})",
            confidence=CONFIDENCE_LOW,
            search_method=METHOD_DEEP_FUZZY,
            note=f"Potential match only; no declaration of {name} was confirmed",
        )

    # === Documentation / manifest references ===

    def _semantic_files(self) -> list[Path]:
        files: list[Path] = []
        for template in self.config.semantic_paths:
            path = self.workspace.expand(template)
            if path.is_file():
                files.append(path)
            elif path.is_dir():
                walk = walk_definition_files(
                    path,
                    self.config.deep_exclude_names,
                    self.config.semantic_depth,
                    self.config.semantic_patterns,
                    max_files=self.config.max_semantic_files,
                )
                files.extend(walk.files)

        for project in self.manifest_projects:
            project_path = project.get("path") or project.get("name")
            if not project_path:
                continue
            for rel in PROJECT_SEMANTIC_FILES:
                candidate = self.workspace.root / project_path / rel
                if candidate.is_file():
                    files.append(candidate)

        return list(dict.fromkeys(files))

    def _search_semantic(self, name: str) -> VerificationResult | None:
        terms = [name] + [part for part in name.split("_") if len(part) > 1]
        for path in self._semantic_files():
            text = self._read(path, cache=False)
            if text is None:
                continue
            lowered = text.lower()
            for term in terms:
                if term.lower() in lowered:
                    return VerificationResult(
                        name=name,
                        available=True,
                        source=self.workspace.relative(path),
                        description=f"Referenced in documentation/manifest: {term}",
                        confidence=CONFIDENCE_MEDIUM,
                        search_method=METHOD_SEMANTIC,
                        note=f"{name} is only referenced textually, not formally declared",
                    )
        return None

    # === Annotations for unavailable symbols ===

    def _apply_knowledge_base(self, result: VerificationResult) -> None:
        known = self.knowledge_base.lookup(result.name)
        if known is None:
            return
        result.alternatives = known.alternatives
        result.suggestions = known.suggestions
        result.warning = known.warning

    def _apply_subsystem_heuristic(self, result: VerificationResult) -> None:
        for prefix, root_symbol in self.config.subsystem_roots.items():
            if not result.name.startswith(prefix) or result.name == root_symbol:
                continue
            result.suggestions.append(f"Ensure CONFIG_{root_symbol}=y is enabled")
            if self._verify_root(root_symbol).available:
                result.suggestions.append(
                    f"{root_symbol} subsystem is available, config might be conditional"
                )
            return

    def _verify_root(self, root_symbol: str) -> VerificationResult:
        with self._memo_lock:
            cached = self._root_memo.get(root_symbol)
        if cached is not None:
            return cached

        # Roots whose own heuristic leads back to them count as unavailable
        pending = getattr(self._checking, "roots", None)
        if pending is None:
            pending = self._checking.roots = set()
        if root_symbol in pending:
            return VerificationResult(name=root_symbol, search_method=METHOD_NOT_FOUND)

        pending.add(root_symbol)
        try:
            result = self._verify_single(root_symbol)
        finally:
            pending.discard(root_symbol)
        with self._memo_lock:
            return self._root_memo.setdefault(root_symbol, result)


def verify_kconfigs(
    workspace_root: str | Path,
    names: Iterable[str],
    west_path: str | Path | None = None,
    config: ScanConfig | None = None,
    manifest_projects: list[dict] | None = None,
    jobs: int = 1,
) -> list[VerificationResult]:
    """Verify Kconfig symbols in a workspace.

    Raises:
        WorkspaceRootInvalid: If the workspace root is missing or not a directory
    """
    verifier = KconfigVerifier(
        workspace_root,
        config=config,
        manifest_projects=manifest_projects,
        west_path=west_path,
    )
    return verifier.verify_symbols(names, jobs=jobs)
