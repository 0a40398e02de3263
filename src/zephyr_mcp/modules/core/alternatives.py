"""Known substitutes for Kconfig symbols that do not exist in a workspace.

The table is data (``data/alternatives.json``); a workspace can point
``alternativesFile`` in its scan config at its own copy.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

_PACKAGE_DATA = Path(__file__).parent / "data" / "alternatives.json"


@dataclass
class KnownAlternative:
    """Substitutes and advice for one unavailable symbol."""

    alternatives: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)
    warning: str | None = None


class AlternativesKnowledgeBase:
    """Exact-name lookup over the alternatives table."""

    def __init__(self, entries: dict[str, KnownAlternative], version: str | None = None) -> None:
        self._entries = entries
        self.version = version

    @classmethod
    def from_dict(cls, data: dict) -> "AlternativesKnowledgeBase":
        entries: dict[str, KnownAlternative] = {}
        for name, raw in (data.get("entries") or {}).items():
            if not isinstance(raw, dict):
                logger.warning("Skipping malformed alternatives entry %s", name)
                continue
            entries[name] = KnownAlternative(
                alternatives=list(raw.get("alternatives") or []),
                suggestions=list(raw.get("suggestions") or []),
                warning=raw.get("warning"),
            )
        return cls(entries, version=data.get("version"))

    @classmethod
    def load(cls, path: str | Path | None = None) -> "AlternativesKnowledgeBase":
        """Load the table from ``path``, or the packaged copy when None.

        Raises:
            OSError: If ``path`` cannot be read
            json.JSONDecodeError: If the file is not valid JSON
        """
        text = Path(path or _PACKAGE_DATA).read_text(encoding="utf-8")
        return cls.from_dict(json.loads(text))

    def lookup(self, name: str) -> KnownAlternative | None:
        """Return a copy of the entry for ``name``, or None."""
        entry = self._entries.get(name)
        if entry is None:
            return None
        return KnownAlternative(
            alternatives=list(entry.alternatives),
            suggestions=list(entry.suggestions),
            warning=entry.warning,
        )

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def names(self) -> list[str]:
        return sorted(self._entries)


_default_kb: AlternativesKnowledgeBase | None = None


def default_knowledge_base() -> AlternativesKnowledgeBase:
    """The packaged table, loaded once per process."""
    global _default_kb
    if _default_kb is None:
        _default_kb = AlternativesKnowledgeBase.load()
    return _default_kb
