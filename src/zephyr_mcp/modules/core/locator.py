"""Locate a Kconfig symbol's declaration in one file and parse its metadata.

A declaration is ``config NAME``, ``menuconfig NAME`` or ``choice NAME``.
Its definition section runs from the declaration line to the next
top-level keyword at the start of a line (or end of file), so help text
and attributes of the following symbol are never attributed to this one.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from .errors import MalformedDefinitionFile

logger = logging.getLogger(__name__)

CONTEXT_SNIPPET_CHARS = 200

# Start of the next declaration. Anchored at line start and requiring the
# full keyword shape so prose in help text ("menu entries ...") is not a boundary.
_SECTION_BOUNDARY = re.compile(
    r"^[ \t]*(?:"
    r"(?:menuconfig|config)[ \t]+[A-Za-z0-9_]+[ \t]*(?:#.*)?$"
    r"|choice(?:[ \t]+[A-Za-z0-9_]+)?[ \t]*(?:#.*)?$"
    r"|endchoice[ \t]*(?:#.*)?$"
    r"|endmenu[ \t]*(?:#.*)?$"
    r"|menu[ \t]+\".*$"
    r")",
    re.MULTILINE,
)

_HELP_MARKER = re.compile(r"^[ \t]*(?:help|---help---)[ \t]*$")
_DEPENDS_ON = re.compile(r"^[ \t]*depends[ \t]+on[ \t]+(.+)$", re.IGNORECASE)
_SELECT = re.compile(r"^[ \t]*select[ \t]+([A-Za-z0-9_]+)", re.IGNORECASE)
_LOGICAL_SEPARATOR = re.compile(r"\s*(?:&&|\|\|)\s*")
_TRAILING_COMMENT = re.compile(r"\s+#.*$")


class DefinitionFile:
    """A candidate definition file. Text is loaded lazily and cached on the instance."""

    __slots__ = ("path", "_text")

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._text: str | None = None

    def read(self) -> str:
        """Return the file text.

        Raises:
            OSError: If the file cannot be read
            MalformedDefinitionFile: If the content is binary
        """
        if self._text is None:
            data = self.path.read_bytes()
            if b"\x00" in data:
                raise MalformedDefinitionFile(str(self.path), "binary content")
            self._text = data.decode("utf-8", errors="replace")
        return self._text

    def read_or_none(self) -> str | None:
        """Return the file text, or None when it cannot be used."""
        try:
            return self.read()
        except (OSError, MalformedDefinitionFile) as e:
            logger.debug("Treating %s as no match: %s", self.path, e)
            return None

    def __eq__(self, other: object) -> bool:
        return isinstance(other, DefinitionFile) and other.path == self.path

    def __hash__(self) -> int:
        return hash(self.path)

    def __repr__(self) -> str:
        return f"DefinitionFile({str(self.path)!r})"


@dataclass
class LocatorResult:
    """Outcome of looking for one symbol in one file's text."""

    found: bool = False
    description: str | None = None
    dependencies: list[str] = field(default_factory=list)
    context_snippet: str | None = None
    declaration_kind: str | None = None
    line: int | None = None


def declaration_patterns(name: str) -> list[re.Pattern]:
    """Declaration patterns for a symbol, strictest first."""
    escaped = re.escape(name)
    anchored = rf"^[ \t]*(menuconfig|config|choice)[ \t]+{escaped}(?=\s|$)"
    return [
        re.compile(anchored, re.MULTILINE),
        re.compile(anchored, re.MULTILINE | re.IGNORECASE),
        re.compile(rf"\b(menuconfig|config)[ \t]+{escaped}(?=\s|$)", re.IGNORECASE),
    ]


def find_declaration(text: str, name: str) -> re.Match | None:
    for pattern in declaration_patterns(name):
        match = pattern.search(text)
        if match:
            return match
    return None


def extract_definition_section(text: str, position: int) -> str:
    """Text from the line containing ``position`` up to the next declaration."""
    line_start = text.rfind("\n", 0, position) + 1
    line_end = text.find("\n", position)
    if line_end == -1:
        return text[line_start:]

    boundary = _SECTION_BOUNDARY.search(text, line_end)
    end = boundary.start() if boundary else len(text)
    return text[line_start:end]


def _indent(line: str) -> int:
    expanded = line.expandtabs(8)
    return len(expanded) - len(expanded.lstrip())


def _split_help(lines: list[str]) -> tuple[str | None, list[str]]:
    """Split section lines into (first help paragraph, attribute lines).

    The help block ends at the first non-blank line indented less than the
    first line of help text.
    """
    help_idx = next(
        (i for i, line in enumerate(lines) if i > 0 and _HELP_MARKER.match(line)),
        None,
    )
    if help_idx is None:
        return None, lines

    first = help_idx + 1
    while first < len(lines) and not lines[first].strip():
        first += 1
    if first >= len(lines) or _indent(lines[first]) <= _indent(lines[help_idx]):
        return None, lines[:help_idx] + lines[help_idx + 1:]

    body_indent = _indent(lines[first])
    end = first
    while end < len(lines) and (not lines[end].strip() or _indent(lines[end]) >= body_indent):
        end += 1

    paragraph: list[str] = []
    for line in lines[first:end]:
        if not line.strip():
            break
        paragraph.append(line.strip())

    description = " ".join(paragraph) or None
    return description, lines[:help_idx] + lines[end:]


def _clean_dependency(token: str) -> str:
    token = token.replace("(", "").replace(")", "").strip()
    return token.lstrip("!").strip()


def extract_dependencies(lines: list[str]) -> list[str]:
    """Symbols named by ``depends on`` and ``select`` lines, deduplicated in order."""
    dependencies: list[str] = []
    for line in lines:
        depends = _DEPENDS_ON.match(line)
        if depends:
            expression = _TRAILING_COMMENT.sub("", depends.group(1))
            dependencies.extend(
                _clean_dependency(token) for token in _LOGICAL_SEPARATOR.split(expression)
            )
            continue
        select = _SELECT.match(line)
        if select:
            dependencies.append(select.group(1))

    return list(dict.fromkeys(dep for dep in dependencies if dep))


def locate_symbol(text: str, name: str) -> LocatorResult:
    """Find ``name``'s declaration in ``text`` and extract its metadata."""
    match = find_declaration(text, name)
    if match is None:
        return LocatorResult()

    section = extract_definition_section(text, match.start())
    description, attribute_lines = _split_help(section.splitlines())

    snippet = section[:CONTEXT_SNIPPET_CHARS]
    if len(section) > CONTEXT_SNIPPET_CHARS:
        snippet += "..."

    line_start = text.rfind("\n", 0, match.start()) + 1
    return LocatorResult(
        found=True,
        description=description,
        dependencies=extract_dependencies(attribute_lines),
        context_snippet=snippet,
        declaration_kind=match.group(1).lower(),
        line=text.count("\n", 0, line_start) + 1,
    )
