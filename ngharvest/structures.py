"""Core data structures for ngharvest."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .errors import DiagnosticCategory


@dataclass(frozen=True)
class SourcePosition:
    """A 1-based line and column inside a template."""

    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class Attribute:
    """A single attribute of a parsed element."""

    name: str
    value: str
    start_position: SourcePosition


@dataclass(frozen=True)
class TextNode:
    """A direct text child of an element."""

    text: str
    start_position: SourcePosition


@dataclass
class AngularElement:
    """An element of an Angular template as seen by the extractor.

    Only ``attributes``, ``texts`` and ``start_position`` are read during
    extraction; ``tag`` and ``source`` are used when rendering messages.
    """

    tag: str
    start_position: SourcePosition
    attributes: List[Attribute] = field(default_factory=list)
    texts: List[TextNode] = field(default_factory=list)
    source: Optional[str] = None


@dataclass(frozen=True)
class TranslationCandidate:
    """A translation found in a template, ready to be registered."""

    translation_id: str
    default_text: str
    position: SourcePosition


@dataclass(frozen=True)
class Diagnostic:
    """A problem in the template markup, reported with its location."""

    message: str
    position: SourcePosition
    category: DiagnosticCategory = DiagnosticCategory.OTHER
