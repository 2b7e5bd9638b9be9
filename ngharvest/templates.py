"""Template traversal feeding parsed elements to the extractor."""

from __future__ import annotations

import html
import re
from html.parser import HTMLParser
from typing import List, Optional, Sequence, Tuple

from .catalog import TranslationCatalog
from .errors import DiagnosticCategory
from .extractor import HtmlTranslationExtractionContext, extract
from .structures import (
    AngularElement,
    Attribute,
    Diagnostic,
    SourcePosition,
    TextNode,
    TranslationCandidate,
)

VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

TAG_NAME_PATTERN = re.compile(r"<[^\s/>]+")
ATTRIBUTE_PATTERN = re.compile(
    r"""([^\s/>"'=][^\s/>"'=]*)(?:\s*=\s*(?:"[^"]*"|'[^']*'|[^\s>]*))?"""
)


def _offset_position(start: SourcePosition, raw: str, offset: int) -> SourcePosition:
    """Translate an offset inside ``raw`` into a template position."""

    prefix = raw[:offset]
    newlines = prefix.count("\n")
    if not newlines:
        return SourcePosition(start.line, start.column + offset)
    return SourcePosition(start.line + newlines, len(prefix) - prefix.rfind("\n"))


def _attribute_offsets(raw: str) -> List[Tuple[str, int]]:
    """Locate attribute names in a raw start tag as (lowercased name, offset)."""

    tag_match = TAG_NAME_PATTERN.match(raw)
    if tag_match is None:
        return []
    return [
        (match.group(1).lower(), match.start())
        for match in ATTRIBUTE_PATTERN.finditer(raw, tag_match.end())
    ]


class _TemplateParser(HTMLParser):
    """Builds ``AngularElement`` objects in document order."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.elements: List[AngularElement] = []
        self._open: List[AngularElement] = []
        self._pending: List[str] = []
        self._pending_start: Optional[SourcePosition] = None

    def handle_starttag(self, tag, attrs) -> None:
        self._flush_text()
        element = self._build_element(tag, attrs)
        self.elements.append(element)
        if tag not in VOID_ELEMENTS:
            self._open.append(element)

    def handle_startendtag(self, tag, attrs) -> None:
        self._flush_text()
        self.elements.append(self._build_element(tag, attrs))

    def handle_endtag(self, tag) -> None:
        self._flush_text()
        for index in range(len(self._open) - 1, -1, -1):
            if self._open[index].tag == tag:
                del self._open[index:]
                return

    def handle_comment(self, data: str) -> None:
        self._flush_text()

    def handle_data(self, data: str) -> None:
        # A bare "<" in text (e.g. "{{ a < b }}") arrives as several chunks.
        if not self._open:
            return
        if self._pending_start is None:
            line, offset = self.getpos()
            self._pending_start = SourcePosition(line, offset + 1)
        self._pending.append(data)

    def close(self) -> None:
        super().close()
        self._flush_text()
        self._open.clear()

    def _flush_text(self) -> None:
        text = "".join(self._pending)
        start = self._pending_start
        self._pending = []
        self._pending_start = None
        if start is None or not self._open or not text.strip():
            return
        leading = len(text) - len(text.lstrip())
        position = _offset_position(start, text, leading)
        self._open[-1].texts.append(TextNode(text=text.strip(), start_position=position))

    def _build_element(self, tag: str, attrs) -> AngularElement:
        line, offset = self.getpos()
        start = SourcePosition(line, offset + 1)
        raw = self.get_starttag_text() or ""
        offsets = _attribute_offsets(raw)
        aligned = len(offsets) == len(attrs)

        attributes: List[Attribute] = []
        for index, (name, value) in enumerate(attrs):
            position = start
            if aligned and offsets[index][0] == name:
                position = _offset_position(start, raw, offsets[index][1])
            attributes.append(
                Attribute(name=name, value=value or "", start_position=position)
            )

        return AngularElement(
            tag=tag,
            start_position=start,
            attributes=attributes,
            source=raw or None,
        )


def parse_template(text: str) -> List[AngularElement]:
    """Parse template markup into elements ordered by their opening tags."""

    parser = _TemplateParser()
    parser.feed(text)
    parser.close()
    return parser.elements


def render_element(element: AngularElement) -> str:
    """Render the opening tag of an element for diagnostics."""

    if element.source:
        return " ".join(element.source.split())
    parts = [element.tag]
    for attribute in element.attributes:
        parts.append(f'{attribute.name}="{html.escape(attribute.value)}"')
    return "<" + " ".join(parts) + ">"


class ElementExtractionContext(HtmlTranslationExtractionContext):
    """Forwards findings for one element of one template into a catalog."""

    def __init__(
        self,
        element: AngularElement,
        *,
        template: str,
        catalog: TranslationCatalog,
    ) -> None:
        self.element = element
        self.template = template
        self.catalog = catalog
        self._rendered: Optional[str] = None

    def register_translation(self, candidate: TranslationCandidate) -> None:
        self.catalog.register(self.template, candidate)

    def emit_error(
        self,
        message: str,
        position: SourcePosition,
        category: DiagnosticCategory = DiagnosticCategory.OTHER,
    ) -> None:
        self.catalog.report(
            self.template,
            Diagnostic(message=message, position=position, category=category),
        )

    def as_html(self) -> str:
        if self._rendered is None:
            self._rendered = render_element(self.element)
        return self._rendered


def extract_elements(
    elements: Sequence[AngularElement],
    *,
    template: str,
    catalog: TranslationCatalog,
) -> int:
    """Run the extractor on each element and return how many were visited."""

    for element in elements:
        context = ElementExtractionContext(element, template=template, catalog=catalog)
        extract(element, context)
    return len(elements)


def extract_template(text: str, *, template: str, catalog: TranslationCatalog) -> int:
    """Parse a template and extract every marked translation into ``catalog``."""

    return extract_elements(parse_template(text), template=template, catalog=catalog)
