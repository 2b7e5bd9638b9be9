"""Extraction of Angular ``i18n`` markers from a single template element."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence

from .errors import DiagnosticCategory
from .structures import AngularElement, Attribute, SourcePosition, TranslationCandidate

I18N_ATTRIBUTE_NAME = "i18n"
I18N_ATTRIBUTE_PREFIX = f"{I18N_ATTRIBUTE_NAME}-"
ID_INDICATOR = "@@"


class HtmlTranslationExtractionContext(ABC):
    """Capabilities the extractor needs from the surrounding traversal."""

    @abstractmethod
    def register_translation(self, candidate: TranslationCandidate) -> None:
        """Record a translation found on the current element."""

    @abstractmethod
    def emit_error(
        self,
        message: str,
        position: SourcePosition,
        category: DiagnosticCategory = DiagnosticCategory.OTHER,
    ) -> None:
        """Report malformed markup at the given position."""

    @abstractmethod
    def as_html(self) -> str:
        """Render the current element for use in messages."""


@dataclass(frozen=True)
class TranslationIdResult:
    """Outcome of reading the custom id from a marker attribute.

    ``translation_id`` is only meaningful when ``found`` is true.
    """

    found: bool
    translation_id: str = ""

    @classmethod
    def of(cls, translation_id: str) -> "TranslationIdResult":
        return cls(found=True, translation_id=translation_id)

    @classmethod
    def absent(cls) -> "TranslationIdResult":
        return cls(found=False)


def extract(element: AngularElement, context: HtmlTranslationExtractionContext) -> None:
    """Register every translation marked on ``element`` and report bad markup.

    Problems are reported through ``context.emit_error``; nothing is raised.
    """

    element_marker = _find_attribute(element.attributes, I18N_ATTRIBUTE_NAME)
    if element_marker is not None:
        _handle_element_marker(element, context, element_marker)

    attribute_markers = [
        attribute
        for attribute in element.attributes
        if attribute.name.startswith(I18N_ATTRIBUTE_PREFIX)
    ]
    _handle_attribute_markers(element, context, attribute_markers)


def extract_translation_id(
    attribute: Attribute,
    context: HtmlTranslationExtractionContext,
) -> TranslationIdResult:
    """Return the text following the first ``@@`` in the attribute value."""

    index = attribute.value.find(ID_INDICATOR)
    if index < 0:
        context.emit_error(
            f"The attribute {attribute.name} on element {context.as_html()} "
            f"is missing the custom id indicator '{ID_INDICATOR}'.",
            attribute.start_position,
            DiagnosticCategory.MISSING_ID_INDICATOR,
        )
        return TranslationIdResult.absent()

    start = index + len(ID_INDICATOR)
    if start == len(attribute.value):
        context.emit_error(
            f"The attribute {attribute.name} on element {context.as_html()} "
            "defines an empty ID.",
            attribute.start_position,
            DiagnosticCategory.EMPTY_ID,
        )
        return TranslationIdResult.absent()

    return TranslationIdResult.of(attribute.value[start:])


def _find_attribute(attributes: Sequence[Attribute], name: str) -> Optional[Attribute]:
    for attribute in attributes:
        if attribute.name == name:
            return attribute
    return None


def _handle_element_marker(
    element: AngularElement,
    context: HtmlTranslationExtractionContext,
    marker: Attribute,
) -> None:
    result = extract_translation_id(marker, context)

    if not element.texts or not element.texts[0].text:
        context.emit_error(
            f"The element {context.as_html()} with attribute {marker.name} is empty "
            "and is therefore missing the default translation.",
            marker.start_position,
            DiagnosticCategory.MISSING_DEFAULT_TEXT,
        )
        return

    if result.found:
        context.register_translation(
            TranslationCandidate(
                translation_id=result.translation_id,
                default_text=element.texts[0].text,
                position=element.start_position,
            )
        )


def _handle_attribute_markers(
    element: AngularElement,
    context: HtmlTranslationExtractionContext,
    markers: Sequence[Attribute],
) -> None:
    for marker in markers:
        result = extract_translation_id(marker, context)
        target_name = marker.name[len(I18N_ATTRIBUTE_PREFIX):]
        target = _find_attribute(element.attributes, target_name)

        if target is None:
            context.emit_error(
                f"The element {context.as_html()} with {marker.name} is missing "
                f"a corresponding {target_name} attribute.",
                element.start_position,
                DiagnosticCategory.MISSING_CORRESPONDING_ATTRIBUTE,
            )
            continue

        if not target.value:
            context.emit_error(
                f"The element {context.as_html()} with {marker.name} is missing "
                f"a value for the corresponding {target_name} attribute.",
                element.start_position,
                DiagnosticCategory.MISSING_CORRESPONDING_VALUE,
            )
            continue

        if result.found:
            context.register_translation(
                TranslationCandidate(
                    translation_id=result.translation_id,
                    default_text=target.value,
                    position=marker.start_position,
                )
            )
