"""Unit tests for the i18n marker extractor."""

from __future__ import annotations

from ngharvest.errors import DiagnosticCategory
from ngharvest.extractor import (
    HtmlTranslationExtractionContext,
    TranslationIdResult,
    extract,
    extract_translation_id,
)
from ngharvest.structures import (
    AngularElement,
    Attribute,
    SourcePosition,
    TextNode,
    TranslationCandidate,
)

ELEMENT_POSITION = SourcePosition(3, 5)


class RecordingContext(HtmlTranslationExtractionContext):
    def __init__(self) -> None:
        self.translations: list[TranslationCandidate] = []
        self.errors: list[tuple[str, SourcePosition, DiagnosticCategory]] = []

    def register_translation(self, candidate: TranslationCandidate) -> None:
        self.translations.append(candidate)

    def emit_error(
        self,
        message: str,
        position: SourcePosition,
        category: DiagnosticCategory = DiagnosticCategory.OTHER,
    ) -> None:
        self.errors.append((message, position, category))

    def as_html(self) -> str:
        return "<span>"

    @property
    def categories(self) -> list[DiagnosticCategory]:
        return [category for _, _, category in self.errors]


def _attr(name: str, value: str, column: int) -> Attribute:
    return Attribute(name=name, value=value, start_position=SourcePosition(3, column))


def _element(*attributes: Attribute, texts: tuple[str, ...] = ()) -> AngularElement:
    return AngularElement(
        tag="span",
        start_position=ELEMENT_POSITION,
        attributes=list(attributes),
        texts=[TextNode(text=text, start_position=SourcePosition(3, 30)) for text in texts],
    )


def test_element_marker_registers_first_text_at_element_position() -> None:
    context = RecordingContext()
    extract(_element(_attr("i18n", "@@greeting", 11), texts=("Hello", "ignored")), context)

    assert context.translations == [
        TranslationCandidate(translation_id="greeting", default_text="Hello", position=ELEMENT_POSITION)
    ]
    assert context.errors == []


def test_element_marker_with_meaning_and_description_keeps_text_after_indicator() -> None:
    context = RecordingContext()
    extract(_element(_attr("i18n", "site header|An introduction@@introHeader", 11), texts=("Hi",)), context)

    assert [candidate.translation_id for candidate in context.translations] == ["introHeader"]


def test_element_marker_without_text_reports_missing_default_at_marker() -> None:
    marker = _attr("i18n", "@@greeting", 11)
    context = RecordingContext()
    extract(_element(marker), context)

    assert context.translations == []
    assert len(context.errors) == 1
    message, position, category = context.errors[0]
    assert category is DiagnosticCategory.MISSING_DEFAULT_TEXT
    assert position == marker.start_position
    assert "<span>" in message
    assert "missing the default translation" in message


def test_element_marker_without_indicator_reports_once_even_with_text() -> None:
    context = RecordingContext()
    extract(_element(_attr("i18n", "no-marker", 11), texts=("Hello",)), context)

    assert context.translations == []
    assert context.categories == [DiagnosticCategory.MISSING_ID_INDICATOR]
    assert "'@@'" in context.errors[0][0]


def test_element_marker_without_indicator_and_text_reports_both_causes() -> None:
    context = RecordingContext()
    extract(_element(_attr("i18n", "no-marker", 11)), context)

    assert context.categories == [
        DiagnosticCategory.MISSING_ID_INDICATOR,
        DiagnosticCategory.MISSING_DEFAULT_TEXT,
    ]


def test_element_marker_with_empty_id_reports_once() -> None:
    context = RecordingContext()
    extract(_element(_attr("i18n", "@@", 11), texts=("Hello",)), context)

    assert context.translations == []
    assert context.categories == [DiagnosticCategory.EMPTY_ID]
    assert "defines an empty ID" in context.errors[0][0]


def test_attribute_marker_registers_sibling_value_at_marker_position() -> None:
    marker = _attr("i18n-title", "@@t1", 20)
    context = RecordingContext()
    extract(_element(marker, _attr("title", "Hi", 40)), context)

    assert context.translations == [
        TranslationCandidate(translation_id="t1", default_text="Hi", position=marker.start_position)
    ]
    assert context.errors == []


def test_attribute_marker_without_sibling_reports_missing_attribute() -> None:
    context = RecordingContext()
    extract(_element(_attr("i18n-title", "@@t1", 20)), context)

    assert context.translations == []
    assert len(context.errors) == 1
    message, position, category = context.errors[0]
    assert category is DiagnosticCategory.MISSING_CORRESPONDING_ATTRIBUTE
    assert position == ELEMENT_POSITION
    assert "i18n-title is missing a corresponding title attribute" in message


def test_attribute_marker_with_empty_sibling_reports_missing_value() -> None:
    context = RecordingContext()
    extract(_element(_attr("i18n-title", "@@t1", 20), _attr("title", "", 40)), context)

    assert context.translations == []
    assert len(context.errors) == 1
    message, position, category = context.errors[0]
    assert category is DiagnosticCategory.MISSING_CORRESPONDING_VALUE
    assert position == ELEMENT_POSITION
    assert "missing a value for the corresponding title attribute" in message


def test_attribute_marker_failures_co_occur() -> None:
    context = RecordingContext()
    extract(_element(_attr("i18n-title", "t1", 20)), context)

    assert context.translations == []
    assert context.categories == [
        DiagnosticCategory.MISSING_ID_INDICATOR,
        DiagnosticCategory.MISSING_CORRESPONDING_ATTRIBUTE,
    ]


def test_attribute_marker_uses_first_matching_sibling() -> None:
    context = RecordingContext()
    extract(
        _element(_attr("i18n-title", "@@t1", 20), _attr("title", "First", 40), _attr("title", "Second", 60)),
        context,
    )

    assert [candidate.default_text for candidate in context.translations] == ["First"]


def test_attribute_marker_names_are_case_sensitive() -> None:
    context = RecordingContext()
    extract(_element(_attr("I18N-title", "@@t1", 20), _attr("I18n", "@@x", 40), _attr("title", "Hi", 60)), context)

    assert context.translations == []
    assert context.errors == []


def test_multiple_attribute_markers_are_independent() -> None:
    context = RecordingContext()
    extract(
        _element(
            _attr("i18n-title", "@@", 10),
            _attr("i18n-alt", "@@altText", 30),
            _attr("i18n-placeholder", "@@ph", 50),
            _attr("title", "Title", 70),
            _attr("alt", "Alternative", 90),
        ),
        context,
    )

    assert [(c.translation_id, c.default_text) for c in context.translations] == [
        ("altText", "Alternative"),
    ]
    assert context.categories == [
        DiagnosticCategory.EMPTY_ID,
        DiagnosticCategory.MISSING_CORRESPONDING_ATTRIBUTE,
    ]


def test_element_and_attribute_markers_on_same_element() -> None:
    context = RecordingContext()
    extract(
        _element(
            _attr("i18n", "@@body", 10),
            _attr("i18n-title", "@@tooltip", 20),
            _attr("title", "More", 40),
            texts=("Click me",),
        ),
        context,
    )

    assert [(c.translation_id, c.default_text) for c in context.translations] == [
        ("body", "Click me"),
        ("tooltip", "More"),
    ]


def test_extraction_is_stateless_across_fresh_contexts() -> None:
    element = _element(
        _attr("i18n", "@@a", 10),
        _attr("i18n-title", "nope", 20),
        texts=("A",),
    )
    first = RecordingContext()
    second = RecordingContext()
    extract(element, first)
    extract(element, second)

    assert first.translations == second.translations
    assert first.errors == second.errors


def test_element_without_markers_is_ignored() -> None:
    context = RecordingContext()
    extract(_element(_attr("class", "title", 10), texts=("Plain",)), context)

    assert context.translations == []
    assert context.errors == []


def test_translation_ids_are_opaque_strings() -> None:
    context = RecordingContext()
    result = extract_translation_id(_attr("i18n", "meaning@@ spaced id@@ with ümlaut ", 10), context)

    assert result == TranslationIdResult(found=True, translation_id=" spaced id@@ with ümlaut ")
    assert context.errors == []


def test_extract_translation_id_reports_once_per_failure() -> None:
    context = RecordingContext()
    missing = extract_translation_id(_attr("i18n-title", "plain", 10), context)
    empty = extract_translation_id(_attr("i18n-title", "desc@@", 10), context)

    assert not missing.found
    assert not empty.found
    assert context.categories == [DiagnosticCategory.MISSING_ID_INDICATOR, DiagnosticCategory.EMPTY_ID]
    assert all(position == SourcePosition(3, 10) for _, position, _ in context.errors)
    assert context.errors[0][0].startswith("The attribute i18n-title on element <span>")
