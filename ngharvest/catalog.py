"""Collection and serialisation of extracted translations."""

from __future__ import annotations

import json
import pathlib
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List

from .errors import DiagnosticCategory
from .structures import Diagnostic, TranslationCandidate

TSV_HEADER = ["id", "default_text", "template", "line", "column"]


@dataclass(frozen=True)
class CatalogEntry:
    """A registered translation together with the template it came from."""

    template: str
    candidate: TranslationCandidate


@dataclass(frozen=True)
class ReportedDiagnostic:
    """A diagnostic together with the template it was raised for."""

    template: str
    diagnostic: Diagnostic

    def format(self) -> str:
        return f"{self.template}:{self.diagnostic.position}: {self.diagnostic.message}"


class TranslationCatalog:
    """Append-only record of translations and diagnostics in call order.

    Duplicate ids are kept as they are; merging is left to downstream tooling.
    """

    def __init__(self) -> None:
        self.entries: List[CatalogEntry] = []
        self.diagnostics: List[ReportedDiagnostic] = []

    def register(self, template: str, candidate: TranslationCandidate) -> None:
        self.entries.append(CatalogEntry(template=template, candidate=candidate))

    def report(self, template: str, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(ReportedDiagnostic(template=template, diagnostic=diagnostic))

    def diagnostic_counts(self) -> Dict[DiagnosticCategory, int]:
        """Count reported diagnostics by category."""

        counter: Counter[DiagnosticCategory] = Counter()
        for reported in self.diagnostics:
            counter[reported.diagnostic.category] += 1
        return dict(counter)


def catalog_to_dict(catalog: TranslationCatalog) -> Dict[str, List[Dict[str, object]]]:
    """Build the JSON-ready representation of a catalog."""

    translations = [
        {
            "id": entry.candidate.translation_id,
            "defaultText": entry.candidate.default_text,
            "template": entry.template,
            "line": entry.candidate.position.line,
            "column": entry.candidate.position.column,
        }
        for entry in catalog.entries
    ]
    diagnostics = [
        {
            "category": reported.diagnostic.category.name,
            "message": reported.diagnostic.message,
            "template": reported.template,
            "line": reported.diagnostic.position.line,
            "column": reported.diagnostic.position.column,
        }
        for reported in catalog.diagnostics
    ]
    return {"translations": translations, "diagnostics": diagnostics}


def write_json(catalog: TranslationCatalog, output_path: pathlib.Path) -> None:
    """Write translations and diagnostics as a JSON document."""

    payload = json.dumps(catalog_to_dict(catalog), ensure_ascii=False, indent=2)
    output_path.write_text(payload + "\n", encoding="utf-8")


def write_tsv(
    catalog: TranslationCatalog,
    output_path: pathlib.Path,
    include_header: bool = True,
) -> None:
    """Write one row per translation using the canonical column order.

    Tabs and newlines inside default texts are replaced by spaces so every
    translation stays on a single row.
    """

    with output_path.open("w", encoding="utf-8") as handle:
        if include_header:
            handle.write("\t".join(TSV_HEADER))
            handle.write("\n")
        for entry in catalog.entries:
            handle.write(
                "\t".join(
                    [
                        _flatten(entry.candidate.translation_id),
                        _flatten(entry.candidate.default_text),
                        entry.template,
                        str(entry.candidate.position.line),
                        str(entry.candidate.position.column),
                    ]
                )
            )
            handle.write("\n")


def _flatten(value: str) -> str:
    return value.replace("\t", " ").replace("\r", " ").replace("\n", " ")
