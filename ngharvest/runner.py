"""High-level orchestration of template extraction."""

from __future__ import annotations

import pathlib
import sys
import time
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence

from .catalog import TranslationCatalog
from .errors import (
    DiagnosticCategory,
    ErrorCategory,
    OverwriteRefusedError,
    TemplateNotFoundError,
    TemplateReadError,
)
from .policy import ErrorPolicy
from .templates import extract_template

DEFAULT_TEMPLATE_GLOB = "**/*.html"


@dataclass
class ExtractionSummary:
    """Report returned after processing a set of templates."""

    total_templates: int
    processed_templates: int
    skipped_templates: int
    total_elements: int
    total_translations: int
    total_diagnostics: int
    diagnostic_counts: Dict[DiagnosticCategory, int]
    total_errors: int
    elapsed_seconds: float
    catalog: TranslationCatalog
    error_messages: List[str] = field(default_factory=list)


def debug_log(label: str, message: str) -> None:
    print(f"[ngharvest][debug] {label}: {message}", file=sys.stderr)


def discover_templates(
    paths: Iterable[pathlib.Path],
    pattern: str = DEFAULT_TEMPLATE_GLOB,
) -> List[pathlib.Path]:
    """Expand files and directories into a sorted list of template files."""

    found = set()
    for path in paths:
        if path.is_file():
            found.add(path)
            continue
        if path.is_dir():
            found.update(candidate for candidate in path.glob(pattern) if candidate.is_file())
            continue
        raise TemplateNotFoundError(f"Template path not found: {path}")
    return sorted(found)


class ExtractionRunner:
    """Coordinates discovery, parsing, and extraction of templates."""

    def __init__(
        self,
        *,
        paths: Sequence[pathlib.Path],
        pattern: str = DEFAULT_TEMPLATE_GLOB,
        interactive: bool,
        verbose: bool = False,
        debug: bool = False,
    ) -> None:
        self.paths = list(paths)
        self.pattern = pattern
        self.interactive = interactive
        self.verbose = verbose
        self.debug = debug

        self.error_policy = ErrorPolicy(interactive=interactive)
        self.catalog = TranslationCatalog()

    def run(self) -> ExtractionSummary:
        start_time = time.time()

        templates = discover_templates(self.paths, self.pattern)
        if self.verbose:
            print(f"Found {len(templates)} templates.")

        processed = 0
        skipped = 0
        total_elements = 0

        for template_path in templates:
            text = self._read_template(template_path)
            if text is None:
                skipped += 1
                continue

            label = str(template_path)
            before = len(self.catalog.entries), len(self.catalog.diagnostics)
            elements = extract_template(text, template=label, catalog=self.catalog)
            total_elements += elements
            processed += 1

            if self.verbose:
                print(
                    f"Processed {label} ({elements} elements, "
                    f"{len(self.catalog.entries) - before[0]} translations, "
                    f"{len(self.catalog.diagnostics) - before[1]} diagnostics)."
                )

        elapsed = time.time() - start_time
        return ExtractionSummary(
            total_templates=len(templates),
            processed_templates=processed,
            skipped_templates=skipped,
            total_elements=total_elements,
            total_translations=len(self.catalog.entries),
            total_diagnostics=len(self.catalog.diagnostics),
            diagnostic_counts=self.catalog.diagnostic_counts(),
            total_errors=len(self.error_policy.records),
            elapsed_seconds=elapsed,
            catalog=self.catalog,
            error_messages=[record.message for record in self.error_policy.records],
        )

    def _read_template(self, path: pathlib.Path) -> str | None:
        """Read a template, consulting the error policy on failure."""

        while True:
            try:
                text = self._load(path)
            except TemplateReadError as exc:
                action = self.error_policy.handle_read_failure(path, exc)
                if action == "retry":
                    continue
                return None

            self.error_policy.record_success()
            if self.debug:
                debug_log("template", f"{path} ({len(text)} chars)")
            return text

    def _load(self, path: pathlib.Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise TemplateReadError(
                f"not valid UTF-8: {exc.reason}", ErrorCategory.ENCODING
            ) from exc
        except OSError as exc:
            raise TemplateReadError(exc.strerror or str(exc), ErrorCategory.FILE_IO) from exc


def validate_output_path(
    output_path: pathlib.Path,
    template_paths: Sequence[pathlib.Path],
    force_overwrite: bool,
) -> None:
    """Validate the catalog destination and overwrite policy."""

    if output_path.exists() and output_path.is_dir():
        raise OverwriteRefusedError("The output path is a directory.")

    resolved = output_path.resolve()
    if any(path.resolve() == resolved for path in template_paths):
        raise OverwriteRefusedError(
            "The output path matches an input template. Refusing to overwrite it."
        )

    if output_path.exists() and not force_overwrite:
        raise OverwriteRefusedError(
            "The output file already exists. Rename it or use the overwrite flag."
        )
