"""Policy for templates that cannot be read."""

from __future__ import annotations

import pathlib
from typing import List

from .errors import (
    AbortRequested,
    ErrorCategory,
    ErrorRecord,
    ErrorTracker,
    NonInteractiveAbort,
    TemplateReadError,
)

READ_FAILURE_LABELS = {
    ErrorCategory.FILE_IO: "could not be opened",
    ErrorCategory.ENCODING: "could not be decoded",
}


class ErrorPolicy:
    """Decides whether a run goes on after a template failed to load.

    Markup diagnostics never pass through here; they are collected in the
    catalog and never stop a run.
    """

    def __init__(self, *, interactive: bool) -> None:
        self.interactive = interactive
        self.records: List[ErrorRecord] = []
        self.tracker = ErrorTracker()

    def record_success(self) -> None:
        """Reset the consecutive counter after a template was loaded."""

        self.tracker.reset_consecutive()

    def handle_read_failure(self, path: pathlib.Path, error: TemplateReadError) -> str:
        """Report an unreadable template and return ``continue`` or ``retry``."""

        message = (
            f"Template {path} {READ_FAILURE_LABELS[error.category]} ({error}). "
            "Skipping this template."
        )
        self.records.append(ErrorRecord(category=error.category, message=message))
        consecutive, total, threshold = self.tracker.register(error.category)

        print(message)

        if not threshold:
            return "continue"

        if consecutive >= self.tracker.CONSECUTIVE_LIMIT:
            prompt = (
                f"{consecutive} templates in a row {READ_FAILURE_LABELS[error.category]}. "
                "Skip and continue, retry this template, or abort?"
            )
        else:
            prompt = (
                f"{total} templates failed to load so far. "
                "Skip and continue, retry this template, or abort?"
            )

        if not self.interactive:
            raise NonInteractiveAbort(
                f"Stopped after {total} unreadable templates in non-interactive mode."
            )

        while True:
            response = input(f"{prompt} ").strip().lower()
            if response in {"continue", "c"}:
                return "continue"
            if response in {"retry", "r"}:
                return "retry"
            if response in {"abort", "a"}:
                raise AbortRequested("Extraction aborted while loading templates.")
            print("Please answer continue, retry, or abort (c/r/a).")
