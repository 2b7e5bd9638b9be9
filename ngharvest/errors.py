"""Error definitions and diagnostic categories for ngharvest."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class DiagnosticCategory(Enum):
    """Classifies malformed i18n markup reported by the extractor."""

    MISSING_DEFAULT_TEXT = auto()
    MISSING_ID_INDICATOR = auto()
    EMPTY_ID = auto()
    MISSING_CORRESPONDING_ATTRIBUTE = auto()
    MISSING_CORRESPONDING_VALUE = auto()
    OTHER = auto()


class ErrorCategory(Enum):
    """Categorises template read failures to apply policy thresholds."""

    FILE_IO = auto()
    ENCODING = auto()


class NgHarvestError(Exception):
    """Base exception for all custom errors."""


class AbortRequested(NgHarvestError):
    """Raised when the user elects to abort processing."""


class NonInteractiveAbort(NgHarvestError):
    """Raised when non-interactive policy dictates termination."""


class TemplateNotFoundError(NgHarvestError):
    """Raised when a requested template path does not exist."""


class TemplateReadError(NgHarvestError):
    """Raised when a template cannot be read or decoded."""

    def __init__(self, message: str, category: ErrorCategory) -> None:
        super().__init__(message)
        self.category = category


class OverwriteRefusedError(NgHarvestError):
    """Raised when attempting to overwrite an output without consent."""


class ConfigurationError(NgHarvestError):
    """Raised when the configuration cannot be loaded or is invalid."""


@dataclass
class ErrorRecord:
    """Stores context for a handled error."""

    category: ErrorCategory
    message: str


class ErrorTracker:
    """Tracks consecutive and aggregate errors to satisfy policy rules."""

    CONSECUTIVE_LIMIT = 3
    TOTAL_LIMIT = 10

    def __init__(self) -> None:
        self.last_category: Optional[ErrorCategory] = None
        self.consecutive: int = 0
        self.total: int = 0

    def register(self, category: ErrorCategory) -> tuple[int, int, bool]:
        """Register a new error and return counters."""

        if self.last_category == category:
            self.consecutive += 1
        else:
            self.last_category = category
            self.consecutive = 1

        self.total += 1

        threshold_reached = (
            self.consecutive >= self.CONSECUTIVE_LIMIT
            or self.total >= self.TOTAL_LIMIT
        )

        return self.consecutive, self.total, threshold_reached

    def reset_consecutive(self) -> None:
        """Reset the consecutive counter after a template was read."""

        self.consecutive = 0
        self.last_category = None
