"""Command line interface for ngharvest."""

from __future__ import annotations

import argparse
import pathlib
import sys
from typing import Iterable, Optional, Sequence

from .catalog import write_json, write_tsv
from .configuration import get_settings
from .errors import (
    AbortRequested,
    ConfigurationError,
    NgHarvestError,
    NonInteractiveAbort,
    OverwriteRefusedError,
    TemplateNotFoundError,
)
from .runner import ExtractionRunner, ExtractionSummary, validate_output_path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ngharvest",
        description=(
            "Extract i18n translations from Angular templates and report malformed markers."
        ),
    )
    parser.add_argument(
        "paths",
        nargs="+",
        help="Template files or directories to scan.",
    )
    parser.add_argument(
        "-o",
        "--output",
        help="Write the extracted catalog to this file.",
    )
    parser.add_argument(
        "--format",
        choices=["json", "tsv"],
        help="Catalog format (default: NGHARVEST_OUTPUT_FORMAT or json).",
    )
    parser.add_argument(
        "--pattern",
        help="Glob used inside directories (default: NGHARVEST_TEMPLATE_GLOB or **/*.html).",
    )
    parser.add_argument(
        "-f",
        "--force",
        action="store_true",
        help="Allow overwriting the output file if it already exists.",
    )
    parser.add_argument(
        "--allow-diagnostics",
        action="store_true",
        help="Exit successfully even when malformed markers were reported.",
    )
    parser.add_argument(
        "--non-interactive",
        action="store_true",
        help="Disable prompts and stop automatically on repeated read errors (suitable for CI).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show per-template progress information.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Print debugging details to stderr.",
    )
    return parser


def execute_extraction(
    *,
    paths: Sequence[str],
    output_file: str | None,
    output_format: str,
    pattern: str,
    force_overwrite: bool,
    fail_on_diagnostics: bool,
    non_interactive: bool,
    verbose: bool,
    debug: bool,
) -> tuple[int, ExtractionSummary | None, str | None]:
    """Execute an extraction run and return the exit code, summary, and message."""

    template_paths = [pathlib.Path(path).expanduser() for path in paths]
    output_path = pathlib.Path(output_file).expanduser() if output_file else None

    if output_path is not None:
        try:
            validate_output_path(output_path, template_paths, force_overwrite=force_overwrite)
        except OverwriteRefusedError as exc:
            return 1, None, str(exc)

    runner = ExtractionRunner(
        paths=template_paths,
        pattern=pattern,
        interactive=not non_interactive,
        verbose=verbose,
        debug=debug,
    )

    try:
        summary = runner.run()
    except TemplateNotFoundError as exc:
        return 1, None, str(exc)
    except NonInteractiveAbort as exc:
        return 2, None, str(exc)
    except AbortRequested:
        return 2, None, "Extraction aborted at your request."
    except NgHarvestError as exc:
        return 1, None, str(exc)
    except KeyboardInterrupt:
        return 2, None, "Extraction interrupted by user."

    if output_path is not None:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            if output_format == "tsv":
                write_tsv(summary.catalog, output_path)
            else:
                write_json(summary.catalog, output_path)
        except OSError as exc:
            return 1, summary, f"Could not write catalog to {output_path}: {exc}"

    if summary.total_errors:
        return 1, summary, None
    if summary.total_diagnostics and fail_on_diagnostics:
        return 1, summary, None
    return 0, summary, None


def print_diagnostics(summary: ExtractionSummary) -> None:
    for reported in summary.catalog.diagnostics:
        print(reported.format())


def print_summary(summary: ExtractionSummary, output_file: str | None = None) -> None:
    """Output a friendly report once processing completes."""

    print("\nExtraction complete.")
    print(
        "  Templates:       "
        f"{summary.processed_templates} processed / {summary.total_templates} found "
        f"({summary.skipped_templates} skipped)"
    )
    print(f"  Elements:        {summary.total_elements}")
    print(f"  Translations:    {summary.total_translations}")
    print(f"  Diagnostics:     {summary.total_diagnostics}")
    for category, count in sorted(
        summary.diagnostic_counts.items(), key=lambda item: item[0].name
    ):
        print(f"    {category.name.lower()}: {count}")
    if output_file:
        print(f"  Catalog:         {output_file}")
    print(f"  Elapsed time:    {summary.elapsed_seconds:.2f} seconds")
    if summary.total_errors:
        print("  Notes:")
        for message in summary.error_messages:
            print(f"    - {message}")


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        settings = get_settings()
    except ConfigurationError as exc:
        print(exc)
        return 1

    exit_code, summary, message = execute_extraction(
        paths=args.paths,
        output_file=args.output,
        output_format=args.format or settings.NGHARVEST_OUTPUT_FORMAT,
        pattern=args.pattern or settings.NGHARVEST_TEMPLATE_GLOB,
        force_overwrite=args.force,
        fail_on_diagnostics=(
            settings.NGHARVEST_FAIL_ON_DIAGNOSTICS and not args.allow_diagnostics
        ),
        non_interactive=args.non_interactive,
        verbose=args.verbose,
        debug=bool(args.debug or settings.NGHARVEST_DEBUG),
    )

    if summary:
        print_diagnostics(summary)
    if message:
        print(message)
    if summary:
        print_summary(summary, args.output)
    return exit_code


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
