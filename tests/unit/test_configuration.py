"""Unit tests for configuration error formatting."""

from __future__ import annotations

from ngharvest.configuration import _format_validation_errors, normalise_output_format


def test_format_validation_errors_lists_location_and_source() -> None:
    message = _format_validation_errors(
        [
            {
                "path": ["NGHARVEST_FAIL_ON_DIAGNOSTICS"],
                "message": "Input should be a valid boolean",
                "source": "env:process:NGHARVEST_FAIL_ON_DIAGNOSTICS",
            },
            {"path": "", "msg": "Unexpected root value"},
        ]
    )

    assert message.splitlines() == [
        "Configuration validation errors detected:",
        "- NGHARVEST_FAIL_ON_DIAGNOSTICS: Input should be a valid boolean "
        "(source: env:process:NGHARVEST_FAIL_ON_DIAGNOSTICS)",
        "- Unexpected root value",
    ]


def test_output_format_normalisation_accepts_synonyms() -> None:
    assert normalise_output_format(" .TSV ") == "tsv"
    assert normalise_output_format("tab") == "tsv"
    assert normalise_output_format("JSON") == "json"
    assert normalise_output_format("yaml") == "json"
