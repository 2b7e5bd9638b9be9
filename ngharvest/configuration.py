"""Prepper-backed configuration loader for ngharvest."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal, Mapping, Sequence

from dotenv import dotenv_values
from prepper import (
    Field,
    IoError,
    SchemaError,
    SchemaModel,
    ValidationError,
    model_validator,
)
from prepper.config import ConfigInstance
from prepper.loaders import _parse_file, _path_to_source, discover_file_paths
from prepper.merge import merge_layer
from prepper.provenance import ProvenanceRecorder

from .errors import ConfigurationError

APP_NAME = "NgHarvest"


class NgHarvestConfig(SchemaModel):
    """Schema describing all supported configuration options."""

    NGHARVEST_TEMPLATE_GLOB: str = Field(
        default="**/*.html",
        description="Glob used to find templates inside directory arguments.",
    )
    NGHARVEST_OUTPUT_FORMAT: Literal["json", "tsv"] = Field(
        default="json",
        description="Catalog format written when an output path is given.",
    )
    NGHARVEST_FAIL_ON_DIAGNOSTICS: bool = Field(default=True)
    NGHARVEST_DEBUG: bool = Field(default=False)

    @model_validator(mode="before")
    def _normalise_output_format(data: Any) -> Any:
        if isinstance(data, dict):
            raw_value = data.get("NGHARVEST_OUTPUT_FORMAT")
            if isinstance(raw_value, str):
                data["NGHARVEST_OUTPUT_FORMAT"] = normalise_output_format(raw_value)
        return data


def normalise_output_format(raw_value: str) -> str:
    """Map user spellings such as ``.TSV`` or ``tab`` onto a supported format."""

    normalized = raw_value.strip().lower().lstrip(".")
    synonyms = {
        "tab": "tsv",
        "tabs": "tsv",
    }
    normalized = synonyms.get(normalized, normalized)
    if normalized not in {"json", "tsv"}:
        normalized = "json"
    return normalized


@lru_cache(maxsize=1)
def _load_config_instance(app_dir: Path | None = None) -> ConfigInstance:
    """Load configuration layers once and cache the immutable instance."""

    base_dir = app_dir or Path.cwd()
    try:
        provenance = ProvenanceRecorder()
        combined = _load_discovered_yaml(app_dir=base_dir, provenance=provenance)
        _merge_env_sources(
            combined,
            provenance=provenance,
            app_dir=base_dir,
            schema=NgHarvestConfig,
        )

        model = NgHarvestConfig.validate(combined, provenance=provenance)

        instance = ConfigInstance(
            model=model,
            provenance=provenance,
            env_prefix=None,
            schema_cls=NgHarvestConfig,
        )
        return instance
    except IoError as exc:
        raise ConfigurationError(
            f"Configuration files could not be read: {exc}"
        ) from exc
    except SchemaError as exc:
        raise ConfigurationError(f"Configuration schema error: {exc}") from exc
    except ValidationError as exc:
        issues = _format_validation_errors(exc.to_dict())
        raise ConfigurationError(issues) from exc


def _load_discovered_yaml(
    *,
    app_dir: Path,
    provenance: ProvenanceRecorder,
) -> dict[str, Any]:
    """Load YAML configuration files using Prepper's discovery rules."""

    result: dict[str, Any] = {}
    discovered = discover_file_paths(
        APP_NAME,
        "yaml",
        app_dir=app_dir,
        extra_paths=None,
    )
    for path, label in discovered:
        parsed = _parse_file(path, "yaml")
        if not isinstance(parsed, Mapping):
            raise IoError(
                f"Invalid configuration file {path}: expected a mapping at the root."
            )
        source = _path_to_source(label, "yaml", path)
        merge_layer(result, parsed, provenance=provenance, source=source, layer="file")
    return result


def _merge_env_sources(
    target: dict[str, Any],
    *,
    provenance: ProvenanceRecorder,
    app_dir: Path,
    schema: type[SchemaModel],
) -> None:
    """Merge .env and process environment variables into the target mapping."""

    allowed = set(schema.__field_infos__.keys())

    def merge_values(values: Mapping[str, str], *, source_prefix: str) -> None:
        for key, value in sorted(values.items()):
            if value is None:
                continue
            if key not in allowed:
                continue
            merge_layer(
                target,
                {key: value},
                provenance=provenance,
                source=f"env:{source_prefix}:{key}",
                layer="env",
            )

    dotenv_path = app_dir / ".env"
    if dotenv_path.exists():
        dotenv_content = dotenv_values(dotenv_path)
        merge_values(
            {k: v for k, v in dotenv_content.items() if v is not None},
            source_prefix=".env",
        )

    merge_values(
        {k: v for k, v in os.environ.items() if isinstance(v, str)},
        source_prefix="process",
    )


def _format_validation_errors(entries: Sequence[dict[str, Any]]) -> str:
    details: list[str] = []
    for entry in entries:
        path = entry.get("path") or []
        if isinstance(path, (list, tuple)):
            location = ".".join(str(part) for part in path if part not in {None, ""})
        else:
            location = str(path)
        message = str(entry.get("message") or entry.get("msg") or "Invalid value")
        source = entry.get("source")
        origin = f" (source: {source})" if source else ""
        prefix = f"{location}: " if location else ""
        details.append(f"- {prefix}{message}{origin}")
    return "Configuration validation errors detected:\n" + "\n".join(details)


def get_config(app_dir: Path | None = None) -> ConfigInstance:
    """Return the immutable configuration instance."""

    return _load_config_instance(app_dir=app_dir)


def get_settings(app_dir: Path | None = None) -> NgHarvestConfig:
    """Return the validated schema model for typed access."""

    return get_config(app_dir=app_dir).model()
