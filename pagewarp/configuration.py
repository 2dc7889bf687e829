"""Prepper-backed configuration loader for pagewarp."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from functools import lru_cache
from itertools import chain
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping, Sequence, Tuple

from dotenv import dotenv_values
from prepper import (
    ConfigNotFound,
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

from .endpoint import EndpointParameters, parse_endpoints
from .errors import ConfigurationError, UnsupportedLanguageError
from .languages import normalize_language_code
from .segmenter import DEFAULT_SHORT_CONTENT_THRESHOLD
from .transport import DEFAULT_TIMEOUT

APP_NAME = "Pagewarp"


class PagewarpConfig(SchemaModel):
    """Schema describing all supported configuration options."""

    PAGEWARP_SOURCES: dict[str, str] = Field(
        default={},
        description="Translation source identifiers mapped to endpoint URLs.",
        secret=True,
    )
    PAGEWARP_PREFERRED_LANGUAGE: str = Field(default="en")
    PAGEWARP_SECOND_PREFERRED_LANGUAGE: str = Field(default="zh-CN")
    PAGEWARP_SHORT_CONTENT_THRESHOLD: int = Field(
        default=DEFAULT_SHORT_CONTENT_THRESHOLD,
        description="Fragments shorter than this without letters are not sent.",
    )
    PAGEWARP_REQUEST_TIMEOUT: float = Field(default=DEFAULT_TIMEOUT)
    PAGEWARP_CACHE_SIZE: int = Field(default=256)
    PAGEWARP_PROVIDER_DEBUG: bool = Field(default=False)

    @model_validator(mode="before")
    def _decode_sources(data: Any) -> Any:
        if isinstance(data, dict):
            raw_value = data.get("PAGEWARP_SOURCES")
            if isinstance(raw_value, str):
                stripped = raw_value.strip()
                data["PAGEWARP_SOURCES"] = json.loads(stripped) if stripped else {}
        return data


@dataclass(frozen=True)
class PipelineConfig:
    """Explicit parameters handed to the page translator."""

    sources: Mapping[str, EndpointParameters] = field(default_factory=dict)
    preferred_language: str = "en"
    second_preferred_language: str = "zh-CN"
    short_content_threshold: int = DEFAULT_SHORT_CONTENT_THRESHOLD
    request_timeout: float = DEFAULT_TIMEOUT
    cache_size: int = 256
    provider_debug: bool = False

    @classmethod
    def from_settings(cls, settings: Any) -> "PipelineConfig":
        return cls(
            sources=parse_endpoints(settings.PAGEWARP_SOURCES or {}),
            preferred_language=normalize_language_code(
                settings.PAGEWARP_PREFERRED_LANGUAGE
            ),
            second_preferred_language=normalize_language_code(
                settings.PAGEWARP_SECOND_PREFERRED_LANGUAGE
            ),
            short_content_threshold=int(settings.PAGEWARP_SHORT_CONTENT_THRESHOLD),
            request_timeout=float(settings.PAGEWARP_REQUEST_TIMEOUT),
            cache_size=int(settings.PAGEWARP_CACHE_SIZE),
            provider_debug=bool(settings.PAGEWARP_PROVIDER_DEBUG),
        )

    def endpoint_for(self, source: str) -> EndpointParameters:
        endpoint = self.sources.get(source)
        if endpoint is None:
            raise ConfigurationError(
                f"No translation source named '{source}' is configured."
            )
        return endpoint


ENV_FILE = ".env"
VALIDATION_HEADER = "Configuration validation errors detected:"

Layer = Tuple[Mapping[str, Any], str, str]


def _yaml_layers(app_dir: Path) -> Iterator[Layer]:
    for path, label in discover_file_paths(
        APP_NAME, "yaml", app_dir=app_dir, extra_paths=None
    ):
        parsed = _parse_file(path, "yaml")
        if not isinstance(parsed, Mapping):
            raise IoError(
                f"Invalid configuration file {path}: expected a mapping at the root."
            )
        yield parsed, _path_to_source(label, "yaml", path), "file"


def _env_layers(app_dir: Path) -> Iterator[Layer]:
    """Schema keys from ``.env`` first, then from the process environment."""

    origins: list[tuple[str, Mapping[str, Any]]] = []
    dotenv_path = app_dir / ENV_FILE
    if dotenv_path.exists():
        origins.append((ENV_FILE, dotenv_values(dotenv_path)))
    origins.append(("process", os.environ))

    for origin, values in origins:
        for key in sorted(PagewarpConfig.__field_infos__):
            value = values.get(key)
            if isinstance(value, str):
                yield {key: value}, f"env:{origin}:{key}", "env"


def _collect_layers(app_dir: Path, provenance: ProvenanceRecorder) -> dict[str, Any]:
    """Merge every configuration layer, later layers winning."""

    combined: dict[str, Any] = {}
    for values, source, layer in chain(_yaml_layers(app_dir), _env_layers(app_dir)):
        merge_layer(combined, values, provenance=provenance, source=source, layer=layer)
    return combined


@lru_cache(maxsize=1)
def _load_config_instance(app_dir: Path | None = None) -> ConfigInstance:
    """Load configuration layers once and cache the immutable instance."""

    try:
        provenance = ProvenanceRecorder()
        combined = _collect_layers(app_dir or Path.cwd(), provenance)
        if not combined:
            raise ConfigNotFound("No configuration sources were found.")

        model = PagewarpConfig.validate(combined, provenance=provenance)
        _validate_settings(model)
        return ConfigInstance(
            model=model,
            provenance=provenance,
            env_prefix=None,
            schema_cls=PagewarpConfig,
        )
    except ConfigNotFound as exc:
        raise ConfigurationError(
            "No configuration sources were found. Set PAGEWARP_SOURCES in a YAML "
            f"file, a {ENV_FILE} file, or the environment."
        ) from exc
    except IoError as exc:
        raise ConfigurationError(
            f"Configuration files could not be read: {exc}"
        ) from exc
    except SchemaError as exc:
        raise ConfigurationError(f"Configuration schema error: {exc}") from exc
    except ValidationError as exc:
        raise ConfigurationError(_format_validation_errors(exc.to_dict())) from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(
            f"PAGEWARP_SOURCES is not valid JSON: {exc}"
        ) from exc


def _bulleted(issues: Iterable[str]) -> str:
    return "\n".join([VALIDATION_HEADER, *(f"- {issue}" for issue in issues)])


def _validate_settings(settings: PagewarpConfig) -> None:
    errors: list[str] = []

    for name in ("PAGEWARP_PREFERRED_LANGUAGE", "PAGEWARP_SECOND_PREFERRED_LANGUAGE"):
        try:
            normalize_language_code(getattr(settings, name))
        except UnsupportedLanguageError as exc:
            errors.append(f"{name}: {exc.message}")

    try:
        parse_endpoints(settings.PAGEWARP_SOURCES or {})
    except ConfigurationError as exc:
        errors.append(f"PAGEWARP_SOURCES: {exc.message}")

    if settings.PAGEWARP_SHORT_CONTENT_THRESHOLD < 0:
        errors.append("PAGEWARP_SHORT_CONTENT_THRESHOLD must not be negative.")
    if settings.PAGEWARP_REQUEST_TIMEOUT <= 0:
        errors.append("PAGEWARP_REQUEST_TIMEOUT must be positive.")

    if errors:
        raise ConfigurationError(_bulleted(errors))


def _describe_issue(entry: Mapping[str, Any]) -> str:
    path = entry.get("path")
    if isinstance(path, (list, tuple)):
        location = ".".join(str(part) for part in path if part not in (None, ""))
    else:
        location = str(path or "")

    text = str(entry.get("message") or entry.get("msg") or "Invalid value")
    if location:
        text = f"{location}: {text}"
    if entry.get("source"):
        text += f" (source: {entry['source']})"
    return text


def _format_validation_errors(entries: Sequence[Mapping[str, Any]]) -> str:
    return _bulleted(_describe_issue(entry) for entry in entries)


def load_settings(app_dir: Path | None = None) -> PagewarpConfig:
    """Return the validated settings model, loading it on first use."""

    return _load_config_instance(app_dir=app_dir).model()


def load_pipeline_config(app_dir: Path | None = None) -> PipelineConfig:
    """Load settings and convert them into a :class:`PipelineConfig`."""

    return PipelineConfig.from_settings(load_settings(app_dir=app_dir))
