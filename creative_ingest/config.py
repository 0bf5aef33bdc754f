"""Configuration helpers for the creative ingestion pipeline."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_ROAS = 100.0


class ConfigurationError(RuntimeError):
    """Raised when configuration files are missing or malformed."""


_SUPPORTED_EXTENSIONS = {".json", ".yaml", ".yml"}
_KNOWN_KEYS = {"max_roas", "column_mapping", "deduplicate", "actions", "reference_images"}
_FOLD_STATES = {"UNFOLDED", "FOLDED"}
_IMAGE_KEYS = ("id", "url", "state")


def load_configuration(path: str | Path) -> Dict[str, Any]:
    """Load configuration data from a JSON or YAML file."""

    file_path = Path(path)
    if not file_path.exists():
        raise ConfigurationError(f"Configuration file '{file_path}' was not found")

    if file_path.suffix.lower() not in _SUPPORTED_EXTENSIONS:
        raise ConfigurationError(
            f"Unsupported configuration format '{file_path.suffix}'. Supported extensions: {sorted(_SUPPORTED_EXTENSIONS)}"
        )

    text = file_path.read_text(encoding="utf-8")
    if file_path.suffix.lower() == ".json":
        data = json.loads(text)
    else:
        try:
            import yaml  # type: ignore
        except ImportError as exc:  # pragma: no cover - dependency optional
            raise ConfigurationError(
                "YAML configuration requires the 'pyyaml' package to be installed"
            ) from exc
        data = yaml.safe_load(text)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file '{file_path}' must contain a mapping at the top level")
    return data


@dataclass(slots=True)
class IngestionSettings:
    """Runtime options for loading, validating, and routing ad rows."""

    max_roas: float = DEFAULT_MAX_ROAS
    deduplicate: bool = False
    column_mapping: Dict[str, str] = field(default_factory=dict)
    actions: Optional[Dict[str, List[str]]] = None
    reference_images: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "IngestionSettings":
        for key in config:
            if key not in _KNOWN_KEYS:
                LOGGER.debug("Ignoring unknown configuration key %s", key)

        settings = cls()
        if "max_roas" in config:
            try:
                settings.max_roas = float(config["max_roas"])
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(f"'max_roas' must be a number, got {config['max_roas']!r}") from exc

        if "deduplicate" in config:
            if not isinstance(config["deduplicate"], bool):
                raise ConfigurationError("'deduplicate' must be true or false")
            settings.deduplicate = config["deduplicate"]

        mapping = config.get("column_mapping") or {}
        if not isinstance(mapping, Mapping):
            raise ConfigurationError("'column_mapping' must map field names to column names")
        settings.column_mapping = {str(key): _column_name(value) for key, value in mapping.items()}

        actions = config.get("actions")
        if actions is not None:
            if not isinstance(actions, Mapping):
                raise ConfigurationError("'actions' must map fold states to lists of actions")
            settings.actions = {_fold_state(state): _string_list(state, values) for state, values in actions.items()}
            unfolded = set(settings.actions.get("UNFOLDED", ()))
            overlap = sorted(unfolded.intersection(settings.actions.get("FOLDED", ())))
            if overlap:
                raise ConfigurationError(f"Actions mapped to both fold states: {', '.join(overlap)}")

        images = config.get("reference_images") or []
        if not isinstance(images, list) or not all(isinstance(image, Mapping) for image in images):
            raise ConfigurationError("'reference_images' must be a list of mappings")
        settings.reference_images = [_reference_image(image) for image in images]

        return settings


def load_settings(path: str | Path | None) -> IngestionSettings:
    """Return settings from ``path`` or the defaults when no path is given."""

    if path is None:
        return IngestionSettings()
    return IngestionSettings.from_config(load_configuration(path))


def _column_name(value: Any) -> str:
    if isinstance(value, str):
        return value
    raise ConfigurationError(f"Invalid column mapping entry {value!r}")


def _fold_state(state: Any) -> str:
    name = str(state).upper()
    if name not in _FOLD_STATES:
        raise ConfigurationError(f"Unknown fold state '{state}'. Expected one of {sorted(_FOLD_STATES)}")
    return name


def _string_list(state: Any, values: Any) -> List[str]:
    if isinstance(values, str) or not isinstance(values, Sequence):
        raise ConfigurationError(f"Actions for state '{state}' must be a list")
    return [str(value) for value in values]


def _reference_image(image: Mapping[str, Any]) -> Dict[str, Any]:
    missing = [key for key in _IMAGE_KEYS if key not in image]
    if missing:
        raise ConfigurationError(f"Reference image {dict(image)!r} is missing {', '.join(missing)}")
    entry = dict(image)
    entry["state"] = _fold_state(image["state"])
    return entry
