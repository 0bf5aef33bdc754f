import json

import pytest

from creative_ingest.config import (
    DEFAULT_MAX_ROAS,
    ConfigurationError,
    IngestionSettings,
    load_configuration,
    load_settings,
)


def test_load_json_configuration(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"max_roas": 50, "deduplicate": True}), encoding="utf-8")

    settings = load_settings(path)

    assert settings.max_roas == 50.0
    assert settings.deduplicate is True


def test_load_yaml_configuration(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        "max_roas: 80\n"
        "column_mapping:\n"
        "  Ad Name: Creative\n"
        "actions:\n"
        "  unfolded: [Walk]\n"
        "  folded: [Lift]\n",
        encoding="utf-8",
    )

    settings = load_settings(path)

    assert settings.max_roas == 80.0
    assert settings.column_mapping == {"Ad Name": "Creative"}
    assert settings.actions == {"UNFOLDED": ["Walk"], "FOLDED": ["Lift"]}


def test_defaults_without_path() -> None:
    settings = load_settings(None)

    assert settings.max_roas == DEFAULT_MAX_ROAS
    assert settings.actions is None
    assert settings.column_mapping == {}


def test_empty_yaml_file_yields_defaults(tmp_path) -> None:
    path = tmp_path / "config.yml"
    path.write_text("", encoding="utf-8")

    assert load_configuration(path) == {}


def test_missing_file(tmp_path) -> None:
    with pytest.raises(ConfigurationError, match="was not found"):
        load_configuration(tmp_path / "missing.json")


def test_unsupported_extension(tmp_path) -> None:
    path = tmp_path / "config.toml"
    path.write_text("max_roas = 1", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="Unsupported configuration format"):
        load_configuration(path)


def test_top_level_must_be_mapping(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_configuration(path)


@pytest.mark.parametrize(
    "config",
    [
        {"max_roas": "lots"},
        {"deduplicate": "yes"},
        {"column_mapping": ["Ad Name"]},
        {"actions": {"SIDEWAYS": ["Walk"]}},
        {"actions": {"FOLDED": "Lift"}},
        {"reference_images": [1, 2]},
        {"reference_images": [{"url": "/a.jpg", "state": "FOLDED"}]},
        {"reference_images": [{"id": "a", "state": "FOLDED"}]},
        {"reference_images": [{"id": "a", "url": "/a.jpg"}]},
        {"reference_images": [{"id": "a", "url": "/a.jpg", "state": "SIDEWAYS"}]},
        {"actions": {"UNFOLDED": ["Walk", "Lift"], "FOLDED": ["Lift"]}},
    ],
)
def test_invalid_values_are_rejected(config) -> None:
    with pytest.raises(ConfigurationError):
        IngestionSettings.from_config(config)


def test_unknown_keys_are_ignored() -> None:
    settings = IngestionSettings.from_config({"unexpected": 1})

    assert settings == IngestionSettings()


def test_reference_image_state_is_normalised() -> None:
    settings = IngestionSettings.from_config(
        {"reference_images": [{"id": "a", "url": "/a.jpg", "state": "folded", "tags": ["lift"]}]}
    )

    assert settings.reference_images == [{"id": "a", "url": "/a.jpg", "state": "FOLDED", "tags": ["lift"]}]
