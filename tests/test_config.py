import pytest

from arrow_spark.config import (
    DEFAULT_MAX_DEPTH,
    ENV_MAX_DEPTH,
    ENV_STRICT_FIELD_NAMES,
    RenderOptions,
    Settings,
    load_settings,
)


def test_defaults():
    options = RenderOptions()
    assert options.max_depth == DEFAULT_MAX_DEPTH
    assert options.strict_field_names is False


def test_from_dict_parses_strings():
    options = RenderOptions.from_dict({"max_depth": "8", "strict_field_names": "yes"})
    assert options == RenderOptions(max_depth=8, strict_field_names=True)


@pytest.mark.parametrize(
    "data",
    [
        {"max_depth": 0},
        {"max_depth": "deep"},
        {"strict_field_names": "maybe"},
    ],
)
def test_invalid_values(data):
    with pytest.raises(ValueError):
        RenderOptions.from_dict(data)


def test_env_overrides():
    options = RenderOptions().with_env({ENV_MAX_DEPTH: "3", ENV_STRICT_FIELD_NAMES: "true"})
    assert options == RenderOptions(max_depth=3, strict_field_names=True)


def test_empty_env_keeps_values():
    options = RenderOptions(max_depth=5).with_env({})
    assert options == RenderOptions(max_depth=5)


def test_load_settings_from_yaml(tmp_path, monkeypatch):
    monkeypatch.delenv(ENV_MAX_DEPTH, raising=False)
    monkeypatch.delenv(ENV_STRICT_FIELD_NAMES, raising=False)
    config = tmp_path / "config.yaml"
    config.write_text(
        "render:\n"
        "  max_depth: 10\n"
        "  strict_field_names: true\n"
        "table:\n"
        "  name: events\n"
        "  database: analytics\n"
        "  partitioned_by: [day]\n"
        "source:\n"
        "  file_path: data/events.parquet\n",
        encoding="utf-8",
    )

    settings = load_settings(str(config))

    assert settings.render == RenderOptions(max_depth=10, strict_field_names=True)
    assert settings.table.name == "events"
    assert settings.table.database == "analytics"
    assert settings.table.using == "DELTA"
    assert settings.table.if_not_exists is True
    assert settings.table.partitioned_by == ["day"]
    assert settings.source_file == "data/events.parquet"


def test_env_wins_over_yaml(tmp_path, monkeypatch):
    monkeypatch.setenv(ENV_MAX_DEPTH, "2")
    config = tmp_path / "config.yaml"
    config.write_text("render:\n  max_depth: 10\n", encoding="utf-8")
    assert load_settings(str(config)).render.max_depth == 2


def test_missing_config():
    with pytest.raises(FileNotFoundError):
        load_settings("/nonexistent/config.yaml")


def test_non_mapping_config(tmp_path):
    config = tmp_path / "config.yaml"
    config.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_settings(str(config))


def test_empty_settings():
    settings = Settings.from_dict(None)
    assert settings.render == RenderOptions()
    assert settings.table.name is None
    assert settings.source_file is None
