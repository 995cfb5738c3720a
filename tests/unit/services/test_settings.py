from __future__ import annotations

import json
from pathlib import Path

import pytest

from repodrift.core.diff import WhitespaceMode
from repodrift.core.errors import ConfigurationError
from repodrift.services.settings import ApplicationSettings, CompareSettings, SettingsManager


def test_missing_default_file_gives_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

    manager = SettingsManager()

    assert manager.settings_path == tmp_path / "repodrift" / "settings.json"
    assert manager.settings == ApplicationSettings()


def test_explicit_missing_or_malformed_file_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="does not exist"):
        SettingsManager(tmp_path / "absent.json").load()

    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="Could not read"):
        SettingsManager(bad).load()

    listed = tmp_path / "list.json"
    listed.write_text("[]", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="JSON object"):
        SettingsManager(listed).load()


def test_partial_file_fills_in_defaults(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({
        "comparison": {"similarity_threshold": 90, "ignore_patterns": ["vendor"], "unknown": 1},
        "output": {"use_colors": False},
    }), encoding="utf-8")

    settings = SettingsManager(path).settings

    assert settings.comparison.similarity_threshold == 90
    assert settings.comparison.ignore_patterns == ["vendor"]
    assert settings.comparison.parallel_workers == 8
    assert settings.output.use_colors is False
    assert settings.output.log_level == "WARNING"


def test_save_then_load_preserves_settings(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "settings.json"
    settings = ApplicationSettings()
    settings.comparison.ignore_case = True
    settings.comparison.whitespace = "trailing"

    SettingsManager(path).save(settings)
    loaded = SettingsManager(path).load()

    assert loaded == settings


def test_to_options_maps_line_matching_settings() -> None:
    options = CompareSettings(parallel_workers=2, whitespace="all", ignore_case=True).to_options()

    assert options.parallel_workers == 2
    assert options.diff_options.whitespace_mode is WhitespaceMode.IGNORE_ALL
    assert options.diff_options.ignore_case is True

    with pytest.raises(ConfigurationError, match="whitespace"):
        CompareSettings(whitespace="sometimes").to_options()

    with pytest.raises(ConfigurationError, match="whitespace"):
        CompareSettings(whitespace=1).to_options()  # type: ignore[arg-type]

    with pytest.raises(ConfigurationError, match="encoding"):
        CompareSettings(encoding="no-such-codec").to_options()


def test_to_options_worker_override_leaves_settings_untouched() -> None:
    settings = CompareSettings(parallel_workers=8)

    options = settings.to_options(parallel_workers=2)

    assert options.parallel_workers == 2
    assert settings.parallel_workers == 8


@pytest.mark.parametrize("document, message", [
    ({"comparison": {"similarity_threshold": "90"}}, "similarity_threshold"),
    ({"comparison": {"similarity_threshold": True}}, "similarity_threshold"),
    ({"comparison": {"parallel_workers": 2.5}}, "parallel_workers"),
    ({"comparison": {"ignore_patterns": "vendor"}}, "ignore_patterns"),
    ({"comparison": {"ignore_patterns": ["vendor", 3]}}, "ignore_patterns"),
    ({"comparison": {"whitespace": 1}}, "whitespace"),
    ({"comparison": []}, "comparison"),
    ({"output": {"use_colors": "yes"}}, "use_colors"),
])
def test_wrongly_typed_values_are_configuration_errors(tmp_path: Path, document: dict, message: str) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps(document), encoding="utf-8")

    with pytest.raises(ConfigurationError, match=message):
        SettingsManager(path).load()
