import pytest
import yaml

from formprobe_tools.common import ConfigLoader, ConfigurationError, get_config


@pytest.fixture(autouse=True)
def _fresh_config():
    ConfigLoader.reset()
    yield
    ConfigLoader.reset()


def test_env_override_and_defaults(monkeypatch, tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        yaml.dump({"form": {"url": "http://example.com/form"}, "timeouts": {"locate_ms": 2000}}),
        encoding="utf-8",
    )

    loader = ConfigLoader(config_path=config_path)
    assert loader.get("form.url") == "http://example.com/form"
    assert loader.get("timeouts.diagnostic_ms", 1000) == 1000

    ConfigLoader.reset()
    monkeypatch.setenv("FORM_URL", "http://env.example.com/form")
    monkeypatch.setenv("TIMEOUTS_LOCATE_MS", "7500")
    loader = ConfigLoader(config_path=config_path)
    assert loader.get("form.url") == "http://env.example.com/form"
    assert loader.get("timeouts.locate_ms") == 7500


def test_env_bool_converted_against_yaml_value(monkeypatch, tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.dump({"browser": {"headless": True}}), encoding="utf-8")
    monkeypatch.setenv("BROWSER_HEADLESS", "false")

    loader = ConfigLoader(config_path=config_path)

    assert loader.get("browser.headless") is False


def test_reload_updates_values(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.dump({"timeouts": {"selection_s": 5.0}}), encoding="utf-8")

    loader = ConfigLoader(config_path=config_path)
    assert loader.get("timeouts.selection_s") == 5.0

    config_path.write_text(yaml.dump({"timeouts": {"selection_s": 2.0}}), encoding="utf-8")
    loader.reload()
    assert loader.get("timeouts.selection_s") == 2.0


def test_invalid_yaml_raises_configuration_error(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("form: [unclosed", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        ConfigLoader(config_path=config_path)


def test_missing_file_uses_defaults(tmp_path):
    loader = ConfigLoader(config_path=tmp_path / "absent.yaml")
    assert loader.get("form.url", "fallback") == "fallback"


def test_repository_config_points_at_practice_form(monkeypatch, project_root):
    for name in ("FORM_URL", "TIMEOUTS_LOCATE_MS", "TIMEOUTS_SELECTION_S"):
        monkeypatch.delenv(name, raising=False)

    assert ConfigLoader()._config_path == project_root / "config" / "config.yaml"
    assert get_config("form.url") == "https://app.cloudqa.io/home/AutomationPracticeForm"
    assert get_config("timeouts.locate_ms") == 5000
    assert get_config("timeouts.selection_s") == 5.0


def test_unconvertible_env_override_raises(monkeypatch, tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.dump({"timeouts": {"locate_ms": 5000}}), encoding="utf-8")
    monkeypatch.setenv("TIMEOUTS_LOCATE_MS", "five seconds")

    loader = ConfigLoader(config_path=config_path)

    with pytest.raises(ConfigurationError, match="TIMEOUTS_LOCATE_MS"):
        loader.get("timeouts.locate_ms")


def test_non_mapping_root_raises_configuration_error(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="mapping"):
        ConfigLoader(config_path=config_path)
