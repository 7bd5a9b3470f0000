"""
Tests for ConfigLoader.
"""

from pathlib import Path

import pytest
import yaml

from fraud_signals.config.config_loader import ConfigLoader
from fraud_signals.exceptions import ConfigurationError

BASE_CONFIG = {
    "api": {"host": "0.0.0.0", "port": 8080},
    "redis": {"host": "localhost", "port": 6379},
    "processing": {"max_workers": 4},
    "engine": {"max_workers": 1},
}


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "service_config.yaml"
    path.write_text(yaml.safe_dump(BASE_CONFIG))
    return path


class TestConfigLoader:
    def test_loads_yaml(self, config_file):
        loader = ConfigLoader(str(config_file))

        assert loader.get("api.port") == 8080
        assert loader.get_redis_config()["host"] == "localhost"
        assert loader.validate_config()

    def test_dotted_lookup_default(self, config_file):
        loader = ConfigLoader(str(config_file))

        assert loader.get("rules.path") is None
        assert loader.get("api.port.nested", "fallback") == "fallback"
        assert loader.get_simulator_config() == {}

    def test_environment_overrides(self, config_file, monkeypatch):
        monkeypatch.setenv("API_PORT", "9090")
        monkeypatch.setenv("REDIS_HOST", "redis.internal")
        monkeypatch.setenv("RULES_PATH", "/etc/fraud/rules.yaml")

        loader = ConfigLoader(str(config_file))

        assert loader.get("api.port") == 9090
        assert loader.get("redis.host") == "redis.internal"
        assert loader.get("rules.path") == "/etc/fraud/rules.yaml"

    def test_config_path_from_environment(self, config_file, monkeypatch):
        monkeypatch.setenv("FRAUD_SIGNALS_CONFIG", str(config_file))

        assert ConfigLoader().config_path == str(config_file)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            ConfigLoader(str(tmp_path / "missing.yaml"))

    def test_non_mapping_root_raises(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigurationError, match="mapping"):
            ConfigLoader(str(path))

    @pytest.mark.parametrize(
        "path, value, message",
        [
            (("api", "port"), "http", "Invalid API port"),
            (("engine", "max_workers"), 0, "max_workers"),
            (("redis", "host"), None, "Redis host"),
        ],
    )
    def test_validation_errors(self, path, value, message):
        config = {section: dict(values) for section, values in BASE_CONFIG.items()}
        config[path[0]][path[1]] = value

        with pytest.raises(ConfigurationError, match=message):
            ConfigLoader.from_dict(config).validate_config()

    def test_missing_section_fails_validation(self):
        config = dict(BASE_CONFIG)
        del config["processing"]

        with pytest.raises(ConfigurationError, match="processing"):
            ConfigLoader.from_dict(config).validate_config()

    def test_packaged_service_config_is_valid(self):
        path = Path(__file__).resolve().parent.parent / "config" / "service_config.yaml"

        assert ConfigLoader(str(path)).validate_config()
