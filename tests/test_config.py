"""Tests for GatewayConfig validation and the INI ConfigManager."""

import configparser

import pytest
from pydantic import ValidationError

from nzb_gateway.exceptions import ConfigurationError
from nzb_gateway.models.config import GatewayConfig
from nzb_gateway.storage import ConfigManager


class TestGatewayConfig:
    def test_defaults(self):
        config = GatewayConfig()

        assert config.base_url == "http://127.0.0.1:5076"
        assert config.external_url == ""
        assert config.api_key == ""

    @pytest.mark.parametrize(
        "url_base, expected", [("", ""), ("/", ""), ("hydra", "/hydra"), ("/hydra/", "/hydra")]
    )
    def test_url_base_is_normalized(self, url_base, expected):
        assert GatewayConfig(url_base=url_base).url_base == expected

    def test_ipv6_bind_all_renders_loopback(self):
        assert GatewayConfig(host="::").base_url == "http://127.0.0.1:5076"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"port": 0},
            {"external_url": "nzb.example.com"},
            {"api_key": "not a key!"},
            {"fetch_timeout": 0},
            {"indexers": [{"name": "x", "host": "indexer.example.com"}]},
        ],
    )
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ValidationError):
            GatewayConfig(**kwargs)


class TestConfigManager:
    def test_save_and_load(self, tmp_path):
        config_file = tmp_path / "config.ini"
        manager = ConfigManager(config_file)
        manager.save_new_config(
            {
                "port": 8080,
                "api_key": "abc123",
                "external_url": "https://nzb.example.com",
                "indexers": [
                    {"name": "nzbgeek", "host": "https://api.nzbgeek.info", "api_key": "k1"}
                ],
            }
        )

        config = ConfigManager(config_file).load_config()

        assert config.port == 8080
        assert config.api_key == "abc123"
        assert config.external_url == "https://nzb.example.com"
        assert config.use_local_url_for_api_access is False
        assert config.config_path == str(tmp_path)
        assert [i.name for i in config.indexers] == ["nzbgeek"]
        assert config.indexers[0].api_key == "k1"

    def test_cli_options_override_file(self, tmp_path):
        config_file = tmp_path / "config.ini"
        ConfigManager(config_file).save_new_config({"port": 8080})

        config = ConfigManager(config_file).load_config({"port": 9090})

        assert config.port == 9090

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            ConfigManager(tmp_path / "nope.ini").load_config()

    def test_invalid_value(self, tmp_path):
        config_file = tmp_path / "config.ini"
        config_file.write_text("[main]\nport = 70000\n", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="validation failed"):
            ConfigManager(config_file).load_config()

    def test_missing_keys_are_migrated(self, tmp_path):
        config_file = tmp_path / "config.ini"
        config_file.write_text("[main]\napi_key = abc123\n", encoding="utf-8")

        config = ConfigManager(config_file).load_config()

        assert config.api_key == "abc123"
        parser = configparser.ConfigParser()
        parser.read(config_file, encoding="utf-8")
        assert parser["main"]["port"] == "5076"
        assert parser["main"]["use_local_url_for_api_access"] == "false"
