"""Tests for configuration loading."""

from pathlib import Path

import pytest

from scriptparser.config import (
    ScriptParserSettings,
    get_settings,
    get_settings_for_cli,
    reset_settings,
)
from scriptparser.exceptions import ConfigurationError
from scriptparser.mcp.models import BackendConfig


class TestDefaults:
    """Default values."""

    def test_defaults(self):
        settings = ScriptParserSettings()

        assert settings.api_port == 3000
        assert settings.api_url == "http://localhost:3000"
        assert settings.api_key is None
        assert settings.api_timeout is None
        assert settings.mcp_server_name == "script-parser-mcp-server"
        assert settings.mcp_check_backend is False

    def test_log_level_is_case_insensitive(self):
        assert ScriptParserSettings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_format_rejected(self):
        with pytest.raises(ValueError):
            ScriptParserSettings(log_format="xml")


class TestEnvironment:
    """Environment variable sources."""

    def test_prefixed_env_vars(self, monkeypatch):
        monkeypatch.setenv("SCRIPTPARSER_API_PORT", "4100")
        monkeypatch.setenv("SCRIPTPARSER_DATABASE_POOL_MAX_SIZE", "3")

        settings = ScriptParserSettings()

        assert settings.api_port == 4100
        assert settings.database_pool_max_size == 3

    def test_legacy_backend_env_vars(self, monkeypatch):
        monkeypatch.setenv("SCRIPT_API_URL", "http://scripts.internal:3000/")
        monkeypatch.setenv("SCRIPT_API_KEY", "abc123")

        settings = ScriptParserSettings()

        assert settings.api_url == "http://scripts.internal:3000"
        assert settings.api_key == "abc123"

    def test_database_path_expands_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SCRIPT_DATA_DIR", str(tmp_path))

        settings = ScriptParserSettings(database_path="$SCRIPT_DATA_DIR/s.db")

        assert settings.database_path == (tmp_path / "s.db").resolve()


class TestConfigFiles:
    """File-based configuration."""

    def test_yaml_file(self, tmp_path):
        config = tmp_path / "scriptparser.yaml"
        config.write_text("api_port: 8123\napi_url: http://backend:9000\n")

        settings = ScriptParserSettings.from_file(config)

        assert settings.api_port == 8123
        assert settings.api_url == "http://backend:9000"

    def test_toml_file(self, tmp_path):
        config = tmp_path / "scriptparser.toml"
        config.write_text('log_level = "info"\napi_max_connections = 4\n')

        settings = ScriptParserSettings.from_file(config)

        assert settings.log_level == "INFO"
        assert settings.api_max_connections == 4

    def test_json_file(self, tmp_path):
        config = tmp_path / "scriptparser.json"
        config.write_text('{"mcp_check_backend": true}')

        assert ScriptParserSettings.from_file(config).mcp_check_backend is True

    def test_unsupported_format(self, tmp_path):
        config = tmp_path / "scriptparser.ini"
        config.write_text("[main]\n")

        with pytest.raises(ConfigurationError, match="Unsupported"):
            ScriptParserSettings.from_file(config)

    def test_common_key_mistake_has_hint(self, tmp_path):
        config = tmp_path / "scriptparser.yaml"
        config.write_text("db_path: /tmp/x.db\n")

        with pytest.raises(ConfigurationError) as exc_info:
            ScriptParserSettings.from_file(config)

        assert exc_info.value.hint == "Use 'database_path' instead of 'db_path'"

    @pytest.mark.parametrize(
        ("filename", "text"),
        [
            ("broken.yaml", "api_port: [4000\n"),
            ("broken.json", "{not json"),
            ("broken.toml", "api_port = \n"),
            ("list.yaml", "- api_port\n"),
        ],
    )
    def test_unreadable_file_raises_configuration_error(self, tmp_path, filename, text):
        config = tmp_path / filename
        config.write_text(text)

        with pytest.raises(ConfigurationError):
            ScriptParserSettings.from_file(config)

    def test_empty_yaml_file_uses_defaults(self, tmp_path):
        config = tmp_path / "scriptparser.yaml"
        config.write_text("")

        assert ScriptParserSettings.from_file(config).api_port == 3000

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ScriptParserSettings.from_file(tmp_path / "missing.yaml")

    def test_multiple_sources_precedence(self, tmp_path):
        base = tmp_path / "base.yaml"
        base.write_text("api_port: 4000\napi_host: 0.0.0.0\n")
        override = tmp_path / "override.yaml"
        override.write_text("api_port: 5000\n")

        settings = ScriptParserSettings.from_multiple_sources(
            config_files=[base, override, tmp_path / "absent.yaml"],
            overrides={"api_host": "127.0.0.2", "api_url": None},
        )

        assert settings.api_port == 5000
        assert settings.api_host == "127.0.0.2"
        assert settings.api_url == "http://localhost:3000"

    def test_discovers_config_in_working_directory(self, tmp_path):
        # The autouse fixture has already chdir'd into tmp_path
        Path("scriptparser.yaml").write_text("api_port: 7001\n")
        reset_settings()

        assert get_settings().api_port == 7001


class TestCliSettings:
    """Settings resolution for CLI commands."""

    def test_cli_overrides_skip_none(self):
        settings = get_settings_for_cli(cli_overrides={"api_port": 9001, "api_url": None})

        assert settings.api_port == 9001
        assert settings.api_url == "http://localhost:3000"

    def test_overrides_apply_over_loaded_settings(self, tmp_path):
        Path("scriptparser.yaml").write_text("api_port: 7001\napi_host: 0.0.0.0\n")
        reset_settings()

        settings = get_settings_for_cli(cli_overrides={"api_port": 9002})

        assert settings.api_port == 9002
        assert settings.api_host == "0.0.0.0"

    def test_no_overrides_returns_global_instance(self):
        assert get_settings_for_cli({"api_port": None}) is get_settings()


def test_backend_config_from_settings():
    settings = ScriptParserSettings(
        api_url="http://backend:3000", api_key="k", api_timeout=5, api_max_connections=2
    )

    config = BackendConfig.from_settings(settings)

    assert config.base_url == "http://backend:3000"
    assert config.api_key == "k"
    assert config.timeout == 5
    assert config.max_connections == 2
    assert "api_key" not in repr(config)
