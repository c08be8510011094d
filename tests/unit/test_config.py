"""
Unit tests for server configuration.
"""

import pytest

from fixturehttpd.config import ServerConfig


class TestServerConfig:
    """Tests for ServerConfig."""

    def test_defaults(self):
        config = ServerConfig()

        assert config.port == 8080
        assert config.backlog == 10
        assert config.buffer_size == 10000
        assert config.fixture_dirs == ("relative",)
        config.validate()

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("FIXTURE_HOST", "127.0.0.1")
        monkeypatch.setenv("FIXTURE_PORT", "9000")
        monkeypatch.setenv("FIXTURE_ROOT", "/srv/fixtures")
        monkeypatch.setenv("FIXTURE_MAX_FILE_SIZE", "1234")
        monkeypatch.setenv("FIXTURE_READ_TIMEOUT", "2.5")
        monkeypatch.setenv("FIXTURE_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("FIXTURE_LOG_FORMAT", "json")

        config = ServerConfig.from_env()

        assert config.host == "127.0.0.1"
        assert config.port == 9000
        assert config.root_dir == "/srv/fixtures"
        assert config.max_file_size == 1234
        assert config.read_timeout == 2.5
        assert config.log_level == "DEBUG"
        assert config.log_format == "json"

    def test_from_env_defaults(self, monkeypatch):
        for name in ("FIXTURE_HOST", "FIXTURE_PORT", "FIXTURE_ROOT"):
            monkeypatch.delenv(name, raising=False)

        config = ServerConfig.from_env()

        assert config.host == "0.0.0.0"
        assert config.port == 8080
        assert config.root_dir == "."

    @pytest.mark.parametrize("overrides", [
        {"port": -1},
        {"port": 65536},
        {"backlog": 0},
        {"buffer_size": 10},
        {"read_timeout": 0},
        {"accept_timeout": -1},
        {"max_file_size": -5},
        {"log_format": "xml"},
        {"redirect_path": "redirect"},
    ])
    def test_validate_rejects(self, overrides):
        with pytest.raises(ValueError):
            ServerConfig(**overrides).validate()

    def test_port_zero_allowed(self):
        ServerConfig(port=0).validate()

    def test_no_read_timeout_allowed(self):
        ServerConfig(read_timeout=None).validate()
