"""
Tests for configuration loading and validation.
"""

import pytest

from keyproxy.config import ConfigValidator, EnvironmentLoader, LogLevel, ProxyConfig, ServerConfig
from keyproxy.exceptions import ConfigurationError
from keyproxy.main import load_config

VALID_KEY = "0f" * 32

ENV_VARS = [
    "JWT_SECRET", "ENCRYPTION_KEY", "OPENAI_API_KEY", "ALLOW_LEGACY_ENCRYPTION_KEY",
    "JWT_EXPIRATION_MINUTES", "UPSTREAM_TIMEOUT", "PORT", "HOST", "CORS_ORIGINS", "LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestEnvironmentLoader:
    """Tests for EnvironmentLoader."""

    def test_defaults(self, clean_env):
        config = EnvironmentLoader.load_config(load_env_file=False)
        assert config.jwt_secret == ""
        assert config.encryption_key is None
        assert config.default_openai_key is None
        assert config.allow_legacy_encryption_key is False
        assert config.jwt_expiration_minutes == 60
        assert config.server.port == 3001
        assert config.server.cors_origins == []
        assert config.log_level == LogLevel.INFO

    def test_reads_environment(self, clean_env):
        clean_env.setenv("JWT_SECRET", "s3cret")
        clean_env.setenv("ENCRYPTION_KEY", VALID_KEY)
        clean_env.setenv("OPENAI_API_KEY", "sk-default-key-value")
        clean_env.setenv("PORT", "8080")
        clean_env.setenv("CORS_ORIGINS", "http://localhost:5173, https://app.example.com")
        clean_env.setenv("LOG_LEVEL", "debug")
        clean_env.setenv("ALLOW_LEGACY_ENCRYPTION_KEY", "TRUE")

        config = EnvironmentLoader.load_config(load_env_file=False)
        assert config.jwt_secret == "s3cret"
        assert config.encryption_key == VALID_KEY
        assert config.default_openai_key == "sk-default-key-value"
        assert config.server.port == 8080
        assert config.server.cors_origins == ["http://localhost:5173", "https://app.example.com"]
        assert config.log_level == LogLevel.DEBUG
        assert config.allow_legacy_encryption_key is True

    def test_unknown_log_level_falls_back(self, clean_env):
        clean_env.setenv("LOG_LEVEL", "chatty")
        assert EnvironmentLoader.load_config(load_env_file=False).log_level == LogLevel.INFO


class TestConfigValidator:
    """Tests for ConfigValidator."""

    def test_valid_config(self):
        config = ProxyConfig(jwt_secret="s", encryption_key=VALID_KEY)
        assert ConfigValidator.validate_config(config) == []

    def test_missing_secrets(self):
        errors = ConfigValidator.validate_config(ProxyConfig(jwt_secret="", encryption_key=None))
        assert "JWT_SECRET is not set" in errors
        assert "ENCRYPTION_KEY is not set" in errors

    @pytest.mark.parametrize("key", ["abc", "x" * 64, VALID_KEY + "00"])
    def test_malformed_encryption_key(self, key):
        errors = ConfigValidator.validate_config(ProxyConfig(jwt_secret="s", encryption_key=key))
        assert len(errors) == 1
        assert "64 characters" in errors[0]

    def test_legacy_flag_tolerates_missing_key(self):
        config = ProxyConfig(jwt_secret="s", encryption_key=None, allow_legacy_encryption_key=True)
        assert ConfigValidator.validate_config(config) == []

    def test_server_settings(self):
        config = ProxyConfig(
            jwt_secret="s",
            encryption_key=VALID_KEY,
            server=ServerConfig(port=70000, cors_origins=["not a url"]),
        )
        errors = ConfigValidator.validate_config(config)
        assert any("70000" in e for e in errors)
        assert any("not a url" in e for e in errors)


class TestLoadConfig:
    """Tests for startup configuration loading."""

    def test_refuses_bad_encryption_key(self, clean_env):
        clean_env.setenv("JWT_SECRET", "s3cret")
        clean_env.setenv("ENCRYPTION_KEY", "too-short")

        with pytest.raises(ConfigurationError) as exc_info:
            load_config()
        assert exc_info.value.errors

    def test_loads_valid_environment(self, clean_env):
        clean_env.setenv("JWT_SECRET", "s3cret")
        clean_env.setenv("ENCRYPTION_KEY", VALID_KEY)
        assert load_config().encryption_key == VALID_KEY


class TestProxyConfig:
    """Tests for ProxyConfig helpers."""

    def test_default_key_preview_is_masked(self):
        config = ProxyConfig(jwt_secret="s", encryption_key=VALID_KEY, default_openai_key="sk-abcdefghijklmnop")
        assert config.default_key_preview == "sk-abc...mnop"

    def test_no_default_key_preview(self):
        assert ProxyConfig(jwt_secret="s", encryption_key=VALID_KEY).default_key_preview is None
