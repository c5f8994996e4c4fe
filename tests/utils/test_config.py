"""Tests for environment-backed configuration."""

import pytest

from src.utils.config import (
    get_app_environment,
    get_config_value,
    get_config_value_str,
    get_distribution_mode,
    get_gateway_port,
    get_openai_model,
    load_env_file,
    parse_config_value,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("true", True), ("FALSE", False), ("3001", 3001), ("0.5", 0.5), ("push", "push")],
)
def test_parse_config_value(raw, expected):
    assert parse_config_value(raw) == expected


def test_get_config_value_prefers_environment(monkeypatch):
    monkeypatch.setenv("GATEWAY_PORT", "8080")
    assert get_config_value("GATEWAY_PORT", 3001) == 8080
    assert get_gateway_port() == 8080


def test_get_config_value_default(monkeypatch):
    monkeypatch.delenv("GATEWAY_PORT", raising=False)
    assert get_gateway_port() == 3001


def test_secrets_stay_strings(monkeypatch):
    monkeypatch.setenv("LINE_CHANNEL_SECRET", "12345")
    assert get_config_value_str("LINE_CHANNEL_SECRET") == "12345"


def test_empty_string_counts_as_unset(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "")
    assert get_config_value_str("OPENAI_API_KEY") is None


def test_defaults(monkeypatch):
    for key in ("APP_ENVIRONMENT", "OPENAI_MODEL", "DISTRIBUTION_MODE"):
        monkeypatch.delenv(key, raising=False)

    assert get_app_environment() == "local"
    assert get_openai_model() == "gpt-4o-mini"
    assert get_distribution_mode() == "push"


def test_distribution_mode_is_case_insensitive(monkeypatch):
    monkeypatch.setenv("DISTRIBUTION_MODE", "PULL")
    assert get_distribution_mode() == "pull"


def test_unknown_distribution_mode_raises(monkeypatch):
    monkeypatch.setenv("DISTRIBUTION_MODE", "broadcast")
    with pytest.raises(ValueError, match="DISTRIBUTION_MODE"):
        get_distribution_mode()


def test_load_env_file_does_not_override(monkeypatch, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("CLIENT_URL=http://from-file\nOPENAI_MODEL=from-file-model\n")
    monkeypatch.setenv("CLIENT_URL", "http://from-env")
    # Registered with monkeypatch so the value loaded from the file is undone afterwards
    monkeypatch.setenv("OPENAI_MODEL", "placeholder")
    monkeypatch.delenv("OPENAI_MODEL")

    assert load_env_file(str(env_file)) is True

    assert get_config_value_str("CLIENT_URL") == "http://from-env"
    assert get_openai_model() == "from-file-model"
