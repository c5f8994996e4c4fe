"""Configuration utility for the content gateway.

This module provides centralized configuration management with:
- Environment variables as primary source (optionally loaded from a .env file)
- Type-safe access to configuration values
"""

import os
from typing import Any

from dotenv import load_dotenv

DISTRIBUTION_MODES = ("push", "pull")


def load_env_file(path: str | None = None) -> bool:
    """Load variables from a .env file without overriding the real environment."""
    return load_dotenv(dotenv_path=path, override=False)


def parse_config_value(value: str) -> str | bool | int | float:
    if value.lower() == "true":
        return True
    elif value.lower() == "false":
        return False
    else:
        try:
            return int(value)
        except ValueError:
            try:
                return float(value)
            except ValueError:
                return value


def get_config_value(key: str, default: Any = None) -> Any:
    """Get a configuration value from environment variables.

    Args:
        key: Configuration key name (e.g., "LINE_CHANNEL_SECRET")
        default: Default value if key not found

    Returns:
        Configuration value or default
    """
    env_value = os.environ.get(key)
    if env_value is not None:
        return parse_config_value(env_value)

    return default


def get_config_value_str(key: str) -> str | None:
    """
    Get a configuration value from environment variables. Secrets and tokens are always strings,
    so they should never go through parse_config_value (a numeric-looking secret would become an int).
    """
    value = os.environ.get(key)
    if value is None or value == "":
        return None
    return value


def get_app_environment() -> str:
    """Get the deployment environment name ("local", "staging", "production")."""
    return get_config_value("APP_ENVIRONMENT", "local")


def get_line_channel_secret() -> str | None:
    """Get the LINE channel secret used to verify webhook signatures."""
    return get_config_value_str("LINE_CHANNEL_SECRET")


def get_line_channel_access_token() -> str | None:
    """Get the LINE channel access token used to download message content."""
    return get_config_value_str("LINE_CHANNEL_ACCESS_TOKEN")


def get_openai_api_key() -> str | None:
    """Get OpenAI API key from config or env."""
    return get_config_value_str("OPENAI_API_KEY")


def get_openai_base_url() -> str | None:
    """Get OpenAI base URL from config or env.

    Any OpenAI-compatible endpoint works here (e.g. Gemini's OpenAI compatibility layer).
    """
    return get_config_value_str("OPENAI_BASE_URL")


def get_openai_model() -> str:
    """Get the chat model used for text enrichment."""
    return get_config_value_str("OPENAI_MODEL") or "gpt-4o-mini"


def get_client_url() -> str | None:
    """Get the dashboard origin allowed for cross-origin requests."""
    return get_config_value_str("CLIENT_URL")


def get_distribution_mode() -> str:
    """Get the content distribution strategy ("push" or "pull").

    Raises:
        ValueError: If DISTRIBUTION_MODE is set to an unknown value
    """
    mode = (get_config_value_str("DISTRIBUTION_MODE") or "push").lower()
    if mode not in DISTRIBUTION_MODES:
        raise ValueError(
            f"Invalid DISTRIBUTION_MODE {mode!r}, expected one of {', '.join(DISTRIBUTION_MODES)}"
        )
    return mode


def get_gateway_port() -> int:
    return get_config_value("GATEWAY_PORT", 3001)


def get_new_relic_license_key() -> str | None:
    return get_config_value_str("NEW_RELIC_LICENSE_KEY")
