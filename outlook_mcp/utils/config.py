"""
Configuration Module

This module loads the server configuration from config.yaml and environment
variables. Environment variables take precedence over the YAML file, which
takes precedence over the built-in defaults.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

CONFIG_FILE_PATH = os.getenv("CONFIG_FILE_PATH", "config.yaml")

DEFAULT_SCOPES = [
    "offline_access",
    "User.Read",
    "Mail.Read",
    "Mail.ReadWrite",
    "Mail.Send",
    "Mail.Read.Shared",
    "Mail.ReadWrite.Shared",
    "Mail.Send.Shared",
    "Calendars.Read",
    "Calendars.ReadWrite",
    "Calendars.ReadWrite.Shared",
    "MailboxSettings.ReadWrite",
]

EMAIL_SELECT_FIELDS = (
    "id,subject,from,toRecipients,ccRecipients,receivedDateTime,"
    "bodyPreview,hasAttachments,importance,isRead,categories"
)
EMAIL_DETAIL_FIELDS = (
    "id,subject,from,toRecipients,ccRecipients,bccRecipients,receivedDateTime,"
    "bodyPreview,body,hasAttachments,importance,isRead,categories,internetMessageHeaders"
)
CALENDAR_SELECT_FIELDS = (
    "id,subject,bodyPreview,start,end,location,organizer,attendees,isAllDay,isCancelled"
)

# Cached configuration
_config_cache: Optional[Dict[str, Any]] = None

# Environment variable name(s) for each config key, first match wins
ENV_OVERRIDES = {
    "client_id": ["MS_CLIENT_ID", "OUTLOOK_CLIENT_ID"],
    "client_secret": ["MS_CLIENT_SECRET", "OUTLOOK_CLIENT_SECRET"],
    "tenant_id": ["MS_TENANT_ID"],
    "redirect_uri": ["MS_REDIRECT_URI"],
    "token_storage_path": ["OUTLOOK_TOKEN_PATH"],
    "token_encryption_key": ["OUTLOOK_TOKEN_ENCRYPTION_KEY"],
    "use_test_mode": ["USE_TEST_MODE"],
    "default_timezone": ["DEFAULT_TIMEZONE"],
    "server_name": ["MCP_SERVER_NAME"],
}


def load_yaml_config() -> Dict[str, Any]:
    """
    Load the YAML configuration file.

    Returns:
        Dict[str, Any]: The parsed file, or an empty dict if the file is missing
        or cannot be read.
    """
    config_path = Path(CONFIG_FILE_PATH).expanduser()
    if not config_path.exists():
        return {}

    try:
        with open(config_path, "r") as f:
            return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        return {}


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def get_config() -> Dict[str, Any]:
    """
    Get the merged configuration.

    The result is cached after the first call.

    Returns:
        Dict[str, Any]: Flat configuration dictionary.
    """
    global _config_cache
    if _config_cache is not None:
        return _config_cache

    yaml_config = load_yaml_config()
    auth_config = yaml_config.get("auth", {}) or {}
    graph_config = yaml_config.get("graph", {}) or {}
    server_config = yaml_config.get("server", {}) or {}

    config: Dict[str, Any] = {
        # Authentication
        "client_id": auth_config.get("client_id", ""),
        "client_secret": auth_config.get("client_secret", ""),
        "tenant_id": auth_config.get("tenant_id", "common"),
        "scopes": auth_config.get("scopes", DEFAULT_SCOPES),
        "redirect_uri": auth_config.get("redirect_uri", "http://localhost:3333/auth/callback"),
        "token_storage_path": auth_config.get("token_storage_path", "~/.outlook-mcp/tokens.json"),
        "token_encryption_key": auth_config.get("token_encryption_key", ""),
        "refresh_buffer_seconds": auth_config.get("refresh_buffer_seconds", 300),
        "use_test_mode": auth_config.get("use_test_mode", False),
        # Graph API
        "graph_api_endpoint": graph_config.get("endpoint", "https://graph.microsoft.com/v1.0/"),
        "page_size": graph_config.get("page_size", 50),
        "request_timeout": graph_config.get("request_timeout", 30),
        "default_timezone": graph_config.get("default_timezone", "Central European Standard Time"),
        "email_select_fields": graph_config.get("email_select_fields", EMAIL_SELECT_FIELDS),
        "email_detail_fields": graph_config.get("email_detail_fields", EMAIL_DETAIL_FIELDS),
        "calendar_select_fields": graph_config.get("calendar_select_fields", CALENDAR_SELECT_FIELDS),
        # Server
        "server_name": server_config.get("name", "Outlook MCP"),
        "log_level": server_config.get("log_level", "INFO"),
        "log_file": server_config.get("log_file", ""),
    }

    for key, env_names in ENV_OVERRIDES.items():
        for env_name in env_names:
            value = os.getenv(env_name)
            if value:
                config[key] = value
                break

    config["use_test_mode"] = _to_bool(config["use_test_mode"])
    if isinstance(config["scopes"], str):
        config["scopes"] = config["scopes"].split()

    _config_cache = config
    return config


def get_config_value(key: str, default: Any = None) -> Any:
    """
    Get a single configuration value.

    Args:
        key (str): The configuration key.
        default (Any, optional): Returned when the key is not set. Defaults to None.

    Returns:
        Any: The configured value or the default.
    """
    return get_config().get(key, default)
