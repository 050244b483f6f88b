"""
TLINK OPC UA bridge configuration loader.

This module reads the local JSON configuration that carries the remote
API account and the OPC UA server settings.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .exceptions import ConfigError
from .logging import log_info, log_fatal


DEFAULT_CONFIG_PATH = "config.json"

DEFAULT_BASE_URL = "https://app.dtuip.com"
DEFAULT_ENDPOINT_URL = "opc.tcp://0.0.0.0:4840"
DEFAULT_SERVER_NAME = "TLINK OPC-UA Server"
DEFAULT_FOLDER_NAME = "拓普瑞"
DEFAULT_GENERIC_DEVICE_NAMES = ["4G压力表"]
DEFAULT_PAGE_SIZE = 100
DEFAULT_SYNC_INTERVAL_MS = 10000
DEFAULT_INITIAL_DELAY_MS = 1000
DEFAULT_REQUEST_TIMEOUT_S = 30.0

REQUIRED_FIELDS = ("username", "password", "clientId", "secret")


def _string(data: Dict[str, Any], name: str, default: str) -> str:
    """Optional string field; absent or null gives the default."""
    value = data.get(name)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ConfigError(f"{name} must be a string")
    return value


def _number(data: Dict[str, Any], name: str, default, kind):
    """Optional numeric field converted with kind; absent or null gives the default."""
    value = data.get(name)
    if value is None:
        return default
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be a number")
    try:
        return kind(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a number")


@dataclass
class BridgeConfig:
    """Remote API account plus server and scheduling settings."""
    username: str
    password: str
    client_id: str
    secret: str
    base_url: str = DEFAULT_BASE_URL
    endpoint_url: str = DEFAULT_ENDPOINT_URL
    server_name: str = DEFAULT_SERVER_NAME
    folder_name: str = DEFAULT_FOLDER_NAME
    generic_device_names: List[str] = field(
        default_factory=lambda: list(DEFAULT_GENERIC_DEVICE_NAMES)
    )
    page_size: int = DEFAULT_PAGE_SIZE
    sync_interval_ms: int = DEFAULT_SYNC_INTERVAL_MS
    initial_delay_ms: int = DEFAULT_INITIAL_DELAY_MS
    request_timeout_s: float = DEFAULT_REQUEST_TIMEOUT_S

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BridgeConfig':
        """
        Create from the decoded configuration document.

        Raises:
            ConfigError: If a required field is missing, null or not a
                         non-empty string, or an optional field has the
                         wrong type.
        """
        for name in REQUIRED_FIELDS:
            value = data.get(name)
            if not isinstance(value, str) or not value:
                raise ConfigError(f"Missing required configuration field: {name}")

        generic_names = data.get("genericDeviceNames")
        if generic_names is None:
            generic_names = DEFAULT_GENERIC_DEVICE_NAMES
        if not isinstance(generic_names, list):
            raise ConfigError("genericDeviceNames must be a list")

        page_size = _number(data, "pageSize", DEFAULT_PAGE_SIZE, int)
        if page_size <= 0:
            raise ConfigError("pageSize must be positive")

        return cls(
            username=data["username"],
            password=data["password"],
            client_id=data["clientId"],
            secret=data["secret"],
            base_url=_string(data, "baseUrl", DEFAULT_BASE_URL).rstrip("/"),
            endpoint_url=_string(data, "endpointUrl", DEFAULT_ENDPOINT_URL),
            server_name=_string(data, "serverName", DEFAULT_SERVER_NAME),
            folder_name=_string(data, "folderName", DEFAULT_FOLDER_NAME),
            generic_device_names=[str(name) for name in generic_names],
            page_size=page_size,
            sync_interval_ms=_number(data, "syncIntervalMs", DEFAULT_SYNC_INTERVAL_MS, int),
            initial_delay_ms=_number(data, "initialDelayMs", DEFAULT_INITIAL_DELAY_MS, int),
            request_timeout_s=_number(data, "requestTimeoutS", DEFAULT_REQUEST_TIMEOUT_S, float),
        )


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> Optional[BridgeConfig]:
    """
    Load bridge configuration from JSON file.

    Args:
        config_path: Path to configuration file

    Returns:
        BridgeConfig or None if loading fails
    """
    try:
        path = Path(config_path)
        if not path.exists():
            log_fatal(f"Configuration file not found: {config_path}")
            return None

        with open(path, 'r', encoding='utf-8') as f:
            raw_config = json.load(f)

        if not isinstance(raw_config, dict):
            log_fatal("Configuration root must be a JSON object")
            return None

        config = BridgeConfig.from_dict(raw_config)
        log_info(f"Configuration loaded from {config_path}")
        return config

    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        log_fatal(f"Invalid JSON in configuration file: {e}")
        return None
    except ConfigError as e:
        log_fatal(f"Invalid configuration: {e}")
        return None
    except OSError as e:
        log_fatal(f"Failed to read configuration: {e}")
        return None
