"""Server configuration loaded from YAML and environment variables."""
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

CONFIG_ENV = "RPCDISPATCH_CONFIG"

# Environment variable -> config field
ENV_OVERRIDES = {
    "RPCDISPATCH_DEFAULT_TIMEOUT": "default_timeout",
    "RPCDISPATCH_CANCEL_ON_TIMEOUT": "cancel_on_timeout",
    "RPCDISPATCH_LOG_LEVEL": "log_level",
    "RPCDISPATCH_HOST": "host",
    "RPCDISPATCH_PORT": "port",
}


class ServerConfig(BaseModel):
    """Settings shared by the HTTP app and the stdin loop."""

    default_timeout: float = Field(default=0.0, ge=0)
    cancel_on_timeout: bool = False
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = Field(default=8080, gt=0, lt=65536)


def _read_yaml(config_path: Path) -> Dict[str, Any]:
    with open(config_path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping")
    # Allow the settings to live under a "server" section
    return data.get("server", data)


def load_config(config_path: Optional[str] = None) -> ServerConfig:
    """Load configuration.

    Args:
        config_path: YAML file to read; falls back to $RPCDISPATCH_CONFIG.
            A missing file is not an error, defaults are used instead.

    Returns:
        Validated ServerConfig with environment overrides applied
    """
    config_path = config_path or os.getenv(CONFIG_ENV)
    values: Dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            values.update(_read_yaml(path))
            logger.info(f"Loaded configuration from {path}")
        else:
            logger.warning(f"Config file not found: {path}, using defaults")

    for env_name, field_name in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value is not None:
            values[field_name] = value

    return ServerConfig(**values)
