# -----------------------------------------------------------------------------
# Copyright (c) 2025 E-Series Perf Analyzer (scaleoutSean@Github and (pre v3.1.0) NetApp, Inc)
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import requests
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from eseries_exporter.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_MODULE = "default"
DEFAULT_TIMEOUT = 10

# Checked in this order so the first missing value is the one reported
REQUIRED_MODULE_FIELDS = ("proxy_url", "user", "password")


class Module(BaseModel):
    """One named profile from the exporter config file."""
    model_config = ConfigDict(extra="forbid")

    user: str = ""
    password: str = ""
    proxy_url: str = ""
    collectors: Optional[List[str]] = None
    timeout: int = 0
    root_ca: Optional[str] = None
    insecure_ssl: bool = False


class Config(BaseModel):
    model_config = ConfigDict(extra="forbid")

    modules: Dict[str, Module] = Field(default_factory=dict)


@dataclass(frozen=True)
class Target:
    """
    A single storage array being scraped.

    Built per scrape request from the requested target name and the module
    settings, and dropped once the response is written.
    """
    name: str
    user: str
    password: str
    base_url: str
    session: requests.Session = field(repr=False)
    collectors: Optional[List[str]] = None
    timeout: float = DEFAULT_TIMEOUT


def load_config(config_file: str) -> Config:
    """
    Read and validate the YAML module configuration.

    Args:
        config_file: Path to the YAML file

    Returns:
        Validated Config with module defaults applied

    Raises:
        ConfigError: If the file is missing, malformed or incomplete
    """
    try:
        with open(config_file, 'r') as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Error reading config file {config_file}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing config file {config_file}: {e}") from e

    try:
        config = Config.model_validate(data or {})
    except ValidationError as e:
        raise ConfigError(f"Error parsing config file {config_file}: {e}") from e

    for name, module in config.modules.items():
        if module.timeout == 0:
            module.timeout = DEFAULT_TIMEOUT
        for required in REQUIRED_MODULE_FIELDS:
            if not getattr(module, required):
                raise ConfigError(f"Module {name} must define '{required}' value")

    logger.info(f"Loaded {len(config.modules)} module(s) from {config_file}")
    return config


class SafeConfig:
    """Holds the active Config and swaps it atomically on reload."""

    def __init__(self, config: Optional[Config] = None):
        self._lock = threading.Lock()
        self._config = config or Config()

    @property
    def config(self) -> Config:
        with self._lock:
            return self._config

    def reload_config(self, config_file: str) -> None:
        config = load_config(config_file)
        with self._lock:
            self._config = config

    def get_module(self, name: str) -> Optional[Module]:
        return self.config.modules.get(name)


class EnvConfig(BaseSettings):
    """Process settings; CLI flags take precedence over these."""
    model_config = SettingsConfigDict(
        env_prefix="ESERIES_EXPORTER_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    CONFIG_FILE: str = "eseries_exporter.yaml"
    LISTEN_ADDRESS: str = ":9313"
    USE_CACHE: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None
