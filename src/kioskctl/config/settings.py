"""Configuration management for kioskctl.

Loads settings from a YAML configuration file with environment variable
overrides. Supports .env files.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/kioskctl.yaml")

DEFAULT_BOOKMARKS = {
    "kibana": (
        "http://kibana.middleearth.eltoro.com:5601/app/kibana#/discover"
        "?_g=(refreshInterval:(display:'10%20seconds',pause:!f,value:10000),"
        "time:(from:now-24h,mode:quick,to:now))"
    ),
}


class BrowserConfig(BaseModel):
    cdp_url: str | None = Field(
        default=None,
        description="Attach to a running Chrome (e.g. http://localhost:9222) instead of launching one",
    )
    headless: bool = Field(default=False)
    kiosk: bool = Field(default=True, description="Launch Chromium with --kiosk")
    start_url: str | None = Field(default=None)
    navigation_timeout: float = Field(default=30.0, gt=0)
    wait_until: Literal["commit", "domcontentloaded", "load", "networkidle"] = Field(
        default="load"
    )


class ServerConfig(BaseModel):
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000, ge=1, le=65535)


class ReloadConfig(BaseModel):
    default_interval: int | None = Field(
        default=None, gt=0, description="Reload schedule started at boot, in seconds"
    )


class ClientConfig(BaseModel):
    base_url: str = Field(default="http://localhost:8000")
    timeout: float = Field(default=60.0, gt=0)


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Root configuration for kioskctl.

    Loads from YAML file and supports environment variable overrides.
    Reads .env files automatically.
    """

    model_config = {
        "env_prefix": "KIOSKCTL_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    reload: ReloadConfig = Field(default_factory=ReloadConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    bookmarks: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_BOOKMARKS))


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables.

    Priority: YAML file > env vars > .env file > defaults. Nested
    sections are merged key by key, so YAML only wins where it sets a key.
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    yaml_data = {}
    if path.exists():
        with open(path) as f:
            yaml_data = yaml.safe_load(f) or {}
        logger.info("Loaded configuration from %s", path)
    else:
        logger.warning("Config file %s not found, using defaults + env vars", path)

    _apply_env_overrides(yaml_data)

    return Settings(**yaml_data)


def _apply_env_overrides(yaml_data: dict) -> None:
    """Apply environment variable overrides for non-prefixed vars."""
    # Conventional name used by most CDP tooling
    cdp_url = os.environ.get("CHROME_CDP_URL", "")

    if "browser" not in yaml_data:
        yaml_data["browser"] = {}

    if cdp_url and not yaml_data["browser"].get("cdp_url"):
        yaml_data["browser"]["cdp_url"] = cdp_url
