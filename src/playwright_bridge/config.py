from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

_DEFAULT_CONFIG_FILENAME = ".playwright-bridge.json"
_TRUTHY = ("1", "true", "yes")


def _default_launch_options() -> dict:
    return {"headless": False}


class BrowserConfig(BaseModel):
    browser_name: Literal["chromium", "firefox", "webkit"] = "chromium"
    launch_options: dict = Field(default_factory=_default_launch_options)
    context_options: dict = Field(default_factory=dict)


class TimeoutsConfig(BaseModel):
    action: int = 5000
    navigation: int = 30000
    assert_text: int = 5000
    wait: int = 1000
    type_delay: int = 100


class BridgeConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PLAYWRIGHT_BRIDGE_",
        env_nested_delimiter="__",
    )

    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    timeouts: TimeoutsConfig = Field(default_factory=TimeoutsConfig)
    screenshot_dir: str = "./screenshots"
    test_id_attribute: str = "data-testid"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_file: str | None = None
    max_line_bytes: int = 16 * 1024 * 1024

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment beats values loaded from a config file.
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator("max_line_bytes")
    @classmethod
    def positive_line_limit(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"max_line_bytes must be positive, got {v}")
        return v


def apply_env_overrides(config: BridgeConfig) -> BridgeConfig:
    """Read specific PLAYWRIGHT_BRIDGE_* env vars and apply them as overrides.

    These land inside the free-form ``launch_options`` dict, which the
    nested-delimiter convention of pydantic-settings cannot address.
    """

    # PLAYWRIGHT_BRIDGE_HEADLESS -> browser.launch_options.headless
    headless = os.environ.get("PLAYWRIGHT_BRIDGE_HEADLESS")
    if headless is not None:
        config.browser.launch_options["headless"] = headless.lower() in _TRUTHY

    # PLAYWRIGHT_BRIDGE_CHANNEL -> browser.launch_options.channel
    channel = os.environ.get("PLAYWRIGHT_BRIDGE_CHANNEL")
    if channel is not None:
        config.browser.launch_options["channel"] = channel

    # PLAYWRIGHT_BRIDGE_EXECUTABLE_PATH -> browser.launch_options.executable_path
    executable_path = os.environ.get("PLAYWRIGHT_BRIDGE_EXECUTABLE_PATH")
    if executable_path is not None:
        config.browser.launch_options["executable_path"] = executable_path

    # PLAYWRIGHT_BRIDGE_NO_SANDBOX -> browser.launch_options.chromium_sandbox = False
    no_sandbox = os.environ.get("PLAYWRIGHT_BRIDGE_NO_SANDBOX")
    if no_sandbox is not None and no_sandbox.lower() in _TRUTHY:
        config.browser.launch_options["chromium_sandbox"] = False

    return config


def get_version() -> str:
    """Return the package version string."""
    try:
        from importlib.metadata import version

        return version("playwright-bridge")
    except Exception:
        return "0.1.0"


def load_config(config_path: str | None = None) -> BridgeConfig:
    """Load bridge configuration from a JSON file and/or environment variables.

    Priority (highest to lowest):
        1. PLAYWRIGHT_BRIDGE_* environment variables
        2. Explicitly provided config_path JSON file
        3. ``.playwright-bridge.json`` in cwd
        4. Built-in defaults

    Args:
        config_path: Optional path to a JSON configuration file. A path that
            does not exist is ignored, the same as no path at all.

    Returns:
        A fully resolved ``BridgeConfig`` instance.
    """
    file_values: dict = {}

    if config_path is not None:
        config_file = Path(config_path)
    else:
        config_file = Path.cwd() / _DEFAULT_CONFIG_FILENAME
    if config_file.is_file():
        file_values = json.loads(config_file.read_text(encoding="utf-8"))

    config = BridgeConfig(**file_values)
    return apply_env_overrides(config)
