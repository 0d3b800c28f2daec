"""
================================================================================
Configuration Loader
================================================================================

Settings for the form probes live in config/config.yaml: the form under
test, the browser to drive, locate/selection timeouts and the flags that
gate live runs. Any setting can be replaced from the environment, which is
how run_tests.py hands its CLI options to the pytest process.

Lookup order for `get("timeouts.locate_ms")`:
    1. TIMEOUTS_LOCATE_MS, converted to the type of the YAML value
    2. timeouts.locate_ms from the YAML file
    3. the caller's default

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from loguru import logger


DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "config.yaml"

TRUE_VALUES = ("true", "1", "yes", "on")


class ConfigurationError(Exception):
    """Raised when the YAML file or an environment override is unusable."""
    pass


def env_key_for(key: str) -> str:
    """Environment variable overriding a dotted key: browser.type -> BROWSER_TYPE."""
    return key.upper().replace(".", "_")


class ConfigLoader:
    """
    Process-wide view of config/config.yaml plus environment overrides.

    One instance is shared (see get_config); tests call reset() to point
    it at another file.

    Usage:
        >>> ConfigLoader().get("form.url")
        'https://app.cloudqa.io/home/AutomationPracticeForm'
        >>> ConfigLoader().get("browser.headless")   # BROWSER_HEADLESS=false
        False
    """

    _instance: Optional["ConfigLoader"] = None
    _config: Dict[str, Any] = {}

    def __new__(cls, config_path: Optional[Path] = None) -> "ConfigLoader":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[Path] = None) -> None:
        # Only the first construction picks the file.
        if getattr(self, "_initialized", False):
            return

        self._config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self._load_config()
        self._initialized = True

    def _load_config(self) -> None:
        if not self._config_path.exists():
            logger.warning(
                f"No config file at {self._config_path}; "
                f"only defaults and environment overrides apply"
            )
            self._config = {}
            return

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"{self._config_path} is not valid YAML: {e}") from e

        loaded = loaded or {}
        if not isinstance(loaded, dict):
            raise ConfigurationError(
                f"{self._config_path} must hold a mapping at the top level, "
                f"got {type(loaded).__name__}"
            )
        self._config = loaded
        logger.debug(f"Loaded configuration from: {self._config_path}")

    def _lookup(self, key: str) -> Any:
        node: Any = self._config
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node

    def get(self, key: str, default: Any = None) -> Any:
        """
        Value for a dotted key such as "timeouts.selection_s".

        An environment override wins and is converted to the type of the
        YAML value (or of `default` when the file lacks the key).

        Raises:
            ConfigurationError: When an override cannot be converted
        """
        value = self._lookup(key)

        env_key = env_key_for(key)
        raw = os.environ.get(env_key)
        if raw is not None:
            return self._from_env(env_key, raw, value if value is not None else default)

        return default if value is None else value

    def reload(self) -> None:
        """Re-read the YAML file (environment overrides are read on every get)."""
        self._load_config()
        logger.info(f"Configuration reloaded from: {self._config_path}")

    @staticmethod
    def _from_env(env_key: str, raw: str, reference: Any) -> Any:
        if isinstance(reference, bool):
            return raw.strip().lower() in TRUE_VALUES
        if isinstance(reference, (int, float)):
            try:
                return type(reference)(raw)
            except ValueError:
                raise ConfigurationError(
                    f"{env_key}={raw!r} is not a valid {type(reference).__name__}"
                ) from None
        return raw

    @classmethod
    def reset(cls) -> None:
        """Forget the shared instance so the next ConfigLoader() reloads."""
        cls._instance = None
        cls._config = {}


__all__ = [
    "ConfigLoader",
    "ConfigurationError",
    "DEFAULT_CONFIG_PATH",
    "env_key_for",
]
