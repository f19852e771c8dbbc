"""
================================================================================
Configuration Loader
================================================================================

YAML-based configuration management with environment variable override support,
plus the device capability profile table used to open BrowserStack sessions.

Features:
    - YAML configuration loading (config/config.yaml)
    - Environment variable override (BROWSERSTACK_USERNAME overrides
      browserstack.username)
    - Dot notation path access with default values
    - Immutable capability profiles looked up by (platform, index)

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml
from loguru import logger


# Default configuration file path
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent.parent / "config" / "config.yaml"


class ConfigurationError(Exception):
    """Raised when configuration loading fails or a profile reference is invalid."""
    pass


class ConfigLoader:
    """
    Configuration loader with YAML and environment variable support.

    Configuration hierarchy (highest to lowest priority):
        1. Environment variables (BROWSERSTACK_USERNAME)
        2. YAML configuration file
        3. Default values

    Usage:
        >>> config = ConfigLoader()
        >>> config.get("browserstack.server", "hub-cloud.browserstack.com")
        'hub-cloud.browserstack.com'

        >>> config.get("timeouts.element_ms", 10000)
        10000  # Default value if not configured

    Environment Variable Mapping:
        - browserstack.username -> BROWSERSTACK_USERNAME
        - browserstack.access_key -> BROWSERSTACK_ACCESS_KEY
        - connection.retry_count -> CONNECTION_RETRY_COUNT
    """

    _instance: Optional["ConfigLoader"] = None
    _config: Dict[str, Any] = {}

    def __new__(cls, config_path: Optional[Path] = None) -> "ConfigLoader":
        """
        Singleton pattern - return existing instance if available.

        Configuration is loaded only once per process.
        """
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[Path] = None) -> None:
        """
        Initialize configuration loader.

        Args:
            config_path: Path to YAML configuration file.
                        Uses DEFAULT_CONFIG_PATH if not specified.
        """
        if getattr(self, "_initialized", False):
            return

        self._config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self._load_config()
        self._initialized = True

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        if not self._config_path.exists():
            logger.warning(
                f"Configuration file not found: {self._config_path}. "
                f"Using defaults and environment variables only."
            )
            self._config = {}
            return

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                self._config = yaml.safe_load(f) or {}
            logger.debug(f"Loaded configuration from: {self._config_path}")
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in configuration file: {e}"
            ) from e

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation path.

        First checks environment variables, then YAML config, then default.

        Args:
            key: Dot-notation path (e.g., "browserstack.server")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        # Check environment variable first
        env_key = key.upper().replace(".", "_")
        env_value = os.environ.get(env_key)
        if env_value is not None:
            return self._convert_type(env_value, default)

        # Navigate YAML config by dot notation
        value = self._config
        for part in key.split("."):
            if isinstance(value, dict):
                value = value.get(part)
            else:
                value = None

            if value is None:
                return default

        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get entire configuration section.

        Args:
            section: Section name (e.g., "browserstack", "profiles")

        Returns:
            Section dictionary or empty dict if not found
        """
        return self._config.get(section, {}) or {}

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()
        logger.info(f"Configuration reloaded from: {self._config_path}")

    def _convert_type(self, value: str, reference: Any) -> Any:
        """
        Convert string value to match reference type.

        Used for environment variables which are always strings.
        """
        if reference is None:
            return value

        if isinstance(reference, bool):
            return value.lower() in ("true", "1", "yes", "on")
        if isinstance(reference, int):
            try:
                return int(value)
            except ValueError:
                return value
        if isinstance(reference, float):
            try:
                return float(value)
            except ValueError:
                return value

        return value

    @classmethod
    def reset(cls) -> None:
        """
        Reset singleton instance.

        Useful for testing when configuration needs to be reloaded
        with different settings.
        """
        cls._instance = None
        cls._config = {}


# =============================================================================
# Capability Profiles
# =============================================================================

@dataclass(frozen=True)
class CapabilityProfile:
    """
    Immutable description of a target device/OS/app combination.

    Attributes:
        platform_name: "Android" or "iOS"
        platform_version: OS version reported to the device cloud
        device_name: Device model (e.g. "Samsung Galaxy S23")
        automation_name: Appium automation backend ("UiAutomator2", "XCUITest")
        app: App reference (bs:// URL on BrowserStack)
        auto_grant_permissions: Grant Android runtime permissions on install
        auto_accept_alerts: Accept iOS system alerts automatically
        no_reset: Keep app state between sessions
        full_reset: Reinstall the app for each session
        session_name: Session label shown on the dashboard
    """
    platform_name: str
    platform_version: str
    device_name: str
    automation_name: str
    app: Optional[str] = None
    auto_grant_permissions: bool = False
    auto_accept_alerts: bool = False
    no_reset: bool = False
    full_reset: bool = False
    session_name: str = ""
    debug: bool = True
    network_logs: bool = True
    video: bool = True
    appium_logs: bool = True

    def to_capabilities(
        self,
        project_name: str,
        build_name: str,
        username: Optional[str] = None,
        access_key: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Render W3C capabilities for the remote endpoint.

        Credentials go into ``bstack:options`` so they never appear
        in the hub URL.
        """
        bstack_options: Dict[str, Any] = {
            "projectName": project_name,
            "buildName": build_name,
            "sessionName": self.session_name or f"{self.platform_name} {self.device_name} Test",
            "deviceName": self.device_name,
            "osVersion": self.platform_version,
            "debug": self.debug,
            "networkLogs": self.network_logs,
            "video": self.video,
            "appiumLogs": self.appium_logs,
        }
        if username:
            bstack_options["userName"] = username
        if access_key:
            bstack_options["accessKey"] = access_key

        capabilities: Dict[str, Any] = {
            "platformName": self.platform_name,
            "appium:automationName": self.automation_name,
            "appium:noReset": self.no_reset,
            "appium:fullReset": self.full_reset,
            "bstack:options": bstack_options,
        }
        if self.app:
            capabilities["appium:app"] = self.app
        if self.auto_grant_permissions:
            capabilities["appium:autoGrantPermissions"] = True
        if self.auto_accept_alerts:
            capabilities["appium:autoAcceptAlerts"] = True
        return capabilities


# YAML key -> CapabilityProfile field
_PROFILE_FIELDS = {
    "platform_name": "platform_name",
    "platform_version": "platform_version",
    "device_name": "device_name",
    "automation_name": "automation_name",
    "app": "app",
    "auto_grant_permissions": "auto_grant_permissions",
    "auto_accept_alerts": "auto_accept_alerts",
    "no_reset": "no_reset",
    "full_reset": "full_reset",
    "session_name": "session_name",
    "debug": "debug",
    "network_logs": "network_logs",
    "video": "video",
    "appium_logs": "appium_logs",
}

_REQUIRED_FIELDS = ("platform_name", "platform_version", "device_name", "automation_name")


def _build_profile(platform: str, index: int, entry: Mapping[str, Any]) -> CapabilityProfile:
    if not isinstance(entry, Mapping):
        raise ConfigurationError(f"Profile {platform}[{index}] must be a mapping, got {type(entry).__name__}")

    missing = [name for name in _REQUIRED_FIELDS if not entry.get(name)]
    if missing:
        raise ConfigurationError(f"Profile {platform}[{index}] is missing: {', '.join(missing)}")

    unknown = set(entry) - set(_PROFILE_FIELDS) - {"app_env"}
    if unknown:
        raise ConfigurationError(f"Profile {platform}[{index}] has unknown keys: {', '.join(sorted(unknown))}")

    kwargs = {_PROFILE_FIELDS[key]: value for key, value in entry.items() if key in _PROFILE_FIELDS}
    kwargs["platform_version"] = str(kwargs["platform_version"])

    # App reference may be supplied per run through an environment variable
    app_env = entry.get("app_env")
    if app_env and os.environ.get(app_env):
        kwargs["app"] = os.environ[app_env]

    return CapabilityProfile(**kwargs)


@dataclass(frozen=True)
class ProfileTable:
    """
    Fixed table of capability profiles keyed by lowercase platform name.

    Usage:
        >>> table = ProfileTable.from_config(ConfigLoader())
        >>> table.lookup("android", 0).device_name
        'Samsung Galaxy S23'
    """
    profiles: Mapping[str, Tuple[CapabilityProfile, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        frozen = {name.lower(): tuple(entries) for name, entries in self.profiles.items()}
        object.__setattr__(self, "profiles", MappingProxyType(frozen))

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "ProfileTable":
        """Build a table from the ``profiles`` section of the configuration."""
        table: Dict[str, Tuple[CapabilityProfile, ...]] = {}
        for platform, entries in (raw or {}).items():
            if not isinstance(entries, list):
                raise ConfigurationError(f"Profiles for '{platform}' must be a list")
            table[str(platform)] = tuple(
                _build_profile(str(platform), i, entry) for i, entry in enumerate(entries)
            )
        return cls(table)

    @classmethod
    def from_config(cls, config: Optional[ConfigLoader] = None) -> "ProfileTable":
        config = config or ConfigLoader()
        return cls.from_mapping(config.get_section("profiles"))

    @property
    def platforms(self) -> Tuple[str, ...]:
        return tuple(self.profiles)

    def lookup(self, platform: str, index: int = 0) -> CapabilityProfile:
        """
        Look up a profile by platform name and position.

        Raises:
            ConfigurationError: Unknown platform or index out of range
        """
        entries = self.profiles.get((platform or "").lower())
        if entries is None:
            raise ConfigurationError(
                f"Unknown platform '{platform}'. Known platforms: {', '.join(self.platforms) or 'none'}"
            )
        if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < len(entries):
            raise ConfigurationError(
                f"Invalid profile index {index!r} for platform '{platform}' "
                f"({len(entries)} profile(s) configured)"
            )
        return entries[index]


__all__ = [
    "ConfigLoader",
    "ConfigurationError",
    "CapabilityProfile",
    "ProfileTable",
]
