"""
================================================================================
Mobile Testing Framework
================================================================================

Appium-based mobile UI automation framework for BrowserStack App Automate.

Components:
    - session_manager: Remote session lifecycle, status reporting, screenshots
    - element_resolver: Ordered fallback locator resolution and element actions
    - locators: key/text/type locator grammar
    - gestures: Touch gesture sequences
    - page_base: Base page object
    - config_loader: YAML configuration and capability profiles

Author: Automation Team
License: MIT
================================================================================
"""

from .config_loader import CapabilityProfile, ConfigLoader, ConfigurationError, ProfileTable
from .element_resolver import (
    Action,
    ElementResolver,
    InteractionError,
    NotReadyError,
    ResolvedElement,
)
from .locators import Locator, UIElement, by_key, by_text, by_type, parse_locator
from .page_base import BasePage, ElementMissingError, PageTimings
from .session_manager import (
    ConnectionRetryConfig,
    MobileSession,
    RemoteConnectionError,
    SessionManager,
    SessionStatus,
)

__all__ = [
    "CapabilityProfile",
    "ConfigLoader",
    "ConfigurationError",
    "ProfileTable",
    "Action",
    "ElementResolver",
    "InteractionError",
    "NotReadyError",
    "ResolvedElement",
    "Locator",
    "UIElement",
    "by_key",
    "by_text",
    "by_type",
    "parse_locator",
    "BasePage",
    "ElementMissingError",
    "PageTimings",
    "ConnectionRetryConfig",
    "MobileSession",
    "RemoteConnectionError",
    "SessionManager",
    "SessionStatus",
]
