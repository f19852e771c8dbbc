"""
================================================================================
Unit Test Configuration
================================================================================

In-memory stand-ins for the Appium driver so the framework can be exercised
without a device cloud.

Fixtures:
    - fake_driver: Scriptable fake Appium driver
    - fake_element: Factory for fake elements
    - profile_table: Profile table mirroring config/config.yaml
    - mobile_session: MobileSession wrapping fake_driver
    - resolver: ElementResolver with short polling

================================================================================
"""

from __future__ import annotations

import time
from typing import Any, Dict, List, Optional, Tuple

import pytest
from selenium.common.exceptions import StaleElementReferenceException, WebDriverException

from testsuites.mobile_testing.framework.config_loader import ProfileTable
from testsuites.mobile_testing.framework.element_resolver import ElementResolver
from testsuites.mobile_testing.framework.locators import Locator
from testsuites.mobile_testing.framework.session_manager import MobileSession


PROFILES = {
    "android": [
        {
            "device_name": "Samsung Galaxy S23",
            "platform_name": "Android",
            "platform_version": "13.0",
            "automation_name": "UiAutomator2",
            "app": "bs://android-app",
            "auto_grant_permissions": True,
        },
        {
            "device_name": "Google Pixel 7",
            "platform_name": "Android",
            "platform_version": "13.0",
            "automation_name": "UiAutomator2",
            "app": "bs://android-app",
            "auto_grant_permissions": True,
        },
    ],
    "ios": [
        {
            "device_name": "iPhone 14",
            "platform_name": "iOS",
            "platform_version": "16",
            "automation_name": "XCUITest",
            "app": "bs://ios-app",
            "auto_accept_alerts": True,
        },
    ],
}


class FakeElement:
    """Minimal WebElement stand-in."""

    def __init__(self, name: str = "element", text: str = "", displayed: bool = True):
        self.name = name
        self.text = text
        self.displayed = displayed
        self.stale = False
        self.clicks = 0
        self.cleared = 0
        self.typed: List[str] = []

    def _check(self) -> None:
        if self.stale:
            raise StaleElementReferenceException(f"{self.name} is no longer attached")

    def is_displayed(self) -> bool:
        self._check()
        return self.displayed

    def click(self) -> None:
        self._check()
        self.clicks += 1

    def clear(self) -> None:
        self._check()
        self.cleared += 1

    def send_keys(self, *value: str) -> None:
        self._check()
        self.typed.append("".join(value))


class FakeDriver:
    """
    Scriptable Appium driver.

    Elements are registered per (strategy, query) and may appear or
    disappear after a delay relative to registration.
    """

    def __init__(self, session_id: str = "fake-session-1"):
        self.session_id = session_id
        self._elements: Dict[Tuple[str, str], List[Tuple[FakeElement, float, Optional[float]]]] = {}
        self.lookups: List[Tuple[str, str, float]] = []
        self.scripts: List[str] = []
        self.executed: List[Tuple[str, Dict[str, Any]]] = []
        self.keycodes: List[int] = []
        self.quit_calls = 0
        self.implicit_wait: Optional[float] = None
        self.window_size = {"width": 1080, "height": 2400}
        self.orientation = "PORTRAIT"
        self.screenshot = b"\x89PNG\r\n\x1a\nfake"
        self.fail_quit = False
        self.fail_scripts = False
        self.fail_screenshot = False
        self.fail_lookups = False
        # Raised by every lookup when set, e.g. a dead session
        self.lookup_error: Optional[Exception] = None

    def add(
        self,
        locator: Locator,
        *elements: FakeElement,
        after: float = 0.0,
        gone_after: Optional[float] = None,
    ) -> None:
        """Register elements for a locator, visible `after` seconds from now."""
        now = time.monotonic()
        key = (locator.strategy, locator.query)
        appear_at = now + after
        disappear_at = now + gone_after if gone_after is not None else None
        for element in elements or (FakeElement(locator.expression),):
            self._elements.setdefault(key, []).append((element, appear_at, disappear_at))

    def find_elements(self, by: str, value: str) -> List[FakeElement]:
        now = time.monotonic()
        self.lookups.append((by, value, now))
        if self.lookup_error is not None:
            raise self.lookup_error
        if self.fail_lookups:
            raise WebDriverException("lookup failed")
        return [
            element
            for element, appear_at, disappear_at in self._elements.get((by, value), [])
            if appear_at <= now and (disappear_at is None or now < disappear_at)
        ]

    def lookups_for(self, locator: Locator) -> List[float]:
        return [t for by, value, t in self.lookups if (by, value) == (locator.strategy, locator.query)]

    def implicitly_wait(self, seconds: float) -> None:
        self.implicit_wait = seconds

    def quit(self) -> None:
        self.quit_calls += 1
        if self.fail_quit:
            raise WebDriverException("session already terminated")

    def execute_script(self, script: str, *args: Any) -> None:
        if self.fail_scripts:
            raise WebDriverException("executor unavailable")
        self.scripts.append(script)

    def execute(self, command: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        self.executed.append((command, params or {}))
        return {"value": None}

    def get_screenshot_as_png(self) -> bytes:
        if self.fail_screenshot:
            raise WebDriverException("screenshot failed")
        return self.screenshot

    def get_window_size(self) -> Dict[str, int]:
        return dict(self.window_size)

    def press_keycode(self, keycode: int) -> None:
        self.keycodes.append(keycode)


@pytest.fixture
def fake_driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def fake_element():
    """Factory fixture: fake_element("name", text="...")."""
    return FakeElement


@pytest.fixture
def profile_table() -> ProfileTable:
    return ProfileTable.from_mapping(PROFILES)


@pytest.fixture
def mobile_session(fake_driver: FakeDriver, profile_table: ProfileTable) -> MobileSession:
    return MobileSession(
        session_id=fake_driver.session_id,
        profile=profile_table.lookup("android", 0),
        driver=fake_driver,
    )


@pytest.fixture
def resolver(mobile_session: MobileSession) -> ElementResolver:
    return ElementResolver(mobile_session, default_timeout=300, poll_interval=20)
