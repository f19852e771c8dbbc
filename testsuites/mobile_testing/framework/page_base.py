"""
================================================================================
Base Page Object
================================================================================

Foundation class for the mobile Page Object Model.

Provides:
    - Element declaration with primary + fallback locators
    - Tap / type / visibility helpers on top of ElementResolver
    - App-ready and permission dialog handling
    - Screenshot capture with Allure attachment
    - Device utilities (orientation, network simulation)

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import allure
from loguru import logger

from autotest_tools.report_tools.allure_utils import attach_png

from .element_resolver import Action, ElementResolver, ResolvedElement
from .locators import CandidatesLike, Locator, UIElement, as_element
from .session_manager import MobileSession, SessionManager


class ElementMissingError(Exception):
    """Raised when a page action needs an element that no locator found."""
    pass


@dataclass
class PageTimings:
    """
    Timeouts and settle pauses used by page objects, in milliseconds.

    Attributes:
        element: Default per-locator lookup timeout
        probe: Short existence check used to pick between alternatives
        page_load: Wait for a page's anchor element
        app_ready: Wait for the Flutter root widget
        app_settle: Pause after the app reports ready
        action_settle: Pause after state-changing taps
        navigation_settle: Pause after navigation-triggering actions
        loading: Wait for a loading indicator to disappear
    """
    element: int = 10000
    probe: int = 3000
    page_load: int = 15000
    app_ready: int = 30000
    app_settle: int = 2000
    action_settle: int = 2000
    navigation_settle: int = 3000
    loading: int = 30000

    @classmethod
    def instant(cls, probe: int = 50) -> "PageTimings":
        """Zero pauses and short waits, for offline runs against a fake device."""
        return cls(
            element=probe,
            probe=probe,
            page_load=probe,
            app_ready=probe,
            app_settle=0,
            action_settle=0,
            navigation_settle=0,
            loading=probe,
        )


# Flutter root widget, present once the app has rendered its first frame
APP_ROOT = UIElement.of("app_root", 'type("MaterialApp")')
ALLOW_BUTTON = UIElement.of("allow_button", 'text("Allow")')


class BasePage:
    """
    Base class for all mobile page objects.

    Usage:
        class LoginPage(BasePage):
            LOGIN_BUTTON = UIElement.of("login_button", 'key("login_button")', 'text("Sign In")')

            async def tap_login_button(self):
                await self.tap(self.LOGIN_BUTTON)
    """

    PAGE_NAME: str = "page"

    # Anchor checked by wait_for_page_load; override in subclasses
    ANCHOR: Optional[UIElement] = None

    def __init__(
        self,
        session: MobileSession,
        resolver: Optional[ElementResolver] = None,
        timings: Optional[PageTimings] = None,
        manager: Optional[SessionManager] = None,
    ):
        """
        Initialize page object.

        Args:
            session: Open remote session
            resolver: Shared resolver (created for the session if None)
            timings: Timeouts and pauses (PageTimings defaults if None)
            manager: Session manager, needed for screenshots and network simulation
        """
        self.session = session
        self.timings = timings or PageTimings()
        self.resolver = resolver or ElementResolver(session, default_timeout=self.timings.element)
        self.manager = manager

    @property
    def driver(self) -> Any:
        return self.session.driver

    @staticmethod
    def element(name: str, *locators: Union[str, Locator]) -> UIElement:
        """Declare an element from primary + fallback locator expressions."""
        return UIElement.of(name, *locators)

    async def pause(self, ms: int) -> None:
        if ms > 0:
            await asyncio.sleep(ms / 1000)

    # =========================================================================
    # Element Interactions
    # =========================================================================

    async def find(
        self,
        candidates: CandidatesLike,
        timeout: Optional[int] = None,
    ) -> Optional[ResolvedElement]:
        """Resolve an element, None when absent."""
        return await self.resolver.resolve(candidates, timeout=timeout)

    async def require(
        self,
        candidates: CandidatesLike,
        timeout: Optional[int] = None,
    ) -> ResolvedElement:
        element = as_element(candidates)
        found = await self.resolver.resolve(element, timeout=timeout)
        if found is None:
            raise ElementMissingError(
                f"{self.PAGE_NAME}: '{element.name}' not found ("
                + ", ".join(loc.expression for loc in element.candidates)
                + ")"
            )
        return found

    async def tap(
        self,
        candidates: CandidatesLike,
        timeout: Optional[int] = None,
    ) -> None:
        """
        Tap the first locator that resolves.

        Raises:
            ElementMissingError: No locator resolved
        """
        element = as_element(candidates)
        with allure.step(f"Tap: {element.name}"):
            found = await self.require(element, timeout=timeout)
            await self.resolver.act(found, Action.TAP)

    async def enter_text(
        self,
        candidates: CandidatesLike,
        value: str,
        timeout: Optional[int] = None,
        secret: bool = False,
    ) -> None:
        """
        Focus a text field, clear it and type a value.

        Args:
            candidates: Field locators
            value: Text to type
            timeout: Per-locator timeout
            secret: Mask the value in reports
        """
        element = as_element(candidates)
        shown = "*" * len(value) if secret or "password" in element.name.lower() else value
        with allure.step(f"Enter text into {element.name}: {shown}"):
            found = await self.require(element, timeout=timeout)
            await self.resolver.act(found, Action.TAP)
            await self.resolver.act(found, Action.CLEAR)
            await self.resolver.act(found, Action.SET_TEXT, value)
            logger.debug(f"Entered text into {element.name}")

    async def is_present(
        self,
        candidates: CandidatesLike,
        timeout: Optional[int] = None,
    ) -> bool:
        """Check if any locator resolves within the timeout."""
        timeout = self.timings.probe if timeout is None else timeout
        return await self.resolver.exists(candidates, timeout=timeout)

    async def get_text(
        self,
        candidates: CandidatesLike,
        timeout: Optional[int] = None,
    ) -> Optional[str]:
        """Text of the first resolved locator, None when absent."""
        found = await self.find(candidates, timeout=timeout)
        if found is None:
            return None
        return await self.resolver.get_text(found)

    async def wait_ready(
        self,
        candidates: CandidatesLike,
        timeout: Optional[int] = None,
    ) -> ResolvedElement:
        timeout = self.timings.page_load if timeout is None else timeout
        return await self.resolver.wait_ready(candidates, timeout=timeout)

    async def check_elements(self, *elements: UIElement) -> Dict[str, bool]:
        """
        Probe several elements and log which are present.

        Returns:
            Mapping of element name -> present
        """
        results: Dict[str, bool] = {}
        for element in elements:
            present = await self.is_present(element, timeout=self.timings.probe)
            results[element.name] = present
            if present:
                logger.info(f"{self.PAGE_NAME}: {element.name} found")
            else:
                logger.warning(f"{self.PAGE_NAME}: {element.name} not found")
        return results

    # =========================================================================
    # App State
    # =========================================================================

    async def wait_for_app_ready(self) -> None:
        """
        Wait for the Flutter app to render its root widget.

        Raises:
            NotReadyError: App did not render in time
        """
        with allure.step("Wait for app ready"):
            logger.info("Waiting for app to be ready...")
            await self.resolver.wait_ready(APP_ROOT, timeout=self.timings.app_ready)
            await self.pause(self.timings.app_settle)
            logger.info("App is ready")

    async def wait_for_page_load(self) -> None:
        """Wait for the app, then for this page's anchor element."""
        with allure.step(f"Wait for {self.PAGE_NAME}"):
            await self.wait_for_app_ready()
            if self.ANCHOR is not None:
                await self.wait_ready(self.ANCHOR)
            logger.info(f"{self.PAGE_NAME} loaded")

    async def handle_permissions(self, max_dialogs: int = 3) -> int:
        """
        Accept runtime permission dialogs (location, notifications, camera).

        Returns:
            Number of dialogs accepted
        """
        accepted = 0
        for _ in range(max_dialogs):
            found = await self.find(ALLOW_BUTTON, timeout=self.timings.probe)
            if found is None:
                break
            await self.resolver.act(found, Action.TAP)
            accepted += 1
            logger.info(f"Permission dialog accepted ({accepted})")
        if not accepted:
            logger.debug("No permission dialogs to handle")
        return accepted

    # =========================================================================
    # Device Utilities
    # =========================================================================

    async def scroll_down(self) -> None:
        await self.resolver.scroll_down()

    async def scroll_up(self) -> None:
        await self.resolver.scroll_up()

    async def set_orientation(self, orientation: str) -> bool:
        """
        Rotate the device ("portrait" / "landscape").

        Returns:
            True on success; failures are logged
        """
        value = orientation.upper()

        def _rotate() -> None:
            self.driver.orientation = value

        try:
            await asyncio.to_thread(_rotate)
            logger.info(f"Orientation set to: {value}")
            return True
        except Exception as e:
            logger.error(f"Failed to set orientation: {e}")
            return False

    async def simulate_network(self, profile: str) -> bool:
        if self.manager is None:
            logger.warning("No session manager attached, cannot simulate network")
            return False
        return await self.manager.set_network_profile(self.session, profile)

    # =========================================================================
    # Screenshot Utilities
    # =========================================================================

    async def screenshot(self, name: str) -> Optional[bytes]:
        """
        Take a screenshot and attach it to the Allure report.

        Returns:
            PNG bytes, or None when capture failed
        """
        if self.manager is None:
            logger.warning("No session manager attached, cannot take screenshot")
            return None
        data = await self.manager.capture_artifact(self.session, name)
        if data:
            attach_png(data, name=name)
        return data

    def get_locator_health_report(self) -> str:
        """Get locator health report."""
        return self.resolver.get_health_report()


__all__ = [
    "BasePage",
    "PageTimings",
    "ElementMissingError",
]
