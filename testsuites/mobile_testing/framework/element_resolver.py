"""
================================================================================
Element Resolver
================================================================================

Finds one logical element from an ordered list of alternative locators and
acts on it.

    - Candidates are tried strictly in order, primary first
    - Each candidate is short-polled up to its own timeout
    - The first candidate that resolves wins; later ones are never tried
    - "Not found" is a normal outcome (None), callers decide if it is fatal
    - Fallback usage is recorded for locator maintenance reports

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from loguru import logger
from selenium.common.exceptions import (
    ElementNotInteractableException,
    InvalidSessionIdException,
    NoSuchElementException,
    StaleElementReferenceException,
    WebDriverException,
)

from . import gestures
from .locators import CandidatesLike, Locator, UIElement, as_element
from .session_manager import MobileSession


DEFAULT_TIMEOUT_MS = 10000
DEFAULT_POLL_INTERVAL_MS = 250


class NotReadyError(Exception):
    """Raised when no candidate becomes present and visible before the timeout."""
    pass


class InteractionError(Exception):
    """Raised when an action targets an element that is stale or detached."""
    pass


class Action(str, Enum):
    TAP = "tap"
    SET_TEXT = "set_text"
    CLEAR = "clear"


@dataclass
class ResolvedElement:
    """
    A live element handle and the locator that found it.

    Attributes:
        element: Appium WebElement
        locator: Winning locator
        position: Index of the winning locator in the candidate list
        element_name: Logical element name
    """
    element: Any
    locator: Locator
    position: int
    element_name: str

    @property
    def used_fallback(self) -> bool:
        return self.position > 0


@dataclass
class LocatorHealth:
    """
    Tracks locator health for one resolution.

    Attributes:
        element_name: Human-readable element name
        primary_selector: The preferred locator expression
        used_fallback: Whether a fallback was used
        fallback_selector: The fallback expression used (if any)
    """
    element_name: str
    primary_selector: str
    used_fallback: bool = False
    fallback_selector: Optional[str] = None


class ElementResolver:
    """
    Resolves and drives elements on one remote session.

    Usage:
        >>> resolver = ElementResolver(session)
        >>> login = UIElement.of("login_button", 'key("login_button")', 'text("Sign In")')
        >>> found = await resolver.resolve(login, timeout=3000)
        >>> if found:
        ...     await resolver.act(found, Action.TAP)
    """

    def __init__(
        self,
        session: MobileSession,
        default_timeout: int = DEFAULT_TIMEOUT_MS,
        poll_interval: int = DEFAULT_POLL_INTERVAL_MS,
    ):
        """
        Args:
            session: Open session to act on
            default_timeout: Per-candidate timeout in milliseconds
            poll_interval: Delay between existence checks in milliseconds
        """
        self.session = session
        self.default_timeout = default_timeout
        self.poll_interval = poll_interval
        self._health_records: List[LocatorHealth] = []
        self._fallback_used: Dict[str, LocatorHealth] = {}

    @property
    def driver(self) -> Any:
        return self.session.driver

    # =========================================================================
    # Lookup
    # =========================================================================

    async def _find(self, locator: Locator) -> Optional[Any]:
        """
        Single existence check.

        Driver errors count as "not there yet", except a dead session.
        """
        try:
            matches = await asyncio.to_thread(self.driver.find_elements, locator.strategy, locator.query)
        except InvalidSessionIdException:
            raise
        except WebDriverException as e:
            logger.debug(f"Lookup of {locator} failed: {str(e)[:80]}")
            return None
        if matches and len(matches) > locator.index:
            return matches[locator.index]
        return None

    async def _poll(self, locator: Locator, timeout: int) -> Optional[Any]:
        deadline = time.monotonic() + timeout / 1000
        interval = self.poll_interval / 1000
        while True:
            element = await self._find(locator)
            if element is not None:
                return element
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return None
            await asyncio.sleep(min(interval, remaining))

    def _record(self, element: UIElement, position: int) -> None:
        locator = element.candidates[position]
        health = LocatorHealth(
            element_name=element.name,
            primary_selector=element.primary.expression,
            used_fallback=position > 0,
            fallback_selector=locator.expression if position > 0 else None,
        )
        self._health_records.append(health)

        if position > 0:
            logger.warning(f"Element '{element.name}' used fallback: {locator.expression}")
            self._fallback_used[element.name] = health
        else:
            logger.debug(f"Element '{element.name}' found: {locator.expression}")

    async def resolve(
        self,
        candidates: CandidatesLike,
        timeout: Optional[int] = None,
        name: str = "custom_element",
    ) -> Optional[ResolvedElement]:
        """
        Resolve the first candidate that exists.

        Args:
            candidates: UIElement, locator, or ordered locator sequence
            timeout: Per-candidate timeout in milliseconds
            name: Element name used when candidates is not a UIElement

        Returns:
            ResolvedElement, or None if no candidate resolved in time

        Raises:
            InvalidSessionIdException: The remote session has ended
        """
        element = as_element(candidates, name)
        timeout = self.default_timeout if timeout is None else timeout

        for position, locator in enumerate(element.candidates):
            found = await self._poll(locator, timeout)
            if found is not None:
                self._record(element, position)
                return ResolvedElement(found, locator, position, element.name)
            logger.debug(f"'{element.name}': {locator.expression} not found within {timeout}ms")

        logger.info(
            f"'{element.name}' not found with {len(element)} locator(s): "
            + ", ".join(loc.expression for loc in element.candidates)
        )
        return None

    async def exists(
        self,
        candidates: CandidatesLike,
        timeout: Optional[int] = None,
    ) -> bool:
        return await self.resolve(candidates, timeout) is not None

    async def _is_displayed(self, element: Any) -> bool:
        try:
            return bool(await asyncio.to_thread(element.is_displayed))
        except InvalidSessionIdException:
            raise
        except WebDriverException:
            return False

    async def wait_ready(
        self,
        candidates: CandidatesLike,
        timeout: Optional[int] = None,
    ) -> ResolvedElement:
        """
        Wait until a candidate is present and visible.

        All candidates share one deadline; each poll round checks them in order.

        Raises:
            NotReadyError: Nothing became ready before the timeout
        """
        element = as_element(candidates)
        timeout = self.default_timeout if timeout is None else timeout
        deadline = time.monotonic() + timeout / 1000
        interval = self.poll_interval / 1000

        while True:
            for position, locator in enumerate(element.candidates):
                found = await self._find(locator)
                if found is not None and await self._is_displayed(found):
                    self._record(element, position)
                    logger.debug(f"Element ready: {locator.expression}")
                    return ResolvedElement(found, locator, position, element.name)

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            await asyncio.sleep(min(interval, remaining))

        error_msg = (
            f"'{element.name}' not ready after {timeout}ms: "
            + ", ".join(loc.expression for loc in element.candidates)
        )
        logger.error(error_msg)
        raise NotReadyError(error_msg)

    async def wait_gone(
        self,
        candidates: CandidatesLike,
        timeout: Optional[int] = None,
    ) -> bool:
        """
        Wait until no candidate resolves (e.g. a loading indicator disappears).

        Returns:
            True if everything disappeared before the timeout
        """
        element = as_element(candidates)
        timeout = self.default_timeout if timeout is None else timeout
        deadline = time.monotonic() + timeout / 1000
        interval = self.poll_interval / 1000

        while True:
            present = False
            for locator in element.candidates:
                if await self._find(locator) is not None:
                    present = True
                    break
            if not present:
                return True

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                logger.warning(f"'{element.name}' still present after {timeout}ms")
                return False
            await asyncio.sleep(min(interval, remaining))

    # =========================================================================
    # Actions
    # =========================================================================

    async def act(
        self,
        element: ResolvedElement,
        action: Action,
        value: Optional[str] = None,
    ) -> None:
        """
        Perform one UI action on a resolved element.

        Raises:
            InteractionError: Element is stale or no longer attached
            ValueError: SET_TEXT without a value
        """
        action = Action(action)
        target = element.element

        try:
            if action is Action.TAP:
                await asyncio.to_thread(target.click)
            elif action is Action.CLEAR:
                await asyncio.to_thread(target.clear)
            else:
                if value is None:
                    raise ValueError("SET_TEXT requires a value")
                await asyncio.to_thread(target.send_keys, value)
        except (
            StaleElementReferenceException,
            NoSuchElementException,
            ElementNotInteractableException,
        ) as e:
            raise InteractionError(
                f"Cannot {action.value} '{element.element_name}' ({element.locator.expression}): "
                f"{e.__class__.__name__}"
            ) from e

        logger.debug(f"{action.value}: '{element.element_name}' via {element.locator.expression}")

    async def get_text(self, element: ResolvedElement) -> str:
        try:
            return await asyncio.to_thread(lambda: element.element.text) or ""
        except (StaleElementReferenceException, NoSuchElementException) as e:
            raise InteractionError(
                f"Cannot read text of '{element.element_name}': {e.__class__.__name__}"
            ) from e

    # =========================================================================
    # Gestures
    # =========================================================================

    async def window_size(self) -> Dict[str, Any]:
        return await asyncio.to_thread(self.driver.get_window_size)

    async def perform_gesture(self, gesture: gestures.Gesture) -> None:
        """Send a gesture. No post-condition check."""
        await asyncio.to_thread(gestures.perform, self.driver, gesture)

    async def scroll_down(self) -> None:
        await self.perform_gesture(gestures.scroll_down(await self.window_size()))

    async def scroll_up(self) -> None:
        await self.perform_gesture(gestures.scroll_up(await self.window_size()))

    async def pull_to_refresh(self) -> None:
        await self.perform_gesture(gestures.pull_to_refresh(await self.window_size()))

    async def swipe(self, start: tuple, end: tuple, hold_ms: int = 500) -> None:
        await self.perform_gesture(gestures.swipe(start, end, hold_ms=hold_ms))

    # =========================================================================
    # Reporting
    # =========================================================================

    @property
    def health_records(self) -> List[LocatorHealth]:
        return list(self._health_records)

    def get_health_report(self) -> str:
        """
        Generate locator health report.

        Lists elements that needed a fallback locator (maintenance candidates).
        """
        if not self._fallback_used:
            return "All elements used primary locators. No maintenance needed."

        report_lines = [
            "Locator Health Report - Fallbacks Used:",
            "",
            "The following elements used fallback locators.",
            "Consider updating the primary locators:",
            "",
        ]

        for element_name, health in self._fallback_used.items():
            report_lines.extend([
                f"  [{element_name}]",
                f"    Failed primary: {health.primary_selector}",
                f"    Used: {health.fallback_selector}",
                "",
            ])

        return "\n".join(report_lines)


__all__ = [
    "ElementResolver",
    "ResolvedElement",
    "LocatorHealth",
    "Action",
    "NotReadyError",
    "InteractionError",
]
