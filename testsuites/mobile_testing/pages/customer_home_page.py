"""
================================================================================
Customer Home Page Object
================================================================================

Meal browsing screen shown to customers after login.

================================================================================
"""

from __future__ import annotations

import asyncio
from typing import Dict

import allure
from loguru import logger

from testsuites.mobile_testing.framework.element_resolver import Action
from testsuites.mobile_testing.framework.locators import by_text
from testsuites.mobile_testing.framework.page_base import BasePage


# Android KEYCODE_ENTER
ENTER_KEYCODE = 66


class CustomerHomePage(BasePage):
    """Customer home page object."""

    PAGE_NAME = "Customer Home Page"

    APP_BAR = BasePage.element("app_bar", 'type("AppBar")')
    SEARCH_FIELD = BasePage.element("search_field", 'key("search_field")', 'type("TextField")')
    PROFILE_BUTTON = BasePage.element("profile_button", 'key("profile_button")', 'type("CircleAvatar")')
    NOTIFICATION_BUTTON = BasePage.element("notification_button", 'key("notification_button")')
    MENU_LIST = BasePage.element("menu_list", 'type("ListView")')
    MEAL_CARD = BasePage.element("meal_card", 'type("Card")', 'type("GestureDetector")')
    CART_BUTTON = BasePage.element("cart_button", 'key("cart_button")')
    ORDER_HISTORY_BUTTON = BasePage.element("order_history", 'text("Order History")')
    SETTINGS_BUTTON = BasePage.element("settings", 'text("Settings")')

    ANCHOR = APP_BAR

    @allure.step("Search for meal: {term}")
    async def search_for_meal(self, term: str) -> None:
        await self.enter_text(self.SEARCH_FIELD, term, timeout=self.timings.probe)
        if self.session.profile.platform_name.lower() == "android":
            await asyncio.to_thread(self.driver.press_keycode, ENTER_KEYCODE)
        else:
            # No key events on iOS, the keyboard submits on newline
            field = await self.require(self.SEARCH_FIELD, timeout=self.timings.probe)
            await self.resolver.act(field, Action.SET_TEXT, "\n")
        await self.pause(self.timings.action_settle)
        logger.info(f"Search completed: {term}")

    async def select_first_meal(self) -> None:
        await self.tap(self.MEAL_CARD, timeout=self.timings.probe)

    async def open_profile(self) -> None:
        await self.tap(self.PROFILE_BUTTON, timeout=self.timings.probe)

    async def open_cart(self) -> None:
        await self.tap(self.CART_BUTTON)

    async def open_order_history(self) -> None:
        await self.tap(self.ORDER_HISTORY_BUTTON)

    async def scroll_to_find_meal(self, meal_name: str, max_scrolls: int = 5) -> bool:
        """
        Scroll down until a meal with the given name is on screen.

        Returns:
            True if the meal was found within max_scrolls swipes
        """
        meal = by_text(meal_name)
        for _ in range(max_scrolls):
            if await self.is_present(meal, timeout=self.timings.probe):
                logger.info(f"Found meal: {meal_name}")
                return True
            await self.scroll_down()
            await self.pause(self.timings.action_settle // 2)

        logger.warning(f"Meal '{meal_name}' not found after {max_scrolls} scrolls")
        return False

    async def verify_home_elements(self) -> Dict[str, bool]:
        """Probe the app bar and menu list."""
        return await self.check_elements(self.APP_BAR, self.MENU_LIST)
