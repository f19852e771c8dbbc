"""
================================================================================
Driver Home Page Object
================================================================================

Delivery driver dashboard: online toggle, map, available orders, delivery flow.

================================================================================
"""

from __future__ import annotations

from typing import Dict

import allure
from loguru import logger

from testsuites.mobile_testing.framework.element_resolver import Action
from testsuites.mobile_testing.framework.locators import by_text
from testsuites.mobile_testing.framework.page_base import BasePage


class DriverHomePage(BasePage):
    """Driver home page object."""

    PAGE_NAME = "Driver Home Page"

    APP_BAR = BasePage.element("app_bar", 'type("AppBar")')
    ONLINE_TOGGLE = BasePage.element("online_toggle", 'key("online_toggle")', 'text("ONLINE")')
    MAP_VIEW = BasePage.element("driver_map", 'key("driver_map")', 'type("FlutterMap")')
    ORDERS_LIST = BasePage.element("orders_list", 'key("orders_list")', 'type("ListView")')
    ACCEPT_ORDER_BUTTON = BasePage.element(
        "accept_order_button", 'key("accept_order_button")', 'text("Accept Order")'
    )
    START_DELIVERY_BUTTON = BasePage.element(
        "start_delivery_button", 'key("start_delivery_button")', 'text("Start Delivery")'
    )
    CHAT_BUTTON = BasePage.element("chat_button", 'key("chat_button")', 'type("FloatingActionButton")')
    FILTER_DROPDOWN = BasePage.element("filter_dropdown", 'key("filter_dropdown")')
    REFRESH_BUTTON = BasePage.element("refresh_button", 'key("refresh_button")')

    ANCHOR = APP_BAR

    async def wait_for_page_load(self) -> None:
        await super().wait_for_page_load()
        # Location permission is requested the first time the dashboard opens
        await self.handle_permissions()

    @allure.step("Toggle online status")
    async def toggle_online_status(self) -> None:
        await self.tap(self.ONLINE_TOGGLE, timeout=self.timings.probe)
        await self.pause(self.timings.action_settle)

    @allure.step("Accept first order")
    async def accept_first_order(self) -> bool:
        """
        Accept the first available order.

        Returns:
            False when the list has no order to accept
        """
        await self.wait_ready(self.ORDERS_LIST, timeout=self.timings.element)
        button = await self.find(self.ACCEPT_ORDER_BUTTON, timeout=self.timings.probe)
        if button is None:
            logger.warning("No order available to accept")
            return False

        await self.resolver.act(button, Action.TAP)
        await self.pause(self.timings.navigation_settle)
        logger.info("Order accepted")
        return True

    @allure.step("Start delivery")
    async def start_delivery(self) -> None:
        await self.tap(self.START_DELIVERY_BUTTON, timeout=self.timings.probe)
        await self.pause(self.timings.navigation_settle)

    async def open_chat(self) -> None:
        await self.tap(self.CHAT_BUTTON, timeout=self.timings.probe)

    @allure.step("Apply filter: {filter_type}")
    async def apply_filter(self, filter_type: str) -> None:
        await self.tap(self.FILTER_DROPDOWN)
        await self.pause(self.timings.action_settle // 2)
        await self.tap(by_text(filter_type))
        await self.pause(self.timings.action_settle)

    @allure.step("Refresh orders")
    async def refresh_orders(self) -> None:
        """Tap the refresh button, or pull to refresh when there is none."""
        if await self.is_present(self.REFRESH_BUTTON):
            await self.tap(self.REFRESH_BUTTON)
        else:
            await self.resolver.pull_to_refresh()
        await self.pause(self.timings.navigation_settle)

    async def verify_map_is_loaded(self) -> bool:
        loaded = await self.is_present(self.MAP_VIEW, timeout=self.timings.element)
        if loaded:
            logger.info("Map is loaded")
        else:
            logger.warning("Map is not loaded")
        return loaded

    async def verify_home_elements(self) -> Dict[str, bool]:
        """Probe the app bar and orders list."""
        return await self.check_elements(self.APP_BAR, self.ORDERS_LIST)
