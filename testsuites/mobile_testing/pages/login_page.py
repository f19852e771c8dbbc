"""
================================================================================
Login Page Object
================================================================================

MealMommy login screen (shared by customer, driver and vendor roles).

Every element is declared with its stable key first and a text/type fallback
for builds where keys are missing.

================================================================================
"""

from __future__ import annotations

import os
from typing import Optional

import allure
from loguru import logger

from testsuites.mobile_testing.framework.page_base import BasePage


class LoginPage(BasePage):
    """Login page object."""

    PAGE_NAME = "Login Page"

    EMAIL_FIELD = BasePage.element("email_field", 'key("email_field")', 'type("TextField")')
    PASSWORD_FIELD = BasePage.element("password_field", 'key("password_field")', 'type("TextField")[1]')
    LOGIN_BUTTON = BasePage.element("login_button", 'key("login_button")', 'text("Sign In")')
    REGISTER_BUTTON = BasePage.element("register_button", 'key("register_button")', 'text("Register")')
    FORGOT_PASSWORD_LINK = BasePage.element("forgot_password", 'text("Forgot Password?")')
    LOADING_INDICATOR = BasePage.element("loading_indicator", 'type("CircularProgressIndicator")')

    # Checked in this order by get_validation_error
    VALIDATION_ERRORS = (
        BasePage.element("email_validation_error", 'text("Please enter a valid email")'),
        BasePage.element("password_validation_error", 'text("Password must be at least 6 characters")'),
        BasePage.element("login_error", 'text("Invalid email or password")'),
    )

    ANCHOR = LOGIN_BUTTON

    async def enter_email(self, email: str) -> None:
        logger.info(f"Entering email: {email}")
        await self.enter_text(self.EMAIL_FIELD, email, timeout=self.timings.probe)

    async def enter_password(self, password: str) -> None:
        logger.info("Entering password")
        await self.enter_text(self.PASSWORD_FIELD, password, timeout=self.timings.probe, secret=True)

    async def tap_login_button(self) -> None:
        await self.tap(self.LOGIN_BUTTON, timeout=self.timings.probe)

    async def tap_register_button(self) -> None:
        await self.tap(self.REGISTER_BUTTON, timeout=self.timings.probe)

    async def wait_for_loading_to_complete(self) -> bool:
        """
        Wait for the login spinner to appear and disappear.

        Returns:
            False if the spinner was still visible at the timeout
        """
        if not await self.is_present(self.LOADING_INDICATOR, timeout=self.timings.probe):
            logger.debug("No loading indicator shown")
            return True
        return await self.resolver.wait_gone(self.LOADING_INDICATOR, timeout=self.timings.loading)

    async def get_validation_error(self) -> Optional[str]:
        """Text of the first visible validation/login error, None if there is none."""
        for element in self.VALIDATION_ERRORS:
            text = await self.get_text(element, timeout=self.timings.probe)
            if text is not None:
                return text
        return None

    @allure.step("Login (email={email})")
    async def login(
        self,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ) -> None:
        """
        Full login flow: wait for the form, fill it, submit, wait for loading.

        Args:
            email: Defaults to TEST_EMAIL env var
            password: Defaults to TEST_PASSWORD env var
        """
        if email is None:
            email = os.getenv("TEST_EMAIL", "customer@mealmommy.com")
        if password is None:
            password = os.getenv("TEST_PASSWORD", "password123")

        await self.wait_for_page_load()
        await self.enter_email(email)
        await self.enter_password(password)
        await self.tap_login_button()
        await self.wait_for_loading_to_complete()
        await self.pause(self.timings.navigation_settle)
        logger.info("Login process completed")

    async def is_login_successful(self) -> bool:
        """Login succeeded when the login button is gone."""
        return not await self.is_present(self.LOGIN_BUTTON, timeout=self.timings.probe)

    async def verify_form_displayed(self) -> bool:
        results = await self.check_elements(self.EMAIL_FIELD, self.PASSWORD_FIELD, self.LOGIN_BUTTON)
        return all(results.values())
