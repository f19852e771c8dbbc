"""
================================================================================
App Launch Smoke Test (Live / BrowserStack)
================================================================================

Launches the MealMommy app on a real cloud device and checks that the login
screen renders. Skipped unless BrowserStack credentials are configured.

================================================================================
"""

import allure
import pytest

from autotest_tools.report_tools.allure_utils import attach_text
from testsuites.mobile_testing.pages.login_page import LoginPage


@allure.epic("Mobile Testing")
@allure.feature("App Launch")
class TestAppLaunch:
    """Live smoke checks."""

    @allure.story("Cold Start")
    @allure.title("App launches and shows the login screen")
    @allure.severity(allure.severity_level.BLOCKER)
    @pytest.mark.P0
    @pytest.mark.smoke
    @pytest.mark.live
    @pytest.mark.asyncio
    async def test_login_page_loads(self, login_page: LoginPage):
        """Verify the app renders and the login form is usable."""
        with allure.step("Wait for login page"):
            await login_page.wait_for_page_load()

        with allure.step("Verify login form"):
            assert await login_page.verify_form_displayed(), "Login form is incomplete"

        await login_page.screenshot("login_page")
        report = login_page.get_locator_health_report()
        attach_text(report, name="Locator Health")
