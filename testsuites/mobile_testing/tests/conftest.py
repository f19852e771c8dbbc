"""
================================================================================
Mobile Testing Pytest Configuration
================================================================================

This module configures pytest for live mobile tests on BrowserStack, providing
fixtures for session management, page objects, and test setup/teardown.

Key Features:
- One remote session per test, always released
- Page Object fixtures sharing one resolver per session
- Screenshot capture on failure
- Pass/fail status reported to the BrowserStack dashboard

Environment:
- BROWSERSTACK_USERNAME / BROWSERSTACK_ACCESS_KEY: required, tests skip without them
- MOBILE_PLATFORM: "android" (default) or "ios"
- MOBILE_DEVICE_INDEX: device profile index (default 0)

================================================================================
"""

import os
from typing import AsyncGenerator

import pytest
from loguru import logger

from autotest_tools.report_tools.allure_utils import attach_capabilities, attach_png
from testsuites.mobile_testing.framework.config_loader import ConfigLoader
from testsuites.mobile_testing.framework.element_resolver import ElementResolver
from testsuites.mobile_testing.framework.session_manager import MobileSession, SessionManager
from testsuites.mobile_testing.pages.customer_home_page import CustomerHomePage
from testsuites.mobile_testing.pages.driver_home_page import DriverHomePage
from testsuites.mobile_testing.pages.login_page import LoginPage


# ================================================================================
# Session Fixtures
# ================================================================================

@pytest.fixture
async def session_manager() -> AsyncGenerator[SessionManager, None]:
    """
    Function-scoped session manager.

    Each test owns its manager, so parallel workers never share a session.
    """
    async with SessionManager() as manager:
        yield manager


@pytest.fixture
async def mobile_session(
    request,
    session_manager: SessionManager,
) -> AsyncGenerator[MobileSession, None]:
    """
    Opens a BrowserStack session for the selected device profile.

    Skips when no credentials are configured. On teardown a failed test gets a
    screenshot attached, and the outcome is reported to the dashboard before
    the session is closed.
    """
    config = ConfigLoader()
    if not config.get("browserstack.username") or not config.get("browserstack.access_key"):
        pytest.skip("BrowserStack credentials not configured")

    platform = os.getenv("MOBILE_PLATFORM", "android")
    index = int(os.getenv("MOBILE_DEVICE_INDEX", "0"))

    session = await session_manager.create_session(platform, index)
    attach_capabilities(session.capabilities, name="Session Capabilities")

    yield session

    report = getattr(request.node, "rep_call", None)
    failed = report is None or report.failed

    if failed:
        screenshot = await session_manager.capture_artifact(session, "failure")
        if screenshot:
            attach_png(screenshot, name="failure_screenshot")

    reason = f"{request.node.name} failed" if failed else f"{request.node.name} passed"
    await session_manager.report_status(session, "failed" if failed else "passed", reason)
    await session_manager.close_session(session)


@pytest.fixture
def resolver(mobile_session: MobileSession) -> ElementResolver:
    """Resolver shared by all page objects of one test."""
    config = ConfigLoader()
    return ElementResolver(
        mobile_session,
        default_timeout=config.get("timeouts.element_ms", 10000),
        poll_interval=config.get("timeouts.poll_interval_ms", 250),
    )


# ================================================================================
# Page Object Fixtures
# ================================================================================

@pytest.fixture
def login_page(mobile_session, resolver, session_manager) -> LoginPage:
    return LoginPage(mobile_session, resolver=resolver, manager=session_manager)


@pytest.fixture
def customer_home_page(mobile_session, resolver, session_manager) -> CustomerHomePage:
    return CustomerHomePage(mobile_session, resolver=resolver, manager=session_manager)


@pytest.fixture
def driver_home_page(mobile_session, resolver, session_manager) -> DriverHomePage:
    return DriverHomePage(mobile_session, resolver=resolver, manager=session_manager)


# ================================================================================
# Test Lifecycle Hooks
# ================================================================================

@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """
    Store each phase's report on the item.

    Fixture teardown reads ``rep_call`` to decide between "passed" and
    "failed" before the session is closed.
    """
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)

    if report.when == "call" and report.failed:
        logger.warning(f"{item.name} failed, capturing device state in teardown")
