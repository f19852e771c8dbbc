"""
================================================================================
Root Pytest Configuration
================================================================================

This module provides the root pytest configuration for the entire test suite.
It registers common markers and provides shared fixtures.

================================================================================
"""

import pytest


def pytest_configure(config):
    """Configure pytest with project-wide custom markers."""

    # Priority markers
    config.addinivalue_line(
        "markers", "P0: Critical priority tests - must pass for deployment"
    )
    config.addinivalue_line(
        "markers", "P1: High priority tests - important functionality"
    )
    config.addinivalue_line(
        "markers", "P2: Medium priority tests - edge cases and minor features"
    )

    # Test type markers
    config.addinivalue_line(
        "markers", "smoke: Quick verification tests"
    )
    config.addinivalue_line(
        "markers", "regression: Full regression test suite"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests simulating user flows"
    )

    # Domain markers
    config.addinivalue_line(
        "markers", "unit: Offline tests against the in-memory fake driver"
    )
    config.addinivalue_line(
        "markers", "mobile: Tests running on a real device session"
    )
    config.addinivalue_line(
        "markers", "live: Tests requiring BrowserStack credentials"
    )

    # Platform markers
    config.addinivalue_line(
        "markers", "android: Android-only tests"
    )
    config.addinivalue_line(
        "markers", "ios: iOS-only tests"
    )

    # Role markers
    config.addinivalue_line(
        "markers", "customer: Tests covering the customer app"
    )
    config.addinivalue_line(
        "markers", "driver: Tests covering the delivery driver app"
    )
    config.addinivalue_line(
        "markers", "vendor: Tests covering the vendor app"
    )


def pytest_collection_modifyitems(config, items):
    """
    Modify collected test items.

    Adds suite markers based on where a test lives.
    """
    for item in items:
        # Auto-add 'unit' marker to tests in the unit directory
        if "unit" in item.path.parts:
            item.add_marker(pytest.mark.unit)

        # Auto-add 'mobile' marker to tests in mobile_testing directory
        if "mobile_testing" in item.path.parts:
            item.add_marker(pytest.mark.mobile)


def pytest_report_header(config):
    """Add custom header to pytest output."""
    return [
        "",
        "=" * 60,
        "MealMommy Mobile Automation Framework",
        "=" * 60,
        "",
    ]
