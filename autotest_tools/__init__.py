"""
================================================================================
Autotest Tools
================================================================================

Support utilities for the mobile test suites.

Modules:
    - common: Logging setup shared by the runner and the suites
    - report_tools: Allure attachments and result summaries

Example:
    from autotest_tools.common import init_logger
    from autotest_tools.report_tools import attach_png

    init_logger(level="DEBUG")

================================================================================
"""

__version__ = "1.0.0"

__all__ = [
    "common",
    "report_tools",
]
