"""
Test suites package.

Keeps `testsuites` importable to support:
  - IDE navigation
  - programmatic runners (e.g., `run_tests.py`)
  - CI/CD module imports

Suites:
  - unit: offline tests against an in-memory fake Appium driver
  - mobile_testing: framework, page objects and live BrowserStack tests
"""
