"""
================================================================================
Session Manager
================================================================================

Remote automation session lifecycle for BrowserStack App Automate.

Features:
    - Capability profile selection by (platform, index)
    - Connection retries with a total time ceiling
    - Idempotent, best-effort teardown
    - Session status reporting and screenshot capture that never fail a test

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import asyncio
import json
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Optional, Union

from appium import webdriver
from appium.options.common import AppiumOptions
from loguru import logger

from .config_loader import CapabilityProfile, ConfigLoader, ProfileTable


class RemoteConnectionError(Exception):
    """Raised when the remote endpoint stays unreachable after all retries."""
    pass


class SessionStatus(str, Enum):
    """Test outcome reported to the device cloud."""
    PASSED = "passed"
    FAILED = "failed"


@dataclass
class ConnectionRetryConfig:
    """
    Configuration for establishing the remote connection.

    Attributes:
        retry_count: Maximum number of connection attempts
        timeout: Total ceiling in seconds across all attempts
        backoff: Pause in seconds between attempts
    """
    retry_count: int = 3
    timeout: float = 120.0
    backoff: float = 2.0

    @classmethod
    def from_config(cls, config: ConfigLoader) -> "ConnectionRetryConfig":
        return cls(
            retry_count=config.get("connection.retry_count", 3),
            timeout=config.get("connection.retry_timeout", 120.0),
            backoff=config.get("connection.retry_backoff", 2.0),
        )


@dataclass
class MobileSession:
    """Handle to one live remote automation session."""
    session_id: str
    profile: CapabilityProfile
    driver: Any = field(repr=False)
    created_at: datetime = field(default_factory=datetime.now)
    closed: bool = False
    # Capabilities sent when the session was opened
    capabilities: Dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def is_open(self) -> bool:
        return not self.closed


DriverFactory = Callable[[str, AppiumOptions], Any]


def _remote_driver(command_executor: str, options: AppiumOptions) -> webdriver.Remote:
    return webdriver.Remote(command_executor=command_executor, options=options)


def _quit_quietly(driver: Any) -> None:
    try:
        driver.quit()
        logger.warning(f"Quit session {getattr(driver, 'session_id', '?')} opened by an abandoned attempt")
    except Exception as e:
        logger.error(f"Error quitting session from abandoned attempt: {e}")


class _ConnectAttempt:
    """
    One driver creation running in a worker thread.

    The thread keeps running after the caller stops waiting. A driver that
    arrives after ``abandon()`` is quit in the worker thread; one that arrived
    just before is returned by ``abandon()`` for the caller to quit.
    """

    def __init__(self, factory: DriverFactory):
        self._factory = factory
        self._lock = threading.Lock()
        self._abandoned = False
        self._driver: Any = None

    def run(self, command_executor: str, options: AppiumOptions) -> Any:
        driver = self._factory(command_executor, options)
        with self._lock:
            if not self._abandoned:
                self._driver = driver
                return driver
        _quit_quietly(driver)
        return None

    def abandon(self) -> Any:
        with self._lock:
            self._abandoned = True
            return self._driver


class SessionManager:
    """
    Creates and tears down one remote automation session at a time.

    Each manager owns at most one open session. Suites running in parallel
    use independent managers.

    Usage:
        async with SessionManager() as manager:
            session = await manager.create_session("android", 0)
            ...
            await manager.report_status(session, "passed", "Login works")
    """

    def __init__(
        self,
        profiles: Optional[ProfileTable] = None,
        config: Optional[ConfigLoader] = None,
        retry: Optional[ConnectionRetryConfig] = None,
        driver_factory: Optional[DriverFactory] = None,
    ):
        """
        Initialize session manager.

        Args:
            profiles: Capability profile table (loaded from config if None)
            config: Configuration loader for endpoint and credentials
            retry: Connection retry settings (loaded from config if None)
            driver_factory: Callable creating the remote driver; defaults
                to ``appium.webdriver.Remote``
        """
        self.config = config or ConfigLoader()
        self.profiles = profiles or ProfileTable.from_config(self.config)
        self.retry = retry or ConnectionRetryConfig.from_config(self.config)
        self._driver_factory = driver_factory or _remote_driver
        self._session: Optional[MobileSession] = None

    async def __aenter__(self) -> "SessionManager":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close_session()

    @property
    def current_session(self) -> Optional[MobileSession]:
        """The open session owned by this manager, if any."""
        if self._session is not None and self._session.is_open:
            return self._session
        return None

    @property
    def command_executor(self) -> str:
        server = self.config.get("browserstack.server", "hub-cloud.browserstack.com")
        port = self.config.get("browserstack.port", 443)
        path = self.config.get("browserstack.path", "/wd/hub")
        return f"https://{server}:{port}{path}"

    def build_options(self, profile: CapabilityProfile) -> AppiumOptions:
        """Build Appium options for a profile, including provider credentials."""
        build_name = self.config.get("browserstack.build_name", "") or (
            f"MealMommy Build {int(time.time() * 1000)}"
        )
        capabilities = profile.to_capabilities(
            project_name=self.config.get("browserstack.project_name", "MealMommy Automation"),
            build_name=build_name,
            username=self.config.get("browserstack.username"),
            access_key=self.config.get("browserstack.access_key"),
        )
        options = AppiumOptions()
        options.load_capabilities(capabilities)
        return options

    async def create_session(
        self,
        platform: str = "android",
        profile_index: int = 0,
    ) -> MobileSession:
        """
        Open a remote session for the profile at (platform, profile_index).

        Args:
            platform: Logical platform name ("android", "ios")
            profile_index: Position of the device profile for that platform

        Returns:
            New MobileSession

        Raises:
            ConfigurationError: Unknown platform or index out of range
            RemoteConnectionError: Endpoint unreachable after all retries
        """
        profile = self.profiles.lookup(platform, profile_index)

        if self.current_session is not None:
            logger.warning(
                f"Session {self._session.session_id} still open, closing it before creating a new one"
            )
            await self.close_session()

        options = self.build_options(profile)
        driver = await self._connect(options, profile)

        try:
            await asyncio.to_thread(driver.implicitly_wait, 0)
        except Exception as e:
            logger.debug(f"Could not reset implicit wait: {e}")

        self._session = MobileSession(
            session_id=str(getattr(driver, "session_id", "") or ""),
            profile=profile,
            driver=driver,
            capabilities=options.to_capabilities(),
        )
        logger.info(
            f"Session {self._session.session_id} created for {profile.device_name} "
            f"({profile.platform_name} {profile.platform_version})"
        )
        return self._session

    async def _connect(self, options: AppiumOptions, profile: CapabilityProfile) -> Any:
        """Connect with retries, bounded by the total retry timeout."""
        deadline = time.monotonic() + self.retry.timeout
        attempts = max(1, self.retry.retry_count)
        last_error: Optional[BaseException] = None

        for attempt in range(1, attempts + 1):
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break

            pending = _ConnectAttempt(self._driver_factory)
            try:
                logger.debug(
                    f"Connecting to {self.command_executor} for {profile.device_name} "
                    f"(attempt {attempt}/{attempts})"
                )
                return await asyncio.wait_for(
                    asyncio.to_thread(pending.run, self.command_executor, options),
                    timeout=remaining,
                )
            except asyncio.TimeoutError as e:
                last_error = e
                logger.warning(f"Attempt {attempt}/{attempts} timed out after {remaining:.1f}s")
                late = pending.abandon()
                if late is not None:
                    await asyncio.to_thread(_quit_quietly, late)
                break
            except Exception as e:
                last_error = e
                logger.warning(f"Attempt {attempt}/{attempts} failed: {e}")

            if attempt < attempts:
                pause = min(self.retry.backoff, max(0.0, deadline - time.monotonic()))
                if pause > 0:
                    await asyncio.sleep(pause)

        error_msg = (
            f"Could not open session for {profile.device_name} on {self.command_executor} "
            f"after {attempts} attempt(s): {last_error}"
        )
        logger.error(error_msg)
        raise RemoteConnectionError(error_msg) from last_error

    async def close_session(self, session: Optional[MobileSession] = None) -> None:
        """
        Release the remote connection.

        Safe with no open session and for an already closed session.
        Failures are logged and swallowed.
        """
        session = session or self._session
        if session is None or session.closed:
            return

        session.closed = True
        try:
            await asyncio.to_thread(session.driver.quit)
            logger.info(f"Session {session.session_id} ended")
        except Exception as e:
            logger.error(f"Error ending session {session.session_id}: {e}")
        finally:
            if self._session is session:
                self._session = None

    async def _execute_browserstack(
        self,
        session: MobileSession,
        action: str,
        arguments: Dict[str, Any],
    ) -> None:
        script = "browserstack_executor: " + json.dumps({"action": action, "arguments": arguments})
        await asyncio.to_thread(session.driver.execute_script, script)

    async def report_status(
        self,
        session: Optional[MobileSession],
        status: Union[SessionStatus, str],
        reason: str = "",
    ) -> None:
        """
        Mark the session as passed or failed on the provider dashboard.

        No-op for an absent or closed session. Send failures are logged only.

        Raises:
            ValueError: status is not "passed" or "failed"
        """
        status = SessionStatus(status)
        if session is None or session.closed:
            logger.debug(f"No open session, skipping status report: {status.value}")
            return

        try:
            await self._execute_browserstack(
                session,
                "setSessionStatus",
                {"status": status.value, "reason": reason},
            )
            logger.info(f"Session {session.session_id} marked as {status.value}: {reason}")
        except Exception as e:
            logger.error(f"Failed to mark session status: {e}")

    async def capture_artifact(
        self,
        session: Optional[MobileSession],
        label: str,
    ) -> Optional[bytes]:
        """
        Take a screenshot of the device.

        Returns:
            PNG bytes, or None when there is no open session or capture fails
        """
        if session is None or session.closed:
            return None

        try:
            data = await asyncio.to_thread(session.driver.get_screenshot_as_png)
            logger.debug(f"Screenshot taken: {label}")
            return data
        except Exception as e:
            logger.error(f"Failed to take screenshot '{label}': {e}")
            return None

    async def set_network_profile(
        self,
        session: Optional[MobileSession],
        profile: str,
    ) -> bool:
        """
        Simulate a network condition (e.g. "2g-gprs-lossy", "no-network").

        Returns:
            True if the provider accepted the request
        """
        if session is None or session.closed:
            return False

        try:
            await self._execute_browserstack(session, "setNetworkProfile", {"profile": profile})
            logger.info(f"Network condition set to: {profile}")
            return True
        except Exception as e:
            logger.error(f"Failed to set network condition: {e}")
            return False


__all__ = [
    "SessionManager",
    "MobileSession",
    "SessionStatus",
    "ConnectionRetryConfig",
    "RemoteConnectionError",
]
