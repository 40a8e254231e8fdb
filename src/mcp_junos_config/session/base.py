"""Base session abstraction for Junos devices."""
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from tenacity import AsyncRetrying

from ..utils.connection import lock_retry_policy

logger = logging.getLogger(__name__)


class SessionError(Exception):
    """Device session failure."""


class ConfigLockError(SessionError):
    """Candidate configuration could not be locked."""


class ConfigLoadError(SessionError):
    """Device rejected one or more configuration lines."""

    def __init__(self, message: str, lines: Optional[list[str]] = None):
        super().__init__(message)
        self.lines = lines or []


class CommitError(SessionError):
    """Commit failed; `warnings` holds what the device reported before failing."""

    def __init__(self, message: str, warnings: Optional[list[str]] = None):
        super().__init__(message)
        self.warnings = warnings or []


@dataclass
class SessionConfig:
    """Connection settings for one Junos device."""
    type: str
    name: str = ""
    host: str = ""
    port: int = 830
    username: str = ""
    password: Optional[str] = None
    password_env: str = "JUNOS_PASSWORD"
    key_file: Optional[str] = None
    timeout: int = 30
    retries: int = 3
    lock_attempts: int = 10
    lock_wait: float = 2
    commit_confirmed: int = 0  # minutes, 0 = plain commit
    commit_confirmed_wait_percent: int = 90
    set_file: Optional[str] = None
    sleep_closed: float = 0

    def get_password(self) -> str:
        """Get password from config or environment variable."""
        if self.password:
            return self.password
        return os.environ.get(self.password_env, "")


class JunosSession(ABC):
    """One configuration session with a Junos device.

    Only `command` and `config_set` are needed by the codec; the rest is the
    lock/commit lifecycle wrapped around them by the engine.
    """

    # Session can apply lines but not read configuration back
    writes_only: bool = False

    def __init__(self, device_id: str, config: SessionConfig):
        self.device_id = device_id
        self.config = config
        self._connected = False

    @property
    def host(self) -> str:
        return self.config.host

    @property
    def is_connected(self) -> bool:
        return self._connected

    @abstractmethod
    async def connect(self) -> None:
        """Open the session."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the session."""

    @abstractmethod
    async def command(self, cmd: str) -> str:
        """Run an operational command and return its text output."""

    @abstractmethod
    async def config_set(self, lines: list[str]) -> None:
        """Apply set/delete lines to the candidate configuration.

        Raises:
            ConfigLoadError: With the device's messages if any line is rejected
        """

    @abstractmethod
    async def lock(self) -> None:
        """Lock the candidate configuration.

        Raises:
            ConfigLockError: If the database stays locked by someone else
        """

    @abstractmethod
    async def unlock(self) -> list[str]:
        """Unlock the candidate configuration; returns non-fatal messages."""

    @abstractmethod
    async def commit(self, message: str) -> list[str]:
        """Commit the candidate configuration.

        Returns:
            Warnings reported by the device

        Raises:
            CommitError: If the commit fails
        """

    @abstractmethod
    async def clear(self) -> None:
        """Discard uncommitted candidate changes."""

    async def ensure_connected(self) -> None:
        if not self._connected:
            await self.connect()

    async def _lock_with_retries(self, try_lock) -> None:
        """Call `try_lock()` until it succeeds or attempts run out."""
        retrying = AsyncRetrying(**lock_retry_policy(self.config.lock_attempts, self.config.lock_wait))
        if not await retrying(try_lock):
            raise ConfigLockError(f"{self.device_id}: configuration database locked")
        logger.debug(f"{self.device_id}: candidate configuration locked")

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()
