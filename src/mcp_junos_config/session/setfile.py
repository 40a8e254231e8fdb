"""Offline session writing set-lines to a file instead of a device."""
import asyncio
import logging
from pathlib import Path

from ..codec.lines import EMPTY_OUTPUT
from .base import JunosSession, SessionConfig, SessionError

logger = logging.getLogger(__name__)


class SetFileSession(JunosSession):
    """Append every applied line to `set_file`.

    Nothing can be read back, so the engine skips existence checks and
    read-back for this session.
    """

    writes_only = True

    def __init__(self, device_id: str, config: SessionConfig):
        super().__init__(device_id, config)
        if not config.set_file:
            raise SessionError(f"{device_id}: set_file is required for a setfile session")
        self.path = Path(config.set_file).expanduser()

    async def connect(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._connected = True
        logger.info(f"{self.device_id}: writing set-lines to {self.path}")

    async def disconnect(self) -> None:
        self._connected = False

    async def command(self, cmd: str) -> str:
        logger.debug(f"{self.device_id}: command {cmd!r} not run (setfile session)")
        return EMPTY_OUTPUT

    async def config_set(self, lines: list[str]) -> None:
        await self.ensure_connected()
        loop = asyncio.get_event_loop()
        await loop.run_in_executor(None, self._append, list(lines))
        logger.debug(f"{self.device_id}: appended {len(lines)} line(s) to {self.path}")

    def _append(self, lines: list[str]) -> None:
        with open(self.path, "a", encoding="utf-8") as f:
            for line in lines:
                f.write(line + "\n")

    async def lock(self) -> None:
        pass

    async def unlock(self) -> list[str]:
        return []

    async def commit(self, message: str) -> list[str]:
        return []

    async def clear(self) -> None:
        pass
