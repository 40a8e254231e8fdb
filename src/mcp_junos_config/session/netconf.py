"""Junos NETCONF session via ncclient.

Technical details:
- ncclient `manager.connect` with Junos device params (port 830)
- Operational commands through the Junos `<command format="text">` RPC;
  the text sits in `<configuration-output>` or `<output>`
- `load-configuration action="set"` applies set/delete lines
- Candidate lock/unlock, commit with comment, optional commit confirmed
- rpc-errors with severity "warning" are collected, not raised
"""
import asyncio
import functools
import logging
from typing import Any, Callable, Optional

from lxml import etree
from ncclient import manager
from ncclient.operations import RaiseMode
from ncclient.operations.rpc import RPCError

from ..codec.lines import EMPTY_OUTPUT
from ..utils.connection import with_retry
from ..utils.logging_config import timed
from .base import CommitError, ConfigLoadError, JunosSession, SessionConfig, SessionError

logger = logging.getLogger(__name__)

ERROR_SEVERITY = "error"

OUTPUT_XPATH = "//*[local-name()='configuration-output' or local-name()='output']"


def reply_text(reply: Any) -> str:
    """Extract the text payload of a `<command format="text">` reply."""
    raw = getattr(reply, "xml", None) or str(reply)
    if isinstance(raw, str):
        raw = raw.encode("utf-8")
    try:
        root = etree.fromstring(raw)
    except etree.XMLSyntaxError:
        # Some transports hand back the bare text
        return raw.decode("utf-8", errors="ignore")
    nodes = root.xpath(OUTPUT_XPATH)
    if not nodes:
        return ""
    return "".join(node.text or "" for node in nodes)


def reply_warnings(reply: Any) -> list[str]:
    """Messages of non-error rpc-errors carried by a reply."""
    warnings = []
    for error in getattr(reply, "errors", None) or []:
        if getattr(error, "severity", ERROR_SEVERITY) != ERROR_SEVERITY:
            warnings.append((error.message or str(error)).strip())
    return warnings


def _error_messages(error: RPCError) -> list[str]:
    errors = getattr(error, "errors", None) or [error]
    return [(e.message or str(e)).strip() for e in errors]


class NetconfSession(JunosSession):
    """Junos configuration session over NETCONF."""

    def __init__(self, device_id: str, config: SessionConfig):
        super().__init__(device_id, config)
        self._conn: Optional[Any] = None

    async def _run(self, func: Callable, *args, **kwargs) -> Any:
        if self._conn is None:
            raise SessionError(f"{self.device_id}: not connected")
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))

    async def connect(self) -> None:
        """Open the NETCONF session, retrying network failures `retries` times."""
        await with_retry(max_attempts=self.config.retries, min_wait=2)(self._open)()

    @timed("netconf_connect")
    async def _open(self) -> None:
        logger.info(f"Connecting to {self.device_id} at {self.host}:{self.config.port} (netconf)")
        loop = asyncio.get_event_loop()

        def _connect():
            return manager.connect(
                host=self.config.host,
                port=self.config.port,
                username=self.config.username,
                password=self.config.get_password() or None,
                key_filename=self.config.key_file,
                timeout=self.config.timeout,
                device_params={"name": "junos"},
                hostkey_verify=False,
                allow_agent=False,
                look_for_keys=False,
            )

        self._conn = await loop.run_in_executor(None, _connect)
        # Warnings are read from replies instead of raised
        self._conn.raise_mode = RaiseMode.ERRORS
        self._connected = True
        logger.info(f"Connected to {self.device_id} via NETCONF")

    async def disconnect(self) -> None:
        if self._conn is not None:
            conn, self._conn = self._conn, None
            loop = asyncio.get_event_loop()
            try:
                await loop.run_in_executor(None, conn.close_session)
            except (RPCError, OSError) as e:
                logger.warning(f"Error closing NETCONF session to {self.device_id}: {e}")
            if self.config.sleep_closed:
                await asyncio.sleep(self.config.sleep_closed)
        self._connected = False
        logger.info(f"Disconnected from {self.device_id}")

    @timed("netconf_command")
    async def command(self, cmd: str) -> str:
        await self.ensure_connected()
        logger.debug(f"{self.device_id}: command {cmd!r}")
        try:
            reply = await self._run(self._conn.command, command=cmd, format="text")
        except RPCError as e:
            raise SessionError(f"executing netconf command: {'; '.join(_error_messages(e))}")
        text = reply_text(reply)
        if not text.strip():
            return EMPTY_OUTPUT
        return text

    @timed("netconf_config_set")
    async def config_set(self, lines: list[str]) -> None:
        await self.ensure_connected()
        logger.debug(f"{self.device_id}: loading {len(lines)} line(s)")
        try:
            reply = await self._run(self._conn.load_configuration, action="set", config=lines)
        except RPCError as e:
            messages = _error_messages(e)
            raise ConfigLoadError("; ".join(messages), lines=lines)
        for warning in reply_warnings(reply):
            logger.warning(f"{self.device_id}: load-configuration: {warning}")

    async def lock(self) -> None:
        await self.ensure_connected()

        async def try_lock() -> bool:
            try:
                await self._run(self._conn.lock, target="candidate")
            except RPCError as e:
                logger.debug(f"{self.device_id}: lock refused: {e}")
                return False
            return True

        await self._lock_with_retries(try_lock)

    async def unlock(self) -> list[str]:
        if self._conn is None:
            return []
        try:
            reply = await self._run(self._conn.unlock, target="candidate")
        except RPCError as e:
            return [f"config unlock: {m}" for m in _error_messages(e)]
        return reply_warnings(reply)

    @timed("netconf_commit")
    async def commit(self, message: str) -> list[str]:
        await self.ensure_connected()
        if self.config.commit_confirmed > 0:
            return await self._commit_confirmed(message)
        try:
            reply = await self._run(self._conn.commit, comment=message)
        except RPCError as e:
            raise CommitError("; ".join(_error_messages(e)))
        return reply_warnings(reply)

    async def _commit_confirmed(self, message: str) -> list[str]:
        minutes = self.config.commit_confirmed
        try:
            reply = await self._run(
                self._conn.commit, confirmed=True, timeout=str(minutes), comment=message
            )
        except RPCError as e:
            raise CommitError(
                f"executing netconf commit (confirmed {minutes}): {'; '.join(_error_messages(e))}"
            )
        warnings = reply_warnings(reply)

        wait = minutes * 60 * self.config.commit_confirmed_wait_percent / 100
        logger.info(f"{self.device_id}: commit confirmed, confirming in {wait:.0f}s")
        await asyncio.sleep(wait)

        try:
            reply = await self._run(self._conn.commit, check=True)
        except RPCError as e:
            raise CommitError(
                f"executing netconf commit check (to confirm): {'; '.join(_error_messages(e))}",
                warnings=warnings,
            )
        return warnings + reply_warnings(reply)

    async def clear(self) -> None:
        if self._conn is None:
            return
        try:
            await self._run(self._conn.discard_changes)
        except RPCError as e:
            raise SessionError(f"discarding candidate changes: {e}")
