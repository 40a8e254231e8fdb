"""Junos session over an interactive SSH shell.

For devices where NETCONF is not enabled. Technical details:
- paramiko `invoke_shell()`; the Junos prompt ends in `>` (operational)
  or `#` (configuration mode)
- `set cli screen-length 0` disables pagination, `---(more)---` is
  still answered just in case
- `configure exclusive` acts as the candidate lock
- Each set/delete line is sent on its own; the device answers rejected
  lines with `error:` / `syntax error` / `unknown command`
"""
import asyncio
import logging
import re
from typing import Optional

import paramiko

from ..codec.lines import EMPTY_OUTPUT, quote
from ..utils.connection import with_retry
from ..utils.logging_config import timed
from .base import CommitError, ConfigLoadError, JunosSession, SessionConfig, SessionError

logger = logging.getLogger(__name__)

PROMPT_PATTERN = re.compile(r"[\w.@-]+[>#]\s*$")
MORE_PATTERN = re.compile(r"---\(more[^)]*\)---")
ANSI_PATTERN = re.compile(r"\x1b\[[0-9;?]*[a-zA-Z]")

ERROR_PATTERNS = [
    re.compile(r"^error:", re.IGNORECASE),
    re.compile(r"syntax error", re.IGNORECASE),
    re.compile(r"unknown command", re.IGNORECASE),
]
WARNING_PATTERN = re.compile(r"^warning:", re.IGNORECASE)
LOCKED_PATTERN = re.compile(r"(configuration database locked|database is locked)", re.IGNORECASE)
COMMIT_OK = "commit complete"


def find_errors(output: str) -> list[str]:
    """Lines of `output` reporting a rejected command."""
    errors = []
    for line in output.splitlines():
        line = line.strip()
        if line and any(pattern.search(line) for pattern in ERROR_PATTERNS):
            errors.append(line)
    return errors


def find_warnings(output: str) -> list[str]:
    return [line.strip() for line in output.splitlines() if WARNING_PATTERN.search(line.strip())]


def strip_echo(output: str, command: str) -> str:
    """Remove the echoed command and the trailing prompt from `output`."""
    lines = output.replace("\r", "").split("\n")
    if lines and command in lines[0]:
        lines = lines[1:]
    if lines and PROMPT_PATTERN.search(lines[-1]):
        lines = lines[:-1]
    # Configuration mode prints a `[edit]` banner before the prompt
    while lines and lines[-1].strip() in ("", "[edit]"):
        lines = lines[:-1]
    return "\n".join(lines).strip()


class JunosShell:
    """Low-level interactive SSH shell."""

    def __init__(self, host: str, port: int, username: str, password: str,
                 key_file: Optional[str] = None, timeout: float = 30):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.key_file = key_file
        self.timeout = timeout
        self._client: Optional[paramiko.SSHClient] = None
        self._shell: Optional[paramiko.Channel] = None

    async def connect(self) -> None:
        loop = asyncio.get_event_loop()

        def _connect():
            client = paramiko.SSHClient()
            client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
            client.connect(
                self.host,
                port=self.port,
                username=self.username,
                password=self.password or None,
                key_filename=self.key_file,
                timeout=self.timeout,
                allow_agent=False,
                look_for_keys=False,
            )
            shell = client.invoke_shell(width=512)
            shell.settimeout(self.timeout)
            return client, shell

        self._client, self._shell = await loop.run_in_executor(None, _connect)
        await self.read_until_prompt(timeout=10)

    async def close(self) -> None:
        for resource in (self._shell, self._client):
            if resource is not None:
                try:
                    resource.close()
                except (OSError, paramiko.SSHException) as e:
                    logger.debug(f"Error closing SSH resource: {e}")
        self._shell = None
        self._client = None

    async def _read_available(self) -> str:
        if not self._shell:
            raise ConnectionError("Not connected")
        loop = asyncio.get_event_loop()

        def _recv() -> str:
            if not self._shell.recv_ready():
                return ""
            data = self._shell.recv(65535)
            return ANSI_PATTERN.sub("", data.decode("utf-8", errors="ignore"))

        return await loop.run_in_executor(None, _recv)

    async def read_until_prompt(self, timeout: float = 30) -> str:
        output = ""
        loop = asyncio.get_event_loop()
        deadline = loop.time() + timeout

        while loop.time() < deadline:
            chunk = await self._read_available()
            if not chunk:
                await asyncio.sleep(0.2)
                continue
            output += chunk
            if MORE_PATTERN.search(output):
                output = MORE_PATTERN.sub("", output)
                await self.send_raw(" ")
                continue
            if PROMPT_PATTERN.search(output):
                break

        return output

    async def send_raw(self, data: str) -> None:
        if not self._shell:
            raise ConnectionError("Not connected")
        loop = asyncio.get_event_loop()
        await loop.run_in_executor(None, self._shell.send, data)

    async def send_command(self, command: str, timeout: float = 30) -> str:
        await self.send_raw(f"{command}\n")
        output = await self.read_until_prompt(timeout=timeout)
        return strip_echo(output, command)


class SSHCliSession(JunosSession):
    """Junos configuration session over the CLI."""

    def __init__(self, device_id: str, config: SessionConfig):
        super().__init__(device_id, config)
        self._shell: Optional[JunosShell] = None
        self._in_configuration = False

    def _require_shell(self) -> JunosShell:
        if self._shell is None:
            raise SessionError(f"{self.device_id}: not connected")
        return self._shell

    async def connect(self) -> None:
        await with_retry(max_attempts=self.config.retries, min_wait=2)(self._open)()

    @timed("ssh_connect")
    async def _open(self) -> None:
        logger.info(f"Connecting to {self.device_id} at {self.host}:{self.config.port} (ssh)")
        self._shell = JunosShell(
            self.config.host,
            self.config.port,
            self.config.username,
            self.config.get_password(),
            key_file=self.config.key_file,
            timeout=self.config.timeout,
        )
        await self._shell.connect()
        await self._shell.send_command("set cli screen-length 0")
        self._connected = True
        logger.info(f"Connected to {self.device_id} via CLI")

    async def disconnect(self) -> None:
        if self._shell:
            await self._shell.close()
            self._shell = None
            if self.config.sleep_closed:
                await asyncio.sleep(self.config.sleep_closed)
        self._connected = False
        self._in_configuration = False
        logger.info(f"Disconnected from {self.device_id}")

    @timed("ssh_command")
    async def command(self, cmd: str) -> str:
        await self.ensure_connected()
        # Operational commands need `run` while in configuration mode
        prefix = "run " if self._in_configuration else ""
        output = await self._require_shell().send_command(prefix + cmd, timeout=self.config.timeout)
        errors = find_errors(output)
        if errors:
            raise SessionError(f"executing command {cmd!r}: {'; '.join(errors)}")
        if not output.strip():
            return EMPTY_OUTPUT
        return output

    @timed("ssh_config_set")
    async def config_set(self, lines: list[str]) -> None:
        await self.ensure_connected()
        shell = self._require_shell()
        messages = []
        for line in lines:
            output = await shell.send_command(line, timeout=self.config.timeout)
            for error in find_errors(output):
                messages.append(f"{line}: {error}")
            for warning in find_warnings(output):
                logger.warning(f"{self.device_id}: {line}: {warning}")
        if messages:
            raise ConfigLoadError("; ".join(messages), lines=lines)

    async def lock(self) -> None:
        await self.ensure_connected()
        shell = self._require_shell()

        async def try_lock() -> bool:
            output = await shell.send_command("configure exclusive", timeout=self.config.timeout)
            if LOCKED_PATTERN.search(output) or find_errors(output):
                logger.debug(f"{self.device_id}: configure exclusive refused: {output}")
                if PROMPT_PATTERN.search(output) and "#" in output:
                    await shell.send_command("exit configuration-mode")
                return False
            self._in_configuration = True
            return True

        await self._lock_with_retries(try_lock)

    async def unlock(self) -> list[str]:
        if self._shell is None or not self._in_configuration:
            return []
        output = await self._shell.send_command("exit configuration-mode", timeout=self.config.timeout)
        self._in_configuration = False
        return find_errors(output)

    @timed("ssh_commit")
    async def commit(self, message: str) -> list[str]:
        shell = self._require_shell()
        command = f"commit comment {quote(message)}"
        if self.config.commit_confirmed > 0:
            command = f"commit confirmed {self.config.commit_confirmed} comment {quote(message)}"
        output = await shell.send_command(command, timeout=max(self.config.timeout, 120))
        warnings = find_warnings(output)
        errors = find_errors(output)
        if errors or COMMIT_OK not in output:
            raise CommitError("; ".join(errors) or f"commit failed: {output}", warnings=warnings)

        if self.config.commit_confirmed > 0:
            wait = self.config.commit_confirmed * 60 * self.config.commit_confirmed_wait_percent / 100
            logger.info(f"{self.device_id}: commit confirmed, confirming in {wait:.0f}s")
            await asyncio.sleep(wait)
            output = await shell.send_command("commit check", timeout=max(self.config.timeout, 120))
            errors = find_errors(output)
            if errors:
                raise CommitError(
                    f"commit check (to confirm): {'; '.join(errors)}", warnings=warnings
                )
            warnings.extend(find_warnings(output))
        return warnings

    async def clear(self) -> None:
        if self._shell is None or not self._in_configuration:
            return
        output = await self._shell.send_command("rollback 0", timeout=self.config.timeout)
        errors = find_errors(output)
        if errors:
            raise SessionError(f"rollback 0: {'; '.join(errors)}")
