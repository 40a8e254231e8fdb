"""Tests for device sessions."""
import logging
from types import SimpleNamespace

import pytest

from mcp_junos_config.session import (
    ConfigLockError,
    NetconfSession,
    SessionConfig,
    SessionError,
    SetFileSession,
    SSHCliSession,
    create_session,
)
from mcp_junos_config.session.cli import find_errors, find_warnings, strip_echo
from mcp_junos_config.session.netconf import reply_text, reply_warnings


class TestCreateSession:
    """Tests for the session factory."""

    def test_default_is_netconf(self):
        """Devices without a type use NETCONF on port 830."""
        session = create_session("srx1", {"host": "192.0.2.1", "username": "admin"})
        assert isinstance(session, NetconfSession)
        assert session.config.port == 830
        assert session.host == "192.0.2.1"
        assert not session.is_connected

    def test_ssh_default_port(self):
        """SSH sessions default to port 22."""
        session = create_session("srx1", {"type": "SSH", "host": "192.0.2.1"})
        assert isinstance(session, SSHCliSession)
        assert session.config.type == "ssh"
        assert session.config.port == 22

    def test_ssh_explicit_port(self):
        """An explicit port is kept."""
        session = create_session("srx1", {"type": "ssh", "host": "192.0.2.1", "port": 2222})
        assert session.config.port == 2222

    def test_setfile(self, tmp_path):
        """Set-file sessions need a path."""
        session = create_session("lab", {"type": "setfile", "set_file": str(tmp_path / "a.set")})
        assert isinstance(session, SetFileSession)
        assert session.writes_only
        with pytest.raises(SessionError):
            create_session("lab", {"type": "setfile"})

    def test_unknown_type(self):
        """Unknown session types are rejected."""
        with pytest.raises(ValueError) as exc_info:
            create_session("srx1", {"type": "telnet"})
        assert "Unknown session type: telnet" in str(exc_info.value)


class TestSessionConfig:
    """Tests for SessionConfig."""

    def test_password_from_config(self):
        """An explicit password wins."""
        config = SessionConfig(type="netconf", password="secret")
        assert config.get_password() == "secret"

    def test_password_from_env(self, monkeypatch):
        """Otherwise the password comes from password_env."""
        monkeypatch.setenv("SRX1_PASSWORD", "from-env")
        config = SessionConfig(type="netconf", password_env="SRX1_PASSWORD")
        assert config.get_password() == "from-env"

    def test_password_missing(self, monkeypatch):
        """No password anywhere gives an empty string."""
        monkeypatch.delenv("JUNOS_PASSWORD", raising=False)
        assert SessionConfig(type="netconf").get_password() == ""


class TestLockRetries:
    """Tests for the shared lock retry loop."""

    @pytest.mark.asyncio
    async def test_gives_up(self, tmp_path):
        """A database that stays locked raises ConfigLockError."""
        config = SessionConfig(type="setfile", set_file=str(tmp_path / "a.set"),
                               lock_attempts=3, lock_wait=0)
        session = SetFileSession("lab", config)
        attempts = []

        async def try_lock():
            attempts.append(1)
            return False

        with pytest.raises(ConfigLockError):
            await session._lock_with_retries(try_lock)
        assert len(attempts) == 3

    @pytest.mark.asyncio
    async def test_succeeds_after_retry(self, tmp_path):
        """The lock is taken once the database frees up."""
        config = SessionConfig(type="setfile", set_file=str(tmp_path / "a.set"),
                               lock_attempts=3, lock_wait=0)
        session = SetFileSession("lab", config)
        results = iter([False, True])

        async def try_lock():
            return next(results)

        await session._lock_with_retries(try_lock)

    @pytest.mark.asyncio
    async def test_errors_not_retried(self, tmp_path):
        """Transport errors while locking propagate on the first attempt."""
        config = SessionConfig(type="setfile", set_file=str(tmp_path / "a.set"),
                               lock_attempts=3, lock_wait=0)
        session = SetFileSession("lab", config)
        attempts = []

        async def try_lock():
            attempts.append(1)
            raise SessionError("connection lost")

        with pytest.raises(SessionError):
            await session._lock_with_retries(try_lock)
        assert len(attempts) == 1

    @pytest.mark.asyncio
    async def test_retry_logged(self, tmp_path, caplog):
        """Each wait for the lock is logged."""
        config = SessionConfig(type="setfile", set_file=str(tmp_path / "a.set"),
                               lock_attempts=2, lock_wait=0)
        session = SetFileSession("lab", config)
        results = iter([False, True])

        async def try_lock():
            return next(results)

        with caplog.at_level(logging.INFO, logger="mcp_junos_config.utils.connection"):
            await session._lock_with_retries(try_lock)
        assert "Retrying" in caplog.text


class TestSetFileSession:
    """Tests for the offline set-file session."""

    @pytest.mark.asyncio
    async def test_appends_lines(self, tmp_path):
        """Lines from successive calls are appended in order."""
        path = tmp_path / "configs" / "lab.set"
        async with SetFileSession("lab", SessionConfig(type="setfile", set_file=str(path))) as session:
            await session.config_set(["set snmp location lab"])
            await session.config_set(["delete snmp contact", "set snmp contact noc"])
            assert await session.commit("create resource junos_snmp") == []
            assert await session.unlock() == []
        assert path.read_text() == (
            "set snmp location lab\ndelete snmp contact\nset snmp contact noc\n"
        )

    @pytest.mark.asyncio
    async def test_reads_nothing(self, tmp_path):
        """Commands return the empty marker."""
        session = SetFileSession("lab", SessionConfig(type="setfile", set_file=str(tmp_path / "a.set")))
        assert await session.command("show configuration snmp | display set relative") == "empty"


class TestCliOutput:
    """Tests for SSH CLI output handling."""

    def test_find_errors(self):
        """Rejected lines are reported, other output is not."""
        output = (
            "set snmp location lab\n"
            "                  ^\n"
            "syntax error.\n"
            "error: configuration check-out failed\n"
            "[edit]\n"
        )
        assert find_errors(output) == ["syntax error.", "error: configuration check-out failed"]
        assert find_errors("[edit]\nadmin@srx1# ") == []

    def test_unknown_command(self):
        """'unknown command' counts as an error."""
        assert find_errors("unknown command.") == ["unknown command."]

    def test_find_warnings(self):
        """Warning lines are collected."""
        output = "warning: statement has no effect\ncommit complete\n"
        assert find_warnings(output) == ["warning: statement has no effect"]

    def test_strip_echo(self):
        """Echo, prompt and [edit] banner are removed."""
        output = (
            "show configuration snmp | display set relative\r\n"
            "set location lab\r\n"
            "set contact noc\r\n"
            "\r\n"
            "[edit]\r\n"
            "admin@srx1# "
        )
        assert strip_echo(output, "show configuration snmp | display set relative") == (
            "set location lab\nset contact noc"
        )

    def test_strip_echo_operational_prompt(self):
        """Operational prompts end in '>'."""
        output = "show version\nJunos: 21.4R3\nadmin@srx1> "
        assert strip_echo(output, "show version") == "Junos: 21.4R3"


class TestNetconfReplies:
    """Tests for NETCONF reply parsing."""

    def test_configuration_output(self):
        """Text inside configuration-output is returned."""
        reply = SimpleNamespace(xml=(
            '<rpc-reply xmlns="urn:ietf:params:xml:ns:netconf:base:1.0">'
            "<configuration-output>\nset location lab\n</configuration-output>"
            "</rpc-reply>"
        ))
        assert reply_text(reply) == "\nset location lab\n"

    def test_output(self):
        """Operational commands answer in <output>."""
        reply = SimpleNamespace(xml="<rpc-reply><output>Junos: 21.4R3</output></rpc-reply>")
        assert reply_text(reply) == "Junos: 21.4R3"

    def test_no_output(self):
        """A reply without text gives an empty string."""
        assert reply_text(SimpleNamespace(xml="<rpc-reply><ok/></rpc-reply>")) == ""

    def test_warnings(self):
        """Only non-error rpc-errors are warnings."""
        reply = SimpleNamespace(errors=[
            SimpleNamespace(severity="warning", message=" statement not found "),
            SimpleNamespace(severity="error", message="syntax error"),
        ])
        assert reply_warnings(reply) == ["statement not found"]
