"""Tests for device inventory management."""
import os
import tempfile

import pytest

from mcp_junos_config.config.inventory import DeviceInventory
from mcp_junos_config.engine import ResourceEngine
from mcp_junos_config.session import NetconfSession, SetFileSession, SSHCliSession


class TestDeviceInventory:
    """Tests for DeviceInventory class."""

    @pytest.fixture
    def temp_config(self, tmp_path):
        """Create a temporary config file for testing."""
        config_content = f"""
defaults:
  username: automation
  password_env: "TEST_PASSWORD"
  timeout: 30
  lock_attempts: 5

devices:
  srx-edge:
    type: netconf
    name: "Edge SRX"
    host: 192.0.2.1

  ex-core:
    type: ssh
    host: 192.0.2.2
    username: admin
    lock_attempts: 20

  lab:
    type: setfile
    set_file: {tmp_path / "lab.set"}

  bare:
"""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            f.write(config_content)
            f.flush()
            yield f.name
        os.unlink(f.name)

    def test_load_config(self, temp_config):
        """Inventory loads config file correctly."""
        inv = DeviceInventory(temp_config)
        assert inv.get_device_ids() == ["srx-edge", "ex-core", "lab", "bare"]

    def test_defaults_merged(self, temp_config):
        """Defaults fill in what a device does not set."""
        inv = DeviceInventory(temp_config)
        edge = inv.get_device_config("srx-edge")
        assert edge["username"] == "automation"
        assert edge["timeout"] == 30
        assert edge["name"] == "Edge SRX"

        core = inv.get_device_config("ex-core")
        assert core["username"] == "admin"
        assert core["lock_attempts"] == 20

    def test_empty_device(self, temp_config):
        """A device with no settings gets defaults and its id as name."""
        inv = DeviceInventory(temp_config)
        bare = inv.get_device_config("bare")
        assert bare["name"] == "bare"
        assert bare["username"] == "automation"

    def test_get_device_unknown(self, temp_config):
        """Unknown device raises KeyError."""
        inv = DeviceInventory(temp_config)
        with pytest.raises(KeyError) as exc_info:
            inv.get_device_config("nonexistent")
        assert "Unknown device" in str(exc_info.value)

    def test_session_types(self, temp_config):
        """Each device gets the session its type names."""
        inv = DeviceInventory(temp_config)
        assert isinstance(inv.get_session("srx-edge"), NetconfSession)
        ssh = inv.get_session("ex-core")
        assert isinstance(ssh, SSHCliSession)
        assert ssh.config.port == 22
        assert isinstance(inv.get_session("lab"), SetFileSession)

    def test_session_cached(self, temp_config, monkeypatch):
        """Session instances are cached."""
        monkeypatch.setenv("TEST_PASSWORD", "secret")
        inv = DeviceInventory(temp_config)
        session = inv.get_session("srx-edge")
        assert inv.get_session("srx-edge") is session
        assert session.config.get_password() == "secret"

    def test_engine_cached(self, temp_config):
        """Engines are cached and own the device session."""
        inv = DeviceInventory(temp_config)
        engine = inv.get_engine("lab")
        assert isinstance(engine, ResourceEngine)
        assert inv.get_engine("lab") is engine
        assert engine.session is inv.get_session("lab")
        assert engine.device_id == "lab"

    @pytest.mark.asyncio
    async def test_close_all(self, temp_config):
        """close_all disconnects sessions and drops the caches."""
        inv = DeviceInventory(temp_config)
        session = inv.get_session("lab")
        await session.connect()
        await inv.close_all()
        assert not session.is_connected
        assert inv.get_session("lab") is not session

    def test_config_from_env(self, temp_config, monkeypatch):
        """JUNOSCRAFT_CONFIG points at the inventory file."""
        monkeypatch.setenv("JUNOSCRAFT_CONFIG", temp_config)
        inv = DeviceInventory()
        assert inv.config_path == temp_config

    def test_missing_config(self, tmp_path, monkeypatch):
        """No inventory anywhere raises FileNotFoundError."""
        monkeypatch.delenv("JUNOSCRAFT_CONFIG", raising=False)
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path))
        if os.path.exists("/etc/junoscraft/devices.yaml"):
            pytest.skip("system inventory present")
        with pytest.raises(FileNotFoundError):
            DeviceInventory()
