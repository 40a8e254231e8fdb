"""Device inventory management from YAML configuration."""
import logging
import os
from pathlib import Path
from typing import Optional

import yaml

from ..engine import ResourceEngine
from ..session import JunosSession, create_session

logger = logging.getLogger(__name__)

CONFIG_ENV = "JUNOSCRAFT_CONFIG"


class DeviceInventory:
    """Manages the device inventory loaded from YAML config.

    ```yaml
    defaults:
      username: automation
      password_env: JUNOS_PASSWORD
      commit_confirmed: 0

    devices:
      srx-edge:
        type: netconf
        host: 192.0.2.1
      ex-core:
        type: ssh
        host: 192.0.2.2
        lock_attempts: 20
      lab:
        type: setfile
        set_file: ~/lab/lab.set
    ```
    """

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or self._find_config()
        self._config: dict = {}
        self._sessions: dict[str, JunosSession] = {}
        self._engines: dict[str, ResourceEngine] = {}
        self._load_config()

    def _find_config(self) -> str:
        """Find the devices.yaml config file."""
        search_paths = [
            Path.cwd() / "configs" / "devices.yaml",
            Path.cwd() / "devices.yaml",
            Path.home() / ".config" / "junoscraft" / "devices.yaml",
            Path("/etc/junoscraft/devices.yaml"),
        ]
        env_path = os.environ.get(CONFIG_ENV)
        if env_path:
            search_paths.insert(0, Path(env_path).expanduser())

        for path in search_paths:
            if path.exists():
                return str(path)

        raise FileNotFoundError(
            f"Could not find devices.yaml. Set {CONFIG_ENV} or create ./configs/devices.yaml"
        )

    def _load_config(self) -> None:
        """Load the YAML configuration."""
        with open(self.config_path) as f:
            self._config = yaml.safe_load(f) or {}

        defaults = self._config.get("defaults") or {}
        devices = self._config.get("devices") or {}
        for device_id, device_config in devices.items():
            if device_config is None:
                device_config = devices[device_id] = {}
            for key, value in defaults.items():
                device_config.setdefault(key, value)
            device_config.setdefault("name", device_id)
        self._config["devices"] = devices
        logger.info(f"Loaded {len(devices)} device(s) from {self.config_path}")

    def get_device_ids(self) -> list[str]:
        """Get all device IDs."""
        return list(self._config["devices"].keys())

    def get_device_config(self, device_id: str) -> dict:
        """Get raw config for a device."""
        devices = self._config["devices"]
        if device_id not in devices:
            raise KeyError(f"Unknown device: {device_id}")
        return devices[device_id]

    def get_session(self, device_id: str) -> JunosSession:
        """Get or create the session for a device."""
        if device_id not in self._sessions:
            config = self.get_device_config(device_id)
            self._sessions[device_id] = create_session(device_id, config)
        return self._sessions[device_id]

    def get_engine(self, device_id: str) -> ResourceEngine:
        """Get or create the resource engine owning the device's session."""
        if device_id not in self._engines:
            self._engines[device_id] = ResourceEngine(self.get_session(device_id), device_id)
        return self._engines[device_id]

    async def close_all(self) -> None:
        """Close all device sessions."""
        for session in self._sessions.values():
            if session.is_connected:
                await session.disconnect()
        self._sessions.clear()
        self._engines.clear()
