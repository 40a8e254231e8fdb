"""Sessions carrying set-lines to Junos devices."""
from .base import (
    CommitError,
    ConfigLoadError,
    ConfigLockError,
    JunosSession,
    SessionConfig,
    SessionError,
)
from .cli import SSHCliSession
from .netconf import NetconfSession
from .setfile import SetFileSession

__all__ = [
    "JunosSession",
    "SessionConfig",
    "SessionError",
    "ConfigLockError",
    "ConfigLoadError",
    "CommitError",
    "NetconfSession",
    "SSHCliSession",
    "SetFileSession",
    "SESSION_TYPES",
    "create_session",
]

# Session type registry
SESSION_TYPES = {
    "netconf": NetconfSession,
    "ssh": SSHCliSession,
    "setfile": SetFileSession,
}


def create_session(device_id: str, config: dict) -> JunosSession:
    """Factory function to create session instances."""
    session_type = config.get("type", "netconf").lower()
    if session_type not in SESSION_TYPES:
        raise ValueError(f"Unknown session type: {session_type}")

    settings = dict(config)
    settings["type"] = session_type
    # SSH CLI defaults to port 22 unless the inventory says otherwise
    if session_type == "ssh" and "port" not in settings:
        settings["port"] = 22
    return SESSION_TYPES[session_type](device_id, SessionConfig(**settings))
