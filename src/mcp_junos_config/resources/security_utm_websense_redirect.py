"""security utm feature-profile web-filtering websense-redirect profile "<name>"
"""
from dataclasses import dataclass
from typing import Optional

from ..codec.fields import Block, Key, Number, Text
from ..codec.schema import OptionSet
from .base import JunosResource

FALLBACK_ACTIONS = ("block", "log-and-permit")


@dataclass
class FallbackSettings(OptionSet):
    default: Optional[str] = None
    server_connectivity: Optional[str] = None
    timeout: Optional[str] = None
    too_many_requests: Optional[str] = None

    LAYOUT = (
        Text("default", "default", choices=FALLBACK_ACTIONS),
        Text("server_connectivity", "server-connectivity", choices=FALLBACK_ACTIONS),
        Text("timeout", "timeout", choices=FALLBACK_ACTIONS),
        Text("too_many_requests", "too-many-requests", choices=FALLBACK_ACTIONS),
    )


@dataclass
class Server(OptionSet):
    host: Optional[str] = None
    port: Optional[int] = None

    LAYOUT = (
        Text("host", "host"),
        Number("port", "port", between=(1024, 65535)),
    )


@dataclass
class WebsenseRedirectProfile(OptionSet):
    name: Optional[str] = None
    account: Optional[str] = None
    custom_block_message: Optional[str] = None
    fallback_settings: Optional[FallbackSettings] = None
    server: Optional[Server] = None
    sockets: Optional[int] = None
    timeout: Optional[int] = None

    KEYS = (Key("name", quoted=True),)
    LAYOUT = (
        Text("account", "account", quoted=True),
        Text("custom_block_message", "custom-block-message", quoted=True),
        Block("fallback_settings", "fallback-settings", FallbackSettings, bare=True),
        Block("server", "server", Server, bare=True),
        Number("sockets", "sockets", between=(1, 32)),
        Number("timeout", "timeout", between=(1, 1800)),
    )


class SecurityUtmWebsenseRedirectResource(JunosResource):
    type_name = "security_utm_profile_web_filtering_websense_redirect"
    path = "security utm feature-profile web-filtering websense-redirect profile"
    options = WebsenseRedirectProfile
    description = "UTM web-filtering profile redirecting to a Websense server"
