"""system radius-server <address>"""
from dataclasses import dataclass
from typing import Optional

from ..codec.fields import Key, Number, Text
from ..codec.schema import OptionSet
from .base import JunosResource


@dataclass
class RadiusServer(OptionSet):
    address: Optional[str] = None
    secret: Optional[str] = None
    accounting_port: Optional[int] = None
    accounting_retry: Optional[int] = None
    accounting_timeout: Optional[int] = None
    dynamic_request_port: Optional[int] = None
    max_outstanding_requests: Optional[int] = None
    port: Optional[int] = None
    preauthentication_port: Optional[int] = None
    preauthentication_secret: Optional[str] = None
    retry: Optional[int] = None
    routing_instance: Optional[str] = None
    source_address: Optional[str] = None
    timeout: Optional[int] = None

    KEYS = (Key("address"),)
    LAYOUT = (
        Text("secret", "secret", quoted=True, secret=True, required=True),
        Number("accounting_port", "accounting-port", between=(1, 65535)),
        Number("accounting_retry", "accounting-retry", between=(0, 100), unset=-1),
        Number("accounting_timeout", "accounting-timeout", between=(0, 1000), unset=-1),
        Number("dynamic_request_port", "dynamic-request-port", between=(1, 65535)),
        Number("max_outstanding_requests", "max-outstanding-requests", between=(0, 2000), unset=-1),
        Number("port", "port", between=(1, 65535)),
        Number("preauthentication_port", "preauthentication-port", between=(1, 65535)),
        Text("preauthentication_secret", "preauthentication-secret", quoted=True, secret=True),
        Number("retry", "retry", between=(1, 100)),
        Text("routing_instance", "routing-instance"),
        Text("source_address", "source-address"),
        Number("timeout", "timeout", between=(1, 1000)),
    )


class SystemRadiusServerResource(JunosResource):
    type_name = "system_radius_server"
    path = "system radius-server"
    options = RadiusServer
    id_format = "<address>"
    description = "RADIUS server used for authentication and accounting"
