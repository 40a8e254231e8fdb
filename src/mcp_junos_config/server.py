"""MCP Server for Junos configuration resources.

Renders resource configurations as Junos set-lines, applies them through
a locked candidate configuration and reads them back from
`show configuration ... | display set relative`.

Tools exposed:
- list_devices: List all configured Junos devices
- list_resource_types: List supported resource types
- describe_resource_type: Attribute tree of a resource type
- render_config: Validate a resource config and show its set-lines
- parse_config: Decode set-line text into a resource config
- show_configuration: Device configuration (a sub-tree) as set-lines
- read_resource: Read a resource from a device
- create_resource: Create a resource on a device
- update_resource: Replace a resource on a device
- delete_resource: Remove a resource from a device
- import_resource: Read an existing resource by id, failing if absent
- get_audit_log: Recent configuration changes
"""
import asyncio
import json
import logging
import os
from typing import Any, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import (
    TextContent,
    Tool,
    Resource,
)
from pydantic import AnyUrl

from .config.inventory import CONFIG_ENV, DeviceInventory
from .engine import OperationResult, ResourceEngine
from .resources import RESOURCE_TYPES, create_resource
from .utils.audit_log import get_recent_changes, setup_audit_logging
from .utils.logging_config import setup_logging, timed_section

logger = logging.getLogger(__name__)

URI_SCHEME = "junos://"

# Global inventory (initialized on first use)
inventory: Optional[DeviceInventory] = None


def get_inventory() -> DeviceInventory:
    """Get or create the device inventory."""
    global inventory
    if inventory is None:
        inventory = DeviceInventory(os.environ.get(CONFIG_ENV))
    return inventory


# Create MCP server
server = Server("junoscraft")


DEVICE_ID = {
    "type": "string",
    "description": "Device ID from the inventory (e.g., 'srx-edge')",
}
RESOURCE_TYPE = {
    "type": "string",
    "description": "Resource type, with or without the junos_ prefix (e.g., 'security_policy')",
}
RESOURCE_ID = {
    "type": "string",
    "description": "Resource id; multi-key ids are joined with '_-_' (e.g., 'trust_-_untrust')",
}
RESOURCE_CONFIG = {
    "type": "object",
    "description": "Resource attributes, see describe_resource_type",
}
DRY_RUN = {
    "type": "boolean",
    "description": "Only validate and show the lines that would be sent",
    "default": False,
}


# === TOOLS ===

@server.list_tools()
async def list_tools() -> list[Tool]:
    """List all available tools."""
    return [
        Tool(
            name="list_devices",
            description="List all configured Junos devices with their session types",
            inputSchema={
                "type": "object",
                "properties": {},
                "required": []
            }
        ),
        Tool(
            name="list_resource_types",
            description="List the supported Junos resource types",
            inputSchema={
                "type": "object",
                "properties": {},
                "required": []
            }
        ),
        Tool(
            name="describe_resource_type",
            description="Show the attributes (types, ranges, choices, keywords) of a resource type",
            inputSchema={
                "type": "object",
                "properties": {"resource_type": RESOURCE_TYPE},
                "required": ["resource_type"]
            }
        ),
        Tool(
            name="render_config",
            description="Validate a resource configuration and render its set-lines without contacting a device",
            inputSchema={
                "type": "object",
                "properties": {
                    "resource_type": RESOURCE_TYPE,
                    "config": RESOURCE_CONFIG,
                },
                "required": ["resource_type", "config"]
            }
        ),
        Tool(
            name="parse_config",
            description="Decode 'show configuration <stanza> | display set relative' text into a resource configuration",
            inputSchema={
                "type": "object",
                "properties": {
                    "resource_type": RESOURCE_TYPE,
                    "id": RESOURCE_ID,
                    "text": {
                        "type": "string",
                        "description": "Set-lines relative to the resource stanza"
                    },
                },
                "required": ["resource_type", "id", "text"]
            }
        ),
        Tool(
            name="show_configuration",
            description="Show device configuration as set-lines, optionally limited to a hierarchy path",
            inputSchema={
                "type": "object",
                "properties": {
                    "device_id": DEVICE_ID,
                    "path": {
                        "type": "string",
                        "description": "Hierarchy path (e.g., 'security policies')",
                        "default": ""
                    },
                },
                "required": ["device_id"]
            }
        ),
        Tool(
            name="read_resource",
            description="Read a resource from a device; state is null when absent",
            inputSchema={
                "type": "object",
                "properties": {
                    "device_id": DEVICE_ID,
                    "resource_type": RESOURCE_TYPE,
                    "id": RESOURCE_ID,
                },
                "required": ["device_id", "resource_type", "id"]
            }
        ),
        Tool(
            name="create_resource",
            description="Create a resource: lock, load set-lines, commit, unlock and read back",
            inputSchema={
                "type": "object",
                "properties": {
                    "device_id": DEVICE_ID,
                    "resource_type": RESOURCE_TYPE,
                    "config": RESOURCE_CONFIG,
                    "dry_run": DRY_RUN,
                },
                "required": ["device_id", "resource_type", "config"]
            }
        ),
        Tool(
            name="update_resource",
            description="Replace a resource: delete and set lines in one commit",
            inputSchema={
                "type": "object",
                "properties": {
                    "device_id": DEVICE_ID,
                    "resource_type": RESOURCE_TYPE,
                    "config": RESOURCE_CONFIG,
                    "dry_run": DRY_RUN,
                },
                "required": ["device_id", "resource_type", "config"]
            }
        ),
        Tool(
            name="delete_resource",
            description="Delete a resource from a device",
            inputSchema={
                "type": "object",
                "properties": {
                    "device_id": DEVICE_ID,
                    "resource_type": RESOURCE_TYPE,
                    "id": RESOURCE_ID,
                    "dry_run": DRY_RUN,
                },
                "required": ["device_id", "resource_type", "id"]
            }
        ),
        Tool(
            name="import_resource",
            description="Read an existing resource by id; fails if the device does not have it",
            inputSchema={
                "type": "object",
                "properties": {
                    "device_id": DEVICE_ID,
                    "resource_type": RESOURCE_TYPE,
                    "id": RESOURCE_ID,
                },
                "required": ["device_id", "resource_type", "id"]
            }
        ),
        Tool(
            name="get_audit_log",
            description="Get recent configuration changes from the audit log",
            inputSchema={
                "type": "object",
                "properties": {
                    "device_id": {
                        "type": "string",
                        "description": "Filter by device ID"
                    },
                    "operation": {
                        "type": "string",
                        "enum": ["create", "update", "delete"],
                        "description": "Filter by operation"
                    },
                    "limit": {
                        "type": "integer",
                        "description": "Maximum number of records",
                        "default": 20
                    },
                },
                "required": []
            }
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[TextContent]:
    """Handle tool calls."""
    device_id = arguments.get("device_id", "N/A")

    async with timed_section(f"tool:{name}", device_id=device_id):
        try:
            if name == "list_devices":
                return await handle_list_devices(get_inventory())

            elif name == "list_resource_types":
                return await handle_list_resource_types()

            elif name == "describe_resource_type":
                return await handle_describe_resource_type(arguments["resource_type"])

            elif name == "render_config":
                return await handle_render_config(
                    arguments["resource_type"],
                    arguments["config"]
                )

            elif name == "parse_config":
                return await handle_parse_config(
                    arguments["resource_type"],
                    arguments["id"],
                    arguments["text"]
                )

            elif name == "show_configuration":
                return await handle_show_configuration(
                    get_inventory(),
                    arguments["device_id"],
                    arguments.get("path", "")
                )

            elif name == "read_resource":
                engine = get_inventory().get_engine(arguments["device_id"])
                result = await engine.read(arguments["resource_type"], arguments["id"])
                return _result(result)

            elif name == "create_resource":
                engine = get_inventory().get_engine(arguments["device_id"])
                result = await engine.create(
                    arguments["resource_type"],
                    arguments["config"],
                    dry_run=arguments.get("dry_run", False)
                )
                return _result(result)

            elif name == "update_resource":
                engine = get_inventory().get_engine(arguments["device_id"])
                result = await engine.update(
                    arguments["resource_type"],
                    arguments["config"],
                    dry_run=arguments.get("dry_run", False)
                )
                return _result(result)

            elif name == "delete_resource":
                engine = get_inventory().get_engine(arguments["device_id"])
                result = await engine.delete(
                    arguments["resource_type"],
                    arguments["id"],
                    dry_run=arguments.get("dry_run", False)
                )
                return _result(result)

            elif name == "import_resource":
                engine = get_inventory().get_engine(arguments["device_id"])
                result = await engine.import_state(arguments["resource_type"], arguments["id"])
                return _result(result)

            elif name == "get_audit_log":
                return await handle_get_audit_log(
                    arguments.get("device_id"),
                    arguments.get("operation"),
                    arguments.get("limit", 20)
                )

            else:
                return [TextContent(type="text", text=f"Unknown tool: {name}")]

        except Exception as e:
            logger.exception(f"Tool {name} failed")
            return [TextContent(type="text", text=f"Error: {str(e)}")]


# === TOOL HANDLERS ===

def _json(data: Any) -> list[TextContent]:
    return [TextContent(type="text", text=json.dumps(data, indent=2))]


def _result(result: OperationResult) -> list[TextContent]:
    return _json(result.to_dict())


async def handle_list_devices(inv: DeviceInventory) -> list[TextContent]:
    """List all configured devices."""
    devices = []
    for device_id in inv.get_device_ids():
        config = inv.get_device_config(device_id)
        devices.append({
            "id": device_id,
            "name": config.get("name", device_id),
            "type": config.get("type", "netconf"),
            "host": config.get("host"),
            "port": config.get("port"),
            "set_file": config.get("set_file"),
        })

    return _json({"devices": devices})


async def handle_list_resource_types() -> list[TextContent]:
    """List supported resource types."""
    types = []
    for type_name in sorted(RESOURCE_TYPES):
        resource = RESOURCE_TYPES[type_name]
        types.append({
            "type": type_name,
            "path": resource.path,
            "id_format": resource.singleton_id or resource.id_format,
            "description": resource.description,
        })
    return _json({"resource_types": types})


async def handle_describe_resource_type(resource_type: str) -> list[TextContent]:
    """Describe the attributes of a resource type."""
    return _json(create_resource(resource_type).describe())


async def handle_render_config(resource_type: str, config: dict) -> list[TextContent]:
    """Render set-lines for a configuration without touching a device."""
    return _result(ResourceEngine.render(resource_type, config))


async def handle_parse_config(resource_type: str, resource_id: str, text: str) -> list[TextContent]:
    """Decode set-line text for a resource."""
    resource = create_resource(resource_type)
    identity = resource.parse_id(resource_id)
    options = resource.decode(text, identity)
    return _json({
        "resource_type": resource.type_name,
        "id": resource.make_id(identity),
        "found": options is not None,
        "config": options.to_dict() if options is not None else None,
    })


async def handle_show_configuration(
    inv: DeviceInventory,
    device_id: str,
    path: str = ""
) -> list[TextContent]:
    """Show device configuration as set-lines."""
    engine = inv.get_engine(device_id)
    output = await engine.show_configuration(path)
    return [TextContent(type="text", text=output)]


async def handle_get_audit_log(
    device_id: Optional[str] = None,
    operation: Optional[str] = None,
    limit: int = 20
) -> list[TextContent]:
    """Get recent configuration changes from the audit log."""
    records = get_recent_changes(
        device_id=device_id,
        operation=operation,
        limit=limit
    )

    formatted_records = []
    for r in records:
        formatted_records.append({
            "timestamp": r.timestamp,
            "device_id": r.device_id,
            "operation": r.operation,
            "resource_type": r.resource_type,
            "resource_id": r.resource_id,
            "dry_run": r.dry_run,
            "success": r.success,
            "lines": r.lines,
            "warnings": r.warnings,
            "error": r.error,
        })

    return _json({
        "total_records": len(formatted_records),
        "filters": {
            "device_id": device_id,
            "operation": operation,
            "limit": limit,
        },
        "records": formatted_records,
    })


# === RESOURCES ===

@server.list_resources()
async def list_resources() -> list[Resource]:
    """List available resources."""
    inv = get_inventory()
    resources = []

    for device_id in inv.get_device_ids():
        config = inv.get_device_config(device_id)
        resources.append(Resource(
            uri=AnyUrl(f"{URI_SCHEME}{device_id}/config"),
            name=f"{config.get('name', device_id)} Configuration",
            description=f"Configuration of {device_id} as set-lines",
            mimeType="text/plain",
        ))

    return resources


@server.read_resource()
async def read_resource(uri: AnyUrl) -> str:
    """Read a resource."""
    # Parse URI: junos://device_id/config
    uri_str = str(uri)
    if uri_str.startswith(URI_SCHEME):
        parts = uri_str[len(URI_SCHEME):].split("/")
        if len(parts) >= 2 and parts[1] == "config":
            result = await handle_show_configuration(get_inventory(), parts[0])
            return result[0].text

    return json.dumps({"error": f"Unknown resource: {uri}"})


def main():
    """Run the MCP server."""
    setup_logging()
    setup_audit_logging()

    async def run():
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options()
            )

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass
    finally:
        if inventory:
            asyncio.run(inventory.close_all())


if __name__ == "__main__":
    main()
