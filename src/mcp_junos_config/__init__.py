"""junoscraft - declarative Junos configuration resources over MCP."""

__version__ = "0.1.0"
