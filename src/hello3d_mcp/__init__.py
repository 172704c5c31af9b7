"""MCP server that lets an agent drive a 3D scene running in a browser."""

__version__ = "1.0.0"

__all__ = ["__version__"]
