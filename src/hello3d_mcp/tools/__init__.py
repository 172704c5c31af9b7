from .base import ToolContext
from .registry import call_tool, get_definition, list_definitions, validate_arguments

__all__ = ["ToolContext", "call_tool", "get_definition", "list_definitions", "validate_arguments"]
