from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from jsonschema import Draft7Validator

from ..shared.errors import NoSession, SchemaValidationError, ToolExecutionError, UnknownTool
from ..shared.logging import get_logger
from . import camera, lights, model, scene
from .base import ToolContext
from .defs import ToolDefinition

logger = get_logger(__name__)

TOOL_DEFINITIONS: list[ToolDefinition] = [*model.TOOLS, *scene.TOOLS, *lights.TOOLS, *camera.TOOLS]

_DEFINITION_INDEX: dict[str, ToolDefinition] = {tool.name: tool for tool in TOOL_DEFINITIONS}
_VALIDATORS: dict[str, Draft7Validator] = {
    tool.name: Draft7Validator(tool.input_schema) for tool in TOOL_DEFINITIONS
}


def list_definitions() -> list[ToolDefinition]:
    return TOOL_DEFINITIONS


def get_definition(name: str) -> ToolDefinition:
    try:
        return _DEFINITION_INDEX[name]
    except KeyError as exc:
        raise UnknownTool(f"Unknown tool '{name}'") from exc


def validate_arguments(tool_name: str, arguments: Mapping[str, Any]) -> dict[str, Any]:
    validator = _VALIDATORS.get(tool_name)
    if not validator:
        raise UnknownTool(f"Unknown tool '{tool_name}'")

    errors = sorted(validator.iter_errors(arguments), key=lambda e: list(e.path))
    if errors:
        first = errors[0]
        path = ".".join(str(p) for p in first.path) or "<root>"
        raise SchemaValidationError(f"{path}: {first.message}")

    return dict(arguments)


async def call_tool(name: str, arguments: Mapping[str, Any] | None, context: ToolContext) -> str:
    definition = get_definition(name)
    validated = validate_arguments(name, arguments or {})
    try:
        return await definition.handler(context, validated)
    except NoSession as exc:
        logger.warning("No session context for %s", name)
        raise ToolExecutionError(exc.message) from exc
