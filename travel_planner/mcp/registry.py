"""Tool registry: definitions plus the handlers that implement them.

The registry is built once at startup and shared read-only by every
session. It knows nothing about transports or sessions.
"""

import inspect
import logging
from typing import Any

from ..engine.handlers import (
    HandlerContext,
    HandlerFunc,
    handle_create_itinerary,
    handle_get_accommodations,
    handle_get_transport_options,
    handle_optimize_itinerary,
    handle_search_attractions,
)
from ..errors import InternalHandlerFault, UnknownTool
from ..models import ToolName, ToolResult
from .tool_defs import TOOL_DEFINITIONS, ToolDefinition

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Ordered mapping of tool name -> (definition, handler)."""

    def __init__(self) -> None:
        self._tools: dict[str, tuple[ToolDefinition, HandlerFunc]] = {}

    def register(self, definition: ToolDefinition, handler: HandlerFunc) -> None:
        """Register a tool. Names must be unique."""
        if definition.name in self._tools:
            raise ValueError(f"Tool already registered: {definition.name}")
        self._tools[definition.name] = (definition, handler)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def list(self) -> list[ToolDefinition]:
        """All tool definitions in registration order."""
        return [definition for definition, _ in self._tools.values()]

    def get_definition(self, name: str) -> ToolDefinition:
        """Look up a tool definition.

        Raises:
            UnknownTool: name is not registered
        """
        try:
            return self._tools[name][0]
        except KeyError:
            raise UnknownTool(name)

    async def invoke(
        self, name: str, validated_args: dict[str, Any], ctx: HandlerContext
    ) -> ToolResult:
        """Run the handler for ``name`` to completion.

        Args:
            name: Tool name
            validated_args: Arguments already checked by validate_call
            ctx: Per-call context (session and request ids)

        Returns:
            The handler's ToolResult

        Raises:
            UnknownTool: name is not registered
            InternalHandlerFault: the handler raised or returned a non-ToolResult
        """
        if name not in self._tools:
            raise UnknownTool(name)
        _, handler = self._tools[name]

        try:
            result = handler(validated_args, ctx)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            logger.error(f"Tool handler {name} failed: {e}", exc_info=True)
            raise InternalHandlerFault(name, e)

        if not isinstance(result, ToolResult):
            logger.error(f"Tool handler {name} returned {type(result).__name__}, not ToolResult")
            raise InternalHandlerFault(name)
        return result


def build_default_registry() -> ToolRegistry:
    """Registry with the five travel planning tools."""
    handlers: dict[str, HandlerFunc] = {
        ToolName.CREATE_ITINERARY: handle_create_itinerary,
        ToolName.OPTIMIZE_ITINERARY: handle_optimize_itinerary,
        ToolName.SEARCH_ATTRACTIONS: handle_search_attractions,
        ToolName.GET_TRANSPORT_OPTIONS: handle_get_transport_options,
        ToolName.GET_ACCOMMODATIONS: handle_get_accommodations,
    }
    registry = ToolRegistry()
    for definition in TOOL_DEFINITIONS:
        registry.register(definition, handlers[definition.name])
    return registry
