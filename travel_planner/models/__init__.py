"""Pydantic models for Travel Planner MCP Server request/response schemas.

Import from submodules directly for cleaner imports:

    from travel_planner.models.enums import ToolName
    from travel_planner.models.responses import ToolResult
"""

from .enums import ChannelKind, MCPMethod, ToolName
from .requests import JsonRpcRequest, ToolCallParams
from .responses import (
    InitializeResult,
    ServerInfo,
    ServerStatus,
    TextContent,
    ToolResult,
)

__all__ = [
    # Enums
    "ChannelKind",
    "MCPMethod",
    "ToolName",
    # Request models
    "JsonRpcRequest",
    "ToolCallParams",
    # Response models
    "InitializeResult",
    "ServerInfo",
    "ServerStatus",
    "TextContent",
    "ToolResult",
]
