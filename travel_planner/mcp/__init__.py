"""MCP (Model Context Protocol) transport module.

This module contains components for the MCP session transport:
- Tool definitions for tools/list
- JSON-RPC 2.0 helpers
- Request validation, tool registry, channels and sessions
  (import from the submodules directly)

The HTTP router lives in mcp_transport.py, the stdio runner in stdio.py.
"""

from .jsonrpc import (
    CHANNEL_CLOSED,
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    SERVER_ERROR,
    SESSION_NOT_FOUND,
    jsonrpc_error,
    jsonrpc_response,
)
from .tool_defs import TOOL_DEFINITIONS, FieldSpec, ToolDefinition

# Note: validation, registry, channels and session import ..errors, which
# imports this package. Import them directly:
#   from travel_planner.mcp.session import SessionManager

__all__ = [
    # Tool definitions
    "TOOL_DEFINITIONS",
    "FieldSpec",
    "ToolDefinition",
    # JSON-RPC helpers
    "jsonrpc_response",
    "jsonrpc_error",
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
    "SERVER_ERROR",
    "SESSION_NOT_FOUND",
    "CHANNEL_CLOSED",
]
