"""Enumeration types for the Travel Planner MCP Server."""

from enum import StrEnum


class ToolName(StrEnum):
    """Available travel planning tools."""

    CREATE_ITINERARY = "create_itinerary"
    OPTIMIZE_ITINERARY = "optimize_itinerary"
    SEARCH_ATTRACTIONS = "search_attractions"
    GET_TRANSPORT_OPTIONS = "get_transport_options"
    GET_ACCOMMODATIONS = "get_accommodations"


class MCPMethod(StrEnum):
    """JSON-RPC methods understood by the server."""

    INITIALIZE = "initialize"
    PING = "ping"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"


class ChannelKind(StrEnum):
    """Delivery channel kinds a session can own."""

    STREAM = "stream"  # SSE stream opened by GET /mcp
    DIRECT = "direct"  # response returned as the POST body
    STDIO = "stdio"  # newline-delimited JSON on stdout
