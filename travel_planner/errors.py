"""Error taxonomy for the MCP transport.

Every error carries a JSON-RPC error code so it can be rendered with
``jsonrpc_error`` wherever it is caught. Framing and session errors are
rejected at the HTTP boundary; tool errors are delivered on the session
channel.
"""

from typing import Any

from .mcp.jsonrpc import (
    CHANNEL_CLOSED,
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    SESSION_NOT_FOUND,
)


class MCPError(Exception):
    """Base class for all protocol-level errors."""

    code: int = INTERNAL_ERROR

    def __init__(self, message: str, data: Any = None):
        super().__init__(message)
        self.message = message
        self.data = data


# ============ FRAMING ERRORS ============


class MalformedJson(MCPError):
    """Request body is not valid JSON."""

    code = PARSE_ERROR


class MissingField(MCPError):
    """Request body is JSON but not a well-formed JSON-RPC request."""

    code = INVALID_REQUEST

    def __init__(self, message: str, request_id: str | int | None = None):
        super().__init__(message)
        # Echoed in the error response when the body carried a usable id
        self.request_id = request_id


# ============ DISPATCH ERRORS ============


class MethodNotFound(MCPError):
    """JSON-RPC method is not implemented."""

    code = METHOD_NOT_FOUND


class InvalidParams(MCPError):
    """Method parameters have the wrong shape."""

    code = INVALID_PARAMS


# ============ TOOL ERRORS ============


class UnknownTool(MethodNotFound):
    """Requested tool is not registered."""

    def __init__(self, tool_name: str):
        super().__init__(f"Unknown tool: {tool_name}")
        self.tool_name = tool_name


class SchemaViolation(InvalidParams):
    """Tool arguments do not conform to the tool's input schema."""

    def __init__(self, tool_name: str, violations: list[dict[str, str]]):
        details = "; ".join(f"{v['field']}: {v['message']}" for v in violations)
        super().__init__(
            f"Invalid arguments for tool {tool_name}: {details}",
            data={"violations": violations},
        )
        self.tool_name = tool_name
        self.violations = violations


class InternalHandlerFault(MCPError):
    """A tool handler raised. The original exception is kept for logging only."""

    code = INTERNAL_ERROR

    def __init__(self, tool_name: str, cause: BaseException | None = None):
        super().__init__("Internal error")
        self.tool_name = tool_name
        self.cause = cause


# ============ SESSION ERRORS ============


class SessionNotFound(MCPError):
    """Session id is missing, unknown, or already closed."""

    code = SESSION_NOT_FOUND


class ChannelClosed(MCPError):
    """The session's delivery channel is gone."""

    code = CHANNEL_CLOSED
