"""MCP method dispatch shared by every transport.

MCPProtocol maps one parsed JSON-RPC request to one JSON-RPC response dict
(or None for notifications). It never raises for request-level problems:
tool, schema and handler errors all come back as JSON-RPC error objects so
the session survives them.
"""

import logging
from typing import Any

from pydantic import ValidationError

from .. import __version__
from ..engine.handlers import HandlerContext
from ..errors import InternalHandlerFault, InvalidParams, MCPError, MethodNotFound
from ..models import InitializeResult, JsonRpcRequest, MCPMethod, ServerInfo, ToolCallParams
from .jsonrpc import INTERNAL_ERROR, jsonrpc_error, jsonrpc_response
from .registry import ToolRegistry
from .validation import validate_call

logger = logging.getLogger(__name__)

SERVER_NAME = "travel-planner"

# Newest first; the first entry is offered when the client asks for an unknown one
SUPPORTED_PROTOCOL_VERSIONS = ("2025-06-18", "2025-03-26", "2024-11-05")


class MCPProtocol:
    """Routes JSON-RPC methods to the tool registry."""

    def __init__(self, registry: ToolRegistry, server_name: str = SERVER_NAME):
        self.registry = registry
        self.server_info = ServerInfo(name=server_name, version=__version__)

    async def handle(self, request: JsonRpcRequest, session_id: str | None = None) -> dict | None:
        """Execute one request.

        Args:
            request: Parsed JSON-RPC request
            session_id: Id of the session the request arrived on

        Returns:
            JSON-RPC response dict, or None for notifications
        """
        if request.is_notification:
            if not request.method.startswith("notifications/"):
                logger.debug(f"Ignoring notification for method {request.method}")
            return None

        ctx = HandlerContext(session_id=session_id, request_id=request.id)
        try:
            result = await self._dispatch(request, ctx)
            return jsonrpc_response(request.id, result)
        except InternalHandlerFault as e:
            # Already logged with traceback by the registry
            return jsonrpc_error(request.id, e.code, e.message)
        except MCPError as e:
            logger.info(f"Request {request.id} ({request.method}) failed: {e.message}")
            return jsonrpc_error(request.id, e.code, e.message, e.data)
        except Exception as e:
            logger.error(f"Unhandled error in {request.method}: {e}", exc_info=True)
            return jsonrpc_error(request.id, INTERNAL_ERROR, "Internal error")

    async def _dispatch(self, request: JsonRpcRequest, ctx: HandlerContext) -> Any:
        method = request.method
        if method == MCPMethod.INITIALIZE:
            return self._initialize(request.params)
        elif method == MCPMethod.PING:
            return {}
        elif method == MCPMethod.TOOLS_LIST:
            return {"tools": [d.to_dict() for d in self.registry.list()]}
        elif method == MCPMethod.TOOLS_CALL:
            return await self._call_tool(request.params, ctx)
        raise MethodNotFound(f"Method not found: {method}")

    def _initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        requested = params.get("protocolVersion")
        if requested in SUPPORTED_PROTOCOL_VERSIONS:
            version = requested
        else:
            version = SUPPORTED_PROTOCOL_VERSIONS[0]
        result = InitializeResult(protocol_version=version, server_info=self.server_info)
        return result.model_dump(by_alias=True)

    async def _call_tool(self, params: dict[str, Any], ctx: HandlerContext) -> dict[str, Any]:
        try:
            call = ToolCallParams.model_validate(params)
        except ValidationError:
            raise InvalidParams("Invalid params: tools/call requires a string 'name'")

        arguments = validate_call(call.name, call.arguments, self.registry)
        result = await self.registry.invoke(call.name, arguments, ctx)
        return result.to_payload()
