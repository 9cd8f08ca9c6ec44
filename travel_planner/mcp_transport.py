"""MCP session transport over HTTP.

One path, three verbs:

- GET /mcp opens a session and returns its SSE stream. The first event is
  ``session`` (the new id); JSON-RPC responses follow as ``message`` events
  and ``: keep-alive`` comments are interleaved by the heartbeat.
- POST /mcp submits one JSON-RPC request for the session named by the
  ``mcp-session-id`` header. Streamed sessions answer 204 and push the
  response on the stream; direct sessions return it as the body. An
  ``initialize`` request without a known id establishes a direct session.
- DELETE /mcp closes a session (idempotent for ids that were issued).

Session and framing errors are answered here with a 4xx and never reach
the tool layer.
"""

import json
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse, StreamingResponse

from .api.deps import (
    MCP_SESSION_ID_HEADER,
    get_client_ip,
    get_protocol,
    get_session_id,
    get_session_manager,
    get_settings,
)
from .config import Settings
from .errors import ChannelClosed, MCPError, SessionNotFound
from .mcp.channels import DirectChannel, StreamChannel
from .mcp.jsonrpc import INVALID_REQUEST, jsonrpc_error
from .mcp.protocol import MCPProtocol
from .mcp.session import Session, SessionManager
from .mcp.validation import parse_request
from .models import ChannelKind, MCPMethod

logger = logging.getLogger(__name__)

router = APIRouter(tags=["MCP Transport"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",  # Disable nginx buffering
}


def _error_response(status_code: int, error: MCPError, id=None) -> JSONResponse:
    return JSONResponse(
        jsonrpc_error(id, error.code, error.message, error.data),
        status_code=status_code,
    )


def _missing_session_response() -> JSONResponse:
    return _error_response(400, SessionNotFound(f"Missing {MCP_SESSION_ID_HEADER} header"))


def _is_initialize(body: bytes) -> bool:
    """Peek at a raw body to see whether it is an initialize request."""
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return False
    return isinstance(payload, dict) and payload.get("method") == MCPMethod.INITIALIZE


async def sse_stream(manager: SessionManager, session: Session):
    """Drain a stream session's frames; tear the session down when it ends.

    Ends when the channel is closed (DELETE, idle expiry, shutdown) or when
    the client disconnects and the response task is cancelled.
    """
    try:
        async for frame in session.channel.frames():
            yield frame
    finally:
        manager.close(session.id, reason="stream ended")


# ============ GET: OPEN STREAM ============


@router.get("/mcp")
async def open_stream(
    request: Request,
    session_id: Annotated[str | None, Depends(get_session_id)],
    manager: Annotated[SessionManager, Depends(get_session_manager)],
):
    """Open a new session and return its SSE stream."""
    if session_id is not None:
        try:
            manager.lookup(session_id)
        except SessionNotFound as e:
            return _error_response(400, e)
        return JSONResponse(
            jsonrpc_error(None, INVALID_REQUEST, "Session already has an open channel"),
            status_code=409,
        )

    session = manager.create_session(StreamChannel())
    logger.debug(f"Stream opened by {get_client_ip(request)}")
    return StreamingResponse(
        sse_stream(manager, session),
        media_type="text/event-stream",
        headers={**SSE_HEADERS, MCP_SESSION_ID_HEADER: session.id},
    )


# ============ POST: SUBMIT REQUEST ============


@router.post("/mcp")
async def post_message(
    request: Request,
    session_id: Annotated[str | None, Depends(get_session_id)],
    manager: Annotated[SessionManager, Depends(get_session_manager)],
    protocol: Annotated[MCPProtocol, Depends(get_protocol)],
    settings: Annotated[Settings, Depends(get_settings)],
):
    """Submit one JSON-RPC request for a session."""
    body = await request.body()
    if len(body) > settings.max_json_payload_size:
        return JSONResponse(
            jsonrpc_error(
                None,
                INVALID_REQUEST,
                f"JSON payload too large. Maximum size: {settings.max_json_payload_size} bytes",
            ),
            status_code=413,
        )

    # Resolve the session before the body is validated
    session: Session | None = None
    if session_id is not None:
        try:
            session = manager.lookup(session_id)
        except SessionNotFound as e:
            if not _is_initialize(body):
                return _error_response(400, e)
            logger.info(f"initialize with stale session id {session_id[:8]}..., issuing a new one")
    elif not _is_initialize(body):
        return _missing_session_response()

    try:
        rpc = parse_request(body)
    except MCPError as e:
        return _error_response(400, e, id=getattr(e, "request_id", None))

    if session is None:
        session = manager.create_session(DirectChannel())

    ticket = session.reserve()
    try:
        response = await protocol.handle(rpc, session.id)
        await session.deliver(ticket, response)
    except ChannelClosed as e:
        logger.warning(f"Dropped response for session {session.id[:8]}...: {e.message}")
        manager.close(session.id, reason="channel closed")
        return _error_response(400, SessionNotFound(f"Session closed: {session.id}"), id=rpc.id)
    finally:
        session.release(ticket)

    headers = {MCP_SESSION_ID_HEADER: session.id}
    if response is None or session.channel.kind == ChannelKind.STREAM:
        return Response(status_code=204, headers=headers)
    return JSONResponse(response, headers=headers)


# ============ DELETE: CLOSE SESSION ============


@router.delete("/mcp")
async def delete_session(
    session_id: Annotated[str | None, Depends(get_session_id)],
    manager: Annotated[SessionManager, Depends(get_session_manager)],
):
    """Close a session. Closing an already-closed session is a no-op.

    Closed ids are remembered up to SESSION_TOMBSTONE_LIMIT, oldest first
    out. An id that has aged out of that window is treated as unknown and
    answered with 400.
    """
    if session_id is None:
        return _missing_session_response()
    if manager.close(session_id, reason="client request") or manager.was_closed(session_id):
        return Response(status_code=204)
    return _error_response(400, SessionNotFound(f"Session not found: {session_id}"))
