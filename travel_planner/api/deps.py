"""FastAPI dependency injection functions.

This module contains shared dependencies for the MCP endpoints:
- Session id header extraction
- Access to the process-scoped SessionManager and MCPProtocol
- Client IP extraction for logging
"""

import logging
from typing import Annotated

from fastapi import Header, Request

from ..config import Settings
from ..mcp.protocol import MCPProtocol
from ..mcp.session import SessionManager

logger = logging.getLogger(__name__)

MCP_SESSION_ID_HEADER = "mcp-session-id"


# ============ HEADER EXTRACTORS ============


async def get_session_id(
    mcp_session_id: Annotated[str | None, Header(alias=MCP_SESSION_ID_HEADER)] = None,
) -> str | None:
    """Extract the session id header (None when absent or blank)."""
    if mcp_session_id is None or not mcp_session_id.strip():
        return None
    return mcp_session_id.strip()


def get_client_ip(request: Request) -> str | None:
    """Extract client IP from X-Forwarded-For header or direct connection."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return None


# ============ APPLICATION STATE ============


def get_session_manager(request: Request) -> SessionManager:
    """The SessionManager owned by the running application."""
    return request.app.state.session_manager


def get_protocol(request: Request) -> MCPProtocol:
    """The MCPProtocol dispatcher owned by the running application."""
    return request.app.state.protocol


def get_settings(request: Request) -> Settings:
    """Settings the running application was created with."""
    return request.app.state.settings
