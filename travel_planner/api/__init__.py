"""API utilities and dependencies.

This package contains shared API utilities:
- deps: FastAPI dependency injection functions
"""

from .deps import (
    MCP_SESSION_ID_HEADER,
    get_client_ip,
    get_protocol,
    get_session_id,
    get_session_manager,
    get_settings,
)

__all__ = [
    "MCP_SESSION_ID_HEADER",
    "get_client_ip",
    "get_protocol",
    "get_session_id",
    "get_session_manager",
    "get_settings",
]
