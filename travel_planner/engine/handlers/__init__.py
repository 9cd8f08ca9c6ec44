"""Tool handlers for the travel planner.

This package contains tool handlers organized by domain:
- itinerary: create_itinerary, optimize_itinerary
- discovery: search_attractions, get_transport_options, get_accommodations

Each handler is a standalone async function that takes:
- params: dict[str, Any] - Validated tool arguments (defaults filled in)
- ctx: HandlerContext - Identifies the calling session and request

And returns:
- ToolResult with MCP text content
"""

from .base import HandlerContext, HandlerFunc, format_list, format_number
from .discovery import (
    handle_get_accommodations,
    handle_get_transport_options,
    handle_search_attractions,
)
from .itinerary import handle_create_itinerary, handle_optimize_itinerary

__all__ = [
    # Base
    "HandlerContext",
    "HandlerFunc",
    "format_list",
    "format_number",
    # Itinerary handlers
    "handle_create_itinerary",
    "handle_optimize_itinerary",
    # Discovery handlers
    "handle_search_attractions",
    "handle_get_transport_options",
    "handle_get_accommodations",
]
