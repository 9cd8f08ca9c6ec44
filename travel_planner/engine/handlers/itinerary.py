"""Itinerary tool handlers.

Handles:
- create_itinerary: Build an itinerary description from trip parameters
- optimize_itinerary: Describe an optimization pass over an itinerary

Both handlers are stubs: they template their inputs into a description and
perform no planning. A real planner plugs in here with the same signature.
"""

import logging
from typing import Any

from ...models import ToolResult
from .base import HandlerContext, format_list, format_number

logger = logging.getLogger(__name__)


async def handle_create_itinerary(
    params: dict[str, Any],
    ctx: HandlerContext,
) -> ToolResult:
    """Create a travel itinerary.

    Args:
        params: Dict containing:
            - origin: Starting location
            - destination: Destination location
            - startDate: Start date (YYYY-MM-DD)
            - endDate: End date (YYYY-MM-DD)
            - budget: Optional budget in USD
            - preferences: Optional list of travel preferences

    Returns:
        ToolResult with the itinerary description
    """
    logger.debug(
        f"create_itinerary {params['origin']} -> {params['destination']} "
        f"(session={ctx.session_id}, request={ctx.request_id})"
    )
    return ToolResult.text(
        f"Created itinerary from {params['origin']} to {params['destination']}\n"
        f"Dates: {params['startDate']} to {params['endDate']}\n"
        f"Budget: {format_number(params.get('budget'))}\n"
        f"Preferences: {format_list(params.get('preferences'), 'None')}"
    )


async def handle_optimize_itinerary(
    params: dict[str, Any],
    ctx: HandlerContext,
) -> ToolResult:
    """Optimize an existing itinerary.

    Args:
        params: Dict containing:
            - itineraryId: ID of the itinerary to optimize
            - optimizationCriteria: List of criteria (time, cost, etc.)

    Returns:
        ToolResult with the optimization summary
    """
    criteria = ", ".join(params["optimizationCriteria"])
    return ToolResult.text(f"Optimized itinerary {params['itineraryId']} based on: {criteria}")
