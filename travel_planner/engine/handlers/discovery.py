"""Discovery tool handlers.

Handles:
- search_attractions: Points of interest around a location
- get_transport_options: Ways to travel between two points
- get_accommodations: Places to stay in a location

Stubs: results describe the query; no provider is contacted.
"""

from typing import Any

from ...models import ToolResult
from .base import HandlerContext, format_list, format_number

DEFAULT_SEARCH_RADIUS_METERS = 5000


async def handle_search_attractions(
    params: dict[str, Any],
    ctx: HandlerContext,
) -> ToolResult:
    """Search attractions near a location.

    Args:
        params: Dict containing:
            - location: Location to search around
            - radius: Optional search radius in meters (default 5000)
            - categories: Optional list of attraction categories

    Returns:
        ToolResult with the search summary
    """
    radius = format_number(params.get("radius"), str(DEFAULT_SEARCH_RADIUS_METERS))
    return ToolResult.text(
        f"Found attractions near {params['location']}\n"
        f"Radius: {radius} meters\n"
        f"Categories: {format_list(params.get('categories'), 'All')}"
    )


async def handle_get_transport_options(
    params: dict[str, Any],
    ctx: HandlerContext,
) -> ToolResult:
    """List transport options between two points on a date."""
    return ToolResult.text(
        f"Transport options from {params['origin']} to {params['destination']}\n"
        f"Date: {params['date']}"
    )


async def handle_get_accommodations(
    params: dict[str, Any],
    ctx: HandlerContext,
) -> ToolResult:
    """Search accommodation for a stay.

    Args:
        params: Dict containing:
            - location: Location to search
            - checkIn: Check-in date (YYYY-MM-DD)
            - checkOut: Check-out date (YYYY-MM-DD)
            - budget: Optional maximum price per night

    Returns:
        ToolResult with the accommodation summary
    """
    return ToolResult.text(
        f"Accommodation options in {params['location']}\n"
        f"Dates: {params['checkIn']} to {params['checkOut']}\n"
        f"Budget: {format_number(params.get('budget'))} per night"
    )
