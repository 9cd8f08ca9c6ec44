"""MCP Tool Definitions for the Travel Planner.

This module contains all tool definitions returned by the tools/list method.
Each tool declares its input contract as an ordered list of FieldSpec
entries; the JSON Schema sent to clients is rendered from them, and the
request validator interprets the same specs, so the two never drift.

Tool Categories:
    - Itineraries: create_itinerary, optimize_itinerary
    - Discovery: search_attractions, get_transport_options, get_accommodations
"""

from dataclasses import dataclass, field
from typing import Any, Literal

from ..models.enums import ToolName

FieldType = Literal["string", "number", "integer", "boolean", "array", "object"]


@dataclass(frozen=True)
class FieldSpec:
    """Declarative description of one tool argument."""

    name: str
    type: FieldType
    description: str = ""
    required: bool = True
    default: Any = None
    items: FieldType | None = None  # element type for arrays

    def to_json_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": self.type}
        if self.items:
            schema["items"] = {"type": self.items}
        if self.description:
            schema["description"] = self.description
        if not self.required and self.default is not None:
            schema["default"] = self.default
        return schema


@dataclass(frozen=True)
class ToolDefinition:
    """A named, schema-described tool. Immutable and shared across requests."""

    name: str
    description: str
    fields: tuple[FieldSpec, ...] = field(default_factory=tuple)

    @property
    def input_schema(self) -> dict[str, Any]:
        """JSON Schema object for the tool's arguments."""
        return {
            "type": "object",
            "properties": {f.name: f.to_json_schema() for f in self.fields},
            "required": [f.name for f in self.fields if f.required],
        }

    def to_dict(self) -> dict[str, Any]:
        """Render the definition as returned by tools/list."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


TOOL_DEFINITIONS: list[ToolDefinition] = [
    # ============ Itinerary Tools ============
    ToolDefinition(
        name=ToolName.CREATE_ITINERARY,
        description="Creates a personalized travel itinerary based on user preferences",
        fields=(
            FieldSpec("origin", "string", "Starting location"),
            FieldSpec("destination", "string", "Destination location"),
            FieldSpec("startDate", "string", "Start date (YYYY-MM-DD)"),
            FieldSpec("endDate", "string", "End date (YYYY-MM-DD)"),
            FieldSpec("budget", "number", "Budget in USD", required=False),
            FieldSpec(
                "preferences", "array", "Travel preferences", required=False, items="string"
            ),
        ),
    ),
    ToolDefinition(
        name=ToolName.OPTIMIZE_ITINERARY,
        description="Optimizes an existing itinerary based on specified criteria",
        fields=(
            FieldSpec("itineraryId", "string", "ID of the itinerary to optimize"),
            FieldSpec(
                "optimizationCriteria",
                "array",
                "Criteria for optimization (time, cost, etc.)",
                items="string",
            ),
        ),
    ),
    # ============ Discovery Tools ============
    ToolDefinition(
        name=ToolName.SEARCH_ATTRACTIONS,
        description="Searches for attractions and points of interest in a specified location",
        fields=(
            FieldSpec("location", "string", "Location to search attractions"),
            FieldSpec(
                "radius", "number", "Search radius in meters", required=False, default=5000
            ),
            FieldSpec(
                "categories",
                "array",
                "Categories of attractions",
                required=False,
                items="string",
            ),
        ),
    ),
    ToolDefinition(
        name=ToolName.GET_TRANSPORT_OPTIONS,
        description="Retrieves available transportation options between two points",
        fields=(
            FieldSpec("origin", "string", "Starting point"),
            FieldSpec("destination", "string", "Destination point"),
            FieldSpec("date", "string", "Travel date (YYYY-MM-DD)"),
        ),
    ),
    ToolDefinition(
        name=ToolName.GET_ACCOMMODATIONS,
        description="Searches for accommodation options in a specified location",
        fields=(
            FieldSpec("location", "string", "Location to search"),
            FieldSpec("checkIn", "string", "Check-in date (YYYY-MM-DD)"),
            FieldSpec("checkOut", "string", "Check-out date (YYYY-MM-DD)"),
            FieldSpec("budget", "number", "Maximum price per night", required=False),
        ),
    ),
]
