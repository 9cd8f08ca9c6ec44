"""Request models for the Travel Planner MCP Server."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr


class JsonRpcRequest(BaseModel):
    """A single JSON-RPC 2.0 request or notification."""

    model_config = ConfigDict(extra="ignore")

    jsonrpc: Literal["2.0"] = Field(..., description="Protocol version, always 2.0")
    id: StrictStr | StrictInt | None = Field(
        default=None, description="Client correlation token (absent for notifications)"
    )
    method: StrictStr = Field(..., min_length=1, description="Method name")
    params: dict[str, Any] = Field(default_factory=dict, description="Method parameters")

    @property
    def is_notification(self) -> bool:
        """True when the request carries no id member at all."""
        return "id" not in self.model_fields_set


class ToolCallParams(BaseModel):
    """Parameters of a tools/call request."""

    name: StrictStr = Field(..., description="Tool name")
    arguments: Any = Field(default_factory=dict, description="Tool arguments")
