"""Response models for the Travel Planner MCP Server."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class TextContent(BaseModel):
    """A text content block of an MCP tool result."""

    type: Literal["text"] = "text"
    text: str = Field(..., description="Text payload")


class ToolResult(BaseModel):
    """Result of a tool execution, rendered as MCP content."""

    model_config = ConfigDict(populate_by_name=True)

    content: list[TextContent] = Field(..., min_length=1, description="Content blocks")
    is_error: bool = Field(default=False, alias="isError")

    @classmethod
    def text(cls, text: str) -> "ToolResult":
        """Build a single-block text result."""
        return cls(content=[TextContent(text=text)])

    def to_payload(self) -> dict[str, Any]:
        """Serialize for a JSON-RPC result (omits isError when false)."""
        payload = self.model_dump(by_alias=True, exclude_defaults=True)
        payload["content"] = [block.model_dump() for block in self.content]
        return payload


class ServerInfo(BaseModel):
    """Server identity returned by initialize."""

    name: str
    version: str


class InitializeResult(BaseModel):
    """Result of the initialize method."""

    model_config = ConfigDict(populate_by_name=True)

    protocol_version: str = Field(..., alias="protocolVersion")
    server_info: ServerInfo = Field(..., alias="serverInfo")
    capabilities: dict[str, Any] = Field(default_factory=lambda: {"tools": {}})


class ServerStatus(BaseModel):
    """Server info returned by the root endpoint."""

    name: str = Field(..., description="Server name")
    version: str = Field(..., description="Server version")
    status: str = Field(..., description="healthy or unhealthy")
    timestamp: datetime = Field(..., description="Server time")
    active_sessions: int = Field(default=0, ge=0, description="Open sessions")
    mcp: str = Field(default="/mcp", description="MCP endpoint path")
    health: str = Field(default="/health", description="Liveness probe path")
