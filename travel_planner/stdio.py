"""MCP over stdio.

Newline-delimited JSON-RPC: one request per line on stdin, one response per
line on stdout. The process serves a single implicit session whose channel
is stdout, so requests share the same dispatcher and ordering guarantees as
the HTTP transport. Logs go to stderr.
"""

import asyncio
import json
import logging
import sys
from io import TextIOWrapper
from typing import Any

import anyio

from .errors import ChannelClosed, MCPError
from .mcp.channels import Channel
from .mcp.jsonrpc import jsonrpc_error
from .mcp.protocol import MCPProtocol
from .mcp.registry import ToolRegistry, build_default_registry
from .mcp.session import DeliveryTicket, Session, SessionManager
from .mcp.validation import parse_request
from .models import ChannelKind

logger = logging.getLogger(__name__)


class StdioChannel(Channel):
    """Writes each message as one JSON line."""

    kind = ChannelKind.STDIO

    def __init__(self, stdout: anyio.AsyncFile[str]):
        super().__init__()
        self._stdout = stdout

    async def _write(self, message: dict[str, Any]) -> None:
        await self._stdout.write(json.dumps(message) + "\n")
        await self._stdout.flush()


class _NonClosingTextIOWrapper(TextIOWrapper):
    """Text wrapper that leaves the process' real stdio handles open."""

    def close(self) -> None:
        if self.closed:
            return
        if self.writable():
            self.flush()


def _wrap_stdio(binary_stream) -> anyio.AsyncFile[str]:
    return anyio.wrap_file(_NonClosingTextIOWrapper(binary_stream, encoding="utf-8"))


async def _process_line(
    line: str, protocol: MCPProtocol, session: Session, ticket: DeliveryTicket
) -> None:
    try:
        try:
            rpc = parse_request(line)
        except MCPError as e:
            response = jsonrpc_error(getattr(e, "request_id", None), e.code, e.message, e.data)
        else:
            response = await protocol.handle(rpc, session.id)
        await session.deliver(ticket, response)
    except ChannelClosed:
        logger.warning("stdout closed, dropping response")
    finally:
        session.release(ticket)


async def run_stdio(
    registry: ToolRegistry | None = None,
    stdin: anyio.AsyncFile[str] | None = None,
    stdout: anyio.AsyncFile[str] | None = None,
) -> None:
    """Serve MCP on stdin/stdout until stdin reaches EOF.

    Requests are handled concurrently; responses are written in the order the
    requests were read.
    """
    if stdin is None:
        stdin = _wrap_stdio(sys.stdin.buffer)
    if stdout is None:
        stdout = _wrap_stdio(sys.stdout.buffer)

    if registry is None:
        registry = build_default_registry()
    protocol = MCPProtocol(registry)
    manager = SessionManager()
    session = manager.create_session(StdioChannel(stdout))
    logger.info("Travel Planner MCP server running on stdio")

    tasks: set[asyncio.Task] = set()
    try:
        async for line in stdin:
            line = line.strip()
            if not line:
                continue
            ticket = session.reserve()
            task = asyncio.create_task(_process_line(line, protocol, session, ticket))
            tasks.add(task)
            task.add_done_callback(tasks.discard)
        if tasks:
            await asyncio.gather(*tasks)
    finally:
        await manager.stop()
