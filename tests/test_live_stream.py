"""GET /mcp stream sessions against a real uvicorn server."""

import asyncio
import json
import threading

import httpx
import pytest
import uvicorn

from tests.helpers import get_free_port, next_event, rpc, tool_call, wait_for_server
from travel_planner.config import Settings
from travel_planner.mcp.tool_defs import FieldSpec, ToolDefinition
from travel_planner.models import ToolResult
from travel_planner.server import create_app

SLOW_ECHO = ToolDefinition(
    name="slow_echo",
    description="Echo text after a delay",
    fields=(
        FieldSpec("text", "string", "Text to echo"),
        FieldSpec("delay", "number", "Seconds to wait"),
    ),
)


async def _slow_echo(params, ctx):
    await asyncio.sleep(params["delay"])
    return ToolResult.text(params["text"])


@pytest.fixture
def live_server(registry):
    """Serve the app on a free port from a background thread."""
    registry.register(SLOW_ECHO, _slow_echo)
    app = create_app(settings=Settings(_env_file=None, heartbeat_interval=0.2), registry=registry)
    port = get_free_port()
    config = uvicorn.Config(app, host="127.0.0.1", port=port, loop="asyncio", log_level="warning")
    server = uvicorn.Server(config)
    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()
    wait_for_server(port)
    try:
        yield f"http://127.0.0.1:{port}", app
    finally:
        server.should_exit = True
        thread.join(timeout=5)


@pytest.mark.anyio
async def test_stream_session_lifecycle(live_server):
    base_url, app = live_server
    async with httpx.AsyncClient(base_url=base_url, timeout=5) as http:
        async with http.stream("GET", "/mcp") as stream:
            assert stream.status_code == 200
            assert stream.headers["content-type"].startswith("text/event-stream")
            session_id = stream.headers["mcp-session-id"]
            lines = stream.aiter_lines()
            assert await next_event(lines) == ("session", session_id)

            headers = {"mcp-session-id": session_id}
            slow = asyncio.create_task(
                http.post(
                    "/mcp",
                    json=tool_call("slow_echo", {"text": "first", "delay": 0.3}, id=1),
                    headers=headers,
                )
            )
            await asyncio.sleep(0.1)
            fast = await http.post(
                "/mcp",
                json=tool_call("slow_echo", {"text": "second", "delay": 0}, id=2),
                headers=headers,
            )
            assert fast.status_code == 204
            assert (await slow).status_code == 204

            delivered = []
            for _ in range(2):
                event, data = await next_event(lines)
                assert event == "message"
                delivered.append(json.loads(data))
            assert [m["id"] for m in delivered] == [1, 2]
            assert [m["result"]["content"][0]["text"] for m in delivered] == ["first", "second"]

        # Client disconnected; the session is torn down
        for _ in range(100):
            r = await http.post("/mcp", json=rpc("ping", id=3), headers=headers)
            if r.status_code == 400:
                break
            await asyncio.sleep(0.05)
        assert r.status_code == 400
        assert r.json()["error"]["code"] == -32001
        assert session_id not in app.state.session_manager


@pytest.mark.anyio
async def test_stream_keepalive(live_server):
    base_url, _ = live_server
    async with httpx.AsyncClient(base_url=base_url, timeout=5) as http:
        async with http.stream("GET", "/mcp") as stream:
            lines = stream.aiter_lines()
            assert (await next_event(lines))[0] == "session"
            async for line in lines:
                if line.startswith(":"):
                    assert line == ": keep-alive"
                    break
