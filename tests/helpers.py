import socket
import time

from fastapi.testclient import TestClient

PARIS_ROME_CALL = {
    "jsonrpc": "2.0",
    "id": 1,
    "method": "tools/call",
    "params": {
        "name": "create_itinerary",
        "arguments": {
            "origin": "Paris",
            "destination": "Rome",
            "startDate": "2025-06-01",
            "endDate": "2025-06-10",
        },
    },
}


def rpc(method: str, id=1, **params) -> dict:
    return {"jsonrpc": "2.0", "id": id, "method": method, "params": params}


def tool_call(name: str, arguments: dict, id=1) -> dict:
    return rpc("tools/call", id=id, name=name, arguments=arguments)


def initialize(client: TestClient) -> str:
    """Establish a direct session and return its id."""
    r = client.post("/mcp", json=rpc("initialize", id=0, protocolVersion="2025-03-26"))
    assert r.status_code == 200, r.text
    return r.headers["mcp-session-id"]


def get_free_port() -> int:
    with socket.socket() as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def wait_for_server(port: int, timeout: float = 5.0) -> None:
    """Poll ``port`` until it accepts connections.

    Raises:
        TimeoutError: the server did not start in time
    """
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        try:
            with socket.create_connection(("127.0.0.1", port), timeout=0.1):
                return
        except OSError:
            time.sleep(0.01)
    raise TimeoutError(f"Server on port {port} did not start within {timeout} seconds")


async def next_event(lines) -> tuple[str | None, str]:
    """Read one SSE event from an ``aiter_lines()`` iterator, skipping comments."""
    event, data = None, []
    async for line in lines:
        if line.startswith(":"):
            continue
        if not line:
            if event is None and not data:
                continue
            return event, "\n".join(data)
        name, _, value = line.partition(": ")
        if name == "event":
            event = value
        elif name == "data":
            data.append(value)
    raise AssertionError("stream ended before a complete event")
