"""
Shared fixtures: a scripted MCP server built on FastAPI, wired into the
bridge's requests.Session through a transport adapter so the real
transport code runs without opening sockets.
"""

import asyncio
import json
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

import pytest
import requests
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from fastapi.testclient import TestClient
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

from mcp_inbridge.bridge import LineBridge
from mcp_inbridge.config import BridgeConfig
from mcp_inbridge.session import SessionStore
from mcp_inbridge.transport import TransportClient

SERVER_URL = "http://mcp.test"


@dataclass
class Reply:
    """One scripted server reply. Dict/list bodies are sent as JSON."""
    body: Any = None
    status: int = 200
    headers: Dict[str, str] = field(default_factory=dict)
    content_type: str = "text/plain"
    delay: float = 0.0


class MockRemote:
    """Streamable-HTTP MCP server double with scripted replies."""

    def __init__(self):
        self.replies = deque()
        self.responder: Optional[Callable[[Any], Reply]] = None
        self.received = []
        self.deleted = []
        self.healthy = True
        self.failure: Optional[Exception] = None
        self.delete_failure: Optional[Exception] = None
        self.timeouts = []
        self.app = self._build_app()
        self.client = TestClient(self.app)

    def queue(self, *replies: Reply) -> None:
        self.replies.extend(replies)

    def _build_app(self) -> FastAPI:
        app = FastAPI()

        @app.get("/health")
        def health():
            if not self.healthy:
                return JSONResponse({"status": "down"}, status_code=503)
            return {"status": "ok"}

        @app.post("/mcp")
        async def mcp(request: Request):
            raw = await request.body()
            payload = json.loads(raw) if raw else None
            self.received.append({"headers": dict(request.headers), "body": payload})
            if self.responder is not None:
                reply = self.responder(payload)
            elif self.replies:
                reply = self.replies.popleft()
            else:
                reply = Reply(body={"jsonrpc": "2.0", "result": {}, "id": None})
            return await render(reply)

        @app.delete("/mcp")
        def delete_session(request: Request):
            self.deleted.append(request.headers.get("mcp-session-id"))
            return Response(status_code=204)

        return app


async def render(reply: Reply) -> Response:
    if reply.delay:
        await asyncio.sleep(reply.delay)
    if isinstance(reply.body, (dict, list)):
        return JSONResponse(reply.body, status_code=reply.status, headers=reply.headers)
    return Response(
        content=reply.body or b"",
        status_code=reply.status,
        headers=reply.headers,
        media_type=reply.content_type,
    )


class RemoteAdapter(BaseAdapter):
    """Routes requests.Session traffic to the MockRemote app."""

    def __init__(self, remote: MockRemote):
        super().__init__()
        self.remote = remote

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        self.remote.timeouts.append((request.method, timeout))
        if request.method == "DELETE" and self.remote.delete_failure is not None:
            raise self.remote.delete_failure
        if self.remote.failure is not None:
            raise self.remote.failure

        headers = {k: v for k, v in request.headers.items() if k.lower() != "content-length"}
        result = self.remote.client.request(
            request.method, request.path_url, content=request.body, headers=headers
        )

        response = requests.Response()
        response.status_code = result.status_code
        response.reason = result.reason_phrase
        response.headers = CaseInsensitiveDict(result.headers)
        response._content = result.content
        response.encoding = requests.utils.get_encoding_from_headers(response.headers)
        response.url = request.url
        response.request = request
        return response

    def close(self):
        pass


@pytest.fixture
def remote():
    return MockRemote()


@pytest.fixture
def config():
    return BridgeConfig(server_url=SERVER_URL, request_timeout=2.0, probe_timeout=1.0, teardown_timeout=1.0)


@pytest.fixture
def transport(remote, config):
    http = requests.Session()
    http.mount(SERVER_URL, RemoteAdapter(remote))
    return TransportClient(config, session=http)


@pytest.fixture
def session():
    return SessionStore()


@pytest.fixture
def bridge(transport, session):
    return LineBridge(transport, session)
