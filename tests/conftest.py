# ==============================
# Testing Fixtures
# ==============================
from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from core.hiveflow_client import HiveFlowClient
from core.models import Settings
from core.router import ResourceRouter

API_URL = "http://hiveflow.test"


def run(coro):
    """Drive a coroutine to completion from a plain test function."""
    return asyncio.run(coro)


class FakeBackend:
    """Scripted HiveFlow API served through an httpx.MockTransport.

    Routes are keyed by (method, raw path), percent-escapes included, so
    "/api/flows/a%2Fb" and "/api/flows/a/b" are different routes.  Unknown
    routes answer 404 with a HiveFlow-style error envelope.
    """

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}
        self.calls: List[Tuple[str, str, Dict[str, str]]] = []

    def reply(self, method: str, path: str, status: int = 200, json: Any = None, text: Optional[str] = None) -> None:
        def _handler(request: httpx.Request) -> httpx.Response:
            if text is not None:
                return httpx.Response(status, text=text)
            return httpx.Response(status, json=json)

        self.routes[(method, path)] = _handler

    def fail(self, method: str, path: str, exc_type: type = httpx.ConnectError) -> None:
        def _handler(request: httpx.Request) -> httpx.Response:
            raise exc_type("simulated failure", request=request)

        self.routes[(method, path)] = _handler

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.raw_path.decode("ascii").split("?", 1)[0]
        self.calls.append((request.method, path, dict(request.url.params)))
        route = self.routes.get((request.method, path))
        if route is None:
            return httpx.Response(404, json={"success": False, "error": "Not found"})
        return route(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def paths(self) -> List[str]:
        return [path for _, path, _ in self.calls]


def refuse_connection(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("[Errno 111] Connection refused", request=request)


@pytest.fixture
def settings() -> Settings:
    return Settings(api_url=API_URL, api_key="test-key")


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def client(settings: Settings, backend: FakeBackend) -> HiveFlowClient:
    return HiveFlowClient(settings, transport=backend.transport)


@pytest.fixture
def router(client: HiveFlowClient) -> ResourceRouter:
    return ResourceRouter(client)


@pytest.fixture
def offline_router(settings: Settings) -> ResourceRouter:
    """Router whose every backend call is refused at connect time."""
    return ResourceRouter(HiveFlowClient(settings, transport=httpx.MockTransport(refuse_connection)))


@pytest.fixture
def three_flows(backend: FakeBackend) -> FakeBackend:
    """Three flows; the second one's execution history is unavailable."""
    backend.reply("GET", "/api/flows", json={
        "success": True,
        "data": [
            {"_id": "f1", "name": "Daily report"},
            {"_id": "f2", "name": "Broken flow"},
            {"_id": "f3", "name": "Lead intake"},
        ],
    })
    backend.reply("GET", "/api/flows/f1/executions", json={
        "success": True,
        "processes": [{"id": "e1", "status": "completed"}, {"id": "e2", "status": "failed"}],
    })
    backend.reply("GET", "/api/flows/f2/executions", status=500, json={"success": False, "error": "db down"})
    backend.reply("GET", "/api/flows/f3/executions", json={
        "success": True,
        "processes": [{"id": "e3", "status": "running"}],
    })
    return backend
