# =============================================================================
# core/hiveflow_client.py  -  HTTP client for the HiveFlow API
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Issues authenticated HTTP requests against the configured HiveFlow base
#   URL and returns the decoded JSON body.  It is the ONLY place in the
#   project that talks to the network.
#
# ONE FAILURE TYPE:
#   Everything that can go wrong on a call is raised as BackendError, with
#   a `kind` so callers can tell failures apart without poking at httpx:
#
#     unreachable  connection refused / DNS failure / host down
#     timeout      the request exceeded Settings.timeout
#     network      any other transport-level failure
#     http         the backend answered with a non-2xx status
#     envelope     2xx, but the body says {"success": false, ...}
#     malformed    2xx, but the body is not a JSON object
#
#   The client does NOT retry and does NOT cache.  A call either returns the
#   parsed body or raises.
#
# WHY A FRESH httpx.AsyncClient PER CALL?
#   The server holds no connection state between requests, so there is
#   nothing to open at startup or close at shutdown.  Tests pass an
#   httpx.MockTransport through `transport` to simulate the backend.
# =============================================================================

from typing import Any, Optional
from urllib.parse import quote

import httpx

from core.models import Settings


class BackendError(Exception):
    """A HiveFlow API call failed."""

    def __init__(
        self,
        message: str,
        kind: str,
        status_code: Optional[int] = None,
        payload: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.status_code = status_code
        self.payload = payload

    def __repr__(self) -> str:
        return f"BackendError(kind={self.kind!r}, status_code={self.status_code!r}, message={self.message!r})"


def envelope_message(body: Any) -> Optional[str]:
    """Pull the human-readable message out of a HiveFlow error body."""
    if isinstance(body, dict):
        for key in ("error", "message"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
            if isinstance(value, dict) and isinstance(value.get("message"), str):
                return value["message"]
    return None


def _flow_path(flow_id: str, action: str = "") -> str:
    # one path segment, whatever the id contains
    path = f"/api/flows/{quote(str(flow_id), safe='')}"
    return f"{path}/{action}" if action else path


class HiveFlowClient:
    """Thin async wrapper over the HiveFlow REST API."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self.settings.api_url

    def _headers(self) -> dict[str, str]:
        headers = {
            "Authorization": f"ApiKey {self.settings.api_key}",
            "Content-Type": "application/json",
        }
        if self.settings.instance_id:
            headers["X-Instance-Id"] = self.settings.instance_id
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._headers(),
                timeout=self.settings.timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(method, path, params=params, json=json)
        except httpx.TimeoutException as e:
            raise BackendError(
                f"request to {path} timed out after {self.settings.timeout:g}s", "timeout"
            ) from e
        except httpx.ConnectError as e:
            raise BackendError(f"connection to {self.base_url} failed: {e}", "unreachable") from e
        except httpx.TransportError as e:
            raise BackendError(f"network error calling {path}: {e}", "network") from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_error:
            raise BackendError(
                envelope_message(body) or f"HTTP {response.status_code}",
                "http",
                status_code=response.status_code,
                payload=body,
            )
        if not isinstance(body, dict):
            raise BackendError(
                f"expected a JSON object from {path}",
                "malformed",
                status_code=response.status_code,
                payload=body,
            )
        if body.get("success") is False:
            raise BackendError(
                envelope_message(body) or "request was not successful",
                "envelope",
                status_code=response.status_code,
                payload=body,
            )
        return body

    # -------------------------------------------------------------------------
    # Flows
    # -------------------------------------------------------------------------
    async def list_flows(self, status: Optional[str] = None, limit: Optional[int] = None) -> dict[str, Any]:
        params: dict[str, Any] = {}
        if status:
            params["status"] = status
        if limit:
            params["limit"] = limit
        return await self._request("GET", "/api/flows", params=params or None)

    async def get_flow(self, flow_id: str) -> dict[str, Any]:
        return await self._request("GET", _flow_path(flow_id))

    async def create_flow(self, name: str, description: str, nodes: Optional[list] = None) -> dict[str, Any]:
        return await self._request(
            "POST",
            "/api/flows",
            json={
                "name": name,
                "description": description,
                "nodes": nodes or [],
                "edges": [],
                "status": "draft",
            },
        )

    async def execute_flow(self, flow_id: str, inputs: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        return await self._request("POST", _flow_path(flow_id, "execute"), json={"inputs": inputs or {}})

    async def pause_flow(self, flow_id: str) -> dict[str, Any]:
        return await self._request("POST", _flow_path(flow_id, "pause"))

    async def resume_flow(self, flow_id: str) -> dict[str, Any]:
        return await self._request("POST", _flow_path(flow_id, "resume"))

    async def list_executions(self, flow_id: str, limit: int = 10) -> dict[str, Any]:
        return await self._request("GET", _flow_path(flow_id, "executions"), params={"limit": limit})

    # -------------------------------------------------------------------------
    # Registered MCP servers
    # -------------------------------------------------------------------------
    async def list_servers(self) -> dict[str, Any]:
        return await self._request("GET", "/api/mcp/servers")

    async def create_server(
        self,
        name: str,
        command: str,
        args: Optional[list[str]] = None,
        description: str = "",
    ) -> dict[str, Any]:
        return await self._request(
            "POST",
            "/api/mcp/servers",
            json={
                "name": name,
                "command": command,
                "args": args or [],
                "description": description,
            },
        )
