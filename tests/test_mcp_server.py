# ==============================
# FastMCP surface (in-memory client)
# ==============================
from __future__ import annotations

import json

import httpx
import pytest
from fastmcp import Client

from hiveflow_mcp.mcp_server import create_server

from conftest import API_URL, refuse_connection, run


@pytest.fixture
def server(settings, backend):
    return create_server(settings, transport=backend.transport)


def _session(server, action):
    async def go():
        async with Client(server) as client:
            return await action(client)

    return run(go())


def _read(server, uri: str):
    contents = _session(server, lambda c: c.read_resource(uri))
    return json.loads(contents[0].text)


def test_lists_literal_resources(server) -> None:
    resources = _session(server, lambda c: c.list_resources())
    assert {str(r.uri) for r in resources} == {
        "hiveflow://flows",
        "hiveflow://mcp-servers",
        "hiveflow://executions",
    }


def test_lists_flow_templates(server) -> None:
    templates = _session(server, lambda c: c.list_resource_templates())
    uris = {t.uriTemplate for t in templates}
    assert {"hiveflow://flows/{flowId}", "hiveflow://flows/{flowId}/executions"} <= uris


def test_read_flows(server, backend) -> None:
    backend.reply("GET", "/api/flows", json={"success": True, "data": [{"_id": "f1"}]})
    assert _read(server, "hiveflow://flows") == [{"_id": "f1"}]


def test_read_flow_executions_template(server, backend) -> None:
    backend.reply("GET", "/api/flows/123/executions", json={"success": True, "processes": [{"id": "e1"}]})
    assert _read(server, "hiveflow://flows/123/executions") == [{"id": "e1"}]
    assert backend.paths() == ["/api/flows/123/executions"]


def test_read_single_flow_template(server, backend) -> None:
    backend.reply("GET", "/api/flows/abc", json={"success": True, "data": {"_id": "abc"}})
    assert _read(server, "hiveflow://flows/abc") == {"_id": "abc"}


def test_unknown_address_is_not_a_protocol_error(server) -> None:
    body = _read(server, "hiveflow://bogus")
    assert "hiveflow://bogus" in body["error"]
    assert len(body["data"]["resources"]) == 3


def test_backend_outage_reads_as_error_envelope(settings) -> None:
    server = create_server(settings, transport=httpx.MockTransport(refuse_connection))
    body = _read(server, "hiveflow://mcp-servers")
    assert body["error"] == f"HiveFlow backend unreachable at {API_URL}"


def test_tool_catalog(server) -> None:
    tools = _session(server, lambda c: c.list_tools())
    assert {t.name for t in tools} == {
        "create_flow",
        "list_flows",
        "get_flow",
        "execute_flow",
        "pause_flow",
        "resume_flow",
        "list_mcp_servers",
        "create_mcp_server",
        "get_flow_executions",
    }


def test_list_flows_tool(server, backend) -> None:
    backend.reply("GET", "/api/flows", json={"success": True, "data": [{"_id": "f1", "name": "Sync"}]})
    result = _session(server, lambda c: c.call_tool("list_flows", {"status": "active"}))
    assert "• Sync (f1) - Status: draft" in result.content[0].text
    assert backend.calls[0][2] == {"status": "active", "limit": "50"}


def test_tool_backend_error_is_reported_as_tool_error(server, backend) -> None:
    backend.reply("POST", "/api/flows/f1/pause", status=409, json={"success": False, "error": "Flow is not active"})
    result = _session(server, lambda c: c.call_tool_mcp("pause_flow", {"flowId": "f1"}))
    assert result.isError is True
    assert "Error executing pause_flow: Flow is not active" in result.content[0].text


def test_encoded_slash_in_flow_id_reads_that_flow(server, backend) -> None:
    backend.reply("GET", "/api/flows/a/executions", json={"success": True, "processes": [{"id": "wrong"}]})
    backend.reply("GET", "/api/flows/a%2Fexecutions", json={"success": True, "data": {"_id": "a/executions"}})

    assert _read(server, "hiveflow://flows/a%2Fexecutions") == {"_id": "a/executions"}
    assert backend.paths() == ["/api/flows/a%2Fexecutions"]


def test_fallback_template_is_labelled_as_such(server) -> None:
    templates = _session(server, lambda c: c.list_resource_templates())
    fallback = [t for t in templates if t.uriTemplate == "hiveflow://{path*}"]
    assert len(fallback) == 1
    assert fallback[0].description.startswith("Not a resource type")
