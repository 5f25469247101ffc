# ==============================
# HiveFlow HTTP client
# ==============================
from __future__ import annotations

import json

import httpx
import pytest

from core.hiveflow_client import BackendError, HiveFlowClient, envelope_message
from core.models import Settings

from conftest import API_URL, run


def _capture(responder=None):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if responder:
            return responder(request)
        return httpx.Response(200, json={"success": True, "data": []})

    return seen, httpx.MockTransport(handler)


def test_sends_api_key_and_instance_headers() -> None:
    seen, transport = _capture()
    settings = Settings(api_url=API_URL, api_key="secret", instance_id="acme")

    run(HiveFlowClient(settings, transport=transport).list_flows())

    request = seen[0]
    assert request.headers["Authorization"] == "ApiKey secret"
    assert request.headers["X-Instance-Id"] == "acme"
    assert str(request.url) == f"{API_URL}/api/flows"


def test_no_instance_header_by_default(settings) -> None:
    seen, transport = _capture()
    run(HiveFlowClient(settings, transport=transport).list_servers())
    assert "X-Instance-Id" not in seen[0].headers


def test_list_flows_passes_filters(settings) -> None:
    seen, transport = _capture()
    run(HiveFlowClient(settings, transport=transport).list_flows(status="active", limit=50))
    assert dict(seen[0].url.params) == {"status": "active", "limit": "50"}


def test_create_flow_posts_draft(settings) -> None:
    seen, transport = _capture()
    run(HiveFlowClient(settings, transport=transport).create_flow("Sync", "Syncs things"))

    request = seen[0]
    assert request.method == "POST"
    assert json.loads(request.content) == {
        "name": "Sync",
        "description": "Syncs things",
        "nodes": [],
        "edges": [],
        "status": "draft",
    }


def test_execute_flow_sends_inputs(settings) -> None:
    seen, transport = _capture()
    run(HiveFlowClient(settings, transport=transport).execute_flow("f1", {"x": 1}))
    assert seen[0].url.path == "/api/flows/f1/execute"
    assert json.loads(seen[0].content) == {"inputs": {"x": 1}}


def test_success_false_envelope_raises(settings) -> None:
    _, transport = _capture(lambda r: httpx.Response(200, json={"success": False, "error": "Quota exceeded"}))
    with pytest.raises(BackendError) as info:
        run(HiveFlowClient(settings, transport=transport).list_flows())
    assert info.value.kind == "envelope"
    assert info.value.message == "Quota exceeded"


def test_http_error_keeps_status_and_message(settings) -> None:
    _, transport = _capture(lambda r: httpx.Response(403, json={"message": "Forbidden"}))
    with pytest.raises(BackendError) as info:
        run(HiveFlowClient(settings, transport=transport).get_flow("f1"))
    assert info.value.kind == "http"
    assert info.value.status_code == 403
    assert info.value.message == "Forbidden"


def test_non_object_body_is_malformed(settings) -> None:
    _, transport = _capture(lambda r: httpx.Response(200, json=[1, 2, 3]))
    with pytest.raises(BackendError) as info:
        run(HiveFlowClient(settings, transport=transport).list_servers())
    assert info.value.kind == "malformed"


def test_non_json_body_is_malformed(settings) -> None:
    _, transport = _capture(lambda r: httpx.Response(200, text="<html></html>"))
    with pytest.raises(BackendError) as info:
        run(HiveFlowClient(settings, transport=transport).list_servers())
    assert info.value.kind == "malformed"


@pytest.mark.parametrize("exc_type, kind", [
    (httpx.ConnectError, "unreachable"),
    (httpx.ConnectTimeout, "timeout"),
    (httpx.ReadTimeout, "timeout"),
    (httpx.ReadError, "network"),
])
def test_transport_failures_are_classified(settings, exc_type, kind) -> None:
    def responder(request):
        raise exc_type("simulated", request=request)

    _, transport = _capture(responder)
    with pytest.raises(BackendError) as info:
        run(HiveFlowClient(settings, transport=transport).list_flows())
    assert info.value.kind == kind


def test_envelope_message_variants() -> None:
    assert envelope_message({"error": "a"}) == "a"
    assert envelope_message({"message": "b"}) == "b"
    assert envelope_message({"error": {"message": "c"}}) == "c"
    assert envelope_message({"error": ""}) is None
    assert envelope_message(None) is None


def test_flow_id_is_escaped_into_one_path_segment(settings) -> None:
    seen, transport = _capture(lambda r: httpx.Response(200, json={"success": True, "data": {}}))
    client = HiveFlowClient(settings, transport=transport)

    run(client.get_flow("a/b?c#d"))
    run(client.list_executions("a/b", limit=3))
    run(client.pause_flow("x y"))

    assert seen[0].url.raw_path == b"/api/flows/a%2Fb%3Fc%23d"
    assert seen[1].url.raw_path == b"/api/flows/a%2Fb/executions?limit=3"
    assert seen[2].url.raw_path == b"/api/flows/x%20y/pause"
