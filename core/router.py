# =============================================================================
# core/router.py  -  URI Router
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Maps a resource URI to backend call(s) and folds the results into an
#   Outcome (Success / UpstreamError).  It never builds response text;
#   that is the normalizer's job.
#
# MATCHING ORDER (an explicit table, not a chain of if/else):
#   1. Literal addresses, exact match
#        hiveflow://flows          -> list_flows()
#        hiveflow://mcp-servers    -> list_servers()
#        hiveflow://executions     -> list_flows() + list_executions() per flow
#   2. Templates, most fixed segments first
#        hiveflow://flows/{flowId}/executions -> list_executions(flowId)
#        hiveflow://flows/{flowId}            -> get_flow(flowId)
#   3. Nothing matched -> UpstreamError carrying the catalog listing
#
#   Because templates are sorted by fixed-segment count, a URI such as
#   hiveflow://flows/123/executions can never be served as flow "123".
#
# FAILURES:
#   BackendError from any call becomes an UpstreamError with a readable
#   message.  Any other exception is a bug and is left for the wrapper in
#   core/resources.py to contain.
#
# THE EXECUTIONS AGGREGATE:
#   Fan-out is bounded to the first MAX_AGGREGATE_FLOWS flows, in list
#   order, and calls are awaited one at a time.  A flow whose executions
#   can't be fetched is logged and left out; the rest are still returned.
# =============================================================================

from typing import Any, Optional

from core.catalog import LITERAL_RESOURCES, RESOURCE_TEMPLATES, catalog_listing
from core.events import emit_event
from core.hiveflow_client import BackendError, HiveFlowClient, envelope_message
from core.models import (
    LiteralAddress,
    Outcome,
    ResourceAddress,
    Success,
    TemplateAddress,
    UpstreamError,
)

MAX_AGGREGATE_FLOWS = 5
EXECUTIONS_PER_FLOW = 10


def build_route_table(
    literals: tuple[LiteralAddress, ...] = LITERAL_RESOURCES,
    templates: tuple[TemplateAddress, ...] = RESOURCE_TEMPLATES,
) -> list[ResourceAddress]:
    """Literals first, then templates by descending fixed-segment count."""
    ordered = sorted(templates, key=lambda t: t.fixed_segment_count, reverse=True)
    return [*literals, *ordered]


def _list_field(body: dict[str, Any], *keys: str) -> list:
    """Return the first of `keys` present in `body`; it must be a list."""
    for key in keys:
        if key in body and body[key] is not None:
            value = body[key]
            if not isinstance(value, list):
                raise BackendError(
                    f"field '{key}' should be a list, got {type(value).__name__}",
                    "malformed",
                    payload=body,
                )
            return value
    return []


def _flow_id(flow: Any) -> Optional[str]:
    if not isinstance(flow, dict):
        return None
    value = flow.get("_id", flow.get("id"))
    return str(value) if value not in (None, "") else None


class ResourceRouter:
    """Resolves resource URIs against the HiveFlow backend."""

    def __init__(self, client: HiveFlowClient, table: Optional[list[ResourceAddress]] = None):
        self.client = client
        self.table = table if table is not None else build_route_table()

    def match(self, uri: str) -> Optional[tuple[ResourceAddress, dict[str, str]]]:
        for address in self.table:
            params = address.match(uri)
            if params is not None:
                return address, params
        return None

    async def resolve(self, uri: str) -> Outcome:
        matched = self.match(uri)
        if matched is None:
            return UpstreamError(f"Resource not found: {uri}", uri, data=catalog_listing())

        address, params = matched
        handler = getattr(self, f"_read_{address.handler}")
        try:
            data = await handler(**params)
        except BackendError as e:
            emit_event(
                "backend_call_failed",
                uri=uri,
                kind=e.kind,
                status_code=e.status_code,
                error=e.message,
            )
            return UpstreamError(self.describe_failure(e, address, params), uri)
        return Success(data)

    def describe_failure(self, error: BackendError, address: ResourceAddress, params: dict[str, str]) -> str:
        """Human-readable message for a failed backend call."""
        base_url = self.client.base_url
        if error.kind == "unreachable":
            return f"HiveFlow backend unreachable at {base_url}"
        if error.kind == "timeout":
            return f"HiveFlow backend at {base_url} did not respond in time ({error.message})"
        if error.kind == "network":
            return f"Network error talking to HiveFlow backend at {base_url}: {error.message}"
        if error.status_code == 404 and address.handler == "flow":
            return f"Flow '{params.get('flowId')}' not found"
        if error.kind == "malformed":
            return f"Unexpected response from HiveFlow backend: {error.message}"

        message = envelope_message(error.payload)
        if message:
            return message
        if error.status_code:
            return f"HiveFlow backend request failed (HTTP {error.status_code})"
        return "HiveFlow backend request failed"

    # -------------------------------------------------------------------------
    # Handlers, one per catalog entry (named by the entry's `handler`)
    # -------------------------------------------------------------------------
    async def _read_flows(self) -> list:
        return _list_field(await self.client.list_flows(), "data", "flows")

    async def _read_servers(self) -> list:
        return _list_field(await self.client.list_servers(), "servers")

    async def _read_flow(self, flowId: str) -> dict:
        body = await self.client.get_flow(flowId)
        # "data" is the canonical field; older backends answer with "flow"
        flow = body.get("data")
        if flow is None:
            flow = body.get("flow")
        if not isinstance(flow, dict):
            raise BackendError(f"no flow object in response for '{flowId}'", "malformed", payload=body)
        return flow

    async def _read_flow_executions(self, flowId: str) -> list:
        body = await self.client.list_executions(flowId, limit=EXECUTIONS_PER_FLOW)
        return _list_field(body, "processes", "executions")

    async def _read_all_executions(self) -> list[dict]:
        flows = _list_field(await self.client.list_flows(), "data", "flows")

        records: list[dict] = []
        for flow in flows[:MAX_AGGREGATE_FLOWS]:
            flow_id = _flow_id(flow)
            if flow_id is None:
                emit_event("parent_skipped", reason="flow has no id")
                continue
            flow_name = flow.get("name")

            try:
                body = await self.client.list_executions(flow_id, limit=EXECUTIONS_PER_FLOW)
                executions = _list_field(body, "processes", "executions")
            except BackendError as e:
                emit_event("parent_skipped", flow_id=flow_id, kind=e.kind, error=e.message)
                continue

            for execution in executions:
                record = dict(execution) if isinstance(execution, dict) else {"execution": execution}
                record["flowId"] = flow_id
                record["flowName"] = flow_name
                records.append(record)
        return records
