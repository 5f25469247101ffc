# =============================================================================
# core/formatting.py  -  Text rendering for tool results
# =============================================================================
#
# Tools answer with short, human-readable text (the assistant relays it to
# the user more or less verbatim), unlike resources, which answer with JSON.
# Each function here takes a decoded HiveFlow response and returns the
# text for one tool.  No I/O, no framework imports: easy to unit-test.
# =============================================================================

from typing import Any


def _flow_id(flow: dict[str, Any]) -> str:
    return str(flow.get("_id") or flow.get("id") or "N/A")


def format_flow_created(name: str, body: dict[str, Any]) -> str:
    flow = body.get("data") or body.get("flow") or {}
    return (
        f'✅ Flow "{name}" created successfully.\n'
        f"ID: {_flow_id(flow)}\n"
        f"Status: {flow.get('status') or 'draft'}"
    )


def format_flow_list(body: dict[str, Any]) -> str:
    flows = body.get("data") or body.get("flows") or []
    lines = "\n".join(
        f"• {flow.get('name')} ({_flow_id(flow)}) - Status: {flow.get('status') or 'draft'}"
        for flow in flows
        if isinstance(flow, dict)
    )
    return f"📋 Flows found ({len(flows)}):\n\n{lines or 'No flows available'}"


def format_flow_details(body: dict[str, Any]) -> str:
    flow = body.get("data") or body.get("flow") or {}
    nodes = flow.get("nodes") or []
    return (
        f'📊 Flow details "{flow.get("name")}":\n'
        f"• ID: {_flow_id(flow)}\n"
        f"• Status: {flow.get('status') or 'draft'}\n"
        f"• Nodes: {len(nodes)}\n"
        f"• Description: {flow.get('description') or 'No description'}\n"
        f"• Last updated: {flow.get('updatedAt') or 'N/A'}"
    )


def format_flow_executed(body: dict[str, Any]) -> str:
    return (
        "🚀 Flow executed successfully.\n"
        f"Execution ID: {body.get('executionId') or 'N/A'}\n"
        f"Status: {body.get('status') or 'started'}"
    )


def format_flow_paused(body: dict[str, Any]) -> str:
    return f"⏸️ Flow paused successfully.\nStatus: {body.get('status') or 'paused'}"


def format_flow_resumed(body: dict[str, Any]) -> str:
    return f"▶️ Flow resumed successfully.\nStatus: {body.get('status') or 'active'}"


def format_server_list(body: dict[str, Any]) -> str:
    servers = body.get("servers") or []
    lines = "\n".join(
        f"• {server.get('name')} - Status: {server.get('status')} "
        f"({'Connected' if server.get('isConnected') else 'Disconnected'})"
        for server in servers
        if isinstance(server, dict)
    )
    return f"🔌 MCP servers ({len(servers)}):\n\n{lines or 'No MCP servers configured'}"


def format_server_created(name: str, command: str) -> str:
    return (
        f'✅ MCP server "{name}" registered successfully.\n'
        f"Command: {command}\n"
        "Status: registered"
    )


def format_execution_list(body: dict[str, Any]) -> str:
    executions = body.get("processes") or body.get("executions") or []
    lines = "\n".join(
        f"• {execution.get('id') or execution.get('_id')} - Status: {execution.get('status')} "
        f"- {execution.get('createdAt')}"
        for execution in executions
        if isinstance(execution, dict)
    )
    return f"📈 Flow executions ({len(executions)}):\n\n{lines or 'No executions'}"
