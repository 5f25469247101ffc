# =============================================================================
# hiveflow_mcp/mcp_server.py  -  FastMCP server (tools + resources)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Builds the FastMCP server that exposes HiveFlow to an AI assistant:
#     - 9 TOOLS: one HiveFlow API call each, answered with short text
#     - 3 RESOURCES + 2 RESOURCE TEMPLATES: answered with JSON
#
# HOW A RESOURCE READ FLOWS:
#   1. The host sends resources/read with a URI (e.g. hiveflow://flows)
#   2. FastMCP routes it to one of the handlers registered below
#   3. Every handler calls core.resources.read_resource(), which runs the
#      URI router + normalizer inside the fault-containment boundary
#   4. The handler returns the normalized JSON text
#
#   A catch-all template (hiveflow://{path*}) is registered LAST, so any
#   hiveflow:// address FastMCP can't place still reaches the router and
#   gets the structured "not found" envelope plus the catalog listing.
#
# HOW A TOOL CALL FLOWS:
#   The tool calls HiveFlowClient, formats the answer with core.formatting,
#   and logs request/response.  A BackendError is re-raised as ToolError,
#   which FastMCP reports to the host as an error result (isError: true).
#
# RUNNING THIS SERVER:
#   hiveflow-mcp --api-key <key>        (see main.py)
# =============================================================================

import logging
import sys
from typing import Any, Awaitable, Literal, Optional
from urllib.parse import quote

import httpx
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from core import formatting
from core.catalog import LITERAL_RESOURCES, RESOURCE_TEMPLATES
from core.hiveflow_client import BackendError, HiveFlowClient
from core.models import SCHEME, LiteralAddress, Settings
from core.resources import read_resource
from core.router import ResourceRouter

SERVER_NAME = "hiveflow-mcp-server"

# =============================================================================
# Logging Setup
# =============================================================================
# We log to STDERR because STDOUT is the MCP transport.  A log line on
# STDOUT would corrupt the JSON-RPC stream and kill the session.
#
#   CYAN    incoming tool calls (name + parameters)
#   GREEN   tool responses
#   YELLOW  intermediate status / failures
# =============================================================================

_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RESET = "\033[0m"

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [MCP] %(message)s",
    datefmt="%H:%M:%S",
    stream=sys.stderr,
)


def _log_request(tool_name: str, **params) -> None:
    """Log an incoming tool call with its parameters in CYAN."""
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items())
    logging.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    """Log an intermediate status message in YELLOW."""
    logging.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, text: str) -> str:
    """Log the tool's text answer (first line only) in GREEN, then return it."""
    logging.info(f"{_GREEN}  ← {tool_name} response: {text.splitlines()[0] if text else ''}{_RESET}")
    return text


async def _call_backend(tool_name: str, call: Awaitable[Any]) -> Any:
    """Await a HiveFlow call, turning BackendError into a ToolError."""
    try:
        return await call
    except BackendError as e:
        _log_status(f"{tool_name} failed ({e.kind}): {e.message}")
        raise ToolError(f"Error executing {tool_name}: {e.message}") from e


def create_server(settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> FastMCP:
    """Build the FastMCP server bound to one HiveFlow backend.

    Args:
        settings: Backend URL, API key and timeout, read once at startup.
        transport: Optional httpx transport (tests pass a MockTransport).
    """
    client = HiveFlowClient(settings, transport=transport)
    router = ResourceRouter(client)
    mcp = FastMCP(SERVER_NAME)

    _register_tools(mcp, client)
    _register_resources(mcp, router)
    return mcp


# =============================================================================
# TOOLS
# =============================================================================
# The docstring of each tool is what the assistant reads to decide when to
# call it, so keep them specific.
# =============================================================================
def _register_tools(mcp: FastMCP, client: HiveFlowClient) -> None:

    @mcp.tool()
    async def create_flow(name: str, description: str, nodes: Optional[list[dict]] = None) -> str:
        """Create a new workflow in HiveFlow.

        Args:
            name: Name of the flow.
            description: What the flow does.
            nodes: Flow nodes (optional). The flow is created as a draft.
        """
        _log_request("create_flow", name=name, description=description, nodes=nodes)
        body = await _call_backend("create_flow", client.create_flow(name, description, nodes))
        return _log_response("create_flow", formatting.format_flow_created(name, body))

    @mcp.tool()
    async def list_flows(
        status: Optional[Literal["active", "paused", "stopped", "draft"]] = None,
        limit: int = 50,
    ) -> str:
        """List the user's workflows.

        Args:
            status: Only return flows in this state (optional).
            limit: Maximum number of flows to return.
        """
        _log_request("list_flows", status=status, limit=limit)
        body = await _call_backend("list_flows", client.list_flows(status=status, limit=limit))
        return _log_response("list_flows", formatting.format_flow_list(body))

    @mcp.tool()
    async def get_flow(flowId: str) -> str:
        """Get the details of a specific flow.

        Args:
            flowId: ID of the flow.
        """
        _log_request("get_flow", flowId=flowId)
        body = await _call_backend("get_flow", client.get_flow(flowId))
        return _log_response("get_flow", formatting.format_flow_details(body))

    @mcp.tool()
    async def execute_flow(flowId: str, inputs: Optional[dict[str, Any]] = None) -> str:
        """Run a specific workflow.

        Args:
            flowId: ID of the flow to run.
            inputs: Optional inputs passed to the flow.
        """
        _log_request("execute_flow", flowId=flowId, inputs=inputs)
        body = await _call_backend("execute_flow", client.execute_flow(flowId, inputs))
        return _log_response("execute_flow", formatting.format_flow_executed(body))

    @mcp.tool()
    async def pause_flow(flowId: str) -> str:
        """Pause an active flow.

        Args:
            flowId: ID of the flow to pause.
        """
        _log_request("pause_flow", flowId=flowId)
        body = await _call_backend("pause_flow", client.pause_flow(flowId))
        return _log_response("pause_flow", formatting.format_flow_paused(body))

    @mcp.tool()
    async def resume_flow(flowId: str) -> str:
        """Resume a paused flow.

        Args:
            flowId: ID of the flow to resume.
        """
        _log_request("resume_flow", flowId=flowId)
        body = await _call_backend("resume_flow", client.resume_flow(flowId))
        return _log_response("resume_flow", formatting.format_flow_resumed(body))

    @mcp.tool()
    async def list_mcp_servers() -> str:
        """List the MCP servers configured in HiveFlow."""
        _log_request("list_mcp_servers")
        body = await _call_backend("list_mcp_servers", client.list_servers())
        return _log_response("list_mcp_servers", formatting.format_server_list(body))

    @mcp.tool()
    async def create_mcp_server(
        name: str,
        command: str,
        args: Optional[list[str]] = None,
        description: str = "",
    ) -> str:
        """Register a new MCP server in HiveFlow.

        Args:
            name: Unique name of the MCP server.
            command: Command that starts the server.
            args: Command arguments.
            description: What the server provides.
        """
        _log_request("create_mcp_server", name=name, command=command, args=args, description=description)
        await _call_backend("create_mcp_server", client.create_server(name, command, args, description))
        return _log_response("create_mcp_server", formatting.format_server_created(name, command))

    @mcp.tool()
    async def get_flow_executions(flowId: str, limit: int = 10) -> str:
        """Get the execution history of a flow.

        Args:
            flowId: ID of the flow.
            limit: Maximum number of executions to return.
        """
        _log_request("get_flow_executions", flowId=flowId, limit=limit)
        body = await _call_backend("get_flow_executions", client.list_executions(flowId, limit=limit))
        return _log_response("get_flow_executions", formatting.format_execution_list(body))


# =============================================================================
# RESOURCES
# =============================================================================
# FastMCP needs one function per address, with parameters named after the
# template placeholders.  All of them funnel into read_resource(); the
# URI router decides what each address means.
#
# FastMCP passes placeholder values percent-decoded.  They are re-encoded
# before the URI is rebuilt, so an id such as "a/executions" stays one
# segment and cannot land on a different address.
# =============================================================================
def _register_literal(mcp: FastMCP, router: ResourceRouter, address: LiteralAddress) -> None:
    async def read() -> str:
        return (await read_resource(address.uri, router)).text

    mcp.resource(
        address.uri,
        name=address.name,
        description=address.description,
        mime_type=address.mime_type,
    )(read)


def _register_resources(mcp: FastMCP, router: ResourceRouter) -> None:
    for address in LITERAL_RESOURCES:
        _register_literal(mcp, router, address)

    executions_template, flow_template = RESOURCE_TEMPLATES

    @mcp.resource(
        executions_template.uri_template,
        name=executions_template.name,
        description=executions_template.description,
        mime_type=executions_template.mime_type,
    )
    async def read_flow_executions(flowId: str) -> str:
        return (await read_resource(f"{SCHEME}flows/{quote(flowId, safe='')}/executions", router)).text

    @mcp.resource(
        flow_template.uri_template,
        name=flow_template.name,
        description=flow_template.description,
        mime_type=flow_template.mime_type,
    )
    async def read_flow(flowId: str) -> str:
        return (await read_resource(f"{SCHEME}flows/{quote(flowId, safe='')}", router)).text

    @mcp.resource(
        f"{SCHEME}{{path*}}",
        name="Unlisted HiveFlow Address (fallback)",
        description=(
            "Not a resource type. Catches any other hiveflow:// address so it "
            "gets a JSON answer; unknown addresses return the resource catalog."
        ),
        mime_type="application/json",
    )
    async def read_any(path: str) -> str:
        return (await read_resource(f"{SCHEME}{quote(path, safe='/')}", router)).text
