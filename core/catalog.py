# =============================================================================
# core/catalog.py  -  Resource Catalog (what we advertise to MCP clients)
# =============================================================================
#
# Static declarations only.  These lists drive two things:
#   - registration with FastMCP (resources/list, resources/templates/list)
#   - the listing returned when a client asks for an address we don't serve
#
# Resolution itself lives in core/router.py.  The router pulls its literal
# and template tables from here, so the two can never drift apart.
# =============================================================================

from core.models import SCHEME, LiteralAddress, TemplateAddress

FLOWS_URI = f"{SCHEME}flows"
SERVERS_URI = f"{SCHEME}mcp-servers"
EXECUTIONS_URI = f"{SCHEME}executions"

LITERAL_RESOURCES: tuple[LiteralAddress, ...] = (
    LiteralAddress(
        uri=FLOWS_URI,
        name="HiveFlow Flows",
        description="List of all workflows",
        handler="flows",
    ),
    LiteralAddress(
        uri=SERVERS_URI,
        name="MCP Servers",
        description="List of MCP servers registered in HiveFlow",
        handler="servers",
    ),
    LiteralAddress(
        uri=EXECUTIONS_URI,
        name="Flow Executions",
        description="Recent execution history across flows",
        handler="all_executions",
    ),
)

RESOURCE_TEMPLATES: tuple[TemplateAddress, ...] = (
    TemplateAddress(
        uri_template=f"{SCHEME}flows/{{flowId}}/executions",
        name="Flow Execution History",
        description="Execution history of a specific flow",
        handler="flow_executions",
    ),
    TemplateAddress(
        uri_template=f"{SCHEME}flows/{{flowId}}",
        name="Flow Details",
        description="Details of a specific flow",
        handler="flow",
    ),
)


def catalog_listing() -> dict:
    """Describe every advertised address, in the shape MCP clients know."""
    return {
        "resources": [
            {
                "uri": r.uri,
                "name": r.name,
                "description": r.description,
                "mimeType": r.mime_type,
            }
            for r in LITERAL_RESOURCES
        ],
        "resourceTemplates": [
            {
                "uriTemplate": t.uri_template,
                "name": t.name,
                "description": t.description,
                "mimeType": t.mime_type,
            }
            for t in RESOURCE_TEMPLATES
        ],
    }
