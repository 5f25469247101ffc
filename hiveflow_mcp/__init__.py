# =============================================================================
# hiveflow_mcp/__init__.py
# =============================================================================
# This package contains the FastMCP wiring for the HiveFlow adapter.
#
# ARCHITECTURAL ROLE:
#   hiveflow_mcp/ is the "translation layer" between the MCP protocol and
#   the HiveFlow logic in core/.  It:
#     1. Registers tools and resources with FastMCP
#     2. Hands every resource read to core.resources.read_resource()
#     3. Turns backend failures on tool calls into MCP tool errors
#
# WHAT IT DOES NOT DO:
#   - It does NOT match URIs or build JSON envelopes (core/router.py,
#     core/normalizer.py)
#   - It does NOT talk HTTP itself (core/hiveflow_client.py)
# =============================================================================
