# =============================================================================
# main.py  -  Entry point for the HiveFlow MCP server
# =============================================================================
#
# HOW TO RUN:
#   hiveflow-mcp --api-key <key>
#   hiveflow-mcp --api-url https://hiveflow.example.com --instance-id acme
#
#   Every flag falls back to an environment variable (HIVEFLOW_API_URL,
#   HIVEFLOW_API_KEY, HIVEFLOW_INSTANCE_ID, HIVEFLOW_TIMEOUT), and a .env
#   file in the working directory is loaded first.
#
# WHAT HAPPENS:
#   1. Loads .env and parses the command line
#   2. Builds the immutable Settings (exits with status 1 if no API key)
#   3. Builds the FastMCP server (hiveflow_mcp/mcp_server.py)
#   4. Serves MCP over stdio until the host closes the stream
#
# An MCP host (Claude Desktop, an IDE, an agent framework) normally starts
# this process itself and talks to it over stdin/stdout, so everything we
# print goes to STDERR.
# =============================================================================

import argparse
import logging
import sys
from typing import Optional, Sequence

from dotenv import load_dotenv

from core.config import ConfigError, load_settings
from hiveflow_mcp.mcp_server import create_server

__version__ = "1.0.0"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hiveflow-mcp",
        description="HiveFlow MCP Server - Connect your AI assistant to HiveFlow",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--api-url", help="HiveFlow API URL (env: HIVEFLOW_API_URL)")
    parser.add_argument("--api-key", help="HiveFlow API key (env: HIVEFLOW_API_KEY)")
    parser.add_argument(
        "--instance-id",
        help="HiveFlow instance ID, for multi-tenant deployments (env: HIVEFLOW_INSTANCE_ID)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Per-request timeout in seconds (env: HIVEFLOW_TIMEOUT, default 30)",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    # Load environment variables from .env BEFORE reading settings
    load_dotenv()

    args = build_parser().parse_args(argv)
    try:
        settings = load_settings(
            api_url=args.api_url,
            api_key=args.api_key,
            instance_id=args.instance_id,
            timeout=args.timeout,
        )
    except ConfigError as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        print("💡 Set the environment variable or use the matching command-line flag", file=sys.stderr)
        return 1

    mcp = create_server(settings)
    logging.info(f"🚀 HiveFlow MCP Server started (backend: {settings.api_url})")
    mcp.run()
    return 0


# =============================================================================
# Script entry point
# =============================================================================
if __name__ == "__main__":
    sys.exit(main())
