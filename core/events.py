# =============================================================================
# core/events.py  -  Structured events for the resource layer
# =============================================================================
#
# The router and the fault-containment wrapper report what they are doing
# through emit_event() instead of printing as they go.  Events are emitted
# at fixed points only:
#
#   resolution_started    a read request entered the wrapper
#   backend_call_failed   a backend call raised BackendError
#   parent_skipped        one flow was left out of the executions aggregate
#   fallback_triggered    a last-resort or substitute envelope was produced
#   resolution_finished   the wrapper is returning content
#
# Each event is a single log line on the "hiveflow.events" logger:
#   event=backend_call_failed {"uri":"hiveflow://flows","kind":"unreachable"}
#
# Like every other log line in this process it goes to STDERR, never STDOUT,
# because STDOUT carries the MCP protocol stream.
# =============================================================================

import json
import logging

logger = logging.getLogger("hiveflow.events")


def emit_event(name: str, level: int = logging.INFO, **fields) -> None:
    """Log one structured event.  Never raises."""
    try:
        payload = json.dumps(fields, separators=(",", ":"), default=str)
    except Exception:
        payload = "{}"
    logger.log(level, "event=%s %s", name, payload)
