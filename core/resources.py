# =============================================================================
# core/resources.py  -  Fault-Containment Wrapper for resource reads
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   read_resource() is the single entry point the MCP layer uses to serve a
#   resource.  It runs the whole pipeline
#
#       ResourceRouter.resolve()  ->  normalize()
#
#   inside one boundary.  Whatever goes wrong in there (a backend outage,
#   an unexpected payload, a bug in a handler, even a failure while building
#   an error response) comes back as NormalizedContent with an error
#   envelope.  No exception crosses this boundary to the transport: an
#   unhandled exception would end the client's MCP session instead of
#   reporting a recoverable error.
#
#   Cancellation (asyncio.CancelledError) and interpreter exits are
#   BaseExceptions and are deliberately not caught.
# =============================================================================

from typing import Any

from core.events import emit_event
from core.models import InternalError, NormalizedContent
from core.normalizer import describe_exception, last_resort_content, normalize, safe_uri
from core.router import ResourceRouter


async def read_resource(uri: Any, router: ResourceRouter) -> NormalizedContent:
    """Resolve `uri` and return normalized content.  Never raises."""
    try:
        emit_event("resolution_started", uri=safe_uri(uri))
        try:
            outcome = await router.resolve(uri)
        except Exception as e:
            emit_event("fallback_triggered", uri=safe_uri(uri), reason="internal", error=describe_exception(e))
            outcome = InternalError(f"internal error: {describe_exception(e)}")

        content = normalize(outcome, uri)
        emit_event("resolution_finished", uri=content.uri, is_error=content.is_error)
        return content
    except Exception as e:
        # normalize() is total, so reaching this means something truly odd
        # (e.g. a broken log handler).  Build the answer from what's at hand.
        return last_resort_content(uri, e)
