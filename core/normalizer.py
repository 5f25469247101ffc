# =============================================================================
# core/normalizer.py  -  Response Normalizer
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Turns a resolution Outcome into the NormalizedContent record handed
#   back to the MCP transport.  normalize() is a TOTAL function: whatever
#   it is given, it returns content whose text is a non-empty JSON document.
#
#   Success(data)          -> JSON of data ([] when data is None)
#   UpstreamError / InternalError
#                          -> {"error", "uri", "timestamp", "data"}
#
# TWO GUARDS:
#   1. Serialization is attempted inside try/except.  A payload that can't
#      be encoded (cyclic, NaN, arbitrary objects) is replaced by
#      {"error": "serialization failed: <cause>", "uri", "timestamp"}.
#   2. The finished body is checked once more.  If it is not a non-empty
#      string, a hard-coded envelope is substituted.
#
#   A resource read must always produce something the caller can parse;
#   a malformed content record is worse than an honest error.
# =============================================================================

import json
from datetime import datetime, timezone
from typing import Any, Optional

from core.events import emit_event
from core.models import (
    SCHEME,
    InternalError,
    NormalizedContent,
    Outcome,
    Success,
    UpstreamError,
)

UNKNOWN_URI = f"{SCHEME}unknown"

_FALLBACK_BODY = (
    '{"error": "internal error: response could not be constructed", '
    f'"uri": "{UNKNOWN_URI}", "timestamp": null}}'
)


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2025-01-31T12:00:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def describe_exception(exc: BaseException) -> str:
    """A message for `exc` that is never empty and never raises."""
    try:
        text = str(exc)
    except Exception:
        text = ""
    try:
        name = type(exc).__name__
    except Exception:
        name = "Exception"
    return text or name


def safe_uri(uri: Any) -> str:
    return uri if isinstance(uri, str) and uri else UNKNOWN_URI


def _dumps(value: Any) -> str:
    # allow_nan=False: NaN/Infinity are not valid JSON
    return json.dumps(value, indent=2, ensure_ascii=False, allow_nan=False)


def error_envelope(message: str, uri: str, data: Any = None) -> dict[str, Any]:
    return {
        "error": message,
        "uri": uri,
        "timestamp": utc_timestamp(),
        "data": data,
    }


def _serialization_failure_body(uri: str, exc: BaseException) -> str:
    try:
        return _dumps({
            "error": f"serialization failed: {describe_exception(exc)}",
            "uri": uri,
            "timestamp": utc_timestamp(),
        })
    except Exception:
        return _FALLBACK_BODY


def _is_usable(body: Any) -> bool:
    return isinstance(body, str) and bool(body.strip())


def normalize(outcome: Outcome, uri: Any) -> NormalizedContent:
    """Build the NormalizedContent for `outcome`.  Never raises."""
    uri = safe_uri(uri)
    is_error = not isinstance(outcome, Success)

    body: Optional[str]
    try:
        if isinstance(outcome, Success):
            body = _dumps([] if outcome.data is None else outcome.data)
        elif isinstance(outcome, UpstreamError):
            body = _dumps(error_envelope(outcome.message, uri, outcome.data))
        elif isinstance(outcome, InternalError):
            body = _dumps(error_envelope(outcome.message, uri))
        else:
            body = _dumps(error_envelope(f"unrecognized outcome: {type(outcome).__name__}", uri))
    except Exception as e:
        emit_event("fallback_triggered", uri=uri, reason="serialization", error=describe_exception(e))
        body = _serialization_failure_body(uri, e)
        is_error = True

    if not _is_usable(body):
        emit_event("fallback_triggered", uri=uri, reason="empty_body")
        body = _FALLBACK_BODY
        is_error = True

    return NormalizedContent(uri=uri, text=body, is_error=is_error)


def last_resort_content(uri: Any, exc: BaseException) -> NormalizedContent:
    """Content built from local information only, for the outermost boundary."""
    uri = safe_uri(uri)
    try:
        body = json.dumps({
            "error": f"internal error: {describe_exception(exc)}",
            "uri": uri,
            "timestamp": utc_timestamp(),
        }, indent=2)
    except Exception:
        body = _FALLBACK_BODY
    return NormalizedContent(uri=uri, text=body, is_error=True)
