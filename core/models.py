# =============================================================================
# core/models.py  -  Data Models (the "nouns" of the resource layer)
# =============================================================================
#
# These dataclasses define the shape of everything that flows through a
# resource read:
#
#   URI ──▶ ResourceAddress ──▶ Outcome ──▶ NormalizedContent ──▶ transport
#
# OUTCOMES ARE A TAGGED UNION:
#   Exactly one of Success / UpstreamError / InternalError comes out of a
#   resolution.  They are created per read, handed to the normalizer, and
#   thrown away.  Nothing here is ever persisted.
#
# WHY DATACLASSES (and frozen ones)?
#   Settings and outcomes are built once and never mutated.  Frozen
#   dataclasses make that a property of the type, so concurrent reads can
#   share them without locks.
# =============================================================================

from dataclasses import dataclass
from typing import Any, Optional, Union
from urllib.parse import unquote

SCHEME = "hiveflow://"
JSON_MIME_TYPE = "application/json"


# -----------------------------------------------------------------------------
# Resource addresses
# -----------------------------------------------------------------------------
# A LiteralAddress matches one exact URI.  A TemplateAddress matches a
# scheme-qualified path segment by segment, binding {placeholders} in order.
# `handler` names the router method that serves the address.
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class LiteralAddress:
    """An exact-match resource URI, e.g. ``hiveflow://flows``."""

    uri: str
    name: str
    description: str
    handler: str
    mime_type: str = JSON_MIME_TYPE

    def match(self, uri: str) -> Optional[dict[str, str]]:
        return {} if uri == self.uri else None


@dataclass(frozen=True)
class TemplateAddress:
    """A templated resource URI, e.g. ``hiveflow://flows/{flowId}``.

    The pattern is compared segment by segment against the path that
    follows the scheme prefix.  Fixed segments must be equal; placeholder
    segments bind the URI segment under the placeholder's name and never
    bind an empty string.  Bound values are percent-decoded, so
    ``flows/a%2Fb`` binds the single id ``a/b``.
    """

    uri_template: str
    name: str
    description: str
    handler: str
    mime_type: str = JSON_MIME_TYPE

    @property
    def segments(self) -> list[str]:
        return self.uri_template[len(SCHEME):].split("/")

    @property
    def fixed_segment_count(self) -> int:
        return sum(1 for seg in self.segments if not _is_placeholder(seg))

    def match(self, uri: str) -> Optional[dict[str, str]]:
        if not uri.startswith(SCHEME):
            return None
        parts = uri[len(SCHEME):].split("/")
        pattern = self.segments
        if len(parts) != len(pattern):
            return None

        bound: dict[str, str] = {}
        for expected, actual in zip(pattern, parts):
            if _is_placeholder(expected):
                if not actual:
                    return None
                bound[expected[1:-1]] = unquote(actual)
            elif expected != actual:
                return None
        return bound


def _is_placeholder(segment: str) -> bool:
    return segment.startswith("{") and segment.endswith("}")


ResourceAddress = Union[LiteralAddress, TemplateAddress]


# -----------------------------------------------------------------------------
# Resolution outcomes
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Success:
    """The backend answered and the payload has the expected shape."""

    data: Any = None


@dataclass(frozen=True)
class UpstreamError:
    """The backend failed, was unreachable, or returned a malformed payload.

    Also used for unresolved addresses, in which case ``data`` carries the
    catalog listing so the caller can see what *is* available.
    """

    message: str
    source_uri: str
    data: Any = None


@dataclass(frozen=True)
class InternalError:
    """A defect inside the adapter itself."""

    message: str


Outcome = Union[Success, UpstreamError, InternalError]


# -----------------------------------------------------------------------------
# NormalizedContent - the unit handed back to the transport
# -----------------------------------------------------------------------------
# `text` is ALWAYS a non-empty JSON document.  On success it is the payload;
# on failure it is an envelope of the form
#     {"error": ..., "uri": ..., "timestamp": ..., "data": ...}
# so that a caller has a single parsing path regardless of outcome.
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class NormalizedContent:
    uri: str
    text: str
    mime_type: str = JSON_MIME_TYPE
    is_error: bool = False


# -----------------------------------------------------------------------------
# Settings - process-wide configuration, read once at startup
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Settings:
    """Connection settings for the HiveFlow backend."""

    api_url: str                       # "https://api.hiveflow.ai"
    api_key: str                       # Sent as "Authorization: ApiKey <key>"
    instance_id: Optional[str] = None  # Multi-tenant instance, optional
    timeout: float = 30.0              # Per-request timeout (seconds)
