# =============================================================================
# core/__init__.py
# =============================================================================
# This package contains the HiveFlow adapter logic: the backend client, the
# resource catalog, the URI router, the response normalizer and the
# fault-containment wrapper around them.
#
# ARCHITECTURAL RULE:
#   Nothing in this package imports FastMCP.  The router and normalizer can
#   be exercised in a plain Python process against a fake client, which is
#   exactly what tests/ does.
# =============================================================================
