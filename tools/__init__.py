# =============================================================================
# tools/__init__.py
# =============================================================================
# FastMCP tool wrappers.
#
# tools/ is the translation layer between the MCP protocol and core/:
#   - mcp_server.py registers the four tools and logs each call
#   - payloads.py turns core dataclasses into camelCase dicts
#
# No guidance or lookup rules live here; those are in core/.
# =============================================================================
