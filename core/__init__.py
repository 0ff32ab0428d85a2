# =============================================================================
# core/__init__.py
# =============================================================================
# Business logic for the enterprise support server: record models, the
# static record store, customer/ticket lookup and the guidance engine.
#
# Nothing in this package imports FastMCP.  Every module can be used (and
# tested) from a bare Python REPL.
# =============================================================================
