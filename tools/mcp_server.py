# =============================================================================
# tools/mcp_server.py  -  FastMCP Tool Server (ALL tools in one place)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Defines the four MCP tools the support agent can call.  Each tool is a
#   thin wrapper around core/ functions: it logs the call, runs the lookup
#   or guidance logic, and returns a JSON-ready dict from tools/payloads.py.
#
# HOW IT WORKS (the flow):
#   1. main.py loads the RecordStore once and calls create_server(store)
#   2. create_server() binds a SupportTools object to that store and
#      registers its methods as MCP tools
#   3. The agent calls a tool by name (e.g., "lookup_customer")
#   4. FastMCP validates the arguments (issueType and tier are closed
#      Literal sets, so bad values never reach core/) and calls the method
#   5. The agent receives a compact, structured payload
#
# TOOLS:
#   - lookup_customer        → account details + support guidance
#   - get_open_tickets       → open/pending/in-progress tickets with age
#   - get_response_guidance  → tone, template, context for an issue type
#   - check_escalation_rules → SLA policy for a tier
#   All tools are read-only and safe to retry.
#
# ERRORS:
#   "Not found" is a normal answer, returned as a payload.  A missing
#   escalation rule for an escalation request is a data-integrity fault;
#   it is reported as a PRECONDITION_VIOLATION payload for that one call.
# =============================================================================

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Callable, Optional

from fastmcp import FastMCP

from core.config import Settings
from core.errors import EscalationRuleMissingError
from core.guidance import derive_response_guidance, derive_support_guidance, tier_guidance
from core.lookup import escalation_rule, find_customer, get_customer, open_tickets
from core.models import CustomerNotFound, IssueType, Tier, TierNotFound
from core.store import RecordStore
from tools.payloads import (
    escalation_rule_payload,
    lookup_payload,
    not_found_payload,
    open_tickets_payload,
    response_guidance_payload,
    tier_not_found_payload,
)

logger = logging.getLogger(__name__)

# =============================================================================
# Logging Setup
# =============================================================================
# Logs go to STDERR: with the stdio transport, STDOUT carries the MCP JSON
# stream and any stray print would corrupt it.
#
# ANSI colours make tool traffic easy to scan in a terminal:
#   CYAN   - incoming requests (tool name + parameters)
#   YELLOW - intermediate status
#   GREEN  - response JSON
# =============================================================================
_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RESET = "\033[0m"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [MCP] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def _log_request(tool_name: str, **params) -> None:
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items())
    logger.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    logger.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, result: dict) -> dict:
    """Log the tool response as compact JSON, then return it."""
    logger.info(
        f"{_GREEN}  ← {tool_name} response: "
        f"{json.dumps(result, separators=(',', ':'), ensure_ascii=False)}{_RESET}"
    )
    return result


# =============================================================================
# SupportTools - the tool implementations, bound to one RecordStore
# =============================================================================
# The docstrings are the tool descriptions the LLM reads when deciding
# which tool to call, so they say WHEN to call and WHAT comes back.
# =============================================================================
class SupportTools:
    def __init__(
        self,
        store: RecordStore,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.store = store
        self.settings = settings or Settings()
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    # -------------------------------------------------------------------------
    # TOOL 1: lookup_customer
    # -------------------------------------------------------------------------
    def lookup_customer(self, query: str) -> dict:
        """Get customer account details by company name or customer ID.

        WHEN TO CALL THIS: First, whenever a support request names a company
        or account. The guidance it returns decides how to handle everything
        else in the conversation.

        Args:
            query: Company name (partial, case-insensitive) or customer ID
                   (e.g., "ENT-001", "Acme").

        Returns:
            {found: true, customer: {...}, supportGuidance: {priorityLevel,
            responseTimeTarget, keyGuidance, accountManager}} on a match, or
            {found: false, message, suggestion} when nothing matches.
        """
        _log_request("lookup_customer", query=query)

        customer = find_customer(self.store, query)
        if isinstance(customer, CustomerNotFound):
            _log_status("No matching customer")
            return _log_response("lookup_customer", not_found_payload(customer))

        _log_status(f"Matched {customer.id} ({customer.company}, {customer.tier})")
        guidance = derive_support_guidance(
            self.store, customer, self.settings.default_response_time
        )
        return _log_response(
            "lookup_customer", lookup_payload(customer, guidance, self.clock())
        )

    # -------------------------------------------------------------------------
    # TOOL 2: get_open_tickets
    # -------------------------------------------------------------------------
    def get_open_tickets(self, customerId: str) -> dict:
        """Retrieve open, pending and in-progress support tickets for a customer.

        WHEN TO CALL THIS: After lookup_customer, to see what is already in
        flight before answering. Resolved and closed tickets are excluded.

        Args:
            customerId: Exact customer ID (e.g., "ENT-001").

        Returns:
            {customerId, company, tier, openTicketCount, tickets: [{id,
            subject, status, priority, ageInDays, lastUpdated, assignee,
            tags}], escalationRule}, or {found: false, message}.
        """
        _log_request("get_open_tickets", customerId=customerId)

        result = open_tickets(self.store, customerId, now=self.clock())
        if isinstance(result, CustomerNotFound):
            _log_status("Unknown customer ID")
            return _log_response("get_open_tickets", not_found_payload(result))

        _log_status(f"{result.count} open ticket(s)")
        return _log_response("get_open_tickets", open_tickets_payload(result))

    # -------------------------------------------------------------------------
    # TOOL 3: get_response_guidance
    # -------------------------------------------------------------------------
    def get_response_guidance(self, customerId: str, issueType: IssueType) -> dict:
        """Get personalized response recommendations for a customer and issue type.

        WHEN TO CALL THIS: Right before drafting a reply. Returns a response
        template to fill in, tone guidance for the customer's tier, and the
        context worth mentioning.

        Args:
            customerId: Exact customer ID (e.g., "ENT-001").
            issueType: One of billing, technical, api, account,
                       feature_request, escalation.

        Returns:
            {customer: {company, tier, primaryContact}, issueType,
            responseTemplate, toneGuidance, escalationPath,
            additionalContext}, or {found: false, message}.  If an
            escalation is requested for a tier with no escalation rule,
            returns {error, errorType: "PRECONDITION_VIOLATION", ...}.
        """
        _log_request("get_response_guidance", customerId=customerId, issueType=issueType)

        customer = get_customer(self.store, customerId)
        if isinstance(customer, CustomerNotFound):
            _log_status("Unknown customer ID")
            return _log_response("get_response_guidance", not_found_payload(customer))

        try:
            guidance = derive_response_guidance(self.store, customer, issueType)
        except EscalationRuleMissingError as exc:
            logger.warning("Precondition violation for %s: %s", customerId, exc)
            return _log_response("get_response_guidance", {
                "error": str(exc),
                "errorType": "PRECONDITION_VIOLATION",
                "customerId": customerId,
                "tier": exc.tier,
                "issueType": issueType,
            })

        _log_status(f"Template for {issueType} ({customer.tier})")
        return _log_response("get_response_guidance", response_guidance_payload(guidance))

    # -------------------------------------------------------------------------
    # TOOL 4: check_escalation_rules
    # -------------------------------------------------------------------------
    def check_escalation_rules(self, tier: Tier) -> dict:
        """Get escalation requirements and timelines for a customer tier.

        WHEN TO CALL THIS: When deciding whether and to whom an issue should
        be escalated, or when the SLA for a tier is in question.

        Args:
            tier: One of Standard, Growth, Enterprise, Enterprise Plus.

        Returns:
            {tier, escalationRules: {maxResponseTime, escalateTo,
            autoEscalateAfter}, guidance}, or {error, validTiers}.
        """
        _log_request("check_escalation_rules", tier=tier)

        rule = escalation_rule(self.store, tier)
        if isinstance(rule, TierNotFound):
            _log_status("No rule for tier")
            return _log_response("check_escalation_rules", tier_not_found_payload(rule))

        return _log_response("check_escalation_rules", {
            "tier": tier,
            "escalationRules": escalation_rule_payload(rule),
            "guidance": tier_guidance(tier),
        })


# =============================================================================
# Server factory
# =============================================================================
def create_server(
    store: RecordStore,
    settings: Optional[Settings] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> FastMCP:
    """Create a FastMCP server whose tools read from `store`.

    The store must already be loaded; the server never touches the dataset
    file itself.
    """
    settings = settings or Settings()
    tools = SupportTools(store, settings, clock)

    mcp = FastMCP(settings.server_name)
    mcp.tool(tools.lookup_customer)
    mcp.tool(tools.get_open_tickets)
    mcp.tool(tools.get_response_guidance)
    mcp.tool(tools.check_escalation_rules)
    return mcp
