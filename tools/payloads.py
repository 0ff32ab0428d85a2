# =============================================================================
# tools/payloads.py  -  core results -> JSON-ready dicts for the agent
# =============================================================================
#
# The core/ layer speaks snake_case dataclasses; the agent sees camelCase
# dicts.  Every conversion lives here so the MCP server stays a thin
# wrapper and the wire format can be tested without a running server.
#
# CONTEXT BUDGET DISCIPLINE:
#   Tickets omit their long description, customers omit non-primary
#   contacts.  The agent gets what it reasons about, nothing more.
# =============================================================================

from datetime import datetime
from typing import Optional

from core.guidance import api_usage_status, format_currency, renewal_status
from core.lookup import primary_contact
from core.models import (
    Customer,
    CustomerNotFound,
    EscalationRule,
    OpenTickets,
    ResponseGuidance,
    SupportGuidance,
    TierNotFound,
)


def _timestamp(moment: datetime) -> str:
    return moment.isoformat().replace("+00:00", "Z")


def escalation_rule_payload(rule: Optional[EscalationRule]) -> Optional[dict]:
    if rule is None:
        return None
    return {
        "maxResponseTime": rule.max_response_time,
        "escalateTo": rule.escalate_to,
        "autoEscalateAfter": rule.auto_escalate_after,
    }


def not_found_payload(result: CustomerNotFound) -> dict:
    payload = {"found": False, "message": result.message}
    if result.suggestion:
        payload["suggestion"] = result.suggestion
    return payload


def tier_not_found_payload(result: TierNotFound) -> dict:
    return {"error": result.message, "validTiers": list(result.valid_tiers)}


def support_guidance_payload(guidance: SupportGuidance) -> dict:
    return {
        "priorityLevel": guidance.priority_level,
        "responseTimeTarget": guidance.response_time_target,
        "keyGuidance": list(guidance.key_guidance),
        "accountManager": guidance.account_manager,
    }


def customer_payload(customer: Customer, now: Optional[datetime] = None) -> dict:
    """The customer block of lookup_customer, with derived fields filled in."""
    contact = primary_contact(customer)
    renewal = renewal_status(customer, now)
    usage = customer.api_usage
    history = customer.support_history
    return {
        "id": customer.id,
        "company": customer.company,
        "tier": customer.tier,
        "accountManager": customer.account_manager,
        "contractValue": format_currency(customer.contract_value),
        "renewalStatus": {
            "date": renewal.renewal_date.isoformat(),
            "daysUntil": renewal.days_until,
            "urgent": renewal.urgent,
        },
        "products": list(customer.products),
        "apiUsage": {
            "monthlyTokens": usage.monthly_tokens,
            "monthlyLimit": usage.monthly_limit,
            "utilizationPercent": usage.utilization_percent,
            "status": api_usage_status(usage.exact_utilization_percent),
        },
        "primaryContact": {
            "name": contact.name,
            "role": contact.role,
            "email": contact.email,
        } if contact else None,
        "supportHistory": {
            "totalTickets": history.total_tickets,
            "avgResolutionHours": history.avg_resolution_hours,
            "csat": history.csat,
        },
        # Sorted so the payload is stable across runs.
        "activeFlags": sorted(customer.flags),
        "knownIssues": list(customer.known_issues),
    }


def lookup_payload(
    customer: Customer,
    guidance: SupportGuidance,
    now: Optional[datetime] = None,
) -> dict:
    return {
        "found": True,
        "customer": customer_payload(customer, now),
        "supportGuidance": support_guidance_payload(guidance),
    }


def open_tickets_payload(result: OpenTickets) -> dict:
    customer = result.customer
    return {
        "customerId": customer.id,
        "company": customer.company,
        "tier": customer.tier,
        "openTicketCount": result.count,
        "tickets": [
            {
                "id": item.ticket.id,
                "subject": item.ticket.subject,
                "status": item.ticket.status,
                "priority": item.ticket.priority,
                "ageInDays": item.age_in_days,
                "lastUpdated": item.ticket.last_updated_text or _timestamp(item.ticket.last_updated),
                "assignee": item.ticket.assignee,
                "tags": list(item.ticket.tags),
            }
            for item in result.tickets
        ],
        "escalationRule": escalation_rule_payload(result.escalation_rule),
    }


def response_guidance_payload(guidance: ResponseGuidance) -> dict:
    return {
        "customer": {
            "company": guidance.company,
            "tier": guidance.tier,
            "primaryContact": guidance.primary_contact,
        },
        "issueType": guidance.issue_type,
        "responseTemplate": guidance.response_template,
        "toneGuidance": list(guidance.tone_guidance),
        "escalationPath": escalation_rule_payload(guidance.escalation_path),
        "additionalContext": list(guidance.additional_context),
    }
