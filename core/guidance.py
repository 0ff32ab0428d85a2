# =============================================================================
# core/guidance.py  -  Guidance Engine
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Turns a raw Customer record into the two kinds of advice the agent needs
#   before it answers a support request:
#
#     derive_support_guidance(store, customer)
#         -> SupportGuidance: priority level, response-time target and an
#            ordered list of handling directives.
#
#     derive_response_guidance(store, customer, issue_type)
#         -> ResponseGuidance: tone lines, a fill-in-the-blanks response
#            template and extra context for one issue type.
#
# THE RULE TABLE:
#   Support directives come from SUPPORT_GUIDANCE_RULES, an ordered tuple of
#   independent predicate -> messages rules.  Every rule whose predicate
#   holds contributes its messages, in table order.  Adding a directive is
#   adding a row; nothing else changes.
#
# PURITY:
#   No I/O, no clock reads except where a `now` argument defaults to the
#   current time.  Same customer in, same guidance out.
# =============================================================================

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from core.config import DEFAULT_RESPONSE_TIME
from core.errors import EscalationRuleMissingError
from core.lookup import days_until, primary_contact
from core.models import (
    Customer,
    RenewalStatus,
    ResponseGuidance,
    SupportGuidance,
)
from core.store import RecordStore

API_LIMIT_THRESHOLD = 90            # percent; at or above -> upgrade talk
RENEWAL_URGENT_DAYS = 30

# Greeting name when a customer has no primary contact.
GREETING_FALLBACK = "there"


# =============================================================================
# Support guidance rule table
# =============================================================================
@dataclass(frozen=True)
class GuidanceRule:
    """One row of the directive table."""

    name: str
    applies: Callable[[Customer], bool]
    messages: Callable[[Customer], tuple[str, ...]]


def _fixed(*lines: str) -> Callable[[Customer], tuple[str, ...]]:
    return lambda _customer: lines


def _has_flag(flag: str) -> Callable[[Customer], bool]:
    return lambda customer: flag in customer.flags


def _known_issues_message(customer: Customer) -> tuple[str, ...]:
    return (f"📋 Known issues to be aware of: {'; '.join(customer.known_issues)}",)


SUPPORT_GUIDANCE_RULES: tuple[GuidanceRule, ...] = (
    # --- Tier ---
    # The two tier rows are mutually exclusive (exact tier comparison).
    GuidanceRule(
        name="strategic_account",
        applies=lambda c: c.tier == "Enterprise Plus",
        messages=_fixed(
            "🔴 STRATEGIC ACCOUNT - White-glove service required",
            "Always CC account manager on responses",
            "Proactive status updates every 2 hours for open issues",
        ),
    ),
    GuidanceRule(
        name="enterprise",
        applies=lambda c: c.tier == "Enterprise",
        messages=_fixed(
            "Enterprise customer - Prioritize and personalize",
            "Loop in account manager for complex issues",
        ),
    ),
    # --- Flags ---
    GuidanceRule(
        name="high_value",
        applies=_has_flag("HIGH_VALUE"),
        messages=_fixed("💰 High-value account - Extra care on all interactions"),
    ),
    GuidanceRule(
        name="approaching_renewal",
        applies=_has_flag("APPROACHING_RENEWAL"),
        messages=_fixed("⚠️ Renewal approaching - Ensure positive experience"),
    ),
    GuidanceRule(
        name="expansion_opportunity",
        applies=_has_flag("EXPANSION_OPPORTUNITY"),
        messages=_fixed("📈 Expansion opportunity - Note upsell potential"),
    ),
    GuidanceRule(
        name="compliance_sensitive",
        applies=_has_flag("COMPLIANCE_SENSITIVE"),
        messages=_fixed("🔒 Compliance-sensitive - Document all interactions thoroughly"),
    ),
    # --- Usage ---
    GuidanceRule(
        name="api_limit",
        applies=lambda c: c.api_usage.exact_utilization_percent >= API_LIMIT_THRESHOLD,
        messages=_fixed("⚡ Approaching API limit - Proactively discuss upgrade options"),
    ),
    # --- Known issues ---
    GuidanceRule(
        name="known_issues",
        applies=lambda c: len(c.known_issues) > 0,
        messages=_known_issues_message,
    ),
)


def derive_support_guidance(
    store: RecordStore,
    customer: Customer,
    default_response_time: str = DEFAULT_RESPONSE_TIME,
) -> SupportGuidance:
    """Apply every rule in SUPPORT_GUIDANCE_RULES, in order, to `customer`.

    Rules are non-exclusive; a customer typically triggers several.  The
    response-time target comes from the tier's escalation rule, falling
    back to `default_response_time` when the tier has none.
    """
    directives: list[str] = []
    for rule in SUPPORT_GUIDANCE_RULES:
        if rule.applies(customer):
            directives.extend(rule.messages(customer))

    rule = store.escalation_rules.get(customer.tier)
    return SupportGuidance(
        priority_level="HIGH" if customer.is_enterprise else "STANDARD",
        response_time_target=rule.max_response_time if rule else default_response_time,
        key_guidance=tuple(directives),
        account_manager=customer.account_manager,
    )


# =============================================================================
# Response guidance (tone + template per issue type)
# =============================================================================
ENTERPRISE_TONE = (
    "Use professional, consultative tone",
    "Reference their specific use case if known",
    "Offer direct line or meeting for complex issues",
)
STANDARD_TONE = (
    "Friendly and helpful tone",
    "Clear, step-by-step guidance",
)
ESCALATION_TONE = (
    "Acknowledge frustration",
    "Provide concrete timeline",
    "Take ownership",
)


def derive_response_guidance(
    store: RecordStore,
    customer: Customer,
    issue_type: str,
) -> ResponseGuidance:
    """Build tone, template and context for answering `issue_type`.

    issue_type is expected to be one of ISSUE_TYPES (enforced at the tool
    boundary); anything unrecognised gets the generic template.

    Raises:
        EscalationRuleMissingError: issue_type is "escalation" and the
            customer's tier has no escalation rule.
    """
    contact = primary_contact(customer)
    greeting = contact.name if contact else GREETING_FALLBACK
    rule = store.escalation_rules.get(customer.tier)

    tone = list(ENTERPRISE_TONE if customer.is_enterprise else STANDARD_TONE)
    context: list[str] = []
    products = ", ".join(customer.products)
    utilization = format_percent(customer.api_usage.utilization_percent)

    if issue_type == "billing":
        template = (
            f"Hi {greeting},\n\n"
            "Thank you for reaching out about your billing inquiry. [Address specific question]\n\n"
            f"For reference, your current plan is {products} at "
            f"{format_currency(customer.contract_value)}/year.\n\n"
            "[Resolution or next steps]"
        )
        context.append(f"Contract value: {format_currency(customer.contract_value)}")
        context.append(f"Renewal date: {customer.renewal_date.isoformat()}")

    elif issue_type in ("api", "technical"):
        template = (
            f"Hi {greeting},\n\n"
            "Thank you for reporting this technical issue. [Acknowledge the problem]\n\n"
            f"Current API usage: {utilization}% of monthly limit\n\n"
            "[Technical solution or investigation steps]"
        )
        context.append(f"API utilization: {utilization}%")
        context.append(f"Products: {products}")
        if customer.known_issues:
            context.append(f"Known issues: {'; '.join(customer.known_issues)}")

    elif issue_type == "escalation":
        if rule is None:
            raise EscalationRuleMissingError(customer.tier, customer.id)
        template = (
            f"Hi {greeting},\n\n"
            "I understand the urgency of this issue and I'm escalating this to "
            f"{rule.escalate_to} immediately.\n\n"
            "[Summary of issue and actions taken]\n\n"
            f"You can expect an update within {rule.max_response_time}."
        )
        tone.extend(ESCALATION_TONE)

    else:
        template = (
            f"Hi {greeting},\n\n"
            "Thank you for contacting support. [Address their inquiry]\n\n"
            "[Resolution or next steps]"
        )

    return ResponseGuidance(
        company=customer.company,
        tier=customer.tier,
        primary_contact=contact.name if contact else None,
        issue_type=issue_type,
        response_template=template,
        tone_guidance=tuple(tone),
        escalation_path=rule,
        additional_context=tuple(context),
    )


# =============================================================================
# Small classifiers used by the lookup_customer / check_escalation_rules tools
# =============================================================================
# Checked top to bottom; first threshold met wins.
_API_USAGE_STATUSES: tuple[tuple[float, str], ...] = (
    (90, "APPROACHING_LIMIT"),
    (75, "HEALTHY"),
)


def api_usage_status(utilization_percent: float) -> str:
    for threshold, status in _API_USAGE_STATUSES:
        if utilization_percent >= threshold:
            return status
    return "UNDERUTILIZED"


def renewal_status(customer: Customer, now: Optional[datetime] = None) -> RenewalStatus:
    remaining = days_until(customer.renewal_date, now or datetime.now(timezone.utc))
    return RenewalStatus(
        renewal_date=customer.renewal_date,
        days_until=remaining,
        urgent=remaining <= RENEWAL_URGENT_DAYS,
    )


def tier_guidance(tier: str) -> str:
    if "Enterprise" in tier:
        return "High-touch support required. Always personalize responses and proactively communicate."
    return "Standard support flow. Escalate if SLA at risk."


# -----------------------------------------------------------------------------
# Display helpers
# -----------------------------------------------------------------------------
def format_currency(amount: float) -> str:
    """$1,250,000 for whole amounts, $1,250,000.50 otherwise."""
    if float(amount).is_integer():
        return f"${int(amount):,}"
    return f"${amount:,.2f}"


def format_percent(value: float) -> str:
    """90.0 -> "90", 87.5 -> "87.5"."""
    return f"{value:g}"
