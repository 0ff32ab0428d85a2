# =============================================================================
# core/models.py  -  Data Models (the "nouns" of the system)
# =============================================================================
#
# These dataclasses define the *shape* of every record and result that flows
# through the support server.  Records are frozen and hold tuples/frozensets
# so nothing loaded at startup can be mutated while the server is running.
#
# TWO KINDS OF MODELS LIVE HERE:
#   1. Records  - Customer, Ticket, EscalationRule (loaded from the dataset)
#   2. Results  - OpenTickets, SupportGuidance, ResponseGuidance, and the
#                 "not found" values returned instead of raising.
#
# Field names are snake_case here.  The camelCase wire format the agent sees
# is produced in tools/payloads.py, not in core/.
# =============================================================================

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Literal, Optional


# -----------------------------------------------------------------------------
# Closed vocabularies
# -----------------------------------------------------------------------------
# Tiers are listed in increasing order of service priority.
TIERS: tuple[str, ...] = ("Standard", "Growth", "Enterprise", "Enterprise Plus")

Tier = Literal["Standard", "Growth", "Enterprise", "Enterprise Plus"]

IssueType = Literal[
    "billing", "technical", "api", "account", "feature_request", "escalation",
]
ISSUE_TYPES: tuple[str, ...] = (
    "billing", "technical", "api", "account", "feature_request", "escalation",
)

# Only these statuses count as "open" for reporting.
OPEN_STATUSES = frozenset({"open", "pending", "in_progress"})

KNOWN_FLAGS = frozenset({
    "HIGH_VALUE",
    "APPROACHING_RENEWAL",
    "EXPANSION_OPPORTUNITY",
    "COMPLIANCE_SENSITIVE",
    "STRATEGIC_ACCOUNT",
})


# -----------------------------------------------------------------------------
# Customer and its nested parts
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ApiUsage:
    """Monthly API consumption for a customer.

    utilization_percent is always derived from tokens/limit.  Any
    precomputed percentage in the source document is ignored.  Threshold
    checks use exact_utilization_percent; the rounded value is for display.
    """

    monthly_tokens: int
    monthly_limit: int

    @property
    def exact_utilization_percent(self) -> float:
        if self.monthly_limit <= 0:
            return 0.0
        return self.monthly_tokens * 100 / self.monthly_limit

    @property
    def utilization_percent(self) -> float:
        return round(self.exact_utilization_percent, 1)


@dataclass(frozen=True)
class SupportHistory:
    total_tickets: int
    avg_resolution_hours: float
    csat: float


@dataclass(frozen=True)
class Contact:
    name: str
    role: str
    email: str
    primary: bool = False


@dataclass(frozen=True)
class Customer:
    """One enterprise account, exactly as loaded from the dataset."""

    id: str
    company: str
    tier: str                          # one of TIERS (checked at load)
    account_manager: Optional[str]
    contract_value: float              # annual, USD
    renewal_date: date
    products: tuple[str, ...] = ()
    api_usage: ApiUsage = field(default_factory=lambda: ApiUsage(0, 0))
    known_issues: tuple[str, ...] = ()
    support_history: SupportHistory = field(
        default_factory=lambda: SupportHistory(0, 0.0, 0.0)
    )
    contacts: tuple[Contact, ...] = ()
    flags: frozenset[str] = frozenset()

    @property
    def is_enterprise(self) -> bool:
        # Substring match: both "Enterprise" and "Enterprise Plus" qualify.
        return "Enterprise" in self.tier


# -----------------------------------------------------------------------------
# Ticket
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Ticket:
    id: str
    customer_id: str
    subject: str
    status: str
    priority: str
    created_at: datetime
    last_updated: datetime
    assignee: str
    description: str = ""
    tags: tuple[str, ...] = ()
    # lastUpdated exactly as stored, echoed back to the agent unchanged.
    last_updated_text: str = ""

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_STATUSES


# -----------------------------------------------------------------------------
# EscalationRule - per-tier SLA policy
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class EscalationRule:
    max_response_time: str             # "1 hour", "24 hours", ...
    escalate_to: str                   # role or named contact
    auto_escalate_after: str


# -----------------------------------------------------------------------------
# Not-found results
# -----------------------------------------------------------------------------
# Lookups return these instead of raising.  The tool layer turns them into
# {"found": false, ...} or {"error": ..., "validTiers": [...]} payloads.
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class CustomerNotFound:
    query: str
    message: str
    suggestion: Optional[str] = None


@dataclass(frozen=True)
class TierNotFound:
    tier: str
    message: str
    valid_tiers: tuple[str, ...] = ()


# -----------------------------------------------------------------------------
# Lookup results
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class OpenTicket:
    """A ticket plus the age derived at lookup time."""

    ticket: Ticket
    age_in_days: int


@dataclass(frozen=True)
class OpenTickets:
    customer: Customer
    tickets: tuple[OpenTicket, ...]
    escalation_rule: Optional[EscalationRule]

    @property
    def count(self) -> int:
        return len(self.tickets)


@dataclass(frozen=True)
class RenewalStatus:
    renewal_date: date
    days_until: int
    urgent: bool


# -----------------------------------------------------------------------------
# Guidance results
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class SupportGuidance:
    """Prioritized handling directives for one customer."""

    priority_level: str                # "HIGH" or "STANDARD"
    response_time_target: str
    key_guidance: tuple[str, ...]
    account_manager: Optional[str]


@dataclass(frozen=True)
class ResponseGuidance:
    """Tone, template and context for answering one issue type."""

    company: str
    tier: str
    primary_contact: Optional[str]     # name only; None when no primary
    issue_type: str
    response_template: str
    tone_guidance: tuple[str, ...]
    escalation_path: Optional[EscalationRule]
    additional_context: tuple[str, ...] = ()

