# =============================================================================
# core/store.py  -  Record Store (customers, tickets, escalation rules)
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Loads the static support dataset ONCE at startup and holds it in an
#   immutable RecordStore.  The store is passed explicitly into the lookup
#   and guidance functions; there is no module-level database.
#
# SOURCE FORMAT (one JSON document):
#   {
#     "customers":       [ {...camelCase customer...}, ... ],
#     "tickets":         [ {...camelCase ticket...}, ... ],
#     "escalationRules": { "<tier>": {maxResponseTime, escalateTo,
#                                     autoEscalateAfter}, ... }
#   }
#
# FAILURE MODEL:
#   Anything wrong with the document (missing file, bad JSON, missing field,
#   unknown tier, two primary contacts, dangling ticket owner ...) raises
#   DataLoadError.  main.py treats that as fatal.
# =============================================================================

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from core.errors import DataLoadError
from core.models import (
    KNOWN_FLAGS,
    TIERS,
    ApiUsage,
    Contact,
    Customer,
    EscalationRule,
    SupportHistory,
    Ticket,
)

logger = logging.getLogger(__name__)

# Stored vs derived utilization may differ by rounding; beyond this, warn.
_UTILIZATION_DRIFT_TOLERANCE = 0.5


@dataclass(frozen=True)
class RecordStore:
    """Read-only view over the three record sets.

    Collections keep their stored order; first-match lookups rely on it.
    """

    customers: tuple[Customer, ...]
    tickets: tuple[Ticket, ...]
    escalation_rules: Mapping[str, EscalationRule]

    def tiers(self) -> list[str]:
        """Tier keys of the rule table, in stored order."""
        return list(self.escalation_rules.keys())

    @classmethod
    def from_document(cls, document: Any) -> "RecordStore":
        """Build a validated store from an already-parsed JSON document."""
        if not isinstance(document, dict):
            raise DataLoadError("Dataset must be a JSON object")

        for section in ("customers", "tickets", "escalationRules"):
            if section not in document:
                raise DataLoadError(f"Dataset is missing the '{section}' section")

        raw_customers = _expect_list(document["customers"], "customers")
        raw_tickets = _expect_list(document["tickets"], "tickets")
        raw_rules = document["escalationRules"]
        if not isinstance(raw_rules, dict):
            raise DataLoadError("'escalationRules' must be an object keyed by tier")

        try:
            rules = {tier: _parse_rule(tier, raw) for tier, raw in raw_rules.items()}
            customers = tuple(_parse_customer(raw) for raw in raw_customers)
            tickets = tuple(_parse_ticket(raw) for raw in raw_tickets)
        except (KeyError, TypeError, ValueError) as exc:
            raise DataLoadError(f"Malformed record: {exc}") from exc

        _check_integrity(customers, tickets)

        logger.info(
            "Loaded %d customers, %d tickets, %d escalation rules",
            len(customers), len(tickets), len(rules),
        )
        return cls(
            customers=customers,
            tickets=tickets,
            escalation_rules=MappingProxyType(rules),
        )


def load_store(path: str | Path) -> RecordStore:
    """Read and validate the dataset at `path`.

    Raises:
        DataLoadError: if the file is unreadable, not JSON, or invalid.
    """
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as file:
            document = json.load(file)
    except OSError as exc:
        raise DataLoadError(f"Cannot read dataset: {exc.strerror or exc}", str(path)) from exc
    except json.JSONDecodeError as exc:
        raise DataLoadError(f"Dataset is not valid JSON: {exc}", str(path)) from exc

    try:
        return RecordStore.from_document(document)
    except DataLoadError as exc:
        raise DataLoadError(str(exc), str(path)) from exc


# =============================================================================
# Record parsers (camelCase JSON -> frozen dataclasses)
# =============================================================================

def _expect_list(value: Any, name: str) -> list:
    if not isinstance(value, list):
        raise DataLoadError(f"'{name}' must be a list of records")
    return value


def _parse_date(value: str) -> date:
    return date.fromisoformat(value[:10])


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_rule(tier: str, raw: dict) -> EscalationRule:
    if tier not in TIERS:
        raise DataLoadError(f"Escalation rule for unknown tier '{tier}'")
    return EscalationRule(
        max_response_time=raw["maxResponseTime"],
        escalate_to=raw["escalateTo"],
        auto_escalate_after=raw["autoEscalateAfter"],
    )


def _parse_customer(raw: dict) -> Customer:
    customer_id = raw["id"]
    tier = raw["tier"]
    if tier not in TIERS:
        raise DataLoadError(f"Customer {customer_id} has unknown tier '{tier}'")

    usage = raw.get("apiUsage") or {}
    api_usage = ApiUsage(
        monthly_tokens=int(usage.get("monthlyTokens", 0)),
        monthly_limit=int(usage.get("monthlyLimit", 0)),
    )
    stored = usage.get("utilizationPercent")
    if stored is not None and abs(float(stored) - api_usage.utilization_percent) > _UTILIZATION_DRIFT_TOLERANCE:
        logger.warning(
            "Customer %s: stored utilizationPercent %s disagrees with derived %s; using derived",
            customer_id, stored, api_usage.utilization_percent,
        )

    history = raw.get("supportHistory") or {}
    contacts = tuple(
        Contact(
            name=c["name"],
            role=c.get("role", ""),
            email=c.get("email", ""),
            primary=bool(c.get("primary", False)),
        )
        for c in raw.get("contacts", [])
    )
    if sum(1 for c in contacts if c.primary) > 1:
        raise DataLoadError(f"Customer {customer_id} has more than one primary contact")

    flags = frozenset(raw.get("flags", []))
    unknown = flags - KNOWN_FLAGS
    if unknown:
        logger.debug("Customer %s carries unrecognised flags: %s", customer_id, sorted(unknown))

    return Customer(
        id=customer_id,
        company=raw["company"],
        tier=tier,
        account_manager=raw.get("accountManager"),
        contract_value=float(raw["contractValue"]),
        renewal_date=_parse_date(raw["renewalDate"]),
        products=tuple(raw.get("products", [])),
        api_usage=api_usage,
        known_issues=tuple(raw.get("knownIssues", [])),
        support_history=SupportHistory(
            total_tickets=int(history.get("totalTickets", 0)),
            avg_resolution_hours=float(history.get("avgResolutionHours", 0.0)),
            csat=float(history.get("csat", 0.0)),
        ),
        contacts=contacts,
        flags=flags,
    )


def _parse_ticket(raw: dict) -> Ticket:
    last_updated = raw.get("lastUpdated") or raw["createdAt"]
    return Ticket(
        id=raw["id"],
        customer_id=raw["customerId"],
        subject=raw["subject"],
        status=raw["status"],
        priority=raw["priority"],
        created_at=_parse_timestamp(raw["createdAt"]),
        last_updated=_parse_timestamp(last_updated),
        assignee=raw.get("assignee", ""),
        description=raw.get("description", ""),
        tags=tuple(raw.get("tags", [])),
        last_updated_text=last_updated,
    )


def _check_integrity(customers: tuple[Customer, ...], tickets: tuple[Ticket, ...]) -> None:
    seen: set[str] = set()
    for customer in customers:
        if customer.id in seen:
            raise DataLoadError(f"Duplicate customer id '{customer.id}'")
        seen.add(customer.id)

    for ticket in tickets:
        if ticket.customer_id not in seen:
            raise DataLoadError(
                f"Ticket {ticket.id} references unknown customer '{ticket.customer_id}'"
            )
