# =============================================================================
# core/lookup.py  -  Lookup Service
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Resolves queries against the RecordStore:
#     - find_customer:   free text or ID  -> Customer | CustomerNotFound
#     - get_customer:    exact ID         -> Customer | CustomerNotFound
#     - open_tickets:    customer ID      -> OpenTickets | CustomerNotFound
#     - escalation_rule: tier             -> EscalationRule | TierNotFound
#
#   Every search is an ordered linear scan; the first match wins.  The
#   dataset is a handful of records, so there is no index.
#
# IDEMPOTENCY:
#   All functions are pure reads over the immutable store.  The only input
#   that changes between calls is `now`, which callers may pin for tests.
# =============================================================================

import math
from datetime import date, datetime, timezone
from typing import Optional

from core.models import (
    Contact,
    Customer,
    CustomerNotFound,
    EscalationRule,
    OpenTicket,
    OpenTickets,
    TierNotFound,
)
from core.store import RecordStore

SEARCH_SUGGESTION = "Try searching by company name or customer ID (e.g., ENT-001)"

_SECONDS_PER_DAY = 60 * 60 * 24


def find_customer(store: RecordStore, query: str) -> Customer | CustomerNotFound:
    """Find the first customer whose ID equals `query` or whose company contains it.

    Both comparisons are case-insensitive.  Records are scanned in stored
    order with no ranking, so "Acme" returns the first Acme-named account.
    """
    needle = query.lower()
    for customer in store.customers:
        if customer.id.lower() == needle or needle in customer.company.lower():
            return customer
    return CustomerNotFound(
        query=query,
        message=f'No customer found matching "{query}"',
        suggestion=SEARCH_SUGGESTION,
    )


def get_customer(store: RecordStore, customer_id: str) -> Customer | CustomerNotFound:
    """Exact (case-sensitive) ID lookup used by the ID-keyed tools."""
    for customer in store.customers:
        if customer.id == customer_id:
            return customer
    return CustomerNotFound(
        query=customer_id,
        message=f'No customer found with ID "{customer_id}"',
    )


def open_tickets(
    store: RecordStore,
    customer_id: str,
    now: Optional[datetime] = None,
) -> OpenTickets | CustomerNotFound:
    """Collect a customer's open/pending/in-progress tickets in stored order.

    A customer with no open tickets gets an empty tuple, not an error.
    """
    customer = get_customer(store, customer_id)
    if isinstance(customer, CustomerNotFound):
        return customer

    now = now or datetime.now(timezone.utc)
    tickets = tuple(
        OpenTicket(ticket=ticket, age_in_days=age_in_days(ticket.created_at, now))
        for ticket in store.tickets
        if ticket.customer_id == customer_id and ticket.is_open
    )
    return OpenTickets(
        customer=customer,
        tickets=tickets,
        escalation_rule=store.escalation_rules.get(customer.tier),
    )


def escalation_rule(store: RecordStore, tier: str) -> EscalationRule | TierNotFound:
    rule = store.escalation_rules.get(tier)
    if rule is None:
        return TierNotFound(
            tier=tier,
            message=f"Unknown tier: {tier}",
            valid_tiers=tuple(store.tiers()),
        )
    return rule


def primary_contact(customer: Customer) -> Optional[Contact]:
    """The contact flagged primary, or None.  At most one exists (checked at load)."""
    return next((c for c in customer.contacts if c.primary), None)


# -----------------------------------------------------------------------------
# Day arithmetic
# -----------------------------------------------------------------------------
# Both helpers round UP: a ticket opened 23 hours ago is 1 day old, a
# renewal 36 hours away is 2 days out.  A ticket opened exactly now is 0.
# -----------------------------------------------------------------------------
def age_in_days(created_at: datetime, now: datetime) -> int:
    return math.ceil((_aware(now) - _aware(created_at)).total_seconds() / _SECONDS_PER_DAY)


def days_until(target: date, now: datetime) -> int:
    """Days from `now` until midnight UTC at the start of `target`."""
    midnight = datetime(target.year, target.month, target.day, tzinfo=timezone.utc)
    return math.ceil((midnight - _aware(now)).total_seconds() / _SECONDS_PER_DAY)


def _aware(moment: datetime) -> datetime:
    # Naive timestamps are treated as UTC.
    return moment if moment.tzinfo else moment.replace(tzinfo=timezone.utc)
