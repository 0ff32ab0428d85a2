"""Tests for the Lookup Service."""
from datetime import date, datetime, timedelta, timezone

import pytest

from core.lookup import (
    SEARCH_SUGGESTION,
    age_in_days,
    days_until,
    escalation_rule,
    find_customer,
    get_customer,
    open_tickets,
    primary_contact,
)
from core.models import Customer, CustomerNotFound, EscalationRule, TierNotFound
from tests.conftest import FIXED_NOW


@pytest.mark.parametrize("query", ["ENT-001", "ent-001", "Acme", "acme corp", "CORPORATION"])
def test_find_customer_matches_id_or_company(store, query):
    result = find_customer(store, query)
    assert isinstance(result, Customer)
    assert result.id == "ENT-001"


def test_find_customer_first_match_wins(store):
    # "c" appears in several company names; stored order decides.
    result = find_customer(store, "c")
    assert result.id == "ENT-001"


def test_find_customer_not_found_echoes_query(store):
    result = find_customer(store, "Nonexistent Inc")
    assert isinstance(result, CustomerNotFound)
    assert result.query == "Nonexistent Inc"
    assert result.message == 'No customer found matching "Nonexistent Inc"'
    assert result.suggestion == SEARCH_SUGGESTION


def test_get_customer_is_exact(store):
    assert get_customer(store, "GRW-001").company == "Brightpath Analytics"
    missing = get_customer(store, "grw-001")
    assert isinstance(missing, CustomerNotFound)
    assert missing.message == 'No customer found with ID "grw-001"'


def test_open_tickets_filters_status_and_keeps_order(store):
    result = open_tickets(store, "ENT-001", now=FIXED_NOW)
    assert [t.ticket.id for t in result.tickets] == ["TKT-1001", "TKT-1002", "TKT-1004"]
    assert all(t.ticket.status not in ("resolved", "closed") for t in result.tickets)
    assert result.count == 3
    assert result.escalation_rule.max_response_time == "4 hours"


def test_open_tickets_ages_round_up(store):
    ages = {t.ticket.id: t.age_in_days for t in open_tickets(store, "ENT-001", now=FIXED_NOW).tickets}
    assert ages["TKT-1001"] == 4   # 3 days 21.5 hours
    assert ages["TKT-1002"] == 1   # 23 hours
    assert ages["TKT-1004"] == 0   # created exactly now


def test_open_tickets_empty_for_customer_without_open_work(store):
    result = open_tickets(store, "ENT-002", now=FIXED_NOW)
    assert result.tickets == ()
    assert result.count == 0


def test_open_tickets_unknown_customer(store):
    result = open_tickets(store, "ENT-404", now=FIXED_NOW)
    assert isinstance(result, CustomerNotFound)
    assert "ENT-404" in result.message


def test_open_tickets_without_rule_for_tier(store_without_growth_rule):
    result = open_tickets(store_without_growth_rule, "GRW-001", now=FIXED_NOW)
    assert result.escalation_rule is None


def test_escalation_rule_round_trip(store):
    rule = escalation_rule(store, "Enterprise Plus")
    assert rule == EscalationRule(
        max_response_time="1 hour",
        escalate_to="Director of Customer Success + Account Manager",
        auto_escalate_after="2 hours",
    )


def test_escalation_rule_unknown_tier(store):
    result = escalation_rule(store, "Platinum")
    assert isinstance(result, TierNotFound)
    assert result.message == "Unknown tier: Platinum"
    assert result.valid_tiers == ("Standard", "Growth", "Enterprise", "Enterprise Plus")


def test_primary_contact(store):
    assert primary_contact(get_customer(store, "ENT-001")).name == "Michael Torres"
    assert primary_contact(get_customer(store, "STD-001")) is None


def test_age_in_days_boundaries():
    assert age_in_days(FIXED_NOW, FIXED_NOW) == 0
    assert age_in_days(FIXED_NOW - timedelta(hours=23), FIXED_NOW) == 1
    assert age_in_days(FIXED_NOW - timedelta(days=1), FIXED_NOW) == 1
    assert age_in_days(FIXED_NOW - timedelta(days=1, seconds=1), FIXED_NOW) == 2


def test_age_in_days_treats_naive_as_utc():
    naive = datetime(2026, 10, 15, 12, 0)
    assert age_in_days(naive, FIXED_NOW) == 1


def test_days_until_rounds_up():
    assert days_until(date(2026, 11, 10), FIXED_NOW) == 25
    assert days_until(date(2026, 10, 17), FIXED_NOW) == 1
    assert days_until(date(2026, 10, 16), datetime(2026, 10, 16, tzinfo=timezone.utc)) == 0
