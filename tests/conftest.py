"""
Pytest configuration and shared fixtures.

Puts the project root on sys.path so `core` and `tools` import without an
install, and provides small in-memory datasets with a pinned clock.
"""
import copy
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from core.store import RecordStore, load_store  # noqa: E402

FIXED_NOW = datetime(2026, 10, 16, 12, 0, tzinfo=timezone.utc)

_RULES = {
    "Standard": {
        "maxResponseTime": "24 hours",
        "escalateTo": "Support Team Lead",
        "autoEscalateAfter": "48 hours",
    },
    "Growth": {
        "maxResponseTime": "12 hours",
        "escalateTo": "Senior Support Engineer",
        "autoEscalateAfter": "24 hours",
    },
    "Enterprise": {
        "maxResponseTime": "4 hours",
        "escalateTo": "Enterprise Support Manager",
        "autoEscalateAfter": "8 hours",
    },
    "Enterprise Plus": {
        "maxResponseTime": "1 hour",
        "escalateTo": "Director of Customer Success + Account Manager",
        "autoEscalateAfter": "2 hours",
    },
}

_DOCUMENT = {
    "customers": [
        {
            "id": "ENT-001",
            "company": "Acme Corporation",
            "tier": "Enterprise",
            "accountManager": "Sarah Chen",
            "contractValue": 450000,
            "renewalDate": "2027-03-15",
            "products": ["Claude API", "Claude for Enterprise"],
            "apiUsage": {"monthlyTokens": 45000000, "monthlyLimit": 50000000, "utilizationPercent": 90},
            "knownIssues": ["Rate limiting concerns during peak hours"],
            "supportHistory": {"totalTickets": 47, "avgResolutionHours": 4.2, "csat": 4.6},
            "contacts": [
                {"name": "Michael Torres", "role": "VP of Engineering", "email": "m.torres@acme.example", "primary": True},
                {"name": "Lisa Park", "role": "ML Platform Lead", "email": "l.park@acme.example", "primary": False},
            ],
            "flags": ["HIGH_VALUE", "EXPANSION_OPPORTUNITY"],
        },
        {
            "id": "ENT-002",
            "company": "GlobalTech Industries",
            "tier": "Enterprise Plus",
            "accountManager": "David Kim",
            "contractValue": 1250000,
            "renewalDate": "2026-11-10",
            "products": ["Claude API", "Dedicated Capacity"],
            "apiUsage": {"monthlyTokens": 156000000, "monthlyLimit": 200000000},
            "knownIssues": [],
            "supportHistory": {"totalTickets": 112, "avgResolutionHours": 2.1, "csat": 4.8},
            "contacts": [
                {"name": "Jennifer Walsh", "role": "CTO", "email": "j.walsh@globaltech.example", "primary": True},
            ],
            "flags": ["STRATEGIC_ACCOUNT", "APPROACHING_RENEWAL", "COMPLIANCE_SENSITIVE"],
        },
        {
            "id": "GRW-001",
            "company": "Brightpath Analytics",
            "tier": "Growth",
            "accountManager": None,
            "contractValue": 48000,
            "renewalDate": "2027-06-30",
            "products": ["Claude API"],
            "apiUsage": {"monthlyTokens": 6100000, "monthlyLimit": 10000000},
            "knownIssues": [],
            "supportHistory": {"totalTickets": 9, "avgResolutionHours": 11.5, "csat": 4.3},
            "contacts": [
                {"name": "Tom Okafor", "role": "Founder", "email": "tom@brightpath.example", "primary": True},
            ],
            "flags": [],
        },
        {
            "id": "STD-001",
            "company": "Maple Street Bakery Co",
            "tier": "Standard",
            "accountManager": None,
            "contractValue": 6000.5,
            "renewalDate": "2027-01-20",
            "products": ["Claude Pro"],
            "apiUsage": {"monthlyTokens": 950000, "monthlyLimit": 1000000},
            "knownIssues": [],
            "supportHistory": {"totalTickets": 3, "avgResolutionHours": 20.0, "csat": 4.0},
            "contacts": [
                {"name": "Grace Liu", "role": "Owner", "email": "grace@maplestreet.example", "primary": False},
            ],
            "flags": [],
        },
    ],
    "tickets": [
        {
            "id": "TKT-1001",
            "customerId": "ENT-001",
            "subject": "429 errors during batch processing",
            "status": "open",
            "priority": "high",
            "createdAt": "2026-10-12T14:30:00Z",
            "lastUpdated": "2026-10-15T09:15:00Z",
            "assignee": "Support Engineer - Alex",
            "description": "Rate limit errors on nightly batch jobs.",
            "tags": ["api", "rate-limiting"],
        },
        {
            "id": "TKT-1002",
            "customerId": "ENT-001",
            "subject": "Invoice discrepancy",
            "status": "pending",
            "priority": "medium",
            "createdAt": "2026-10-15T13:00:00Z",
            "lastUpdated": "2026-10-15T16:45:00Z",
            "assignee": "Billing - Jordan",
            "tags": ["billing"],
        },
        {
            "id": "TKT-1003",
            "customerId": "ENT-001",
            "subject": "Formatting question",
            "status": "resolved",
            "priority": "low",
            "createdAt": "2026-09-20T08:00:00Z",
            "lastUpdated": "2026-09-21T12:00:00Z",
            "assignee": "Support Engineer - Alex",
            "tags": [],
        },
        {
            "id": "TKT-1004",
            "customerId": "ENT-001",
            "subject": "Workspace provisioning",
            "status": "in_progress",
            "priority": "medium",
            "createdAt": "2026-10-16T12:00:00Z",
            "lastUpdated": "2026-10-16T12:00:00Z",
            "assignee": "Support Engineer - Alex",
            "tags": ["account"],
        },
        {
            "id": "TKT-2001",
            "customerId": "ENT-002",
            "subject": "Retention policy documentation",
            "status": "closed",
            "priority": "medium",
            "createdAt": "2026-08-02T13:00:00Z",
            "lastUpdated": "2026-08-05T10:30:00Z",
            "assignee": "Compliance - Priya",
            "tags": ["compliance"],
        },
    ],
    "escalationRules": _RULES,
}


@pytest.fixture
def document():
    """A fresh, mutable copy of the test dataset."""
    return copy.deepcopy(_DOCUMENT)


@pytest.fixture
def store(document):
    return RecordStore.from_document(document)


@pytest.fixture
def store_without_growth_rule(document):
    del document["escalationRules"]["Growth"]
    return RecordStore.from_document(document)


@pytest.fixture
def bundled_store():
    """The dataset shipped in core/data/customers.json."""
    return load_store(project_root / "core" / "data" / "customers.json")
