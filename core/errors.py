# =============================================================================
# core/errors.py  -  Exception types for the support server
# =============================================================================
#
# Ordinary "not found" outcomes are NOT exceptions; they are returned as
# CustomerNotFound / TierNotFound values (see core/models.py).  Exceptions
# are reserved for two cases:
#
#   DataLoadError               - the dataset is unreadable or malformed.
#                                 Fatal: the server must not start.
#   EscalationRuleMissingError  - an escalation response was requested for a
#                                 tier with no rule.  A data-integrity fault
#                                 that fails one request, not the process.
# =============================================================================


class SupportError(Exception):
    """Base class for all support-server errors."""


class DataLoadError(SupportError):
    """Raised when the static dataset cannot be read or fails validation."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        base = super().__str__()
        return f"{base} ({self.path})" if self.path else base


class EscalationRuleMissingError(SupportError):
    """Raised when a tier that needs an escalation rule has none."""

    def __init__(self, tier: str, customer_id: str | None = None) -> None:
        super().__init__(f"No escalation rule defined for tier '{tier}'")
        self.tier = tier
        self.customer_id = customer_id
