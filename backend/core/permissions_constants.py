"""
Capability Constants — **Single Source of Truth**

Every capability referenced in code (service guards, scope rules, the
dashboard, serializers) MUST use one of the constants defined here.

A capability is a named permission granted per role.  The role →
capability table lives in ``accounts.models.ROLE_CAPABILITIES``; the
constants below are the attribute names on ``RoleCapabilities`` so that
``RoleCapabilities.grants(name)`` and ``core.domain.access.require_capability``
can look them up without typos.

Adding a new capability requires:
    1. Add the constant below.
    2. Add the matching boolean field to ``RoleCapabilities``.
    3. Fill the column for every role in ``ROLE_CAPABILITIES``.
"""


# ════════════════════════════════════════════════════════════════════
#  EVIDENCE APP — Lifecycle capabilities
# ════════════════════════════════════════════════════════════════════

class EvidenceCaps:
    """Capabilities gating evidence submission and access requests."""

    CAN_SUBMIT_EVIDENCE = "can_submit_evidence"
    """Create new Evidence Records (investigator, admin)."""

    CAN_VIEW_ALL_REQUESTS = "can_view_all_requests"
    """Unrestricted access-request visibility (prosecutor, judge, admin)."""

    CAN_APPROVE_OWN_EVIDENCE_REQUESTS = "can_approve_own_evidence_requests"
    """Approve / deny requests against evidence the actor uploaded."""

    CAN_APPROVE_ANY_REQUEST = "can_approve_any_request"
    """Approve / deny any access request (global oversight)."""


# ════════════════════════════════════════════════════════════════════
#  VIEW SCOPES — data-visibility tiers for access requests
# ════════════════════════════════════════════════════════════════════

class RequestScopes:
    """
    Visibility tiers derived from the capability flags.

    Ordered from broadest to narrowest.
    """

    ALL = "all"
    """Every request in the snapshot."""

    OWN_EVIDENCE = "own_evidence"
    """Requests whose referenced evidence was uploaded by the actor."""

    OWN_REQUESTS = "own_requests"
    """Requests the actor personally submitted."""
