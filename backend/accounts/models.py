"""
Accounts app models.

Defines the fixed Role enumeration, the per-role capability table, and the
session-scoped ``Actor``.  None of these are database models: actors live
only for the duration of a signed session token, and roles are fixed.

The capability table below is the single place that answers both "who can
see" and "who can act".  Every call site (visibility scoping, decision
guards, dashboard statistics, navigation) goes through ``RoleResolver``
in ``accounts.services``, which reads it.
"""

from __future__ import annotations

from dataclasses import dataclass

from django.db import models

from core.domain.exceptions import UnknownRoleError
from core.permissions_constants import RequestScopes


class Role(models.TextChoices):
    """The five roles an actor may hold.  No other values are valid."""

    INVESTIGATOR = "investigator", "Investigator"
    ANALYST = "analyst", "Evidence Analyst"
    PROSECUTOR = "prosecutor", "Prosecutor"
    JUDGE = "judge", "Judge"
    ADMIN = "admin", "System Admin"


@dataclass(frozen=True)
class RoleCapabilities:
    """
    Capability set granted to one role.

    Field names match the constants in
    ``core.permissions_constants.EvidenceCaps``.
    """

    can_submit_evidence: bool
    can_view_all_requests: bool
    can_approve_own_evidence_requests: bool
    can_approve_any_request: bool

    @property
    def can_decide(self) -> bool:
        """True when the role may approve or deny at least some requests."""
        return self.can_approve_any_request or self.can_approve_own_evidence_requests

    @property
    def view_scope(self) -> str:
        """Visibility tier for access requests (see ``RequestScopes``)."""
        if self.can_view_all_requests:
            return RequestScopes.ALL
        if self.can_approve_own_evidence_requests:
            return RequestScopes.OWN_EVIDENCE
        return RequestScopes.OWN_REQUESTS

    def grants(self, capability: str) -> bool:
        """Return whether the named capability flag is set."""
        if capability not in self.__dataclass_fields__:
            raise ValueError(f"Unknown capability: {capability!r}")
        return bool(getattr(self, capability))

    def as_dict(self) -> dict[str, bool | str]:
        return {
            "can_submit_evidence": self.can_submit_evidence,
            "can_view_all_requests": self.can_view_all_requests,
            "can_approve_own_evidence_requests": self.can_approve_own_evidence_requests,
            "can_approve_any_request": self.can_approve_any_request,
            "can_decide": self.can_decide,
            "view_scope": self.view_scope,
        }


# ── Fixed policy table ──────────────────────────────────────────────
#   role          submit  view-all  approve-own  approve-any
ROLE_CAPABILITIES: dict[str, RoleCapabilities] = {
    Role.INVESTIGATOR: RoleCapabilities(True, False, True, False),
    Role.ANALYST: RoleCapabilities(False, False, False, False),
    Role.PROSECUTOR: RoleCapabilities(False, True, False, True),
    Role.JUDGE: RoleCapabilities(False, True, False, True),
    Role.ADMIN: RoleCapabilities(True, True, False, True),
}


@dataclass(frozen=True)
class Actor:
    """
    An authenticated, session-scoped party with a fixed role.

    Created at login from the actor directory and rebuilt from token
    claims on every request; never persisted.  The role is validated on
    construction, so an ``Actor`` always resolves to a capability set.
    """

    id: str
    role: str
    display_name: str
    username: str = ""

    # DRF's ``IsAuthenticated`` reads this attribute.
    is_authenticated = True

    def __post_init__(self) -> None:
        if not isinstance(self.role, str) or self.role not in ROLE_CAPABILITIES:
            raise UnknownRoleError(self.role)

    @property
    def capabilities(self) -> RoleCapabilities:
        return ROLE_CAPABILITIES[self.role]

    def __str__(self) -> str:
        return f"{self.id} ({self.role})"
