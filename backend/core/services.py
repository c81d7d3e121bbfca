"""
Core app services — **Service Layer**.

Contains cross-app aggregation logic.  Views delegate all business
logic to the service classes defined here, keeping views thin and
ensuring testability.

╔══════════════════════════════════════════════════════════════════════╗
║  CROSS-APP IMPORT RULEBOOK                                         ║
║                                                                    ║
║  1. NEVER import ``evidence`` or ``accounts`` at the module level. ║
║     Always import inside the method/function that needs them.      ║
║                                                                    ║
║  2. When type hints are needed at module level, use                ║
║     ``TYPE_CHECKING``:                                             ║
║       from __future__ import annotations                           ║
║       from typing import TYPE_CHECKING                             ║
║       if TYPE_CHECKING:                                            ║
║           from evidence.models import Snapshot                     ║
║                                                                    ║
║  3. Aggregations run over an already-fetched ``Snapshot``; this    ║
║     module performs no I/O of its own.                             ║
╚══════════════════════════════════════════════════════════════════════╝
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from accounts.models import Actor
    from evidence.models import Snapshot


# ════════════════════════════════════════════════════════════════════
#  Dashboard Aggregation Service
# ════════════════════════════════════════════════════════════════════

class DashboardAggregationService:
    """
    Produces the list of stat cards consumed by
    ``DashboardStatCardSerializer``.

    The statistics are **role-aware**:

    * **Investigator**: evidence they uploaded, pending requests on that
      evidence, and how much of it is confirmed on chain.
    * **Evidence Analyst**: the catalogue size, their own requests, and
      how many of those were approved.
    * **Prosecutor**: catalogue size, pending and approved requests.
    * **Judge**: catalogue size, requests awaiting review, all requests.
    * **System Admin**: catalogue size, pending requests, and chain
      confirmations across the system.
    """

    def __init__(self, actor: Actor, snapshot: Snapshot) -> None:
        self.actor = actor
        self.snapshot = snapshot

    # ── Public API ──────────────────────────────────────────────────

    def get_stats(self) -> list[dict[str, Any]]:
        """Return the stat cards for the actor's role, in display order."""
        from accounts.models import Role

        builders = {
            Role.INVESTIGATOR: self._investigator_stats,
            Role.ANALYST: self._analyst_stats,
            Role.PROSECUTOR: self._prosecutor_stats,
            Role.JUDGE: self._judge_stats,
            Role.ADMIN: self._admin_stats,
        }
        return [
            {"key": key, "label": label, "value": value}
            for key, label, value in builders[self.actor.role]()
        ]

    @classmethod
    def for_actor(cls, actor: Actor) -> list[dict[str, Any]]:
        """Fetch a fresh snapshot and return the actor's stat cards."""
        from evidence.services import EvidenceQueryService

        snapshot = EvidenceQueryService().fetch_snapshot()
        return cls(actor, snapshot).get_stats()

    # ── Per-role builders ───────────────────────────────────────────

    def _investigator_stats(self) -> list[tuple[str, str, int]]:
        mine = [e for e in self.snapshot.evidence if e.uploaded_by == self.actor.id]
        my_ids = {e.id for e in mine}
        pending_on_mine = [
            r for r in self.snapshot.requests
            if r.is_pending and r.evidence_id in my_ids
        ]
        return [
            ("my_evidence", "My Evidence", len(mine)),
            ("access_requests", "Access Requests", len(pending_on_mine)),
            ("blockchain_confirmed", "Blockchain Confirmed", self._confirmed(mine)),
        ]

    def _analyst_stats(self) -> list[tuple[str, str, int]]:
        from evidence.models import RequestStatus

        mine = [r for r in self.snapshot.requests if r.requested_by == self.actor.id]
        return [
            ("available_evidence", "Available Evidence", len(self.snapshot.evidence)),
            ("my_requests", "My Requests", len(mine)),
            ("approved_access", "Approved Access", self._with_status(mine, RequestStatus.APPROVED)),
        ]

    def _prosecutor_stats(self) -> list[tuple[str, str, int]]:
        from evidence.models import RequestStatus

        requests = self.snapshot.requests
        return [
            ("total_evidence", "Total Evidence", len(self.snapshot.evidence)),
            ("pending_requests", "Pending Requests", self._with_status(requests, RequestStatus.PENDING)),
            ("approved_requests", "Approved Requests", self._with_status(requests, RequestStatus.APPROVED)),
        ]

    def _judge_stats(self) -> list[tuple[str, str, int]]:
        from evidence.models import RequestStatus

        requests = self.snapshot.requests
        return [
            ("total_evidence", "Total Evidence", len(self.snapshot.evidence)),
            ("pending_review", "Pending Review", self._with_status(requests, RequestStatus.PENDING)),
            ("total_requests", "Total Requests", len(requests)),
        ]

    def _admin_stats(self) -> list[tuple[str, str, int]]:
        from evidence.models import RequestStatus

        return [
            ("system_evidence", "System Evidence", len(self.snapshot.evidence)),
            (
                "pending_requests",
                "Pending Requests",
                self._with_status(self.snapshot.requests, RequestStatus.PENDING),
            ),
            ("blockchain_confirmed", "Blockchain Confirmed", self._confirmed(self.snapshot.evidence)),
        ]

    # ── Private helpers ─────────────────────────────────────────────

    @staticmethod
    def _confirmed(evidence) -> int:
        return sum(1 for e in evidence if e.is_confirmed)

    @staticmethod
    def _with_status(requests, status: str) -> int:
        return sum(1 for r in requests if r.status == status)


# ════════════════════════════════════════════════════════════════════
#  System Constants Service
# ════════════════════════════════════════════════════════════════════

class SystemConstantsService:
    """
    Gathers all system-wide choice enumerations into a single dict for
    the frontend.

    This service is **stateless** — it does not depend on the requesting
    actor.  All constants are needed by the dashboard to render
    dropdowns and labels.
    """

    @staticmethod
    def get_constants() -> dict[str, Any]:
        """Return all system constants as a dict."""
        from accounts.models import Role
        from evidence.models import BlockchainStatus, RequestStatus, RequestType

        to_list = SystemConstantsService._choices_to_list

        return {
            "roles": to_list(Role),
            "request_types": to_list(RequestType),
            "request_statuses": to_list(RequestStatus),
            "blockchain_statuses": to_list(BlockchainStatus),
        }

    @staticmethod
    def _choices_to_list(
        choices_class: type,
    ) -> list[dict[str, str]]:
        """
        Convert a Django ``TextChoices`` class to a list of
        ``{"value": ..., "label": ...}`` dicts.
        """
        return [
            {"value": str(value), "label": str(label)}
            for value, label in choices_class.choices
        ]
