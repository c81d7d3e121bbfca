"""
Evidence app Service Layer.

This module is the **single source of truth** for all business logic
in the ``evidence`` app.  Views must remain thin: validate input via
serializers, call a service method, and return the result wrapped in
a DRF ``Response``.

Architecture
------------
- ``EvidenceQueryService``      — Snapshot reads, browse search, case list.
- ``EvidenceSubmissionService`` — Capability-checked evidence creation.
- ``AccessRequestLifecycle``    — Request creation, visibility, decisions.

All state lives in the external evidence API.  Every mutating call goes
through ``_ApiService._mutate``, which performs the call and then refetches
the snapshot; nothing is updated optimistically.

Capability Constants (from ``core.permissions_constants.EvidenceCaps``)
-----------------------------------------------------------------------
- ``CAN_SUBMIT_EVIDENCE``               — Create Evidence Records.
- ``CAN_VIEW_ALL_REQUESTS``             — Unrestricted request visibility.
- ``CAN_APPROVE_OWN_EVIDENCE_REQUESTS`` — Decide requests on own evidence.
- ``CAN_APPROVE_ANY_REQUEST``           — Decide any request.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Sequence

from core.domain.access import ScopeConfig, apply_scope, require_capability
from core.domain.exceptions import InvalidStateError, PermissionDenied, ValidationError
from core.permissions_constants import EvidenceCaps, RequestScopes

from .client import EvidenceApiClient, get_client
from .models import (
    DECISIONS,
    AccessRequest,
    EvidenceRecord,
    RequestStatus,
    RequestType,
    Snapshot,
)

logger = logging.getLogger(__name__)

#: Hex-encoded SHA-256 digest.
HASH_PATTERN = re.compile(r"^[0-9a-fA-F]{64}$")


def _uploader_of(evidence: Sequence[EvidenceRecord], evidence_id: str | None) -> str | None:
    if not evidence_id:
        return None
    for record in evidence:
        if record.id == evidence_id:
            return record.uploaded_by
    return None


# ── View-scope configuration for access-request visibility ──────────
_REQUEST_SCOPE_CONFIG: ScopeConfig = {
    # Prosecutor / Judge / Admin
    RequestScopes.ALL: lambda items, actor, evidence: items,
    # Investigator: requests against evidence they uploaded
    RequestScopes.OWN_EVIDENCE: lambda items, actor, evidence: [
        r for r in items if _uploader_of(evidence, r.evidence_id) == actor.id
    ],
    # Analyst: requests they submitted
    RequestScopes.OWN_REQUESTS: lambda items, actor, evidence: [
        r for r in items if r.requested_by == actor.id
    ],
}


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class _ApiService:
    """Shared plumbing: the API client and refetch-on-success."""

    def __init__(self, client: EvidenceApiClient | None = None) -> None:
        self.client = client if client is not None else get_client()
        self.snapshot: Snapshot | None = None

    def fetch_snapshot(self) -> Snapshot:
        """Read both collections from the API and keep the result."""
        self.snapshot = Snapshot.from_api(
            self.client.list_evidence(),
            self.client.list_access_requests(),
        )
        return self.snapshot

    def _mutate(self, call: Callable[[], Any]) -> Any:
        result = call()
        self.fetch_snapshot()
        return result


# ═══════════════════════════════════════════════════════════════════
#  Evidence Query Service
# ═══════════════════════════════════════════════════════════════════


class EvidenceQueryService(_ApiService):
    """
    Read-side helpers for the browse view.

    Evidence listing is not role-scoped: every authenticated actor may
    browse the catalogue (and then request access to an item).
    """

    def list_evidence(self, filters: Mapping[str, Any] | None = None) -> list[EvidenceRecord]:
        filters = filters or {}
        evidence = self.fetch_snapshot().evidence
        return self.search_evidence(
            evidence,
            search=filters.get("search"),
            case_id=filters.get("case"),
        )

    @staticmethod
    def search_evidence(
        evidence: Sequence[EvidenceRecord],
        *,
        search: str | None = None,
        case_id: str | None = None,
    ) -> list[EvidenceRecord]:
        """
        Keep records whose filename, description or case id contains
        *search* (case-insensitive) and whose case id equals *case_id*.
        Empty criteria match everything.  Input order is preserved.
        """
        needle = (search or "").lower()

        def matches(record: EvidenceRecord) -> bool:
            if needle and not (
                needle in record.original_filename.lower()
                or needle in record.description.lower()
                or needle in record.case_id.lower()
            ):
                return False
            return not case_id or record.case_id == case_id

        return [record for record in evidence if matches(record)]

    @staticmethod
    def unique_case_ids(evidence: Sequence[EvidenceRecord]) -> list[str]:
        """Distinct non-empty case ids, in first-seen order."""
        return list(dict.fromkeys(r.case_id for r in evidence if r.case_id))


# ═══════════════════════════════════════════════════════════════════
#  Evidence Submission Service
# ═══════════════════════════════════════════════════════════════════


class EvidenceSubmissionService(_ApiService):
    """Creates Evidence Records on behalf of investigators and admins."""

    #: Required input fields: attribute name → wire name.
    REQUIRED_FIELDS: dict[str, str] = {
        "case_id": "caseId",
        "description": "description",
        "original_filename": "originalFilename",
        "hash": "hash",
        "file_size": "fileSize",
        "mime_type": "mimeType",
    }

    @classmethod
    def validate(cls, fields: Mapping[str, Any]) -> None:
        missing = [
            wire for attr, wire in cls.REQUIRED_FIELDS.items() if _blank(fields.get(attr))
        ]
        if missing:
            raise ValidationError(
                f"Missing required evidence fields: {', '.join(missing)}.",
                fields=missing,
            )
        if not HASH_PATTERN.match(str(fields["hash"]).strip()):
            raise ValidationError(
                "Evidence hash must be a 64-character hexadecimal SHA-256 digest.",
                fields=["hash"],
            )
        file_size = fields["file_size"]
        if isinstance(file_size, bool) or not isinstance(file_size, int) or file_size < 0:
            raise ValidationError(
                "File size must be a non-negative integer.",
                fields=["fileSize"],
            )

    def submit_evidence(self, actor: Any, fields: Mapping[str, Any]) -> EvidenceRecord:
        """
        Create a new Evidence Record.

        The returned record is the API's stored copy, carrying the
        server-assigned id and ``blockchainStatus = pending``.
        """
        # 1. Capability check
        require_capability(
            actor,
            EvidenceCaps.CAN_SUBMIT_EVIDENCE,
            message="Your role cannot submit evidence.",
        )

        # 2. Input validation
        self.validate(fields)

        # 3. Build the wire payload (fields sans id / status)
        mime_type = str(fields["mime_type"]).strip()
        payload: dict[str, Any] = {
            "caseId": str(fields["case_id"]).strip(),
            "description": str(fields["description"]).strip(),
            "originalFilename": str(fields["original_filename"]).strip(),
            "hash": str(fields["hash"]).strip().lower(),
            "fileSize": fields["file_size"],
            "mimeType": mime_type,
            "fileType": fields.get("file_type") or mime_type,
            "location": fields.get("location") or "",
            "uploadedBy": actor.id,
            "timestamp": _now_iso(),
            "tags": [t.strip() for t in fields.get("tags") or () if t and t.strip()],
        }
        if fields.get("ipfs_cid"):
            payload["ipfsCid"] = fields["ipfs_cid"]

        # 4. Create, then refetch
        stored = self._mutate(lambda: self.client.create_evidence(payload))
        record = EvidenceRecord.from_api(stored)

        logger.info(
            "Evidence %s (%s) submitted for case %s by %s",
            record.id,
            record.original_filename,
            record.case_id,
            actor,
        )
        return record


# ═══════════════════════════════════════════════════════════════════
#  Access Request Lifecycle
# ═══════════════════════════════════════════════════════════════════


class AccessRequestLifecycle(_ApiService):
    """
    Governs the access-request state machine::

        pending ──► approved
           └──────► denied

    Creation always enters ``pending``; ``approved`` and ``denied`` are
    terminal.
    """

    # ── Creation ─────────────────────────────────────────────────────

    def request_access(
        self,
        actor: Any,
        *,
        reason: str | None,
        request_type: str | None,
        evidence_id: str | None = None,
        case_id: str | None = None,
        justification: str | None = None,
    ) -> AccessRequest:
        """
        Submit a new access request as *actor*.  Any role may ask.

        At least one of *evidence_id* / *case_id* is required.
        """
        if _blank(reason):
            raise ValidationError("A reason is required.", fields=["reason"])
        for value, field_name in (
            (reason, "reason"),
            (request_type, "requestType"),
            (justification, "justification"),
        ):
            if value is not None and not isinstance(value, str):
                raise ValidationError(
                    f"'{field_name}' must be a string.", fields=[field_name],
                )
        if _blank(request_type):
            raise ValidationError("A request type is required.", fields=["requestType"])
        if request_type not in RequestType.values:
            raise ValidationError(
                f"Invalid request type: {request_type!r}. "
                f"Expected one of: {', '.join(RequestType.values)}.",
                fields=["requestType"],
            )
        if _blank(evidence_id) and _blank(case_id):
            raise ValidationError(
                "Either an evidence id or a case id must be provided.",
                fields=["evidenceId", "caseId"],
            )

        payload: dict[str, Any] = {
            "requestedBy": actor.id,
            "reason": reason.strip(),
            "requestType": request_type,
        }
        if not _blank(evidence_id):
            payload["evidenceId"] = str(evidence_id).strip()
        if not _blank(case_id):
            payload["caseId"] = str(case_id).strip()
        if not _blank(justification):
            payload["justification"] = justification.strip()

        stored = self._mutate(lambda: self.client.create_access_request(payload))
        access_request = AccessRequest.from_api(stored)

        logger.info(
            "Access request %s (%s) submitted by %s for evidence=%s case=%s",
            access_request.id,
            request_type,
            actor,
            payload.get("evidenceId"),
            payload.get("caseId"),
        )
        return access_request

    # ── Visibility ───────────────────────────────────────────────────

    @staticmethod
    def list_visible_requests(
        actor: Any,
        all_requests: Sequence[AccessRequest],
        all_evidence: Sequence[EvidenceRecord],
    ) -> list[AccessRequest]:
        """
        Filter an already-fetched request collection down to what
        *actor* may see.  Pure: no I/O, no re-sorting.
        """
        return apply_scope(
            all_requests,
            actor,
            scope_config=_REQUEST_SCOPE_CONFIG,
            context=all_evidence,
        )

    def visible_requests(self, actor: Any) -> list[AccessRequest]:
        """Fetch a fresh snapshot and return the actor's visible requests."""
        snapshot = self.fetch_snapshot()
        return self.list_visible_requests(actor, snapshot.requests, snapshot.evidence)

    # ── Decisions ────────────────────────────────────────────────────

    @staticmethod
    def ensure_can_decide(
        actor: Any,
        request: AccessRequest,
        evidence: Sequence[EvidenceRecord],
    ) -> None:
        """
        Raise ``PermissionDenied`` unless *actor* may approve or deny
        *request*.

        Oversight roles may decide any request.  Investigators may decide
        only requests against evidence they uploaded, so a request that
        references no evidence is never theirs to decide.
        """
        from accounts.services import RoleResolver

        capabilities = RoleResolver.for_actor(actor)
        if capabilities.can_approve_any_request:
            return
        if capabilities.can_approve_own_evidence_requests:
            if _uploader_of(evidence, request.evidence_id) == actor.id:
                return
            raise PermissionDenied(
                "You can only decide access requests for evidence you uploaded."
            )
        raise PermissionDenied("Your role cannot approve or deny access requests.")

    @classmethod
    def decidable_ids(
        cls,
        actor: Any,
        requests: Sequence[AccessRequest],
        evidence: Sequence[EvidenceRecord],
    ) -> set[str]:
        """Ids of the pending requests *actor* may approve or deny."""
        ids = set()
        for request in requests:
            if not request.is_pending:
                continue
            try:
                cls.ensure_can_decide(actor, request, evidence)
            except PermissionDenied:
                continue
            ids.add(request.id)
        return ids

    def decide(
        self,
        actor: Any,
        request: AccessRequest,
        decision: str,
        *,
        evidence: Sequence[EvidenceRecord],
    ) -> AccessRequest:
        """
        Move a pending request to ``approved`` or ``denied``.

        Checks, in order: the request is still pending; the actor may
        decide it; the decision is a valid terminal status.  Returns the
        request as re-read after the refetch, so the server-assigned
        ``approvalTimestamp`` is present.
        """
        # 1. Terminal states are final, whoever asks
        if not request.is_pending:
            raise InvalidStateError(current=request.status, target=decision)

        # 2. Authorization
        self.ensure_can_decide(actor, request, evidence)

        # 3. Decision value
        if decision not in DECISIONS:
            raise ValidationError(
                f"Invalid decision: {decision!r}. Expected 'approved' or 'denied'.",
                fields=["status"],
            )

        # 4. Issue the transition, then refetch
        if decision == RequestStatus.APPROVED:
            self._mutate(lambda: self.client.approve_access_request(request.id, actor.id))
        else:
            self._mutate(lambda: self.client.deny_access_request(request.id, actor.id))

        updated = self.snapshot.find_request(request.id)
        logger.info(
            "Access request %s %s by %s (now %s)",
            request.id,
            decision,
            actor,
            updated.status,
        )
        return updated

    def decide_by_id(self, actor: Any, request_id: str, decision: str) -> AccessRequest:
        """
        Decide against the authoritative state: refetch first, so a
        request decided elsewhere raises ``InvalidStateError``.
        """
        snapshot = self.fetch_snapshot()
        request = snapshot.find_request(request_id)
        return self.decide(actor, request, decision, evidence=snapshot.evidence)
