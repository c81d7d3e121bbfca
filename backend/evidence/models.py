"""
Evidence app models.

The records themselves are owned by the external evidence API; these are
immutable in-process snapshots of what it returned.  ``from_api`` parses
the API's camelCase JSON; ``Snapshot`` bundles one consistent read of both
collections for the lifecycle services.

Status enumerations use ``TextChoices`` so serializers and the system
constants endpoint can share the same value/label pairs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Sequence

from django.db import models
from django.utils.dateparse import parse_datetime

from core.domain.exceptions import NotFound, TransportError


class BlockchainStatus(models.TextChoices):
    """Chain-confirmation status of an Evidence Record."""

    PENDING = "pending", "Pending"
    CONFIRMED = "confirmed", "Confirmed"
    FAILED = "failed", "Failed"


class RequestStatus(models.TextChoices):
    """Access-request lifecycle.  ``approved`` and ``denied`` are terminal."""

    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    DENIED = "denied", "Denied"


class RequestType(models.TextChoices):
    ANALYSIS = "analysis", "Analysis"
    TESTING = "testing", "Testing"
    REPORT = "report", "Report"


#: Statuses a pending request may move to.
DECISIONS = (RequestStatus.APPROVED, RequestStatus.DENIED)


def _parse_timestamp(value: Any) -> datetime | None:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    try:
        return parse_datetime(str(value))
    except ValueError:
        return None


def _required(data: Mapping[str, Any], key: str, kind: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise TransportError(f"Malformed {kind} from evidence API: missing '{key}'.")
    except TypeError:
        raise TransportError(f"Malformed {kind} from evidence API: expected an object.")


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _optional_text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _integer(data: Mapping[str, Any], key: str, kind: str) -> int:
    value = data.get(key)
    if value is None or value == "":
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        raise TransportError(
            f"Malformed {kind} from evidence API: invalid '{key}' {value!r}."
        )


@dataclass(frozen=True)
class EvidenceRecord:
    """An immutable description of a submitted artifact."""

    id: str
    hash: str
    original_filename: str
    case_id: str
    description: str
    uploaded_by: str
    blockchain_status: str = BlockchainStatus.PENDING
    location: str = ""
    timestamp: datetime | None = None
    file_size: int = 0
    file_type: str = ""
    mime_type: str = ""
    tx_hash: str | None = None
    ipfs_cid: str | None = None
    tags: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> EvidenceRecord:
        record_id = _required(data, "id", "evidence record")
        return cls(
            id=str(record_id),
            hash=_text(data.get("hash")),
            original_filename=_text(data.get("originalFilename")),
            case_id=_text(data.get("caseId")),
            description=_text(data.get("description")),
            uploaded_by=_text(data.get("uploadedBy")),
            blockchain_status=_text(data.get("blockchainStatus")) or BlockchainStatus.PENDING,
            location=_text(data.get("location")),
            timestamp=_parse_timestamp(data.get("timestamp")),
            file_size=_integer(data, "fileSize", "evidence record"),
            file_type=_text(data.get("fileType")),
            mime_type=_text(data.get("mimeType")),
            tx_hash=_optional_text(data.get("txHash")),
            ipfs_cid=_optional_text(data.get("ipfsCid")),
            tags=tuple(str(tag) for tag in data.get("tags") or ()),
        )

    @property
    def is_confirmed(self) -> bool:
        return self.blockchain_status == BlockchainStatus.CONFIRMED


@dataclass(frozen=True)
class AccessRequest:
    """A requester's ask to access evidence, with a one-way status."""

    id: str
    requested_by: str
    reason: str
    request_type: str
    status: str = RequestStatus.PENDING
    evidence_id: str | None = None
    case_id: str | None = None
    justification: str | None = None
    timestamp: datetime | None = None
    approved_by: str | None = None
    approval_timestamp: datetime | None = None

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> AccessRequest:
        request_id = _required(data, "id", "access request")
        return cls(
            id=str(request_id),
            requested_by=_text(data.get("requestedBy")),
            reason=_text(data.get("reason")),
            request_type=_text(data.get("requestType")),
            status=_text(data.get("status")) or RequestStatus.PENDING,
            evidence_id=_optional_text(data.get("evidenceId")),
            case_id=_optional_text(data.get("caseId")),
            justification=_optional_text(data.get("justification")),
            timestamp=_parse_timestamp(data.get("timestamp")),
            approved_by=_optional_text(data.get("approvedBy")),
            approval_timestamp=_parse_timestamp(data.get("approvalTimestamp")),
        )

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING


@dataclass(frozen=True)
class Snapshot:
    """
    One read of both collections from the external API.

    Order is the API's order; nothing here re-sorts.
    """

    evidence: tuple[EvidenceRecord, ...] = ()
    requests: tuple[AccessRequest, ...] = ()

    @classmethod
    def from_api(
        cls,
        evidence_payload: Sequence[Mapping[str, Any]] | None,
        request_payload: Sequence[Mapping[str, Any]] | None,
    ) -> Snapshot:
        return cls(
            evidence=tuple(EvidenceRecord.from_api(item) for item in evidence_payload or ()),
            requests=tuple(AccessRequest.from_api(item) for item in request_payload or ()),
        )

    def evidence_by_id(self) -> dict[str, EvidenceRecord]:
        return {record.id: record for record in self.evidence}

    def find_request(self, request_id: str) -> AccessRequest:
        for request in self.requests:
            if request.id == str(request_id):
                return request
        raise NotFound(f"Access request {request_id} not found.")
