"""
Evidence app serializers.

Contains all Request and Response serializers for the Evidence API.
Field names are camelCase to mirror the external evidence API and the
dashboard that consumes this one.

Request serializers check **types only**.  Required-field, hash-format
and lifecycle rules are enforced by ``services.py`` so that the same
rules apply whether a call comes through HTTP or from Python.

Structure
---------
1. Filter / query-param serializers
2. Read serializers (evidence, access request, case list)
3. Write serializers (evidence submission, access request)
"""

from __future__ import annotations

from rest_framework import serializers

from .models import RequestType


# ═══════════════════════════════════════════════════════════════════
#  1. Filter / Query-Parameter Serializers
# ═══════════════════════════════════════════════════════════════════


class EvidenceFilterSerializer(serializers.Serializer):
    """
    Validates query-parameter filters for ``GET /api/evidence/``.

    Query Parameters
    ----------------
    ``search`` : str — case-insensitive match on filename, description, case id
    ``case``   : str — exact case id
    """

    search = serializers.CharField(required=False, allow_blank=True, max_length=255)
    case = serializers.CharField(required=False, allow_blank=True, max_length=255)


# ═══════════════════════════════════════════════════════════════════
#  2. Read Serializers
# ═══════════════════════════════════════════════════════════════════


class EvidenceRecordSerializer(serializers.Serializer):
    """Read-only representation of an ``EvidenceRecord``."""

    id = serializers.CharField(read_only=True)
    hash = serializers.CharField(read_only=True)
    originalFilename = serializers.CharField(source="original_filename", read_only=True)
    caseId = serializers.CharField(source="case_id", read_only=True)
    description = serializers.CharField(read_only=True)
    location = serializers.CharField(read_only=True)
    timestamp = serializers.DateTimeField(read_only=True, allow_null=True)
    uploadedBy = serializers.CharField(source="uploaded_by", read_only=True)
    blockchainStatus = serializers.CharField(source="blockchain_status", read_only=True)
    txHash = serializers.CharField(source="tx_hash", read_only=True, allow_null=True)
    fileSize = serializers.IntegerField(source="file_size", read_only=True)
    fileType = serializers.CharField(source="file_type", read_only=True)
    mimeType = serializers.CharField(source="mime_type", read_only=True)
    ipfsCid = serializers.CharField(source="ipfs_cid", read_only=True, allow_null=True)
    tags = serializers.ListField(child=serializers.CharField(), read_only=True)


class AccessRequestSerializer(serializers.Serializer):
    """Read-only representation of an ``AccessRequest``."""

    id = serializers.CharField(read_only=True)
    evidenceId = serializers.CharField(source="evidence_id", read_only=True, allow_null=True)
    caseId = serializers.CharField(source="case_id", read_only=True, allow_null=True)
    requestedBy = serializers.CharField(source="requested_by", read_only=True)
    reason = serializers.CharField(read_only=True)
    justification = serializers.CharField(read_only=True, allow_null=True)
    requestType = serializers.CharField(source="request_type", read_only=True)
    status = serializers.CharField(read_only=True)
    timestamp = serializers.DateTimeField(read_only=True, allow_null=True)
    approvedBy = serializers.CharField(source="approved_by", read_only=True, allow_null=True)
    approvalTimestamp = serializers.DateTimeField(
        source="approval_timestamp", read_only=True, allow_null=True,
    )


class VisibleAccessRequestSerializer(AccessRequestSerializer):
    """
    Access request as listed on the requests page: adds the referenced
    evidence's filename and whether the viewer may decide it.

    Expects ``context["evidence_by_id"]`` and ``context["decidable_ids"]``.
    """

    evidenceFilename = serializers.SerializerMethodField()
    canDecide = serializers.SerializerMethodField()

    def get_evidenceFilename(self, obj) -> str | None:
        record = self.context.get("evidence_by_id", {}).get(obj.evidence_id)
        return record.original_filename if record else None

    def get_canDecide(self, obj) -> bool:
        return obj.id in self.context.get("decidable_ids", set())


class CaseListSerializer(serializers.Serializer):
    cases = serializers.ListField(child=serializers.CharField(), read_only=True)


# ═══════════════════════════════════════════════════════════════════
#  3. Write Serializers
# ═══════════════════════════════════════════════════════════════════


class EvidenceSubmitSerializer(serializers.Serializer):
    """
    Payload for ``POST /api/evidence/``.

    ``uploadedBy``, ``timestamp``, ``id`` and ``blockchainStatus`` are set
    by the service / the external API and are not accepted here.
    """

    caseId = serializers.CharField(source="case_id", required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    originalFilename = serializers.CharField(source="original_filename", required=False, allow_blank=True)
    hash = serializers.CharField(required=False, allow_blank=True)
    fileSize = serializers.IntegerField(source="file_size", required=False, allow_null=True)
    mimeType = serializers.CharField(source="mime_type", required=False, allow_blank=True)
    fileType = serializers.CharField(source="file_type", required=False, allow_blank=True)
    location = serializers.CharField(required=False, allow_blank=True)
    ipfsCid = serializers.CharField(source="ipfs_cid", required=False, allow_blank=True)
    tags = serializers.ListField(
        child=serializers.CharField(allow_blank=True), required=False,
    )


class AccessRequestCreateSerializer(serializers.Serializer):
    """Payload for ``POST /api/access-requests/``."""

    evidenceId = serializers.CharField(source="evidence_id", required=False, allow_blank=True, allow_null=True)
    caseId = serializers.CharField(source="case_id", required=False, allow_blank=True, allow_null=True)
    reason = serializers.CharField(required=False, allow_blank=True, max_length=500)
    justification = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    requestType = serializers.CharField(
        source="request_type",
        required=False,
        allow_blank=True,
        help_text=f"One of: {', '.join(RequestType.values)}.",
    )
