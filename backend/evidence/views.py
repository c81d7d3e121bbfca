"""
Evidence app ViewSets.

Architecture: Views are intentionally thin.
Every view follows the strict three-step pattern:

    1. Parse / validate input via a serializer.
    2. Delegate all business logic to the appropriate service class.
    3. Serialize the result and return a DRF ``Response``.

No capability checks, visibility rules, or state-machine logic lives here.
Domain exceptions raised by services are turned into responses by
``core.domain.exception_handler``.

ViewSets
--------
- ``EvidenceViewSet``      — browse, submit, list case ids.
- ``AccessRequestViewSet`` — list visible, create, approve, deny.
"""

from __future__ import annotations

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
)

from .models import RequestStatus
from .serializers import (
    AccessRequestCreateSerializer,
    AccessRequestSerializer,
    CaseListSerializer,
    EvidenceFilterSerializer,
    EvidenceRecordSerializer,
    EvidenceSubmitSerializer,
    VisibleAccessRequestSerializer,
)
from .services import (
    AccessRequestLifecycle,
    EvidenceQueryService,
    EvidenceSubmissionService,
)


class EvidenceViewSet(viewsets.ViewSet):
    """
    Evidence catalogue endpoints.

    Uses ``viewsets.ViewSet`` (not ``ModelViewSet``) so every action is
    explicitly defined; there is no update or delete for evidence.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="List evidence records",
        description="Return evidence records from the evidence API, optionally filtered by a search term and case id.",
        parameters=[
            OpenApiParameter(name="search", type=str, required=False, description="Match filename, description or case id."),
            OpenApiParameter(name="case", type=str, required=False, description="Exact case id."),
        ],
        responses={200: OpenApiResponse(response=EvidenceRecordSerializer(many=True), description="Evidence list.")},
        tags=["Evidence"],
    )
    def list(self, request: Request) -> Response:
        """GET /api/evidence/ — Browse evidence."""
        filter_serializer = EvidenceFilterSerializer(data=request.query_params)
        if not filter_serializer.is_valid():
            return Response(filter_serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        records = EvidenceQueryService().list_evidence(filter_serializer.validated_data)
        return Response(EvidenceRecordSerializer(records, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Submit evidence",
        description="Register a new evidence record. Investigators and admins only.",
        request=EvidenceSubmitSerializer,
        responses={
            201: OpenApiResponse(response=EvidenceRecordSerializer, description="Evidence stored, chain status pending."),
            400: OpenApiResponse(description="Missing fields or malformed hash."),
            403: OpenApiResponse(description="Role cannot submit evidence."),
            502: OpenApiResponse(description="Evidence API failure."),
        },
        tags=["Evidence"],
    )
    def create(self, request: Request) -> Response:
        """POST /api/evidence/ — Submit evidence."""
        serializer = EvidenceSubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        record = EvidenceSubmissionService().submit_evidence(request.user, serializer.validated_data)
        return Response(EvidenceRecordSerializer(record).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="List case ids",
        description="Distinct case ids across all evidence, for the browse filter dropdown.",
        responses={200: OpenApiResponse(response=CaseListSerializer, description="Case ids.")},
        tags=["Evidence"],
    )
    @action(detail=False, methods=["get"], url_path="cases")
    def cases(self, request: Request) -> Response:
        """GET /api/evidence/cases/"""
        service = EvidenceQueryService()
        cases = service.unique_case_ids(service.fetch_snapshot().evidence)
        return Response(CaseListSerializer({"cases": cases}).data, status=status.HTTP_200_OK)


class AccessRequestViewSet(viewsets.ViewSet):
    """
    Access-request lifecycle endpoints.

    Permission Strategy
    -------------------
    The base permission is ``IsAuthenticated``.  Visibility and decision
    rules are enforced exclusively inside ``AccessRequestLifecycle``.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="List visible access requests",
        description=(
            "Investigators see requests on evidence they uploaded, analysts see their own "
            "requests, prosecutors / judges / admins see all. Order follows the evidence API."
        ),
        responses={200: OpenApiResponse(response=VisibleAccessRequestSerializer(many=True), description="Requests.")},
        tags=["Access Requests"],
    )
    def list(self, request: Request) -> Response:
        """GET /api/access-requests/"""
        lifecycle = AccessRequestLifecycle()
        visible = lifecycle.visible_requests(request.user)
        evidence = lifecycle.snapshot.evidence

        decidable_ids = lifecycle.decidable_ids(request.user, visible, evidence)

        serializer = VisibleAccessRequestSerializer(
            visible,
            many=True,
            context={
                "evidence_by_id": lifecycle.snapshot.evidence_by_id(),
                "decidable_ids": decidable_ids,
            },
        )
        return Response(serializer.data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Request access",
        request=AccessRequestCreateSerializer,
        responses={
            201: OpenApiResponse(response=AccessRequestSerializer, description="Request created as pending."),
            400: OpenApiResponse(description="Missing reason / type, or no evidence or case id."),
            502: OpenApiResponse(description="Evidence API failure."),
        },
        tags=["Access Requests"],
    )
    def create(self, request: Request) -> Response:
        """POST /api/access-requests/"""
        serializer = AccessRequestCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        access_request = AccessRequestLifecycle().request_access(
            request.user,
            reason=data.get("reason"),
            request_type=data.get("request_type"),
            evidence_id=data.get("evidence_id"),
            case_id=data.get("case_id"),
            justification=data.get("justification"),
        )
        return Response(AccessRequestSerializer(access_request).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="Approve an access request",
        request=None,
        responses={
            200: OpenApiResponse(response=AccessRequestSerializer, description="Request approved."),
            403: OpenApiResponse(description="Actor may not decide this request."),
            404: OpenApiResponse(description="No such request."),
            409: OpenApiResponse(description="Request already decided."),
        },
        tags=["Access Requests"],
    )
    @action(detail=True, methods=["post"], url_path="approve")
    def approve(self, request: Request, pk: str = None) -> Response:
        """POST /api/access-requests/{id}/approve/"""
        updated = AccessRequestLifecycle().decide_by_id(request.user, pk, RequestStatus.APPROVED)
        return Response(AccessRequestSerializer(updated).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Deny an access request",
        request=None,
        responses={
            200: OpenApiResponse(response=AccessRequestSerializer, description="Request denied."),
            403: OpenApiResponse(description="Actor may not decide this request."),
            404: OpenApiResponse(description="No such request."),
            409: OpenApiResponse(description="Request already decided."),
        },
        tags=["Access Requests"],
    )
    @action(detail=True, methods=["post"], url_path="deny")
    def deny(self, request: Request, pk: str = None) -> Response:
        """POST /api/access-requests/{id}/deny/"""
        updated = AccessRequestLifecycle().decide_by_id(request.user, pk, RequestStatus.DENIED)
        return Response(AccessRequestSerializer(updated).data, status=status.HTTP_200_OK)
