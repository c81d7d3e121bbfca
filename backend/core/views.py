"""
Core app views — **Thin Views**.

Each view delegates all business logic to the corresponding service in
``core.services``.  Views are responsible only for:

1. Calling the service with the authenticated actor.
2. Serialising the result and returning an HTTP ``Response``.

No aggregation logic and no evidence API calls live here.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from drf_spectacular.utils import OpenApiResponse, extend_schema

from .serializers import DashboardStatCardSerializer, SystemConstantsSerializer
from .services import DashboardAggregationService, SystemConstantsService


class DashboardStatsView(APIView):
    """
    **GET /api/core/dashboard/**

    Return the stat cards for the authenticated actor's role.

    The response payload is **role-aware** — an investigator sees counts
    over the evidence they uploaded, an analyst over their own requests,
    and the oversight roles see system-wide counts.  See
    ``DashboardAggregationService`` for the per-role cards.

    **Authentication**: Required (``IsAuthenticated``).

    **Error Responses**:
        - ``401 Unauthorized``: Missing, invalid or revoked token.
        - ``502 Bad Gateway``: The evidence API could not be read.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Dashboard statistics",
        description="Return the per-role stat cards computed from a fresh evidence API snapshot.",
        responses={
            200: OpenApiResponse(response=DashboardStatCardSerializer(many=True), description="Stat cards."),
            502: OpenApiResponse(description="Evidence API failure."),
        },
        tags=["Dashboard"],
    )
    def get(self, request: Request) -> Response:
        cards = DashboardAggregationService.for_actor(request.user)
        serializer = DashboardStatCardSerializer(cards, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)


class SystemConstantsView(APIView):
    """
    **GET /api/core/constants/**

    Return the role, request-type and status enumerations so the
    dashboard can build dropdowns and labels without hardcoding values.

    **Authentication**: Required (``IsAuthenticated``).
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="System constants",
        description=(
            "Return all system-wide choice enumerations so the frontend can "
            "dynamically build dropdowns, filters, and labels."
        ),
        responses={200: OpenApiResponse(response=SystemConstantsSerializer, description="System constants.")},
        tags=["System"],
    )
    def get(self, request: Request) -> Response:
        data = SystemConstantsService.get_constants()
        serializer = SystemConstantsSerializer(data)
        return Response(serializer.data, status=status.HTTP_200_OK)
