"""
Accounts app views.

All views follow the **Thin View** pattern: validate input via
serializers, delegate to the service layer, and return the result
wrapped in a DRF ``Response``.  **No business logic** resides here.

View Map
--------
- ``LoginView``  — POST /auth/login/
- ``LogoutView`` — POST /auth/logout/
- ``MeView``     — GET  /me/
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from drf_spectacular.utils import OpenApiResponse, extend_schema

from .serializers import LoginRequestSerializer, MeSerializer, TokenResponseSerializer
from .services import (
    ActorTokenService,
    AuthenticationService,
    CurrentActorService,
    RoleResolver,
)


# ═══════════════════════════════════════════════════════════════════
#  Authentication Views
# ═══════════════════════════════════════════════════════════════════


class LoginView(APIView):
    """
    POST /api/accounts/auth/login/

    Public endpoint.  Verifies username + password against the actor
    directory and issues the access token that carries the actor's role
    for the rest of the session.

    Request body  → ``LoginRequestSerializer``
    Response body → ``TokenResponseSerializer`` (200 OK)
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        summary="Log in",
        request=LoginRequestSerializer,
        responses={
            200: OpenApiResponse(response=TokenResponseSerializer, description="Access token and actor."),
            400: OpenApiResponse(description="Missing username or password."),
            401: OpenApiResponse(description="Invalid credentials."),
        },
        tags=["Auth"],
    )
    def post(self, request: Request) -> Response:
        serializer = LoginRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        actor = AuthenticationService.authenticate(
            username=serializer.validated_data["username"],
            password=serializer.validated_data["password"],
        )
        if actor is None:
            return Response(
                {"detail": "Invalid credentials."},
                status=status.HTTP_401_UNAUTHORIZED,
            )

        payload = ActorTokenService.issue(actor)
        payload["actor"] = actor
        payload["capabilities"] = RoleResolver.for_actor(actor)
        return Response(TokenResponseSerializer(payload).data, status=status.HTTP_200_OK)


class LogoutView(APIView):
    """
    POST /api/accounts/auth/logout/

    Revokes the bearer token used for this request.  Any later request
    with the same token is rejected with 401.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Log out",
        request=None,
        responses={204: OpenApiResponse(description="Token revoked.")},
        tags=["Auth"],
    )
    def post(self, request: Request) -> Response:
        ActorTokenService.revoke(request.auth)
        return Response(status=status.HTTP_204_NO_CONTENT)


# ═══════════════════════════════════════════════════════════════════
#  Current Actor ("Me") View
# ═══════════════════════════════════════════════════════════════════


class MeView(APIView):
    """
    GET /api/accounts/me/

    Returns the authenticated actor, the capability set of their role,
    and the dashboard views they may open.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Current actor profile",
        responses={200: OpenApiResponse(response=MeSerializer, description="Actor profile.")},
        tags=["Auth"],
    )
    def get(self, request: Request) -> Response:
        profile = CurrentActorService.get_profile(request.user)
        return Response(MeSerializer(profile).data, status=status.HTTP_200_OK)
