"""
Accounts app serializers.

Request serializers validate input shape only; response serializers
render ``Actor`` objects and capability sets in the camelCase field names
the dashboard consumes.  No authentication logic lives here — that
belongs in ``services.py``.
"""

from __future__ import annotations

from rest_framework import serializers

from .models import Role


# ═══════════════════════════════════════════════════════════════════
#  Request serializers
# ═══════════════════════════════════════════════════════════════════


class LoginRequestSerializer(serializers.Serializer):
    """Username + password login credentials."""

    username = serializers.CharField(
        max_length=150,
        trim_whitespace=True,
        help_text="Actor username as configured in the actor directory.",
    )
    password = serializers.CharField(
        write_only=True,
        trim_whitespace=False,
        style={"input_type": "password"},
        help_text="Actor password.",
    )


# ═══════════════════════════════════════════════════════════════════
#  Response serializers
# ═══════════════════════════════════════════════════════════════════


class ActorSerializer(serializers.Serializer):
    """Read-only representation of an authenticated ``Actor``."""

    id = serializers.CharField(read_only=True)
    username = serializers.CharField(read_only=True)
    role = serializers.ChoiceField(choices=Role.choices, read_only=True)
    displayName = serializers.CharField(source="display_name", read_only=True)


class CapabilitiesSerializer(serializers.Serializer):
    """Capability flags for the actor's role (see ``RoleCapabilities``)."""

    canSubmitEvidence = serializers.BooleanField(source="can_submit_evidence", read_only=True)
    canViewAllRequests = serializers.BooleanField(source="can_view_all_requests", read_only=True)
    canApproveOwnEvidenceRequests = serializers.BooleanField(
        source="can_approve_own_evidence_requests", read_only=True,
    )
    canApproveAnyRequest = serializers.BooleanField(source="can_approve_any_request", read_only=True)
    canDecide = serializers.BooleanField(source="can_decide", read_only=True)
    viewScope = serializers.CharField(source="view_scope", read_only=True)


class TokenResponseSerializer(serializers.Serializer):
    """Login response: the access token plus the resolved actor."""

    access = serializers.CharField(read_only=True)
    expiresAt = serializers.IntegerField(source="expires_at", read_only=True)
    actor = ActorSerializer(read_only=True)
    capabilities = CapabilitiesSerializer(read_only=True)


class MeSerializer(serializers.Serializer):
    """Profile of the authenticated actor for the ``/me/`` endpoint."""

    actor = ActorSerializer(read_only=True)
    roleDisplay = serializers.CharField(source="role_display", read_only=True)
    capabilities = CapabilitiesSerializer(read_only=True)
    navigation = serializers.ListField(child=serializers.CharField(), read_only=True)
