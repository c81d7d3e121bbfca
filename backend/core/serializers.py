"""
Core app serializers.

**Response-only** serializers for the aggregated endpoints served by the
core app.  They work exclusively with plain Python dicts / lists produced
by the service layer, keeping the core app decoupled from the
``evidence`` and ``accounts`` record types.
"""

from __future__ import annotations

from rest_framework import serializers


# ════════════════════════════════════════════════════════════════════
#  Dashboard Statistics
# ════════════════════════════════════════════════════════════════════

class DashboardStatCardSerializer(serializers.Serializer):
    """
    One stat card on the dashboard.

    Example::

        {"key": "pending_requests", "label": "Pending Requests", "value": 3}
    """

    key = serializers.CharField(
        help_text="Machine-readable card key (e.g. 'my_evidence').",
    )
    label = serializers.CharField(
        help_text="Human-readable card title.",
    )
    value = serializers.IntegerField(
        help_text="The count shown on the card.",
    )


# ════════════════════════════════════════════════════════════════════
#  System Constants
# ════════════════════════════════════════════════════════════════════

class ChoiceItemSerializer(serializers.Serializer):
    """
    A single choice option (value + display label).

    Example::

        {"value": "pending", "label": "Pending"}
    """

    value = serializers.CharField()
    label = serializers.CharField()


class SystemConstantsSerializer(serializers.Serializer):
    """
    Response serializer for ``GET /api/core/constants/``.

    Response shape::

        {
            "roles": [{"value": "investigator", "label": "Investigator"}, ...],
            "requestTypes": [...],
            "requestStatuses": [...],
            "blockchainStatuses": [...]
        }
    """

    roles = ChoiceItemSerializer(many=True)
    requestTypes = ChoiceItemSerializer(source="request_types", many=True)
    requestStatuses = ChoiceItemSerializer(source="request_statuses", many=True)
    blockchainStatuses = ChoiceItemSerializer(source="blockchain_statuses", many=True)
