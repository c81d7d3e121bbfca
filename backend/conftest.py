"""
Root conftest.py — shared fixtures for the entire test suite.

Provides:
  - ``api_client`` fixture returning a DRF ``APIClient``.
  - ``FakeEvidenceApi`` — an in-memory stand-in for the external
    evidence API with the same method surface as ``EvidenceApiClient``.
  - ``fake_api`` fixture that installs a fresh ``FakeEvidenceApi`` as
    the client every service builds.
  - Actor fixtures for each role and ``auth_client`` for authenticated
    requests (real JWT, issued through ``ActorTokenService``).

No fixture touches a database.
"""

from __future__ import annotations

import copy
import itertools
from datetime import datetime, timezone
from typing import Any

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from core.domain.exceptions import TransportError


VALID_HASH = "a" * 64


@pytest.fixture()
def api_client() -> APIClient:
    """Unauthenticated DRF test client."""
    return APIClient()


@pytest.fixture(autouse=True)
def _clear_cache():
    """Revoked tokens must not leak between tests."""
    cache.clear()
    yield
    cache.clear()


# ════════════════════════════════════════════════════════════════════
#  Fake evidence API
# ════════════════════════════════════════════════════════════════════


class FakeEvidenceApi:
    """
    In-memory evidence API.

    Assigns ids, stores records with ``blockchainStatus = pending`` and
    stamps ``approvalTimestamp`` on decisions, the way the real server
    does.  ``calls`` records every method invocation; set ``fail_with``
    to a ``TransportError`` to make the next call raise it.
    """

    def __init__(self) -> None:
        self.evidence: list[dict[str, Any]] = []
        self.requests: list[dict[str, Any]] = []
        self.calls: list[tuple[str, tuple]] = []
        self.fail_with: TransportError | None = None
        self._ids = itertools.count(1)

    # ── Seeding helpers ─────────────────────────────────────────────

    def add_evidence(self, *, uploaded_by: str, **fields: Any) -> dict[str, Any]:
        record = {
            "id": fields.pop("id", f"ev-{next(self._ids)}"),
            "hash": VALID_HASH,
            "originalFilename": "scene.jpg",
            "caseId": "CASE-1",
            "description": "Photo of the scene",
            "uploadedBy": uploaded_by,
            "blockchainStatus": "pending",
            "timestamp": "2024-01-01T10:00:00Z",
            "fileSize": 1024,
            "mimeType": "image/jpeg",
            "fileType": "image/jpeg",
            "location": "",
            "tags": [],
        }
        record.update(fields)
        self.evidence.append(record)
        return record

    def add_request(self, *, requested_by: str, **fields: Any) -> dict[str, Any]:
        record = {
            "id": fields.pop("id", f"req-{next(self._ids)}"),
            "requestedBy": requested_by,
            "reason": "Need to analyse",
            "requestType": "analysis",
            "status": "pending",
            "timestamp": "2024-01-02T10:00:00Z",
        }
        record.update(fields)
        self.requests.append(record)
        return record

    # ── EvidenceApiClient surface ───────────────────────────────────

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        if self.fail_with is not None:
            error, self.fail_with = self.fail_with, None
            raise error

    def create_evidence(self, payload: dict[str, Any]) -> dict[str, Any]:
        self._record("create_evidence", payload)
        record = dict(payload, id=f"ev-{next(self._ids)}", blockchainStatus="pending")
        self.evidence.append(record)
        return copy.deepcopy(record)

    def list_evidence(self) -> list[dict[str, Any]]:
        self._record("list_evidence")
        return copy.deepcopy(self.evidence)

    def create_access_request(self, payload: dict[str, Any]) -> dict[str, Any]:
        self._record("create_access_request", payload)
        record = dict(payload, id=f"req-{next(self._ids)}", status="pending")
        self.requests.append(record)
        return copy.deepcopy(record)

    def list_access_requests(self) -> list[dict[str, Any]]:
        self._record("list_access_requests")
        return copy.deepcopy(self.requests)

    def approve_access_request(self, request_id: str, approved_by: str) -> dict[str, Any]:
        self._record("approve_access_request", request_id, approved_by)
        return self._decide(request_id, "approved", approved_by)

    def deny_access_request(self, request_id: str, approved_by: str) -> dict[str, Any]:
        self._record("deny_access_request", request_id, approved_by)
        return self._decide(request_id, "denied", approved_by)

    def _decide(self, request_id: str, status: str, approved_by: str) -> dict[str, Any]:
        for record in self.requests:
            if record["id"] == request_id:
                if record["status"] != "pending":
                    raise TransportError("Request already processed", status_code=409)
                record.update(
                    status=status,
                    approvedBy=approved_by,
                    approvalTimestamp=datetime.now(timezone.utc).isoformat(),
                )
                return copy.deepcopy(record)
        raise TransportError("Access request not found", status_code=404)

    def mutating_calls(self) -> list[str]:
        return [name for name, _ in self.calls if not name.startswith("list_")]


@pytest.fixture()
def fake_api(monkeypatch) -> FakeEvidenceApi:
    """Every service built during the test talks to this fake."""
    api = FakeEvidenceApi()
    monkeypatch.setattr("evidence.services.get_client", lambda: api)
    return api


# ════════════════════════════════════════════════════════════════════
#  Actors
# ════════════════════════════════════════════════════════════════════


@pytest.fixture()
def make_actor():
    """
    Factory fixture for ``Actor`` instances.

    Usage::

        def test_something(make_actor):
            actor = make_actor("judge")
            other = make_actor("investigator", actor_id="inv-2")
    """
    from accounts.models import Actor

    def _factory(role: str, *, actor_id: str | None = None, name: str | None = None) -> Actor:
        actor_id = actor_id or f"{role}-001"
        return Actor(
            id=actor_id,
            role=role,
            display_name=name or role.title(),
            username=actor_id.rsplit("-", 1)[0],
        )

    return _factory


@pytest.fixture()
def investigator(make_actor):
    return make_actor("investigator", actor_id="investigator1-001")


@pytest.fixture()
def other_investigator(make_actor):
    return make_actor("investigator", actor_id="investigator2-001")


@pytest.fixture()
def analyst(make_actor):
    return make_actor("analyst", actor_id="analyst1-001")


@pytest.fixture()
def prosecutor(make_actor):
    return make_actor("prosecutor", actor_id="prosecutor1-001")


@pytest.fixture()
def judge(make_actor):
    return make_actor("judge", actor_id="judge1-001")


@pytest.fixture()
def admin_actor(make_actor):
    return make_actor("admin", actor_id="admin-001")


@pytest.fixture()
def auth_client():
    """
    Factory returning an ``APIClient`` that carries a real bearer token
    for the given actor.

    Usage::

        def test_something(auth_client, judge):
            client = auth_client(judge)
            client.get("/api/access-requests/")
    """
    from accounts.services import ActorTokenService

    def _factory(actor) -> APIClient:
        client = APIClient()
        token = ActorTokenService.issue(actor)["access"]
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        return client

    return _factory
