"""
End-to-end API tests for the evidence and access-request endpoints.

Requests go through URL routing, ``ActorJWTAuthentication``, the thin
views, the service layer and ``core.domain.exception_handler``; only the
external evidence API is replaced by ``FakeEvidenceApi``.
"""

from __future__ import annotations

import pytest
from django.urls import reverse
from rest_framework import status

from conftest import VALID_HASH
from core.domain.exceptions import TransportError


EVIDENCE_URL = "/api/evidence/"
REQUESTS_URL = "/api/access-requests/"


def _approve_url(request_id: str) -> str:
    return reverse("access-request-approve", kwargs={"pk": request_id})


def _deny_url(request_id: str) -> str:
    return reverse("access-request-deny", kwargs={"pk": request_id})


def _submit_payload(**overrides):
    payload = {
        "caseId": "CASE-2024-001",
        "description": "Blood sample",
        "originalFilename": "sample.png",
        "hash": VALID_HASH,
        "fileSize": 4096,
        "mimeType": "image/png",
        "tags": ["dna", " "],
    }
    payload.update(overrides)
    return payload


# ════════════════════════════════════════════════════════════════════
#  Evidence endpoints
# ════════════════════════════════════════════════════════════════════

class TestEvidenceEndpoints:

    def test_requires_authentication(self, api_client, fake_api):
        resp = api_client.get(EVIDENCE_URL)
        assert resp.status_code == status.HTTP_401_UNAUTHORIZED

    def test_investigator_submits_evidence(self, auth_client, investigator, fake_api):
        resp = auth_client(investigator).post(EVIDENCE_URL, _submit_payload(), format="json")

        assert resp.status_code == status.HTTP_201_CREATED, resp.data
        assert resp.data["blockchainStatus"] == "pending"
        assert resp.data["uploadedBy"] == investigator.id
        assert resp.data["tags"] == ["dna"]
        assert resp.data["id"]

    def test_analyst_cannot_submit(self, auth_client, analyst, fake_api):
        resp = auth_client(analyst).post(EVIDENCE_URL, _submit_payload(), format="json")

        assert resp.status_code == status.HTTP_403_FORBIDDEN
        assert resp.data["detail"] == "Your role cannot submit evidence."
        assert fake_api.mutating_calls() == []

    def test_malformed_hash_is_400_with_field(self, auth_client, admin_actor, fake_api):
        resp = auth_client(admin_actor).post(
            EVIDENCE_URL, _submit_payload(hash="deadbeef"), format="json",
        )

        assert resp.status_code == status.HTTP_400_BAD_REQUEST
        assert resp.data["fields"] == ["hash"]

    def test_missing_fields_listed(self, auth_client, investigator, fake_api):
        resp = auth_client(investigator).post(
            EVIDENCE_URL, {"caseId": "C", "hash": VALID_HASH}, format="json",
        )

        assert resp.status_code == status.HTTP_400_BAD_REQUEST
        assert resp.data["fields"] == ["description", "originalFilename", "fileSize", "mimeType"]

    def test_browse_with_filters(self, auth_client, analyst, investigator, fake_api):
        fake_api.add_evidence(uploaded_by=investigator.id, caseId="CASE-A", originalFilename="gun.jpg")
        fake_api.add_evidence(uploaded_by=investigator.id, caseId="CASE-B", originalFilename="gun-2.jpg")
        fake_api.add_evidence(uploaded_by=investigator.id, caseId="CASE-A", originalFilename="note.txt",
                              description="ransom note")

        client = auth_client(analyst)
        resp = client.get(EVIDENCE_URL, {"search": "GUN", "case": "CASE-A"})

        assert resp.status_code == status.HTTP_200_OK
        assert [r["originalFilename"] for r in resp.data] == ["gun.jpg"]

        resp = client.get(reverse("evidence-cases"))
        assert resp.data == {"cases": ["CASE-A", "CASE-B"]}

    def test_api_down_is_502(self, auth_client, judge, fake_api):
        fake_api.fail_with = TransportError("Evidence API unreachable: refused")

        resp = auth_client(judge).get(EVIDENCE_URL)

        assert resp.status_code == status.HTTP_502_BAD_GATEWAY
        assert "unreachable" in resp.data["detail"]

    def test_malformed_upstream_record_is_502(self, auth_client, analyst, investigator, fake_api):
        fake_api.add_evidence(uploaded_by=investigator.id, fileSize="2.4 MB")

        resp = auth_client(analyst).get(EVIDENCE_URL)

        assert resp.status_code == status.HTTP_502_BAD_GATEWAY
        assert "fileSize" in resp.data["detail"]


# ════════════════════════════════════════════════════════════════════
#  Access-request endpoints
# ════════════════════════════════════════════════════════════════════

@pytest.fixture()
def seeded(fake_api, investigator, other_investigator, analyst):
    fake_api.add_evidence(id="E1", uploaded_by=investigator.id, originalFilename="e1.jpg")
    fake_api.add_evidence(id="E2", uploaded_by=other_investigator.id, originalFilename="e2.jpg")
    fake_api.add_request(id="R1", requested_by=analyst.id, evidenceId="E1", reason="Trial prep")
    fake_api.add_request(id="R2", requested_by="analyst2-001", evidenceId="E2")
    return fake_api


class TestAccessRequestEndpoints:

    def test_analyst_requests_access(self, auth_client, analyst, fake_api):
        resp = auth_client(analyst).post(
            REQUESTS_URL,
            {"evidenceId": "E1", "reason": "Trial prep", "requestType": "analysis"},
            format="json",
        )

        assert resp.status_code == status.HTTP_201_CREATED, resp.data
        assert resp.data["status"] == "pending"
        assert resp.data["requestedBy"] == analyst.id
        assert resp.data["evidenceId"] == "E1"

    def test_request_without_reason_is_400(self, auth_client, analyst, fake_api):
        resp = auth_client(analyst).post(
            REQUESTS_URL,
            {"evidenceId": "E1", "reason": "", "requestType": "analysis"},
            format="json",
        )

        assert resp.status_code == status.HTTP_400_BAD_REQUEST
        assert resp.data["fields"] == ["reason"]

    def test_request_without_target_is_400(self, auth_client, analyst, fake_api):
        resp = auth_client(analyst).post(
            REQUESTS_URL, {"reason": "r", "requestType": "report"}, format="json",
        )

        assert resp.status_code == status.HTTP_400_BAD_REQUEST

    def test_investigator_list_is_scoped_and_annotated(self, auth_client, investigator, seeded):
        resp = auth_client(investigator).get(REQUESTS_URL)

        assert resp.status_code == status.HTTP_200_OK
        assert [r["id"] for r in resp.data] == ["R1"]
        assert resp.data[0]["evidenceFilename"] == "e1.jpg"
        assert resp.data[0]["canDecide"] is True

    def test_analyst_list_shows_own_requests_without_decide(self, auth_client, analyst, seeded):
        resp = auth_client(analyst).get(REQUESTS_URL)

        assert [r["id"] for r in resp.data] == ["R1"]
        assert resp.data[0]["canDecide"] is False

    def test_judge_list_shows_all_in_api_order(self, auth_client, judge, seeded):
        resp = auth_client(judge).get(REQUESTS_URL)

        assert [r["id"] for r in resp.data] == ["R1", "R2"]
        assert all(r["canDecide"] for r in resp.data)

    def test_approve_then_deny_is_409(self, auth_client, investigator, seeded):
        client = auth_client(investigator)

        resp = client.post(_approve_url("R1"))
        assert resp.status_code == status.HTTP_200_OK, resp.data
        assert resp.data["status"] == "approved"
        assert resp.data["approvedBy"] == investigator.id
        assert resp.data["approvalTimestamp"] is not None

        resp = client.post(_deny_url("R1"))
        assert resp.status_code == status.HTTP_409_CONFLICT
        assert "already decided" in resp.data["detail"]

    def test_analyst_cannot_approve(self, auth_client, analyst, seeded):
        resp = auth_client(analyst).post(_approve_url("R1"))

        assert resp.status_code == status.HTTP_403_FORBIDDEN
        assert seeded.mutating_calls() == []

    def test_investigator_cannot_decide_foreign_evidence(self, auth_client, investigator, seeded):
        resp = auth_client(investigator).post(_deny_url("R2"))

        assert resp.status_code == status.HTTP_403_FORBIDDEN

    def test_prosecutor_denies_any(self, auth_client, prosecutor, seeded):
        resp = auth_client(prosecutor).post(_deny_url("R2"))

        assert resp.status_code == status.HTTP_200_OK
        assert resp.data["status"] == "denied"

    def test_unknown_request_is_404(self, auth_client, admin_actor, seeded):
        resp = auth_client(admin_actor).post(_approve_url("nope"))

        assert resp.status_code == status.HTTP_404_NOT_FOUND

    def test_upstream_error_message_is_surfaced(self, auth_client, judge, seeded, monkeypatch):
        def _failing(request_id, approved_by):
            raise TransportError("Request already processed", status_code=409)

        monkeypatch.setattr(seeded, "approve_access_request", _failing)

        resp = auth_client(judge).post(_approve_url("R1"))

        assert resp.status_code == status.HTTP_502_BAD_GATEWAY
        assert resp.data["detail"] == "Request already processed"
