"""
Client for the external evidence API.

The API owns all persistence; this module is the only place that speaks
HTTP to it.  Every method returns decoded JSON (or ``None`` for an empty
body) and raises ``core.domain.exceptions.TransportError`` for anything
other than a 2xx answer, so the service layer never sees ``requests``
exceptions.

Endpoint contract
-----------------
  POST /api/evidence                           → stored Evidence Record
  GET  /api/evidence                           → Evidence Records, API order
  POST /api/access-requests                    → stored Access Request
  GET  /api/access-requests                    → Access Requests, API order
  POST /api/access-requests/{id}/approve       body {approvedBy}
  POST /api/access-requests/{id}/deny          body {approvedBy}
"""

from __future__ import annotations

import logging
import threading
from typing import Any
from urllib.parse import quote

import requests
from django.conf import settings

from core.domain.exceptions import TransportError

logger = logging.getLogger(__name__)


class EvidenceApiClient:
    """Thin JSON-over-HTTP wrapper around one ``requests.Session``."""

    #: Body fields checked, in order, for a server-provided error message.
    ERROR_MESSAGE_FIELDS = ("error", "message", "detail")

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.session.headers.setdefault("Accept", "application/json")

    @classmethod
    def from_settings(cls) -> EvidenceApiClient:
        return cls(settings.EVIDENCE_API_BASE, timeout=settings.EVIDENCE_API_TIMEOUT)

    def close(self) -> None:
        """Close the session if this client created it."""
        if self._owns_session:
            self.session.close()

    # ── Evidence ─────────────────────────────────────────────────────

    def create_evidence(self, payload: dict[str, Any]) -> Any:
        return self._request("POST", "/api/evidence", payload)

    def list_evidence(self) -> Any:
        return self._request("GET", "/api/evidence")

    # ── Access requests ──────────────────────────────────────────────

    def create_access_request(self, payload: dict[str, Any]) -> Any:
        return self._request("POST", "/api/access-requests", payload)

    def list_access_requests(self) -> Any:
        return self._request("GET", "/api/access-requests")

    def approve_access_request(self, request_id: str, approved_by: str) -> Any:
        return self._request(
            "POST",
            f"/api/access-requests/{quote(str(request_id), safe='')}/approve",
            {"approvedBy": approved_by},
        )

    def deny_access_request(self, request_id: str, approved_by: str) -> Any:
        return self._request(
            "POST",
            f"/api/access-requests/{quote(str(request_id), safe='')}/deny",
            {"approvedBy": approved_by},
        )

    # ── Transport ────────────────────────────────────────────────────

    def _request(self, method: str, path: str, payload: dict[str, Any] | None = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.exceptions.Timeout as exc:
            logger.error("Evidence API timeout: %s %s", method, url)
            raise TransportError(f"Evidence API timed out: {exc}") from exc
        except requests.exceptions.RequestException as exc:
            logger.error("Evidence API error: %s %s: %s", method, url, exc)
            raise TransportError(f"Evidence API unreachable: {exc}") from exc

        if not 200 <= response.status_code < 300:
            message = self._error_message(response)
            logger.error(
                "Evidence API returned %s for %s %s: %s",
                response.status_code, method, url, message,
            )
            raise TransportError(message, status_code=response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(
                "Evidence API returned a malformed JSON body.",
                status_code=response.status_code,
            ) from exc

    @classmethod
    def _error_message(cls, response: requests.Response) -> str:
        """Server-provided message if present, else the status text."""
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            for key in cls.ERROR_MESSAGE_FIELDS:
                if body.get(key):
                    return str(body[key])
        return response.reason or f"HTTP {response.status_code}"


_local = threading.local()


def get_client() -> EvidenceApiClient:
    """
    Return this thread's client, rebuilt when the configured base URL or
    timeout changes.  Tests replace this with a fake.
    """
    key = (settings.EVIDENCE_API_BASE, settings.EVIDENCE_API_TIMEOUT)
    cached = getattr(_local, "client", None)
    if cached is not None and getattr(_local, "key", None) == key:
        return cached
    if cached is not None:
        cached.close()
    _local.client = EvidenceApiClient.from_settings()
    _local.key = key
    return _local.client
