"""
core.domain.exceptions — Domain-specific exception hierarchy.

These exceptions represent business-rule violations inside service layers
and failures of the external evidence API.  They are deliberately **not**
DRF exceptions so that the domain layer stays framework-agnostic.  The
global DRF exception handler (``core.domain.exception_handler``) maps them
to HTTP responses.

Mapping cheatsheet
------------------
┌─────────────────────┬──────────────────────────────┬──────┐
│ Domain Exception    │ Meaning                      │ Code │
├─────────────────────┼──────────────────────────────┼──────┤
│ DomainError         │ generic business-rule breach │ 400  │
│ ValidationError     │ malformed / incomplete input │ 400  │
│ UnknownRoleError    │ role outside the fixed set   │ 403  │
│ PermissionDenied    │ role lacks the capability    │ 403  │
│ NotFound            │ record absent from snapshot  │ 404  │
│ Conflict            │ clashes with current state   │ 409  │
│ InvalidStateError   │ request already decided      │ 409  │
│ TransportError      │ external API call failed     │ 502  │
└─────────────────────┴──────────────────────────────┴──────┘

Recommended usage inside a service::

    from core.domain.exceptions import InvalidStateError

    if not request.is_pending:
        raise InvalidStateError(current=request.status, target=decision)
"""

from __future__ import annotations


class DomainError(Exception):
    """
    Base class for all domain / business-rule errors.

    Catch this at the view boundary and convert to a 400 Bad Request.
    """

    def __init__(self, message: str = "A business rule was violated.") -> None:
        self.message = message
        super().__init__(self.message)


class ValidationError(DomainError):
    """
    Input to a lifecycle operation is malformed or incomplete.

    ``fields`` lists the offending input names (camelCase, as the
    dashboard submits them) so the UI can surface the error inline.
    """

    def __init__(
        self,
        message: str = "The submitted data is invalid.",
        *,
        fields: list[str] | None = None,
    ) -> None:
        super().__init__(message)
        self.fields = fields or []


class UnknownRoleError(DomainError):
    """
    A role value outside the fixed enumeration was supplied.

    Fatal for the operation: no authorization policy can be resolved.
    """

    def __init__(self, role: object = None, message: str | None = None) -> None:
        if message is None:
            message = f"Unknown role: {role!r}."
        super().__init__(message)
        self.role = role


class PermissionDenied(DomainError):
    """
    The authenticated actor's role does not grant the capability
    required for this operation.

    Maps to HTTP 403.
    """

    def __init__(self, message: str = "You do not have permission to perform this action.") -> None:
        super().__init__(message)


class NotFound(DomainError):
    """
    The requested record does not exist in the fetched snapshot.

    Maps to HTTP 404.
    """

    def __init__(self, message: str = "The requested resource was not found.") -> None:
        super().__init__(message)


class Conflict(DomainError):
    """
    The operation conflicts with the current state of the resource.

    Maps to HTTP 409.
    """

    def __init__(self, message: str = "The operation conflicts with the current state.") -> None:
        super().__init__(message)


class InvalidStateError(Conflict):
    """
    A status transition attempted on an access request that is no longer
    ``pending``.  ``approved`` and ``denied`` are terminal.

    Example::

        raise InvalidStateError(current="approved", target="denied")
    """

    def __init__(
        self,
        message: str | None = None,
        *,
        current: str | None = None,
        target: str | None = None,
    ) -> None:
        if message is None:
            parts = ["Access request already decided"]
            if current:
                parts.append(f"(status '{current}')")
            if target:
                parts.append(f"and cannot be moved to '{target}'")
            message = " ".join(parts) + "."
        super().__init__(message)
        self.current = current
        self.target = target


class TransportError(DomainError):
    """
    The external evidence API could not be reached or answered with a
    non-2xx status.

    ``status_code`` is ``None`` when no HTTP response was received
    (connection refused, timeout).  Maps to HTTP 502.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
