"""
core.domain — Shared domain utilities for cross-app service layers.

Modules
-------
exceptions         Domain-specific exceptions that map cleanly to HTTP responses.
exception_handler  DRF ``EXCEPTION_HANDLER`` that renders them.
access             Capability-scoped selectors and guards.

Usage from any app::

    from core.domain.exceptions import DomainError, InvalidStateError
    from core.domain.access import apply_scope, require_capability
"""
