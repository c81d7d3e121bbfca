"""
core.domain.access — Capability-scoped selectors (shared patterns).

This module provides shared utilities that each app's service layer
calls to filter already-fetched collections by the requesting actor's
role, and to guard operations behind a capability.

╔══════════════════════════════════════════════════════════════════╗
║  IMPORTANT — Per-app scoping logic does NOT live here.           ║
║  Each app's ``services.py`` owns its own scope config.           ║
║  This module provides:                                           ║
║    1) ``apply_scope`` — view-scope dispatch over a sequence.     ║
║    2) ``require_capability`` — guard that checks the role table. ║
╚══════════════════════════════════════════════════════════════════╝

Usage in an app's service layer::

    from core.domain.access import apply_scope
    from core.permissions_constants import RequestScopes

    REQUEST_SCOPE_CONFIG = {
        RequestScopes.ALL:          lambda items, actor, ctx: items,
        RequestScopes.OWN_REQUESTS: lambda items, actor, ctx: [
            r for r in items if r.requested_by == actor.id
        ],
    }

    visible = apply_scope(requests, actor, scope_config=REQUEST_SCOPE_CONFIG)

Filters never re-sort: the result keeps the input order.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Sequence, TypeVar

from core.domain.exceptions import PermissionDenied

if TYPE_CHECKING:
    from accounts.models import Actor

T = TypeVar("T")

# Takes (items, actor, context) and returns the visible subset.
ScopeFilter = Callable[[Sequence[Any], "Actor", Any], list]

# View scope (``core.permissions_constants.RequestScopes``) → filter.
ScopeConfig = dict[str, ScopeFilter]


def apply_scope(
    items: Sequence[T],
    actor: Actor,
    *,
    scope_config: ScopeConfig,
    context: Any = None,
    default: str = "none",
) -> list[T]:
    """
    Apply the filter registered for the actor's view scope.

    Args:
        items:        The full, already-fetched collection.
        actor:        The authenticated actor.
        scope_config: Mapping of view scope → filter function.
        context:      Extra data passed through to the filter (e.g. the
                      evidence collection an ownership check needs).
        default:      What to do when the scope has no filter.
                      ``"none"`` (default) → empty list.
                      ``"all"`` → the unfiltered items.

    Returns:
        A new list with the visible items, in input order.
    """
    from accounts.services import RoleResolver

    scope = RoleResolver.for_actor(actor).view_scope
    filter_fn = scope_config.get(scope)
    if filter_fn is not None:
        return list(filter_fn(items, actor, context))

    if default == "none":
        return []
    return list(items)


def require_capability(actor: Actor, *capabilities: str, message: str = "") -> None:
    """
    Guard that raises ``PermissionDenied`` if the actor's role grants
    **none** of the given capabilities (OR-logic).

    Args:
        actor:         Authenticated actor.
        *capabilities: Names from ``core.permissions_constants.EvidenceCaps``.
        message:       Optional custom error message.

    Example::

        require_capability(
            actor,
            EvidenceCaps.CAN_SUBMIT_EVIDENCE,
            message="Only investigators and admins can submit evidence.",
        )
    """
    from accounts.services import RoleResolver

    granted = RoleResolver.for_actor(actor)
    if any(granted.grants(cap) for cap in capabilities):
        return
    raise PermissionDenied(
        message or "You do not have permission to perform this action."
    )
