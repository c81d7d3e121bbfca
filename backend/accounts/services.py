"""
Accounts Service Layer.

This module is the **single source of truth** for all business logic
within the ``accounts`` app.  Views must remain *thin*: they validate
input through serializers, call a service function / method, and
return the result wrapped in a DRF ``Response``.

Architecture
------------
- ``RoleResolver``          — role → capability set (the policy table).
- ``ActorDirectory``        — configured actors and their password hashes.
- ``AuthenticationService`` — credential check against the directory.
- ``ActorTokenService``     — JWT issuance, claim decoding, revocation.
- ``CurrentActorService``   — "Me" endpoint helpers (profile + navigation).

An actor's role comes only from the configured directory and is carried
in a signed token from then on; nothing is inferred from the username.
"""

from __future__ import annotations

import functools
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from django.conf import settings
from django.contrib.auth.hashers import check_password, identify_hasher, make_password
from django.core.cache import cache
from rest_framework_simplejwt.settings import api_settings as jwt_settings
from rest_framework_simplejwt.tokens import AccessToken, Token

from core.domain.exceptions import UnknownRoleError

from .models import ROLE_CAPABILITIES, Actor, Role, RoleCapabilities

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  Role Resolver
# ═══════════════════════════════════════════════════════════════════


class RoleResolver:
    """
    Maps a role (or an actor) to the authorization policy applied to
    lifecycle operations.
    """

    @staticmethod
    def capabilities_for(role: Any) -> RoleCapabilities:
        """
        Return the capability set for *role*.

        Raises ``UnknownRoleError`` for anything outside the five
        ``Role`` values, including non-string input.
        """
        if not isinstance(role, str) or role not in ROLE_CAPABILITIES:
            raise UnknownRoleError(role)
        return ROLE_CAPABILITIES[role]

    @staticmethod
    def for_actor(actor: Actor) -> RoleCapabilities:
        return RoleResolver.capabilities_for(actor.role)


capabilities_for = RoleResolver.capabilities_for


# ═══════════════════════════════════════════════════════════════════
#  Actor Directory
# ═══════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class DirectoryEntry:
    actor: Actor
    password_hash: str


class ActorDirectory:
    """
    The set of actors allowed to log in, keyed by username.

    Built from ``settings.EVIDENCE_ACTORS``: a list of mappings with
    ``username``, ``id``, ``role``, ``display_name`` and ``password``.
    ``password`` is either an encoded Django password hash or a raw
    password, which is hashed once when the directory is loaded.
    """

    def __init__(self, entries: Iterable[Mapping[str, Any]]) -> None:
        self._entries: dict[str, DirectoryEntry] = {}
        for raw in entries:
            username = raw["username"]
            actor = Actor(
                id=str(raw.get("id") or f"{username}-001"),
                role=raw["role"],
                display_name=raw.get("display_name") or username,
                username=username,
            )
            self._entries[username] = DirectoryEntry(
                actor=actor,
                password_hash=self._ensure_hashed(raw["password"]),
            )

    @staticmethod
    def _ensure_hashed(password: str) -> str:
        try:
            identify_hasher(password)
        except ValueError:
            return make_password(password)
        return password

    @classmethod
    def from_settings(cls) -> ActorDirectory:
        # Keyed on the serialized entries so that ``override_settings``
        # in tests yields a fresh directory.
        return _load_directory(json.dumps(settings.EVIDENCE_ACTORS, sort_keys=True))

    def get(self, username: str) -> DirectoryEntry | None:
        return self._entries.get(username)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries.values())


@functools.lru_cache(maxsize=4)
def _load_directory(serialized_entries: str) -> ActorDirectory:
    directory = ActorDirectory(json.loads(serialized_entries))
    logger.info("Loaded actor directory with %d actors", len(directory))
    return directory


# ═══════════════════════════════════════════════════════════════════
#  Authentication Service
# ═══════════════════════════════════════════════════════════════════


class AuthenticationService:
    """Verifies credentials against the configured actor directory."""

    @staticmethod
    def authenticate(username: str, password: str) -> Actor | None:
        """
        Return the ``Actor`` for valid credentials, else ``None``.

        An unknown username still runs the password hasher so that the
        response time does not reveal which usernames exist.
        """
        entry = ActorDirectory.from_settings().get(username)
        if entry is None:
            make_password(password)
            logger.info("Login rejected for unknown username %r", username)
            return None
        if not check_password(password, entry.password_hash):
            logger.info("Login rejected for %r: bad password", username)
            return None
        logger.info("Actor %s logged in", entry.actor)
        return entry.actor


# ═══════════════════════════════════════════════════════════════════
#  Token Service
# ═══════════════════════════════════════════════════════════════════


class ActorTokenService:
    """
    Issues and revokes the signed access token that carries an actor
    between requests.

    The token is the session: it is created at login and revoked at
    logout.  Revocation is recorded in the Django cache under the token's
    ``jti`` until the token would have expired anyway.
    """

    ROLE_CLAIM = "role"
    NAME_CLAIM = "name"
    USERNAME_CLAIM = "username"
    _REVOKED_KEY = "revoked-token:{jti}"

    @classmethod
    def issue(cls, actor: Actor) -> dict[str, Any]:
        token = AccessToken()
        token[jwt_settings.USER_ID_CLAIM] = actor.id
        token[cls.ROLE_CLAIM] = str(actor.role)
        token[cls.NAME_CLAIM] = actor.display_name
        token[cls.USERNAME_CLAIM] = actor.username
        return {"access": str(token), "expires_at": token["exp"]}

    @classmethod
    def actor_from_token(cls, token: Token) -> Actor:
        """
        Rebuild the ``Actor`` from validated token claims.

        Raises ``KeyError`` for a token without actor claims and
        ``UnknownRoleError`` for a role outside the fixed set.
        """
        return Actor(
            id=str(token[jwt_settings.USER_ID_CLAIM]),
            role=token[cls.ROLE_CLAIM],
            display_name=token.get(cls.NAME_CLAIM, ""),
            username=token.get(cls.USERNAME_CLAIM, ""),
        )

    @classmethod
    def revoke(cls, token: Token) -> None:
        jti = token.get(jwt_settings.JTI_CLAIM)
        if not jti:
            return
        remaining = int(token.get("exp", 0)) - int(time.time())
        if remaining <= 0:
            return
        cache.set(cls._REVOKED_KEY.format(jti=jti), True, timeout=remaining)
        logger.info("Token %s revoked", jti)

    @classmethod
    def is_revoked(cls, token: Token) -> bool:
        jti = token.get(jwt_settings.JTI_CLAIM)
        return bool(jti) and cache.get(cls._REVOKED_KEY.format(jti=jti), False)


# ═══════════════════════════════════════════════════════════════════
#  Current Actor Service
# ═══════════════════════════════════════════════════════════════════


class CurrentActorService:
    """Profile data for the ``/me/`` endpoint."""

    #: Views every actor may open, in menu order.
    _BASE_VIEWS = ("dashboard", "browse-evidence", "access-requests", "request-access")

    @staticmethod
    def navigation_for(actor: Actor) -> list[str]:
        views = list(CurrentActorService._BASE_VIEWS)
        if RoleResolver.for_actor(actor).can_submit_evidence:
            views.insert(1, "add-evidence")
        return views

    @staticmethod
    def get_profile(actor: Actor) -> dict[str, Any]:
        return {
            "actor": actor,
            "role_display": Role(actor.role).label,
            "capabilities": RoleResolver.for_actor(actor).as_dict(),
            "navigation": CurrentActorService.navigation_for(actor),
        }
