"""
DRF authentication class for actor tokens.

Registered in ``settings.REST_FRAMEWORK['DEFAULT_AUTHENTICATION_CLASSES']``
so that every API view receives an ``Actor`` as ``request.user`` and the
validated token as ``request.auth``.

Unlike the stock SimpleJWT class, no user row is looked up: the actor is
rebuilt entirely from the signed claims.
"""

from __future__ import annotations

from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken

from core.domain.exceptions import UnknownRoleError

from .models import Actor
from .services import ActorTokenService


class ActorJWTAuthentication(JWTAuthentication):
    """Bearer-token authentication that yields an ``Actor``."""

    def get_validated_token(self, raw_token):
        validated_token = super().get_validated_token(raw_token)
        if ActorTokenService.is_revoked(validated_token):
            raise InvalidToken("Token has been revoked.")
        return validated_token

    def get_user(self, validated_token) -> Actor:
        try:
            return ActorTokenService.actor_from_token(validated_token)
        except KeyError:
            raise InvalidToken("Token contained no recognizable actor identification.")
        except UnknownRoleError:
            raise InvalidToken("Token carries an unknown role.")
