"""
Tests for Actor construction from token users and role checks.
"""

from __future__ import annotations

import uuid

import pytest
from django.contrib.auth.models import AnonymousUser
from rest_framework.exceptions import NotAuthenticated
from rest_framework_simplejwt.models import TokenUser
from rest_framework_simplejwt.tokens import AccessToken

from core.actors import Actor, ActorRole
from core.exceptions import PermissionDeniedError


def _token_user(**claims):
    token = AccessToken()
    for key, value in claims.items():
        token[key] = value
    return TokenUser(token)


class TestFromUser:
    def test_builds_actor_from_claims(self):
        vendor_id = uuid.uuid4()

        actor = Actor.from_user(_token_user(user_id=str(vendor_id), role="vendor"))

        assert actor == Actor(id=vendor_id, role=ActorRole.VENDOR)
        assert not actor.is_admin

    def test_anonymous_user(self):
        with pytest.raises(NotAuthenticated):
            Actor.from_user(AnonymousUser())

    def test_missing_role(self):
        with pytest.raises(PermissionDeniedError, match="valid role"):
            Actor.from_user(_token_user(user_id=str(uuid.uuid4())))

    def test_system_role_not_accepted_from_token(self):
        with pytest.raises(PermissionDeniedError):
            Actor.from_user(_token_user(user_id=str(uuid.uuid4()), role="system"))

    def test_invalid_user_id(self):
        with pytest.raises(PermissionDeniedError, match="valid user id"):
            Actor.from_user(_token_user(user_id="42", role="user"))


class TestRequireRole:
    def test_allowed(self):
        Actor(id=uuid.uuid4(), role=ActorRole.ADMIN).require_role(
            ActorRole.VENDOR, ActorRole.ADMIN
        )

    def test_denied(self):
        with pytest.raises(PermissionDeniedError) as exc_info:
            Actor(id=uuid.uuid4(), role=ActorRole.USER).require_role(ActorRole.VENDOR)

        assert exc_info.value.details == {"role": "user"}

    def test_system_actor(self):
        actor = Actor.system()

        assert actor.id is None
        assert actor.role == ActorRole.SYSTEM
