"""
Actor identity for role-gated operations.

Every mutating operation is performed by an Actor: the id of the person
(or process) acting and the role that gates what they may do. The HTTP
layer builds an Actor from the JWT claims; services and tasks build one
directly.

Roles:
    user   - a customer placing and returning orders
    vendor - a seller fulfilling their part of an order
    admin  - platform staff (escape hatch for every transition)
    system - scheduled jobs (settlement sweep)

Usage:
    from core.actors import Actor, ActorRole

    admin = Actor(id=admin_id, role=ActorRole.ADMIN)
    OrderLifecycleService.change_status(order.code, "delivered", admin)
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from django.db import models
from rest_framework.exceptions import NotAuthenticated

from core.exceptions import PermissionDeniedError


class ActorRole(models.TextChoices):
    USER = "user", "Customer"
    VENDOR = "vendor", "Vendor"
    ADMIN = "admin", "Admin"
    SYSTEM = "system", "System"


@dataclass(frozen=True)
class Actor:
    """An authenticated principal with a role."""

    id: uuid.UUID | None
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ActorRole.ADMIN

    @classmethod
    def system(cls) -> Actor:
        return cls(id=None, role=ActorRole.SYSTEM)

    @classmethod
    def from_user(cls, user) -> Actor:
        """
        Build an Actor from request.user.

        With JWTStatelessUserAuthentication the user is a TokenUser whose
        unknown attributes resolve to token claims, so ``user.role`` is
        the ``role`` claim.

        Raises:
            NotAuthenticated: No authenticated user on the request
            PermissionDeniedError: Token carries no usable role or id
        """
        if user is None or not getattr(user, "is_authenticated", False):
            raise NotAuthenticated()

        role = getattr(user, "role", None)
        if role not in (ActorRole.USER, ActorRole.VENDOR, ActorRole.ADMIN):
            raise PermissionDeniedError(
                "Token does not carry a valid role",
                details={"role": role},
            )

        try:
            actor_id = uuid.UUID(str(user.id))
        except (TypeError, ValueError, AttributeError) as e:
            raise PermissionDeniedError("Token does not carry a valid user id") from e

        return cls(id=actor_id, role=role)

    def require_role(self, *roles: str) -> None:
        """Raise PermissionDeniedError unless the actor has one of the roles."""
        if self.role not in roles:
            raise PermissionDeniedError(
                f"This action requires role: {', '.join(roles)}",
                details={"role": self.role},
            )
