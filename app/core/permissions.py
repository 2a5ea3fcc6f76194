"""
Role-based permission classes for the API.

Roles come from the ``role`` claim of the access token (see core.actors).

- IsCustomer: role == user
- IsVendor: role == vendor
- IsPlatformAdmin: role == admin
- IsVendorOrAdmin: role in (vendor, admin)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rest_framework import permissions

from core.actors import ActorRole

if TYPE_CHECKING:
    from rest_framework.request import Request
    from rest_framework.views import APIView


class _RolePermission(permissions.BasePermission):
    allowed_roles: tuple[str, ...] = ()

    def has_permission(self, request: Request, view: APIView) -> bool:
        # Unauthenticated requests fall through to IsAuthenticated (401)
        if not request.user or not request.user.is_authenticated:
            return False
        return getattr(request.user, "role", None) in self.allowed_roles


class IsCustomer(_RolePermission):
    message = "Only customers can perform this action."
    allowed_roles = (ActorRole.USER,)


class IsVendor(_RolePermission):
    message = "Only vendors can perform this action."
    allowed_roles = (ActorRole.VENDOR,)


class IsPlatformAdmin(_RolePermission):
    message = "Admin access required."
    allowed_roles = (ActorRole.ADMIN,)


class IsVendorOrAdmin(_RolePermission):
    message = "Vendor or admin access required."
    allowed_roles = (ActorRole.VENDOR, ActorRole.ADMIN)
