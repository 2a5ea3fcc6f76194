"""
Helper functions for common infrastructure operations.

- validate_uuid: UUID validation (used to tell ids from human-readable codes)
- lookup_by_id_or_code: resolve a record from either identifier

Usage:
    from core.helpers import lookup_by_id_or_code

    order = lookup_by_id_or_code(Order.objects.all(), "ORD-1718000000000-4821")
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from django.db.models import Model, QuerySet


def validate_uuid(value) -> bool:
    """
    Check if value is a valid UUID.

    Example:
        is_valid = validate_uuid("550e8400-e29b-41d4-a716-446655440000")  # True
    """
    if isinstance(value, uuid.UUID):
        return True
    try:
        uuid.UUID(str(value))
        return True
    except (ValueError, TypeError):
        return False


def lookup_by_id_or_code(queryset: QuerySet, ref) -> Model | None:
    """
    Fetch a single record by primary key or by its ``code`` field.

    API clients may pass either the UUID or the human-readable code, so
    anything that parses as a UUID is treated as an id.

    Returns:
        The record, or None when nothing matches
    """
    if ref is None or ref == "":
        return None
    if validate_uuid(ref):
        return queryset.filter(pk=ref).first()
    return queryset.filter(code=str(ref)).first()
