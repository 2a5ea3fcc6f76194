"""
Model mixins providing reusable functionality for Django models.

Available Mixins:
    UUIDPrimaryKeyMixin: Use UUID as primary key
    AppendOnlyMixin: Records that may be inserted but never updated or deleted
    CodeMixin: Human-readable unique code generated on first save

Usage:
    from core.models import BaseModel
    from core.model_mixins import AppendOnlyMixin, UUIDPrimaryKeyMixin

    class OrderStatusHistory(UUIDPrimaryKeyMixin, AppendOnlyMixin, BaseModel):
        status = models.CharField(max_length=32)

Note:
    - Always list mixins before BaseModel in inheritance
    - Mixins are abstract and don't create database tables
"""

from __future__ import annotations

import random
import time
import uuid

from django.db import models


class UUIDPrimaryKeyMixin(models.Model):
    """
    Use UUID as primary key instead of auto-increment integer.

    Fields:
        id: UUIDField as primary key (auto-generated)
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for this record",
    )

    class Meta:
        abstract = True


class AppendOnlyMixin(models.Model):
    """
    Insert-only records (ledger entries, status history).

    save() refuses to update a row that already exists and delete() is
    refused outright. QuerySet.update()/delete() bypass these guards and
    must not be used on append-only tables.
    """

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError(
                f"{self.__class__.__name__} records are append-only and cannot be modified"
            )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError(
            f"{self.__class__.__name__} records are append-only and cannot be deleted"
        )


def generate_reference_code(prefix: str) -> str:
    """
    Build a human-readable reference such as ``ORD-1718000000000-4821``.

    Millisecond timestamp plus a 4-digit random suffix. Uniqueness is
    still enforced by the database.
    """
    return f"{prefix}-{int(time.time() * 1000)}-{random.randint(1000, 9999)}"


class CodeMixin(models.Model):
    """
    Human-readable unique code, generated on first save.

    Subclasses set CODE_PREFIX (e.g. "ORD", "RET", "RFD", "TXN").

    Usage:
        class Order(CodeMixin, BaseModel):
            CODE_PREFIX = "ORD"
    """

    CODE_PREFIX = "REF"

    code = models.CharField(
        max_length=32,
        unique=True,
        editable=False,
        help_text="Human-readable unique reference code",
    )

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        if not self.code:
            self.code = generate_reference_code(self.CODE_PREFIX)
        super().save(*args, **kwargs)
