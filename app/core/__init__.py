"""
Core Application - Infrastructure & Base Classes

Generic building blocks shared by the domain apps (wallets, orders,
returns, notifications). No marketplace logic lives here.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Model Mixins (import from core.model_mixins):
    - UUIDPrimaryKeyMixin: UUID as primary key
    - AppendOnlyMixin: Insert-only rows (ledger entries, history)
    - CodeMixin: Human-readable reference codes (ORD-..., RET-...)

Services (import from core.services):
    - BaseService: Base class for service layer
    - ServiceResult: Result wrapper for side-effect services

Exceptions (import from core.exceptions):
    - BaseApplicationError and the error taxonomy used across apps

Other:
    - core.actors: Actor / ActorRole (who performs an operation)
    - core.permissions: Role-based DRF permission classes
    - core.exception_handler: DRF exception handler (error envelope)
    - core.locks: Redis DistributedLock
    - core.helpers: id-or-code lookups

Note:
    Django models and model mixins are NOT imported here to avoid
    AppRegistryNotReady errors. Import them directly from their modules.
"""

# Services (no Django model dependencies)
from .services import BaseService, ServiceResult

# Exceptions (no Django dependencies)
from .exceptions import (
    AlreadyProcessedError,
    BaseApplicationError,
    ConflictError,
    DuplicateRequestError,
    InsufficientBalanceError,
    InvalidTransitionError,
    LockAcquisitionError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)

__all__ = [
    # Services
    "BaseService",
    "ServiceResult",
    # Exceptions
    "BaseApplicationError",
    "ValidationError",
    "NotFoundError",
    "PermissionDeniedError",
    "ConflictError",
    "InvalidTransitionError",
    "AlreadyProcessedError",
    "InsufficientBalanceError",
    "DuplicateRequestError",
    "LockAcquisitionError",
]
