"""
Role-keyed order transition table.

Allowed (current -> new) status pairs depend on who is acting. Admins may
move an order between any two statuses; the system role (scheduled jobs)
never changes order status.

Usage:
    from orders.transitions import can_transition

    if not can_transition(order.status, "delivered", actor.role):
        raise InvalidTransitionError(...)
"""

from __future__ import annotations

from core.actors import ActorRole

from orders.models import OrderStatus

S = OrderStatus

CUSTOMER_TRANSITIONS: dict[str, frozenset[str]] = {
    S.PENDING: frozenset({S.CANCELLATION_REQUESTED}),
    S.PROCESSING: frozenset({S.CANCELLATION_REQUESTED}),
}

VENDOR_TRANSITIONS: dict[str, frozenset[str]] = {
    S.PENDING: frozenset(
        {S.PROCESSING, S.CANCELLED, S.ON_HOLD, S.CANCELLATION_REQUESTED}
    ),
    S.PROCESSING: frozenset(
        {
            S.READY_TO_SHIP,
            S.ON_HOLD,
            S.DISPATCHED,
            S.CANCELLED,
            S.CANCELLATION_REQUESTED,
        }
    ),
    S.READY_TO_SHIP: frozenset({S.DISPATCHED, S.SHIPPED_SELLER}),
    S.DISPATCHED: frozenset({S.SHIPPED_SELLER, S.DELIVERED}),
    S.SHIPPED_SELLER: frozenset({S.DELIVERED}),
    S.ON_HOLD: frozenset({S.PROCESSING, S.READY_TO_SHIP}),
    S.CANCELLATION_REQUESTED: frozenset(
        {S.CANCELLED, S.CANCELLATION_REJECTED, S.PROCESSING}
    ),
    S.CANCELLATION_REJECTED: frozenset({S.PROCESSING, S.CANCELLED}),
}

TRANSITIONS_BY_ROLE: dict[str, dict[str, frozenset[str]]] = {
    ActorRole.USER: CUSTOMER_TRANSITIONS,
    ActorRole.VENDOR: VENDOR_TRANSITIONS,
}

# Statuses from which a customer may ask for cancellation
CANCELLABLE_STATUSES = frozenset({S.PENDING, S.PROCESSING})


def allowed_transitions(current: str, role: str) -> frozenset[str]:
    """Statuses the role may move an order to from ``current``."""
    if role == ActorRole.ADMIN:
        return frozenset(s for s in OrderStatus.values if s != current)
    return TRANSITIONS_BY_ROLE.get(role, {}).get(current, frozenset())


def can_transition(current: str, new: str, role: str) -> bool:
    if new not in OrderStatus.values:
        return False
    if role == ActorRole.ADMIN:
        return True
    return new in allowed_transitions(current, role)
