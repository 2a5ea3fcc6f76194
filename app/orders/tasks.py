"""
Celery tasks for order settlement.

Tasks:
    release_pending_funds: Periodic settlement sweep (celery-beat, daily)

The schedule is created by migration 0002_add_release_funds_schedule.
"""

from __future__ import annotations

import logging

from celery import shared_task

from core.exceptions import LockAcquisitionError
from core.locks import DistributedLock

from orders.settlement import SettlementService

logger = logging.getLogger(__name__)

# One sweep at a time across all workers
SWEEP_LOCK_KEY = "orders:release_pending_funds"

# Long enough to cover a full batch
SWEEP_LOCK_TTL = 600


@shared_task(bind=True, acks_late=True)
def release_pending_funds(self) -> dict:
    """
    Release vendor earnings for delivered orders whose return window is over.

    Returns:
        Dict with status ("completed" or "skipped") and, when completed,
        the SweepResult fields
    """
    try:
        with DistributedLock(SWEEP_LOCK_KEY, ttl=SWEEP_LOCK_TTL, blocking=False):
            result = SettlementService.release_pending_funds()
    except LockAcquisitionError:
        logger.info("Settlement sweep already running, skipping")
        return {"status": "skipped"}

    return {"status": "completed", **result.to_dict()}
