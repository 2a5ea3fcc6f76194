"""
Tests for the periodic settlement task.
"""

from unittest.mock import patch

import pytest

from orders.models import Order, OrderStatus
from orders.tasks import SWEEP_LOCK_KEY, release_pending_funds
from orders.tests.factories import OrderWithVendorFactory


@pytest.mark.django_db
class TestReleasePendingFundsTask:
    def test_runs_sweep_under_lock(self, mock_redis_lock, vendor):
        order = OrderWithVendorFactory(vendor_id=vendor.id, status=OrderStatus.DELIVERED)

        result = release_pending_funds.apply().get()

        assert result["status"] == "completed"
        assert result["processed_count"] == 1
        assert result["total_released_cents"] == 90000
        assert Order.objects.get(pk=order.pk).funds_released is True
        lock_key = mock_redis_lock.set.call_args[0][0]
        assert lock_key == f"lock:{SWEEP_LOCK_KEY}"
        mock_redis_lock.eval.assert_called_once()

    def test_skips_when_another_sweep_holds_lock(self, mock_redis_lock):
        mock_redis_lock.set.return_value = False

        with patch("orders.tasks.SettlementService.release_pending_funds") as sweep:
            result = release_pending_funds.apply().get()

        assert result == {"status": "skipped"}
        sweep.assert_not_called()
