"""
Tests for the health check endpoint.
"""

from unittest.mock import patch

import pytest
from django.db import DatabaseError


@pytest.mark.django_db
class TestHealthCheck:
    def test_healthy(self, client):
        response = client.get("/health/")

        assert response.status_code == 200
        assert response.json() == {
            "status": "healthy",
            "database": "connected",
            "cache": "connected",
        }

    def test_database_down(self, client):
        with patch("core.views.connection") as conn:
            conn.cursor.side_effect = DatabaseError("down")
            response = client.get("/health/")

        assert response.status_code == 503
        assert response.json()["database"] == "disconnected"

    def test_cache_down_is_still_healthy(self, client):
        with patch("core.views.cache") as cache:
            cache.set.side_effect = ConnectionError("redis down")
            response = client.get("/health/")

        assert response.status_code == 200
        assert response.json()["cache"] == "disconnected"
