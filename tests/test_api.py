"""
Tests for the FastAPI application.

Author: Seon Sivasathan
Institution: Computer Science @ Western University
"""

import pytest
from fastapi.testclient import TestClient

from orderseed.api import app as api
from orderseed.db.store import OrderStore


@pytest.fixture
def client(database_url):
    """Test client bound to a temporary database."""
    api.state.store = OrderStore(database_url)
    with TestClient(api.app) as test_client:
        yield test_client
    api.state.store = None


@pytest.fixture
def populated_client(client):
    """Client after a small populate run."""
    response = client.post("/populate", json={"historical_count": 40, "recent_count": 6})
    assert response.status_code == 200
    return client


class TestHealth:
    """Tests for the health endpoint."""

    def test_health(self, client):
        """Test health check reports the app version."""
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["version"] == api.settings.app_version


class TestPopulate:
    """Tests for the populate endpoint."""

    def test_populate_counts(self, client):
        """Test the response reports the written batch."""
        response = client.post(
            "/populate", json={"historical_count": 30, "recent_count": 4}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["order_count"] - body["recent_count"] == 30
        assert body["recent_count"] in (0, 4)
        assert body["total_price"] > 0

    def test_populate_rejects_negative_counts(self, client):
        """Test request validation."""
        response = client.post("/populate", json={"historical_count": -1})
        assert response.status_code == 422

    def test_repopulate_resets(self, client):
        """Test a second run replaces the first."""
        client.post("/populate", json={"historical_count": 20, "recent_count": 0})
        client.post("/populate", json={"historical_count": 10, "recent_count": 0})

        rows = client.get("/reports/sales", params={"time_range": "monthly"}).json()
        units = sum(r["units_sold"] for r in rows)
        # Every order holds one to three sellables
        assert 10 <= units <= 30


class TestReports:
    """Tests for the report endpoints."""

    def test_x_then_z(self, populated_client):
        """Test the close empties the hourly report."""
        hourly = populated_client.get("/reports/x").json()
        closed = populated_client.post("/reports/z").json()

        assert closed["order_count"] == sum(r["order_count"] for r in hourly)
        assert populated_client.get("/reports/x").json() == []

    def test_sales(self, populated_client):
        """Test sales rows carry period, sellable, units and revenue."""
        response = populated_client.get("/reports/sales", params={"time_range": "weekly"})

        assert response.status_code == 200
        rows = response.json()
        assert rows
        assert set(rows[0]) == {"period", "sellable", "units_sold", "revenue"}

    def test_sales_invalid_range(self, client):
        """Test an unknown range is a client error."""
        response = client.get("/reports/sales", params={"time_range": "hourly"})
        assert response.status_code == 400
