"""
Tests des routes HTTP (/api/v1) avec TestClient et une base en memoire.
"""
import pytest

from app.domain.catalog import DEFAULT_CATALOG


API = "/api/v1"
DAY = "2026-01-05"


# ============================================================
# Lecture
# ============================================================

class TestGetActivity:

    def test_missing_date_returns_defaults(self, client):
        response = client.get(f"{API}/activities/{DAY}")

        assert response.status_code == 200
        data = response.json()
        assert data["date"] == DAY
        assert data["totalActivityCount"] == 0
        assert data["createdAt"] is None
        for key, default in DEFAULT_CATALOG.defaults().items():
            assert data[key] == default

    @pytest.mark.parametrize("bad_date", ["2026-1-5", "05-01-2026", "2026-02-30", "today"])
    def test_invalid_date(self, client, bad_date):
        response = client.get(f"{API}/activities/{bad_date}")
        assert response.status_code == 400

    def test_catalog_order(self, client):
        response = client.get(f"{API}/catalog")

        assert response.status_code == 200
        assert [d["key"] for d in response.json()] == list(DEFAULT_CATALOG.keys())
        walk = response.json()[3]
        assert walk["kind"] == "non-negative-real"
        assert walk["unit"] == "km"


# ============================================================
# Ecriture
# ============================================================

class TestUpdateField:

    def test_first_write_creates_record(self, client):
        response = client.patch(f"{API}/activities/{DAY}/workout", json={"value": True})

        assert response.status_code == 200
        data = response.json()
        assert data["workout"] is True
        assert data["totalActivityCount"] == 1
        assert data["createdAt"] is not None

    def test_unknown_field(self, client):
        response = client.patch(f"{API}/activities/{DAY}/doesNotExist", json={"value": 5})

        assert response.status_code == 400
        assert "doesNotExist" in response.json()["detail"]
        assert client.get(f"{API}/activities/{DAY}").json()["createdAt"] is None

    def test_negative_value(self, client):
        response = client.patch(f"{API}/activities/{DAY}/water", json={"value": -1})
        assert response.status_code == 400

    def test_missing_value(self, client):
        response = client.patch(f"{API}/activities/{DAY}/water", json={})
        assert response.status_code == 400

    def test_successive_updates_accumulate(self, client):
        client.patch(f"{API}/activities/{DAY}/problems", json={"value": 7})
        response = client.patch(f"{API}/activities/{DAY}/walk", json={"value": 0.5})

        data = response.json()
        assert data["problems"] == 7
        assert data["walk"] == 0.5
        assert data["totalActivityCount"] == 2.5


class TestUpsert:

    def test_put_with_fractions(self, client):
        response = client.put(
            f"{API}/activities/{DAY}",
            json={"problems": 5, "walk": 1.5, "bath": True},
        )

        assert response.status_code == 200
        assert response.json()["totalActivityCount"] == 4.5

    def test_post_is_accepted(self, client):
        response = client.post(f"{API}/activities/{DAY}", json={"meditation": True})

        assert response.status_code == 200
        assert response.json()["meditation"] is True

    def test_merge_keeps_previous_values(self, client):
        client.put(f"{API}/activities/{DAY}", json={"bath": True})
        response = client.put(f"{API}/activities/{DAY}", json={"water": 2})

        data = response.json()
        assert data["bath"] is True
        assert data["water"] == 2
        assert data["totalActivityCount"] == 3

    def test_client_total_ignored(self, client):
        response = client.put(
            f"{API}/activities/{DAY}",
            json={"workout": True, "totalActivityCount": 99},
        )
        assert response.json()["totalActivityCount"] == 1

    def test_fetched_payload_can_be_sent_back(self, client):
        payload = client.patch(f"{API}/activities/{DAY}/water", json={"value": 1}).json()
        payload["water"] = 4

        response = client.put(f"{API}/activities/{DAY}", json=payload)

        assert response.status_code == 200
        assert response.json()["water"] == 4

    def test_body_date_mismatch(self, client):
        response = client.put(
            f"{API}/activities/{DAY}",
            json={"date": "2026-01-06", "workout": True},
        )
        assert response.status_code == 400

    def test_wrong_type(self, client):
        response = client.put(f"{API}/activities/{DAY}", json={"bath": "yes"})
        assert response.status_code == 400

    def test_body_must_be_object(self, client):
        response = client.put(f"{API}/activities/{DAY}", json=[1, 2])
        assert response.status_code == 422


class TestDelete:

    def test_delete_existing(self, client):
        client.patch(f"{API}/activities/{DAY}/bath", json={"value": True})

        response = client.delete(f"{API}/activities/{DAY}")

        assert response.status_code == 200
        assert response.json()["deleted"] is True
        assert client.get(f"{API}/activities/{DAY}").json()["totalActivityCount"] == 0

    def test_delete_missing_is_ok(self, client):
        response = client.delete(f"{API}/activities/2026-09-09")

        assert response.status_code == 200
        assert response.json()["deleted"] is False


# ============================================================
# Intervalles, statistiques, heatmap
# ============================================================

class TestRanges:

    @pytest.fixture(autouse=True)
    def _records(self, client):
        for day in ("2026-03-15", "2026-02-01", "2026-02-28", "2025-12-31"):
            client.patch(f"{API}/activities/{day}/workout", json={"value": True})

    def test_range_sorted(self, client):
        response = client.get(f"{API}/activities", params={"start": "2026-01-01", "end": "2026-12-31"})

        assert response.status_code == 200
        assert [r["date"] for r in response.json()] == ["2026-02-01", "2026-02-28", "2026-03-15"]

    def test_reversed_range_is_empty(self, client):
        response = client.get(f"{API}/activities", params={"start": "2026-12-31", "end": "2026-01-01"})

        assert response.status_code == 200
        assert response.json() == []

    def test_year(self, client):
        response = client.get(f"{API}/activities/year/2025")
        assert [r["date"] for r in response.json()] == ["2025-12-31"]

    def test_month(self, client):
        response = client.get(f"{API}/activities/month/2026/2")
        assert [r["date"] for r in response.json()] == ["2026-02-01", "2026-02-28"]

    def test_invalid_month(self, client):
        response = client.get(f"{API}/activities/month/2026/13")
        assert response.status_code == 400


class TestStatisticsRoutes:

    def test_empty_statistics(self, client):
        response = client.get(f"{API}/statistics/2026-01-01/2026-01-31")

        assert response.status_code == 200
        data = response.json()
        assert data["totalDays"] == 0
        assert data["averageActivityCount"] == 0

    def test_statistics(self, client):
        client.put(f"{API}/activities/2026-01-01", json={"workout": True, "water": 3})
        client.put(f"{API}/activities/2026-01-02", json={"workout": True})

        data = client.get(f"{API}/statistics/2026-01-01/2026-01-31").json()

        assert data["totalDays"] == 2
        assert data["completedDays"]["workout"] == 2
        assert data["totals"]["water"] == 3
        assert data["averageActivityCount"] == 2

    def test_statistics_reversed_range(self, client):
        client.put(f"{API}/activities/2026-01-15", json={"workout": True})

        response = client.get(f"{API}/statistics/2026-01-31/2026-01-01")

        assert response.status_code == 200
        assert response.json()["totalDays"] == 0
        assert response.json()["averageActivityCount"] == 0

    def test_statistics_invalid_date(self, client):
        response = client.get(f"{API}/statistics/2026-01-01/2026-13-01")
        assert response.status_code == 400

    def test_heatmap(self, client):
        client.put(f"{API}/activities/2026-01-01", json={"problems": 9, "bath": True})

        response = client.get(f"{API}/heatmap/2026")

        assert response.status_code == 200
        data = response.json()
        assert len(data["cells"]) == 365
        assert data["cells"][0] == {"date": "2026-01-01", "count": 3, "level": 2}

    def test_heatmap_for_activity(self, client):
        response = client.get(f"{API}/heatmap/2026", params={"activity": "junkFood"})

        assert response.status_code == 200
        assert response.json()["palette"] == "warning"

    def test_heatmap_unknown_activity(self, client):
        response = client.get(f"{API}/heatmap/2026", params={"activity": "doesNotExist"})
        assert response.status_code == 400


# ============================================================
# Sante
# ============================================================

class TestHealth:

    def test_healthy(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_database_down(self, client, monkeypatch):
        import app.main as main_module
        monkeypatch.setattr(main_module, "check_database_health", lambda: False)

        response = client.get("/health")

        assert response.status_code == 503
        assert response.json()["services"]["database"] == "disconnected"
