"""
API endpoint tests.

Uses FastAPI TestClient (backed by httpx) with the sample transaction store
and a fake seed feed.  Each test group covers one endpoint: happy path,
empty results, invalid parameters and pagination.
"""

import pytest

# FastAPI TestClient requires fastapi + httpx; skip the entire module if not installed
pytest.importorskip("fastapi")
pytest.importorskip("httpx")

from conftest import JANUARY_IDS, MARCH_IDS, FakeSession, row_count  # noqa: E402


# ── /health ───────────────────────────────────────────────────────────────────

class TestHealth:
    def test_health_ok(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ok"
        assert body["transactions"] == 9


# ── /api/transactions ─────────────────────────────────────────────────────────

class TestListTransactions:
    def test_march(self, client):
        resp = client.get("/api/transactions", params={"month": "March", "perPage": 50})
        assert resp.status_code == 200
        body = resp.json()
        assert [t["id"] for t in body["transactions"]] == MARCH_IDS
        assert body["total"] == 6
        assert body["page"] == 1
        assert body["perPage"] == 50
        assert body["pageCount"] == 1

    def test_wire_fields_are_camel_case(self, client):
        resp = client.get("/api/transactions", params={"month": "March", "perPage": 1})
        tx = resp.json()["transactions"][0]
        assert set(tx) == {"id", "title", "description", "price", "category",
                           "sold", "dateOfSale", "image"}
        assert tx["sold"] is True
        assert tx["dateOfSale"].startswith("2021-03-15")

    def test_defaults(self, client):
        body = client.get("/api/transactions").json()
        # default month is January, default page size is 10
        assert [t["id"] for t in body["transactions"]] == JANUARY_IDS
        assert body["page"] == 1
        assert body["perPage"] == 10

    def test_pagination(self, client):
        first = client.get("/api/transactions",
                           params={"month": "March", "page": 1, "perPage": 4}).json()
        second = client.get("/api/transactions",
                            params={"month": "March", "page": 2, "perPage": 4}).json()
        assert len(first["transactions"]) == 4
        assert len(second["transactions"]) == 2
        assert first["total"] == second["total"] == 6
        assert first["pageCount"] == 2
        ids = [t["id"] for t in first["transactions"] + second["transactions"]]
        assert ids == MARCH_IDS

    def test_search(self, client):
        body = client.get("/api/transactions",
                          params={"month": "March", "search": "JaCkEt"}).json()
        assert [t["id"] for t in body["transactions"]] == ["t-cotton", "t-pack"]
        assert body["total"] == 2

    def test_empty_search_matches_all(self, client):
        body = client.get("/api/transactions",
                          params={"month": "March", "search": ""}).json()
        assert body["total"] == 6

    def test_percent_is_literal(self, client):
        body = client.get("/api/transactions",
                          params={"month": "January", "search": "%"}).json()
        assert [t["id"] for t in body["transactions"]] == ["t-promo"]

    def test_empty_month(self, client):
        body = client.get("/api/transactions", params={"month": "July"}).json()
        assert body["transactions"] == []
        assert body["total"] == 0
        assert body["pageCount"] == 1

    @pytest.mark.parametrize("month", ["Marchh", "march", "Mar", "13", ""])
    def test_invalid_month_returns_400(self, client, month):
        resp = client.get("/api/transactions", params={"month": month})
        assert resp.status_code == 400
        body = resp.json()
        assert body["kind"] == "invalid_month"
        assert body["status_code"] == 400
        assert month in body["detail"]

    @pytest.mark.parametrize("params", [
        {"page": 0}, {"page": -1}, {"perPage": 0}, {"page": "two"},
    ])
    def test_invalid_paging_returns_422(self, client, params):
        resp = client.get("/api/transactions", params={"month": "March", **params})
        assert resp.status_code == 422

    def test_request_id_header(self, client):
        resp = client.get("/api/transactions", params={"month": "March"})
        assert len(resp.headers["X-Request-ID"]) == 8


# ── /api/transactions/statistics ──────────────────────────────────────────────

class TestStatistics:
    def test_march(self, client):
        resp = client.get("/api/transactions/statistics", params={"month": "March"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["totalSales"] == pytest.approx(2505.98)
        assert body["totalSoldItems"] == 3
        assert body["totalNotSoldItems"] == 3

    def test_default_month(self, client):
        body = client.get("/api/transactions/statistics").json()
        assert body == {"totalSales": 730, "totalSoldItems": 1, "totalNotSoldItems": 1}

    def test_empty_month(self, client):
        body = client.get("/api/transactions/statistics", params={"month": "July"}).json()
        assert body == {"totalSales": 0, "totalSoldItems": 0, "totalNotSoldItems": 0}

    def test_invalid_month(self, client):
        resp = client.get("/api/transactions/statistics", params={"month": "Smarch"})
        assert resp.status_code == 400
        assert resp.json()["kind"] == "invalid_month"


# ── /api/transactions/bar-chart ───────────────────────────────────────────────

class TestBarChart:
    def test_march(self, client):
        resp = client.get("/api/transactions/bar-chart", params={"month": "March"})
        assert resp.status_code == 200
        body = resp.json()
        assert len(body) == 11
        assert set(body[0]) == {"bucketLabel", "lowerBound", "upperBound", "count"}
        counts = {b["bucketLabel"]: b["count"] for b in body}
        assert counts["0-100"] == 2
        assert counts["100-200"] == 2
        assert counts["900-1000"] == 1
        assert counts["1000-above"] == 1
        assert sum(counts.values()) == 6

    def test_overflow_bucket_is_last_and_open(self, client):
        last = client.get("/api/transactions/bar-chart", params={"month": "March"}).json()[-1]
        assert last == {"bucketLabel": "1000-above", "lowerBound": 1000,
                        "upperBound": None, "count": 1}

    def test_empty_month_is_zero_filled(self, client):
        body = client.get("/api/transactions/bar-chart", params={"month": "July"}).json()
        assert len(body) == 11
        assert all(b["count"] == 0 for b in body)

    def test_invalid_month(self, client):
        resp = client.get("/api/transactions/bar-chart", params={"month": "Marchh"})
        assert resp.status_code == 400


# ── /api/transactions/pie-chart ───────────────────────────────────────────────

class TestPieChart:
    def test_march(self, client):
        resp = client.get("/api/transactions/pie-chart", params={"month": "March"})
        assert resp.status_code == 200
        assert resp.json() == [{"sold": True, "count": 3}, {"sold": False, "count": 3}]

    def test_only_observed_groups(self, client):
        body = client.get("/api/transactions/pie-chart", params={"month": "November"}).json()
        assert body == [{"sold": True, "count": 1}]

    def test_empty_month(self, client):
        assert client.get("/api/transactions/pie-chart", params={"month": "July"}).json() == []

    def test_invalid_month(self, client):
        resp = client.get("/api/transactions/pie-chart", params={"month": "Janvier"})
        assert resp.status_code == 400


# ── /api/transactions/initialize ──────────────────────────────────────────────

class TestInitialize:
    @pytest.mark.parametrize("method", ["GET", "POST"])
    def test_replaces_store(self, client, db_path, fake_session, method):
        resp = client.request(method, "/api/transactions/initialize")
        assert resp.status_code == 200
        body = resp.json()
        assert body["message"] == "Database initialized successfully!"
        assert body["initializedCount"] == 3
        assert body["deletedCount"] == 9
        assert row_count(db_path) == 3
        assert len(fake_session.calls) == 1

    def test_views_reflect_new_data(self, client):
        client.post("/api/transactions/initialize")
        body = client.get("/api/transactions", params={"month": "March"}).json()
        assert [t["title"] for t in body["transactions"]] == ["Mens Cotton Jacket"]
        assert body["transactions"][0]["sold"] is False
        stats = client.get("/api/transactions/statistics", params={"month": "October"}).json()
        assert stats["totalSales"] == pytest.approx(22.3)

    def test_source_failure_returns_502(self, client, db_path, fake_session):
        import requests
        fake_session.exc = requests.ConnectionError("connection refused")
        resp = client.get("/api/transactions/initialize")
        assert resp.status_code == 502
        body = resp.json()
        assert body["kind"] == "seed_source_unreachable"
        assert "Failed to fetch data from the source" in body["detail"]
        assert row_count(db_path) == 9

    def test_malformed_feed_returns_502(self, client, db_path, fake_session):
        fake_session.payload = [{"title": "no price or date"}]
        resp = client.post("/api/transactions/initialize")
        assert resp.status_code == 502
        assert row_count(db_path) == 9


# ── Missing store ─────────────────────────────────────────────────────────────

class TestStoreUnavailable:
    @pytest.fixture()
    def bare_client(self, tmp_path, app_config):
        from fastapi.testclient import TestClient
        from api.app import create_app
        app = create_app(db_path=tmp_path / "missing.sqlite", config=app_config,
                         seed_session=FakeSession(payload=[]))
        # No context manager: the lifespan hook does not create the store
        return TestClient(app, raise_server_exceptions=False)

    def test_health_reports_no_database(self, bare_client):
        resp = bare_client.get("/health")
        assert resp.status_code == 503
        assert resp.json()["status"] == "no_database"

    @pytest.mark.parametrize("path", [
        "/api/transactions",
        "/api/transactions/statistics",
        "/api/transactions/bar-chart",
        "/api/transactions/pie-chart",
    ])
    def test_reads_return_503(self, bare_client, path):
        resp = bare_client.get(path, params={"month": "March"})
        assert resp.status_code == 503
        assert resp.json()["kind"] == "store_unavailable"


# ── Docs ──────────────────────────────────────────────────────────────────────

class TestDocs:
    def test_swagger_ui(self, client):
        assert client.get("/api-docs").status_code == 200

    def test_openapi_lists_routes(self, client):
        paths = client.get("/openapi.json").json()["paths"]
        for path in ("/api/transactions", "/api/transactions/statistics",
                     "/api/transactions/bar-chart", "/api/transactions/pie-chart",
                     "/api/transactions/initialize", "/health"):
            assert path in paths
