"""
Pytest fixtures for the transaction dashboard tests.

Provides a temporary SQLite store populated through the same insert helper
the seeder uses, a fake HTTP session standing in for the seed feed, and a
FastAPI TestClient wired to both.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from utils.database import connect, init_schema, insert_transactions  # noqa: E402


# ── Sample data ───────────────────────────────────────────────────────────────
# Six March rows across three years (one only falls in March once converted
# to UTC), two January rows, one November row.

SAMPLE_TRANSACTIONS = [
    {"id": "t-widget", "title": "Widget", "description": "A small gadget",
     "price": 150, "category": "electronics", "sold": True,
     "date_of_sale": "2021-03-15T10:00:00+00:00", "image": "https://img/1.jpg"},
    {"id": "t-cotton", "title": "Cotton Jacket", "description": "Great outerwear",
     "price": 55.99, "category": "men's clothing", "sold": False,
     "date_of_sale": "2022-03-02T08:30:00+00:00", "image": None},
    {"id": "t-ring", "title": "Gold Ring", "description": "Solid gold ring",
     "price": 1200, "category": "jewelery", "sold": True,
     "date_of_sale": "2021-03-28T12:00:00+00:00", "image": None},
    {"id": "t-pack", "title": "Backpack", "description": "Fits 15 inch laptops, JACKET pocket",
     "price": 100, "category": "men's clothing", "sold": True,
     "date_of_sale": "2022-03-10T00:00:00+00:00", "image": None},
    {"id": "t-ssd", "title": "SSD 1TB", "description": "Fast storage",
     "price": 999.99, "category": "electronics", "sold": False,
     "date_of_sale": "2023-03-01T09:00:00+00:00", "image": None},
    {"id": "t-monitor", "title": "Monitor", "description": "27 inch display",
     "price": 329.85, "category": "electronics", "sold": True,
     "date_of_sale": "2021-11-27T20:29:54+05:30", "image": None},
    {"id": "t-lamp", "title": "Midnight Lamp", "description": "Bedside lamp",
     "price": 0, "category": "home", "sold": False,
     "date_of_sale": "2022-04-01T02:00:00+05:30", "image": None},
    {"id": "t-promo", "title": "Jacket 50%_off", "description": "Clearance item",
     "price": 250, "category": "women's clothing", "sold": True,
     "date_of_sale": "2022-01-05T00:00:00+00:00", "image": None},
    {"id": "t-denim", "title": "Denim Jacket", "description": "Blue denim",
     "price": 480, "category": "women's clothing", "sold": False,
     "date_of_sale": "2021-01-20T00:00:00+00:00", "image": None},
]

MARCH_IDS = ["t-widget", "t-cotton", "t-ring", "t-pack", "t-ssd", "t-lamp"]
JANUARY_IDS = ["t-promo", "t-denim"]

# Shape of the public seed feed (numeric ids, sold sometimes missing,
# price sometimes a string).
SEED_FEED = [
    {"id": 1, "title": "Fjallraven Backpack", "price": 109.95,
     "description": "Your perfect pack for everyday use",
     "category": "men's clothing", "image": "https://fakestoreapi.com/img/1.jpg",
     "sold": False, "dateOfSale": "2021-11-27T20:29:54+05:30"},
    {"id": 2, "title": "Mens Casual T-Shirt", "price": "22.3",
     "description": "Slim-fitting style",
     "category": "men's clothing", "image": "https://fakestoreapi.com/img/2.jpg",
     "sold": True, "dateOfSale": "2021-10-27T20:29:54+05:30"},
    {"id": 3, "title": "Mens Cotton Jacket", "price": 615.89,
     "description": "great outerwear jackets",
     "category": "men's clothing", "image": "https://fakestoreapi.com/img/3.jpg",
     "dateOfSale": "2022-03-27T20:29:54+05:30"},
]


# ── Fake HTTP session ─────────────────────────────────────────────────────────

class FakeResponse:
    def __init__(self, payload=None, status_code=200, invalid_json=False):
        self._payload = payload
        self.status_code = status_code
        self._invalid_json = invalid_json

    def raise_for_status(self):
        import requests
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error", response=self)

    def json(self):
        if self._invalid_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


class FakeSession:
    """Stand-in for requests.Session that records calls and never hits the network."""

    def __init__(self, payload=None, status_code=200, exc=None, invalid_json=False):
        self.payload = payload
        self.status_code = status_code
        self.exc = exc
        self.invalid_json = invalid_json
        self.calls: list[tuple[str, float | None]] = []

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        if self.exc is not None:
            raise self.exc
        return FakeResponse(self.payload, self.status_code, self.invalid_json)


# ── Helpers ───────────────────────────────────────────────────────────────────

def make_db(path: Path, records=SAMPLE_TRANSACTIONS) -> Path:
    """Create a transaction store at *path* holding *records*."""
    conn = connect(path)
    try:
        init_schema(conn)
        with conn:
            insert_transactions(conn, records)
    finally:
        conn.close()
    return path


def row_count(path: Path) -> int:
    conn = connect(path)
    try:
        return conn.execute("SELECT COUNT(*) FROM transactions").fetchone()[0]
    finally:
        conn.close()


# ── Fixtures ──────────────────────────────────────────────────────────────────

@pytest.fixture()
def db_path(tmp_path):
    """Path to a store populated with SAMPLE_TRANSACTIONS."""
    return make_db(tmp_path / "transactions.sqlite")


@pytest.fixture()
def conn(db_path):
    """Open connection to the populated store."""
    c = connect(db_path)
    yield c
    c.close()


@pytest.fixture()
def empty_conn(tmp_path):
    """Open connection to a store with the schema but no rows."""
    path = tmp_path / "empty.sqlite"
    c = connect(path)
    init_schema(c)
    yield c
    c.close()


@pytest.fixture()
def fake_session():
    return FakeSession(payload=SEED_FEED)


@pytest.fixture()
def app_config(monkeypatch):
    """AppConfig built from a clean environment."""
    for var in ("APP_DEFAULT_MONTH", "SEED_SOURCE_URL", "SEED_TIMEOUT",
                "APP_CORS_ORIGINS", "APP_LOG_FORMAT"):
        monkeypatch.delenv(var, raising=False)
    from utils.config import AppConfig
    return AppConfig.from_env()


@pytest.fixture()
def client(db_path, app_config, fake_session):
    """TestClient over the populated store with the fake seed feed."""
    pytest.importorskip("httpx")
    from fastapi.testclient import TestClient
    from api.app import create_app

    app = create_app(db_path=db_path, config=app_config, seed_session=fake_session)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
