#!/usr/bin/env python3
"""
API tests using FastAPI's TestClient. The scraper itself is replaced by a
fake coroutine, so no browser is started.
"""
import os
import sqlite3

os.environ.setdefault("API_LOG_FILE", "")

import pytest
from fastapi.testclient import TestClient

import gmaps_api.routes.scrape as scrape_routes
from gmaps_api.config import Config
from gmaps_api.main import app
from gmaps_scraper.exceptions import SessionError
from gmaps_scraper.models import PlaceRecord

PLACE_URL = "https://www.google.com/maps/place/Prufrock+Coffee/data=!4m7"


def make_record(query: str, **overrides) -> PlaceRecord:
    data = dict(
        query=query,
        maps_url=PLACE_URL,
        scraped_at="2026-01-01T00:00:00+00:00",
        name="Prufrock Coffee",
        address="23-25 Leather Ln, London",
        phone="020 7242 0467",
    )
    data.update(overrides)
    return PlaceRecord(**data)


class FakeScraper:
    """Stands in for run_scrape and remembers how it was called."""

    def __init__(self, records=None, error=None):
        self.records = records
        self.error = error
        self.calls = []

    async def __call__(self, query, limit, **kwargs):
        self.calls.append((query, limit))
        if self.error:
            raise self.error
        if self.records is not None:
            return self.records
        return [make_record(query)]


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(Config, "DB_PATH", str(tmp_path / "db" / "places.db"))
    with TestClient(app) as c:
        yield c


@pytest.fixture
def fake_scraper(monkeypatch):
    fake = FakeScraper()
    monkeypatch.setattr(scrape_routes, "run_scrape", fake)
    return fake


def test_scrape_requires_query(client, fake_scraper):
    for url in ("/scrape", "/scrape?query=", "/scrape?query=%20%20"):
        res = client.get(url)
        assert res.status_code == 400
        assert "error" in res.json()
    assert fake_scraper.calls == []


@pytest.mark.parametrize("raw,expected", [
    (None, 20),
    ("0", 20),
    ("abc", 20),
    ("5", 5),
    ("1000", 1000),
    ("5000", 1000),
    ("-3", 1),
])
def test_scrape_limit_resolution(client, fake_scraper, raw, expected):
    url = "/scrape?query=coffee" + (f"&limit={raw}" if raw is not None else "")
    assert client.get(url).status_code == 200
    assert fake_scraper.calls == [("coffee", expected)]


def test_scrape_returns_records_and_stores_them(client, fake_scraper):
    res = client.get("/scrape?query=coffee+london&limit=5")
    assert res.status_code == 200
    body = res.json()
    assert body["query"] == "coffee london"
    assert body["count"] == 1
    result = body["results"][0]
    assert result["mapsUrl"] == PLACE_URL
    assert result["name"] == "Prufrock Coffee"
    assert result["website"] is None
    assert result["scrapedAt"] == "2026-01-01T00:00:00+00:00"

    stored = client.get("/api/places").json()
    assert stored["total"] == 1
    assert stored["items"][0]["place_key"] == PLACE_URL


def test_repeated_scrape_updates_instead_of_duplicating(client, monkeypatch):
    monkeypatch.setattr(scrape_routes, "run_scrape", FakeScraper([make_record("coffee")]))
    client.get("/scrape?query=coffee")
    monkeypatch.setattr(scrape_routes, "run_scrape", FakeScraper([make_record("coffee", phone="020 0000 0000", rating="4.8")]))
    client.get("/scrape?query=coffee")

    stored = client.get("/api/places").json()
    assert stored["total"] == 1
    assert stored["items"][0]["phone"] == "020 0000 0000"
    assert stored["items"][0]["rating"] == "4.8"


def test_scrape_fatal_failure_returns_500(client, monkeypatch):
    monkeypatch.setattr(scrape_routes, "run_scrape", FakeScraper(error=SessionError("search page failed to load")))
    res = client.get("/scrape?query=coffee")
    assert res.status_code == 500
    assert res.json() == {"error": "search page failed to load"}


def test_scrape_persistence_failure_returns_500(client, fake_scraper, monkeypatch):
    def broken_save(records):
        raise sqlite3.OperationalError("database is locked")

    monkeypatch.setattr(scrape_routes, "save_places", broken_save)
    res = client.get("/scrape?query=coffee")
    assert res.status_code == 500
    assert res.json()["error"] == "database is locked"


def test_empty_scrape(client, monkeypatch):
    monkeypatch.setattr(scrape_routes, "run_scrape", FakeScraper([]))
    res = client.get("/scrape?query=nowhere")
    assert res.status_code == 200
    assert res.json() == {"query": "nowhere", "count": 0, "results": []}


def test_places_filter_and_lookup(client, monkeypatch):
    other = "https://www.google.com/maps/place/Monmouth/data=!4m7"
    monkeypatch.setattr(scrape_routes, "run_scrape", FakeScraper([
        make_record("coffee"),
        make_record("coffee", maps_url=other, name="Monmouth Coffee", address="27 Monmouth St"),
    ]))
    client.get("/scrape?query=coffee")

    assert client.get("/api/places?q=monmouth").json()["total"] == 1
    assert client.get("/api/places?limit=1").json()["total"] == 2
    assert len(client.get("/api/places?limit=1").json()["items"]) == 1

    res = client.get(f"/api/places/{other}")
    assert res.status_code == 200
    assert res.json()["name"] == "Monmouth Coffee"
    assert client.get("/api/places/https://example.com/missing").status_code == 404


def test_export_csv(client, fake_scraper):
    client.get("/scrape?query=coffee")
    res = client.get("/api/export/csv")
    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/csv")
    lines = res.text.splitlines()
    assert lines[0] == '"query","name","address","phone","website","rating","reviews","mapsUrl"'
    assert lines[1] == (
        f'"coffee","Prufrock Coffee","23-25 Leather Ln, London","020 7242 0467","","","","{PLACE_URL}"'
    )


def test_ui_pages(client, fake_scraper):
    page = client.get("/")
    assert page.status_code == 200
    assert "scrapeBtn" in page.text
    assert "exportCSV" in page.text
    # stored table reloads after each scrape
    assert 'hx-trigger="load, refresh"' in page.text
    assert 'htmx.trigger("#stored", "refresh")' in page.text
    # client limit cap follows the server's
    assert f'max="{Config.MAX_LIMIT}"' in page.text
    assert "__MAX_LIMIT__" not in page.text

    assert "No places stored yet" in client.get("/ui/table").text
    client.get("/scrape?query=coffee")
    table = client.get("/ui/table").text
    assert "Prufrock Coffee" in table
    assert "Page 1 of 1" in table


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"
