"""Tests for the HTTP routes in main.py."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from main import app

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)
REF = {"reference": NOW.isoformat()}


@pytest.fixture()
def client() -> TestClient:
    return TestClient(app)


def _doc(entry_id: str, mood: int, days_ago: int = 0, tags=(), **extra) -> dict:
    doc = {
        "id": entry_id,
        "userId": "u1",
        "content": f"Entry {entry_id}",
        "mood": mood,
        "tags": list(tags),
        "createdAt": (NOW - timedelta(days=days_ago)).isoformat(),
    }
    doc.update(extra)
    return doc


@pytest.fixture()
def docs() -> list[dict]:
    return [
        _doc("a", 5, 0, ["work"]),
        _doc("b", 4, 1, ["work", "gym"]),
        _doc("c", 2, 3, ["family"], context="Visited grandma"),
        _doc("d", 1, 10, ["work"]),
    ]


# ---- meta ----


def test_root(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json() == {"message": "Journal Insights API running"}


def test_schema(client):
    body = client.get("/schema").json()
    assert set(body) >= {"entry", "mood_trend", "tag_analysis", "journal_insight", "weekly_stats"}


# ---- analytics ----


def test_trends_default_window(client, docs):
    resp = client.post("/analytics/trends", json=docs, params=REF)
    assert resp.status_code == 200
    body = resp.json()
    assert len(body) == 7
    assert body[-1] == {"date": "2026-03-15", "average_mood": 5.0, "entry_count": 1}
    assert body[-2]["entry_count"] == 1


def test_trends_custom_window(client):
    resp = client.post("/analytics/trends", json=[], params={**REF, "days": 30})
    assert resp.status_code == 200
    assert len(resp.json()) == 30


def test_trends_rejects_zero_days(client):
    resp = client.post("/analytics/trends", json=[], params={"days": 0})
    assert resp.status_code == 422


def test_invalid_mood_rejected(client):
    resp = client.post("/analytics/trends", json=[_doc("x", 6)])
    assert resp.status_code == 422


def test_tags(client, docs):
    resp = client.post("/analytics/tags", json=docs, params={"limit": 2})
    assert resp.status_code == 200
    assert resp.json() == [
        {"tag": "work", "count": 3, "average_mood": 3.3},
        {"tag": "gym", "count": 1, "average_mood": 4.0},
    ]


def test_streak(client, docs):
    resp = client.post("/analytics/streak", json=docs, params=REF)
    assert resp.json() == {"streak": 2}


def test_insights(client, docs):
    resp = client.post("/analytics/insights", json=docs, params=REF)
    assert resp.status_code == 200
    types = [i["type"] for i in resp.json()]
    assert types == ["mood_trend", "writing_streak", "frequent_tags"]


def test_weekly(client, docs):
    body = client.post("/analytics/weekly", json=docs, params=REF).json()
    assert body["total_entries"] == 3
    assert body["average_mood"] == 3.7
    assert [t["tag"] for t in body["top_tags"]] == ["work", "gym", "family"]
    assert body["writing_streak"] == 2


def test_quick_stats(client, docs):
    body = client.post("/analytics/quick-stats", json=docs, params=REF).json()
    assert body == {"total_entries": 4, "current_streak": 2, "average_mood": 3.0, "mood_emoji": "😐"}


def test_empty_entries_everywhere(client):
    for path in ("/analytics/insights", "/analytics/tags"):
        assert client.post(path, json=[]).json() == []
    assert client.post("/analytics/streak", json=[]).json() == {"streak": 0}
    weekly = client.post("/analytics/weekly", json=[]).json()
    assert weekly == {"total_entries": 0, "average_mood": 0.0, "top_tags": [], "writing_streak": 0}


# ---- entries ----


def test_search(client, docs):
    resp = client.post("/entries/search", json=docs, params={"q": "GRANDMA"})
    assert resp.status_code == 200
    body = resp.json()
    assert [e["id"] for e in body] == ["c"]
    assert body[0]["user_id"] == "u1"
    assert body[0]["context"] == "Visited grandma"


def test_review(client, docs):
    docs[0]["lastReviewedAt"] = NOW.isoformat()
    resp = client.post("/entries/review", json=docs, params={**REF, "limit": 2})
    assert [e["id"] for e in resp.json()] == ["b", "c"]
