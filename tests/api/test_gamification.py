"""Tests for gamification endpoints (XP, badges, activities, leaderboard)"""
import time

import pytest
from fastapi.testclient import TestClient

from src.api.middleware import limiter
from src.api.server import app
from src.utils.cache import _cache


@pytest.fixture
def client(test_env_vars, memory_store):
    """Client against the app without running the lifespan (no database pool)"""
    limiter.enabled = False
    yield TestClient(app)
    limiter.enabled = True


@pytest.fixture
def headers(test_api_key):
    return {"Authorization": f"Bearer {test_api_key}"}


# ============================================================================
# Authentication
# ============================================================================

def test_missing_api_key_rejected(client, test_user_id):
    response = client.get(f"/api/v1/users/{test_user_id}/gamification")

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_invalid_api_key_rejected(client, test_user_id):
    response = client.get(
        f"/api/v1/users/{test_user_id}/gamification",
        headers={"Authorization": "Bearer wrong_key"}
    )

    assert response.status_code == 401


def test_no_configured_keys_is_unavailable(client, headers, monkeypatch, test_user_id):
    monkeypatch.delenv("API_KEYS")

    response = client.get(f"/api/v1/users/{test_user_id}/gamification", headers=headers)

    assert response.status_code == 503


# ============================================================================
# Snapshot & catalog
# ============================================================================

def test_list_badges(client, headers):
    response = client.get("/api/v1/badges", headers=headers)

    assert response.status_code == 200
    names = [badge["name"] for badge in response.json()]
    assert names == ["Busy Bee", "Quiz Whiz", "Star Bee", "Honey Hunter", "Super Bee"]


def test_snapshot_for_new_user(client, headers, test_user_id):
    response = client.get(f"/api/v1/users/{test_user_id}/gamification", headers=headers)

    assert response.status_code == 200
    data = response.json()
    assert data["xp"] == 0
    assert data["level"] == 1
    assert data["xp_to_next_level"] == 100
    assert data["badges"] == []
    assert len(data["all_badges"]) == 5
    assert data["streak"]["current_streak"] == 0


def test_snapshot_unavailable_when_store_fails(client, headers, memory_store, test_user_id):
    memory_store.fail_on.add("get_user_gamification")

    response = client.get(f"/api/v1/users/{test_user_id}/gamification", headers=headers)

    assert response.status_code == 503


# ============================================================================
# XP & badges
# ============================================================================

def test_add_xp(client, headers, test_user_id):
    response = client.post(
        f"/api/v1/users/{test_user_id}/xp",
        json={"amount": 120, "reason": "Lesson completed"},
        headers=headers
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["total_awarded"] == 120
    assert data["new_level"] == 2
    assert data["leveled_up"] is True
    assert [badge["name"] for badge in data["badges_unlocked"]] == ["Busy Bee", "Quiz Whiz", "Star Bee"]

    snapshot = client.get(f"/api/v1/users/{test_user_id}/gamification", headers=headers).json()
    assert snapshot["xp"] == 120
    assert len(snapshot["badges"]) == 3


def test_add_xp_negative_amount_rejected(client, headers, memory_store, test_user_id):
    response = client.post(
        f"/api/v1/users/{test_user_id}/xp",
        json={"amount": -10},
        headers=headers
    )

    assert response.status_code == 422
    assert memory_store.calls == []


def test_add_xp_store_failure_reported_in_body(client, headers, memory_store, test_user_id):
    memory_store.fail_on.add("upsert_user_gamification")

    response = client.post(f"/api/v1/users/{test_user_id}/xp", json={"amount": 10}, headers=headers)

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is False
    assert data["total_awarded"] == 0
    assert data["error"]


def test_award_badge(client, headers, test_user_id):
    first = client.post(f"/api/v1/users/{test_user_id}/badges", json={"name": "Super Bee"}, headers=headers)
    second = client.post(f"/api/v1/users/{test_user_id}/badges", json={"name": "Super Bee"}, headers=headers)

    assert first.json() == {"awarded": True}
    assert second.json() == {"awarded": False}


# ============================================================================
# Activities
# ============================================================================

def test_course_completed_activity(client, headers, test_user_id):
    response = client.post(
        f"/api/v1/users/{test_user_id}/activities",
        json={"activity_type": "course_completed"},
        headers=headers
    )

    assert response.status_code == 200
    data = response.json()
    assert data["activity_type"] == "course_completed"
    assert data["award"]["total_awarded"] == 50
    assert data["badges_granted"] == ["Honey Hunter"]


def test_quiz_activity(client, headers, test_user_id):
    response = client.post(
        f"/api/v1/users/{test_user_id}/activities",
        json={"activity_type": "quiz_submitted", "score": 9, "passed": True},
        headers=headers
    )

    assert response.status_code == 200
    data = response.json()
    assert data["award"]["total_awarded"] == 5
    assert data["badges_granted"] == ["Quiz Whiz"]


def test_quiz_activity_requires_score(client, headers, test_user_id):
    response = client.post(
        f"/api/v1/users/{test_user_id}/activities",
        json={"activity_type": "quiz_submitted", "passed": True},
        headers=headers
    )

    assert response.status_code == 422


def test_repeat_lesson_activity(client, headers, memory_store, test_user_id):
    response = client.post(
        f"/api/v1/users/{test_user_id}/activities",
        json={"activity_type": "lesson_completed", "first_completion": False},
        headers=headers
    )

    assert response.status_code == 200
    assert response.json()["award"] is None
    assert memory_store.calls == []


# ============================================================================
# Leaderboard, health, metrics
# ============================================================================

def test_leaderboard(client, headers, memory_store):
    memory_store.gamification["user-a"] = {"user_id": "user-a", "xp": 300, "level": 4}
    memory_store.gamification["user-b"] = {"user_id": "user-b", "xp": 80, "level": 1}
    memory_store.profiles["user-a"] = "Maya Honeycomb"

    response = client.get("/api/v1/leaderboard", params={"user_id": "user-b"}, headers=headers)

    assert response.status_code == 200
    data = response.json()
    assert [entry["full_name"] for entry in data["entries"]] == ["Maya Honeycomb", "Anonymous Bee"]
    assert data["user_rank"] == 2


def test_leaderboard_limit_bounds(client, headers):
    response = client.get("/api/v1/leaderboard", params={"limit": 0}, headers=headers)

    assert response.status_code == 422


def test_health_without_database_is_degraded(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "degraded"
    assert data["database"] == "disconnected"
    assert "hit_rate_percent" in data["cache"]


def test_health_sweeps_expired_cache_entries(client):
    _cache["gamification:gone"] = ({"xp": 1}, time.time() - 1)

    response = client.get("/api/health")

    assert response.status_code == 200
    assert "gamification:gone" not in _cache
    assert response.json()["cache"]["cache_size"] == 0


def test_metrics_endpoint(client, headers, test_user_id):
    client.post(f"/api/v1/users/{test_user_id}/xp", json={"amount": 10}, headers=headers)

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "beelearn_xp_awarded_total" in response.text
