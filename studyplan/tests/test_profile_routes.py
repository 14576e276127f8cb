from flask import json

from studyplan.models import Profile


# Tests for GET /api/profile
def test_get_profile_defaults(client, test_db):
    response = client.get("/api/profile")
    assert response.status_code == 200
    data = json.loads(response.data)
    assert data["user_id"] == "local"
    assert data["chronotype"] == "balanced"
    assert data["preferred_session_mins"] == 60
    assert data["calendar_write_enabled"] is False


def test_get_profile_saved(client, create_profile_factory):
    create_profile_factory(chronotype="night", preferred_session_mins=90)
    data = json.loads(client.get("/api/profile").data)
    assert data["chronotype"] == "night"
    assert data["preferred_session_mins"] == 90


# Tests for POST /api/profile/baseline
def test_save_baseline_creates_profile(client, test_db):
    response = client.post(
        "/api/profile/baseline",
        json={
            "name": "Sam",
            "major": "Biology",
            "chronotype": "morning",
            "work_style": "sprints",
            "preferred_session_mins": 45,
            "timezone": "Europe/Berlin",
        },
    )
    assert response.status_code == 200
    data = json.loads(response.data)
    assert data["chronotype"] == "morning"
    assert data["work_style"] == "sprints"
    assert data["timezone"] == "Europe/Berlin"

    test_db.session.expire_all()
    profile = test_db.session.get(Profile, "local")
    assert profile.preferred_session_mins == 45
    assert profile.name == "Sam"


def test_save_baseline_merges(client, create_profile_factory):
    create_profile_factory(chronotype="night", preferred_session_mins=90)
    data = json.loads(
        client.post("/api/profile/baseline", json={"university": "State U"}).data
    )
    assert data["university"] == "State U"
    assert data["chronotype"] == "night"
    assert data["preferred_session_mins"] == 90


def test_save_baseline_invalid_values(client, test_db):
    for payload in (
        {"chronotype": "owl"},
        {"work_style": "cramming"},
        {"preferred_session_mins": 5},
        {"preferred_session_mins": 600},
        {"preferred_session_mins": "60"},
        {"timezone": "Mars/Olympus"},
    ):
        response = client.post("/api/profile/baseline", json=payload)
        assert response.status_code == 400, payload
        assert "error" in json.loads(response.data)

    test_db.session.expire_all()
    assert test_db.session.get(Profile, "local") is None


def test_save_baseline_requires_object(client, test_db):
    response = client.post("/api/profile/baseline", json=["morning"])
    assert response.status_code == 400


def test_profile_per_user(client, test_db):
    client.post(
        "/api/profile/baseline",
        json={"chronotype": "night"},
        headers={"X-User-Id": "other-student"},
    )
    assert json.loads(client.get("/api/profile").data)["chronotype"] == "balanced"
    data = json.loads(client.get("/api/profile", headers={"X-User-Id": "other-student"}).data)
    assert data["chronotype"] == "night"


# Tests for POST /api/profile/calendar-prefs
def test_save_calendar_prefs(client, test_db):
    response = client.post("/api/profile/calendar-prefs", json={"calendar_write_enabled": True})
    assert response.status_code == 200
    assert json.loads(response.data) == {"calendar_write_enabled": True}

    data = json.loads(client.get("/api/profile").data)
    assert data["calendar_write_enabled"] is True

    client.post("/api/profile/calendar-prefs", json={"calendar_write_enabled": False})
    assert json.loads(client.get("/api/profile").data)["calendar_write_enabled"] is False
