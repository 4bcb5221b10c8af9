import os, sys

import pytest
from fastapi.testclient import TestClient

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from scoretracker.main import app

BASE = "/api/v0"


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def _players(client, *names):
    return [client.post(f"{BASE}/players", json={"name": n}).json()["id"] for n in names]


def test_create_elo_season_enrolls_active_players(client):
    _players(client, "Ana", "Bo")
    resp = client.post(f"{BASE}/seasons", json={"name": "Spring", "score_type": "elo"})
    assert resp.status_code == 200, resp.text
    season = resp.json()
    assert (season["initial_score"], season["k_factor"], season["rounds"]) == (1200, 32, None)
    assert season["closed"] is False

    standings = client.get(f"{BASE}/seasons/{season['id']}/standings").json()
    assert sorted(r["name"] for r in standings["rows"]) == ["Ana", "Bo"]
    assert {r["current_rating"] for r in standings["rows"]} == {1200.0}


def test_points_season_overrides_rating_settings_and_builds_fixtures(client):
    _players(client, "Ana", "Bo", "Cy", "Di")
    season = client.post(
        f"{BASE}/seasons",
        json={
            "name": "League",
            "score_type": "3-1-0",
            "initial_score": 1500,
            "k_factor": 20,
            "rounds": 2,
        },
    ).json()
    assert (season["initial_score"], season["k_factor"]) == (0, -1)

    fixtures = client.get(f"{BASE}/seasons/{season['id']}/fixtures").json()
    assert len(fixtures) == 12
    assert {f["round"] for f in fixtures} == set(range(1, 7))
    assert not any(f["played"] for f in fixtures)


def test_invalid_score_type(client):
    resp = client.post(f"{BASE}/seasons", json={"name": "X", "score_type": "glicko"})
    assert resp.status_code == 422
    assert resp.json()["code"] == "invalid_score_type"


def test_naive_dates_are_rejected(client):
    resp = client.post(
        f"{BASE}/seasons",
        json={"name": "X", "score_type": "elo", "start_date": "2024-01-01T00:00:00"},
    )
    assert resp.status_code == 422


def test_enroll_late_player_is_idempotent(client):
    season = client.post(f"{BASE}/seasons", json={"name": "S", "score_type": "elo"}).json()
    (pid,) = _players(client, "Late")
    for _ in range(2):
        resp = client.post(f"{BASE}/seasons/{season['id']}/players", json={"player_id": pid})
        assert resp.status_code == 200
        assert resp.json()["score"] == 1200.0
    rows = client.get(f"{BASE}/seasons/{season['id']}/standings").json()["rows"]
    assert [r["entrant_id"] for r in rows] == [pid]

    resp = client.post(f"{BASE}/seasons/{season['id']}/players", json={"player_id": "nope"})
    assert resp.json()["code"] == "player_not_found"


def test_close_season(client):
    ana, bo = _players(client, "Ana", "Bo")
    season = client.post(f"{BASE}/seasons", json={"name": "S", "score_type": "elo"}).json()
    sid = season["id"]
    client.post(
        f"{BASE}/seasons/{sid}/matches",
        json={"home_player_ids": [bo], "away_player_ids": [ana], "home_score": 2, "away_score": 0},
    )

    resp = client.post(f"{BASE}/seasons/{sid}/close")
    assert resp.json() == {"season_id": sid, "winner_id": bo}
    assert client.get(f"{BASE}/seasons/{sid}").json()["closed"] is True

    again = client.post(f"{BASE}/seasons/{sid}/close")
    assert again.status_code == 409
    assert again.json()["code"] == "season_closed"

    achievements = client.get(f"{BASE}/players/{bo}/achievements").json()
    assert achievements["top"] == ["season_winner"]


def test_unknown_season(client):
    resp = client.get(f"{BASE}/seasons/missing")
    assert resp.status_code == 404
    assert resp.json()["code"] == "season_not_found"
    assert client.get(f"{BASE}/seasons/missing/standings").status_code == 404
    assert client.post(f"{BASE}/seasons/missing/recalculate").status_code == 404
