import pytest
from fastapi.testclient import TestClient

from api.main import app
from core import data as dc
from core.filters import YEAR_RANGE_OPTIONS


@pytest.fixture
def client(monkeypatch, sample_csv):
    monkeypatch.setenv(dc.SOURCE_ENV_VAR, str(sample_csv))
    dc.clear_cache()
    yield TestClient(app)
    dc.clear_cache()


def test_meta_teams(client):
    response = client.get("/meta/teams")
    assert response.status_code == 200
    assert response.json() == {"teams": ["BAL", "DAL", "DET", "JAX", "NE", "NYG", "SD"]}


def test_meta_year_ranges(client):
    assert client.get("/meta/year-ranges").json() == {"values": YEAR_RANGE_OPTIONS}


def test_meta_length_buckets(client):
    assert client.get("/meta/length-buckets").json() == {"values": ["all", "short", "medium", "long"]}


def test_overview(client):
    response = client.post("/overview", json={})
    assert response.status_code == 200
    body = response.json()
    assert body["kpis"]["suspensions"] == 9
    assert body["charts"]["suspension_scatter"]["title"]["text"] == "NFL SUSPENSION SEVERITY BY OFFENSE TYPE"


def test_groups_long_bucket(client):
    response = client.post("/groups", json={"length_bucket": "long"})
    assert response.status_code == 200
    groups = response.json()["groups"]
    assert len(groups) == 3
    assert all(g["games"] > 10 for g in groups)
    assert all(g["players"] for g in groups)


def test_groups_unknown_team_is_ignored(client):
    groups = client.post("/groups", json={"team": "Nowhere"}).json()["groups"]
    assert sum(g["count"] for g in groups) == 9


def test_group_detail(client):
    response = client.get("/groups/detail", params={"sub_category": "PEDs", "games": 4})
    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 2
    assert [p["name"] for p in body["players"]] == ["S. Hamm", "L. Tonga"]


def test_group_detail_with_filters(client):
    params = {"sub_category": "Personal conduct", "games": 40, "team": "BAL"}
    body = client.get("/groups/detail", params=params).json()
    assert body["count"] == 1
    assert body["percentage"] == 0.5


def test_debug(client):
    body = client.post("/debug", json={}).json()
    assert body["row_counts"]["raw_rows"] == 11
    assert body["rejected_by_reason"]["invalid_games"] == 1


def test_export_suspensions(client):
    response = client.post("/export/suspensions", json={"team": "JAX"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    lines = response.text.strip().splitlines()
    assert lines[0].startswith("name,team,games,category,sub_category")
    assert len(lines) == 3


def test_export_groups_drops_players(client):
    response = client.post("/export/groups", json={})
    header = response.text.splitlines()[0]
    assert header == "category,sub_category,games,count,percentage"


def test_load_failure_returns_500(monkeypatch, tmp_path):
    monkeypatch.setenv(dc.SOURCE_ENV_VAR, str(tmp_path / "missing.csv"))
    dc.clear_cache()
    response = TestClient(app).post("/overview", json={})
    assert response.status_code == 500
    assert response.json()["type"] == "FileNotFoundError"
