"""
Tests for the HTTP surface.
"""

import json

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from timeparser.api import create_app
from timeparser.infra.config import Settings

METADATA = '{"owner": "ML", "month": "2025-04"}'
ENTRY = {
    "date": "2025-04-02",
    "start": "09:00",
    "end": "11:30",
    "task": "(ML) - Figma-Export - April'25",
    "description": "Figma-Export Konzept",
    "owner": "ML",
    "project": "1258 - PDM - Produkt - Anwendungen - 2025",
}


@pytest.fixture
def settings(tmp_path, sample_catalog_path):
    return Settings(
        config_dir=tmp_path / "config",
        data_dir=tmp_path / "data",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        catalog_path=sample_catalog_path,
    )


@pytest.fixture
def backend(completion):
    return completion


@pytest.fixture
def client(settings, backend):
    with TestClient(create_app(settings, completion=backend)) as test_client:
        yield test_client


def test_parse(client, backend):
    backend.responses.extend([METADATA, "```json\n" + json.dumps([ENTRY]) + "\n```"])

    response = client.post("/api/parse", json={"rawText": "ML April\n02.04. 9-11:30 Figma-Export Konzept"})

    assert response.status_code == 200
    assert response.json() == {"parsed": [ENTRY]}
    assert "(ML) - Konzept-Workshop" in backend.prompts[1]


@pytest.mark.parametrize("body", [{}, {"rawText": ""}, {"rawText": "   "}])
def test_parse_without_text(client, backend, body):
    response = client.post("/api/parse", json=body)

    assert response.status_code == 400
    assert backend.prompts == []


def test_parse_metadata_failure(client, backend):
    backend.responses.append("No JSON here")

    response = client.post("/api/parse", json={"rawText": "something"})

    assert response.status_code == 400
    assert response.json()["detail"]["kind"] == "no_json_block"


def test_parse_match_failure(client, backend):
    backend.responses.extend([METADATA, "```json\n[{oops}]\n```"])

    response = client.post("/api/parse", json={"rawText": "something"})

    assert response.status_code == 500
    assert response.json()["detail"]["kind"] == "malformed_json"


def test_save_and_list(client):
    second = dict(ENTRY, date="2025-04-01", start="13:00", end="15:00")

    response = client.post("/api/save", json={"entries": [ENTRY, second]})

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Entries saved successfully"
    assert [e["date"] for e in body["saved"]] == ["2025-04-02", "2025-04-01"]
    assert all(e["id"] for e in body["saved"])

    saved = client.get("/api/saved").json()
    assert [e["start"] for e in saved] == ["09:00", "13:00"]
    assert saved[0]["task"] == ENTRY["task"]

    by_date = client.get("/api/saved/by-date").json()
    assert list(by_date) == ["2025-04-01", "2025-04-02"]


def test_save_without_entries(client):
    response = client.post("/api/save", json={})
    assert response.status_code == 400


def test_health(client):
    body = client.get("/api/health").json()
    assert body == {"backend_available": True, "catalog_tasks": 9}


def test_saved_entries_survive_restart_unless_cleared(settings, backend):
    with TestClient(create_app(settings, completion=backend)) as first:
        first.post("/api/save", json={"entries": [ENTRY]})

    with TestClient(create_app(settings, completion=backend)) as second:
        assert len(second.get("/api/saved").json()) == 1

    settings.clear_entries_on_startup = True
    with TestClient(create_app(settings, completion=backend)) as third:
        assert third.get("/api/saved").json() == []


@pytest.mark.parametrize("route, method", [
    ("/api/saved", "list_saved"),
    ("/api/saved/by-date", "saved_by_date"),
])
def test_saved_routes_report_storage_failure(client, monkeypatch, route, method):
    async def broken():
        raise OperationalError("SELECT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(client.app.state.entries, method, broken)

    response = client.get(route)

    assert response.status_code == 500
    assert response.json()["detail"]["error"] == "Failed to fetch saved entries"
