"""
tests/test_api.py

HTTP contract tests for the upload, progress and dashboard endpoints.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from specmap.config import UploadSettings
from specmap.domain.canonical_record import Coordinates
from specmap.main import create_app
from specmap.services.ingestion_pipeline import PipelineContext
from support import RecordingSleep, ScriptedGeocodingClient, build_enricher

CSV_BODY = (
    "현장명,연도,월,진행내용,주소,건설사,설계사,제품명,합계\n"
    "서울 DC,2024,5,납품중,Seoul City Hall,A건설,B설계,항온항습기,500\n"
    "서울 DC,2024,5,납품중,Seoul City Hall,A건설,B설계,냉각탑,700\n"
    ",2024,6,,,,,,900\n"
    "부산 DC,2023,2,납품완료,Busan Harbor 7,C건설,,,100\n"
).encode("utf-8")


@pytest.fixture()
def geocoder() -> ScriptedGeocodingClient:
    return ScriptedGeocodingClient(
        {"Seoul City Hall": Coordinates(lat=37.5665, lon=126.978), "Busan Harbor 7": None}
    )


@pytest.fixture()
def client(geocoder: ScriptedGeocodingClient, recording_sleep: RecordingSleep):
    pipeline = PipelineContext(enricher=build_enricher(geocoder, recording_sleep))
    with TestClient(create_app(pipeline=pipeline)) as test_client:
        yield test_client


def _upload(client: TestClient, body: bytes = CSV_BODY, filename: str = "specs.csv", content_type: str = "text/csv"):
    return client.post("/uploads", files={"file": (filename, body, content_type)})


def test_health_reports_empty_dataset(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "records": 0, "ingestion_running": False}


def test_upload_csv_returns_summary(client: TestClient, geocoder: ScriptedGeocodingClient) -> None:
    response = _upload(client)

    assert response.status_code == 200
    payload = response.json()
    assert payload["source_name"] == "specs.csv"
    assert payload["rows_read"] == 4
    assert payload["rows_dropped"] == 1
    assert payload["records_committed"] == 3
    assert payload["addresses_resolved"] == 1
    assert geocoder.calls == ["Seoul City Hall", "Busan Harbor 7"]


def test_dashboard_after_upload(client: TestClient) -> None:
    _upload(client)

    response = client.get("/dashboard", params={"year": 2024})

    assert response.status_code == 200
    payload = response.json()
    assert payload["record_count"] == 2
    assert payload["source_name"] == "specs.csv"
    assert payload["loaded_at"] is not None
    (project,) = payload["projects"]
    assert project["name"] == "서울 DC"
    assert project["total_amount"] == 1200.0
    assert project["latitude"] == 37.5665
    assert project["stage"] == "delivering"
    assert len(project["specs"]) == 2
    assert payload["summary"]["top_constructors"] == [{"name": "A건설", "amount": 1200.0}]
    assert payload["trends"]["reference_year"] == 2024
    assert len(payload["trends"]["month"]) == 12
    assert payload["available_years"] == [2023, 2024]


def test_dashboard_without_filter_counts_missing_coordinates(client: TestClient) -> None:
    _upload(client)
    summary = client.get("/dashboard").json()["summary"]
    assert summary["site_count"] == 2
    assert summary["total_spec"] == 1300.0
    assert summary["missing_coordinates"] == 1


def test_records_endpoint_lists_committed_records(client: TestClient) -> None:
    _upload(client)
    records = client.get("/records").json()
    assert [record["project_name"] for record in records] == ["서울 DC", "서울 DC", "부산 DC"]
    assert records[2]["latitude"] is None


def test_progress_after_upload(client: TestClient) -> None:
    _upload(client)
    response = client.get("/progress")
    assert response.json() == {
        "status": "Location data synchronized",
        "percent": 100,
        "is_running": False,
        "last_error": None,
    }


def test_rejects_non_spreadsheet_upload(client: TestClient) -> None:
    response = _upload(client, body=b"hello", filename="notes.txt", content_type="text/plain")
    assert response.status_code == 400


def test_undecodable_upload_keeps_previous_dataset(client: TestClient) -> None:
    _upload(client)

    response = _upload(
        client,
        body=b"definitely not a workbook",
        filename="broken.xlsx",
        content_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )

    assert response.status_code == 400
    assert client.get("/health").json()["records"] == 3
    progress = client.get("/progress").json()
    assert progress["last_error"]
    assert progress["status"] == "Ingestion failed"
    assert progress["percent"] == 100
    assert progress["is_running"] is False


@pytest.mark.parametrize("params", [{"month": 13}, {"year": -1}])
def test_dashboard_rejects_bad_filters(client: TestClient, params: dict) -> None:
    assert client.get("/dashboard", params=params).status_code == 422


def test_oversized_upload_is_rejected(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "specmap.api.routers.ingestion.get_upload_settings",
        lambda: UploadSettings(max_upload_bytes=10),
    )
    assert _upload(client).status_code == 413


def test_shutdown_closes_geocoding_client(geocoder: ScriptedGeocodingClient, recording_sleep: RecordingSleep) -> None:
    pipeline = PipelineContext(enricher=build_enricher(geocoder, recording_sleep))
    with TestClient(create_app(pipeline=pipeline)):
        pass
    assert geocoder.closed
