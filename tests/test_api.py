"""
Unit tests for the HTTP surface.
"""
import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.api import app
from core.config import get_settings


@pytest.fixture
def client():
    """Create a test client for the FastAPI application."""
    return TestClient(app)


MAPPING = json.dumps({"01": "Alpha", "02": "Beta"})


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_process_csv_with_json_mapping(client, sample_csv_file):
    """Test uploading a spreadsheet returns the serialized result."""
    with open(sample_csv_file, "rb") as f:
        response = client.post(
            "/process",
            files={"file": ("doacoes.csv", f, "text/csv")},
            data={"mapping": MAPPING},
        )

    assert response.status_code == 200
    result = response.json()["result"]
    assert [s["bucket_name"] for s in result["summaries"]] == ["Beta", "Alpha"]
    assert result["summaries"][0]["total_amount"] == "1500.02"
    assert result["mapped_records"][0]["date"] == "2024-01-05"
    assert result["mapped_records"][0]["outcome"] == "mapped"
    assert result["stats"]["total_records"] == 2
    assert result["stats"]["skipped_rows"] == 1
    assert "files" not in response.json()


def test_process_with_mapping_file(client, sample_csv_file):
    mapping_csv = "cents,bucket_name\n01,Alpha\n"
    with open(sample_csv_file, "rb") as f:
        response = client.post(
            "/process",
            files={
                "file": ("doacoes.csv", f, "text/csv"),
                "mapping_file": ("mapeamento.csv", mapping_csv.encode("utf-8"), "text/csv"),
            },
        )

    assert response.status_code == 200
    result = response.json()["result"]
    assert [s["bucket_name"] for s in result["summaries"]] == ["Alpha"]
    assert result["stats"]["unmapped_count"] == 1


def test_process_mapping_file_not_utf8(client, sample_csv_file):
    """Test an undecodable mapping upload is rejected as invalid input."""
    with open(sample_csv_file, "rb") as f:
        response = client.post(
            "/process",
            files={
                "file": ("doacoes.csv", f, "text/csv"),
                "mapping_file": ("mapeamento.csv", b"01,Igr\xff\n", "text/csv"),
            },
        )

    assert response.status_code == 422
    assert response.json()["detail"]["message"] == "Mapping file must be UTF-8 text"


def test_process_cleans_up_upload(client, sample_csv_file):
    storage = Path(get_settings().temp_storage_path)
    before = set(storage.iterdir())
    with open(sample_csv_file, "rb") as f:
        client.post("/process", files={"file": ("doacoes.csv", f, "text/csv")}, data={"mapping": MAPPING})
    assert set(storage.iterdir()) == before


def test_process_missing_mapping(client, sample_csv_file):
    with open(sample_csv_file, "rb") as f:
        response = client.post("/process", files={"file": ("doacoes.csv", f, "text/csv")})
    assert response.status_code == 422


def test_process_invalid_mapping(client, sample_csv_file):
    with open(sample_csv_file, "rb") as f:
        response = client.post(
            "/process",
            files={"file": ("doacoes.csv", f, "text/csv")},
            data={"mapping": '{"150": "Alpha"}'},
        )
    assert response.status_code == 422
    assert response.json()["detail"]["message"] == "Invalid bucket mapping"


def test_process_missing_columns(client, tmp_path):
    """Test a header without date/amount is reported with the missing categories."""
    bad_file = tmp_path / "bad.csv"
    bad_file.write_text("Doador;Obs\nAna;x\n", encoding="utf-8")
    with open(bad_file, "rb") as f:
        response = client.post(
            "/process",
            files={"file": ("bad.csv", f, "text/csv")},
            data={"mapping": MAPPING},
        )
    assert response.status_code == 422
    assert response.json()["detail"]["details"]["missing_columns"] == ["date", "amount"]


def test_process_invalid_extension(client, tmp_path):
    txt_file = tmp_path / "doacoes.txt"
    txt_file.write_text("Data;Valor\n")
    with open(txt_file, "rb") as f:
        response = client.post(
            "/process",
            files={"file": ("doacoes.txt", f, "text/plain")},
            data={"mapping": MAPPING},
        )
    assert response.status_code == 400


def test_process_corrupt_workbook(client):
    response = client.post(
        "/process",
        files={"file": ("doacoes.xlsx", b"not a workbook", "application/octet-stream")},
        data={"mapping": MAPPING},
    )
    assert response.status_code == 400


def test_process_with_export_and_download(client, sample_csv_file):
    """Test exported reports can be downloaded by name."""
    with open(sample_csv_file, "rb") as f:
        response = client.post(
            "/process",
            files={"file": ("doacoes.csv", f, "text/csv")},
            data={"mapping": MAPPING, "export": "true"},
        )
    assert response.status_code == 200
    files = response.json()["files"]
    assert set(files) == {"detailed", "summary", "unmapped", "workbook"}

    download = client.get(f"/download/{files['summary']}")
    assert download.status_code == 200
    assert "bucket_name" in download.content.decode("utf-8-sig")


@pytest.mark.parametrize("filename, status", [
    ("..secret.csv", 400),
    ("report.txt", 400),
    ("missing_report.csv", 404),
])
def test_download_rejects_bad_names(client, filename, status):
    assert client.get(f"/download/{filename}").status_code == status
