# tests/test_api.py
"""HTTP-level tests for the vehicle and import routers (SQLite-backed)."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from unittest.mock import MagicMock
from fastapi.testclient import TestClient
from app.database import get_db
from app.main import app
from app.models.vehicle import Vehicle
from app.routers.imports import _respond
from app.services.import_pipeline import ImportStats, build_result


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestImportEndpoints:
    def test_json_import_returns_summary_and_stored_rows(self, client):
        resp = client.post("/api/v1/vehicles/import", json={"vehicles": [
            {"PLACA": "abc123", "CÉDULA": "111", "Nombre": "Ana"},
            {"PLACA": "XYZ789", "CÉDULA": 999, "Nombre": "Sin conductor"},
            {"PLACA": "", "CÉDULA": "222"},
        ]})
        assert resp.status_code == 200
        body = resp.json()
        assert body["result"]["success"] is True
        assert body["result"]["inserted_count"] == 2
        assert body["result"]["message"] == "Proceso completado: 2 insertados"
        assert len(body["result"]["errors"]) == 1

        by_plate = {v["placa"]: v for v in body["vehicles"]}
        assert set(by_plate) == {"ABC123", "XYZ789"}
        assert by_plate["ABC123"]["conductor"]["id"] == "111"
        assert by_plate["XYZ789"]["conductor"] is None
        assert by_plate["XYZ789"]["cedula"] == "999"

    def test_empty_import_rejected(self, client):
        resp = client.post("/api/v1/vehicles/import", json={"vehicles": []})
        assert resp.status_code == 400

    def test_csv_upload(self, client):
        content = "CEDULA;PLACA;Estado\n111;aaa111;\n222;bbb222;inactivo\n".encode("utf-8")
        resp = client.post("/api/v1/vehicles/import/file",
                           files={"file": ("vehiculos.csv", content, "text/csv")})
        assert resp.status_code == 200
        vehicles = {v["placa"]: v for v in resp.json()["vehicles"]}
        assert vehicles["AAA111"]["estado"] == "ACTIVO"
        assert vehicles["BBB222"]["estado"] == "INACTIVO"

    def test_unsupported_upload(self, client):
        resp = client.post("/api/v1/vehicles/import/file",
                           files={"file": ("notes.txt", b"hello", "text/plain")})
        assert resp.status_code == 400

    def test_lookup_failure_returns_failed_summary(self, client, db_session):
        Vehicle.__table__.drop(bind=db_session.get_bind())

        resp = client.post("/api/v1/vehicles/import", json={"vehicles": [{"placa": "AAA111"}]})
        assert resp.status_code == 200
        body = resp.json()
        assert body["result"]["success"] is False
        assert body["result"]["message"] == "Error general en la importación"
        assert body["result"]["inserted_count"] == 0
        assert "vehicles" in body["result"]["errors"][0]
        assert body["vehicles"] == []

    def test_failed_follow_up_read_still_returns_summary(self):
        store = MagicMock()
        store.find_vehicles_by_plates.side_effect = Exception("connection reset")
        result = build_result(ImportStats(inserted=1), plates=["AAA111"])

        body = _respond(store, result)
        assert body == {"result": result, "vehicles": []}
        store.db.rollback.assert_called_once()


class TestVehicleEndpoints:
    def test_cedula_correction_unknown_plate_is_404(self, client):
        resp = client.patch("/api/v1/vehicles/NOPE99/cedula", json={"cedula": "111"})
        assert resp.status_code == 404

    def test_cedula_correction_links_driver(self, client):
        client.post("/api/v1/vehicles/import", json={"vehicles": [{"placa": "ABC123", "cedula": "999"}]})
        resp = client.patch("/api/v1/vehicles/abc123/cedula", json={"cedula": "222"})
        assert resp.status_code == 200
        assert resp.json()["conductor"]["name"] == "Luis Gómez"

    def test_register_then_lookup(self, client):
        resp = client.post("/api/v1/vehicles", json={"placa": "lmn456", "conductor_id": "111"})
        assert resp.status_code == 201
        assert resp.json()["origen"] == "REGISTRO"

        assert client.post("/api/v1/vehicles", json={"placa": "LMN456"}).status_code == 400
        assert client.get("/api/v1/vehicles/lmn456").json()["conductor_id"] == "111"
        assert client.get("/api/v1/vehicles/ZZZ000").status_code == 404

    def test_list_and_by_plates(self, client):
        for p in ["B2", "A1"]:
            client.post("/api/v1/vehicles", json={"placa": p})
        listing = client.get("/api/v1/vehicles", params={"skip": 0, "take": 10}).json()
        assert listing["total_count"] == 2
        assert [v["placa"] for v in listing["vehicles"]] == ["A1", "B2"]

        found = client.post("/api/v1/vehicles/by-plates", json={"placas": ["a1", "Q9"]}).json()
        assert [v["placa"] for v in found] == ["A1"]

    def test_driver_lookup(self, client):
        assert client.get("/api/v1/drivers/111").json()["name"] == "Ana Pérez"
        assert client.get("/api/v1/drivers/404").status_code == 404

    def test_health(self, client):
        client.post("/api/v1/vehicles", json={"placa": "H1"})
        body = client.get("/api/v1/health").json()
        assert body["database"] == "ok"
        assert body["vehicles"] == 1
        assert body["drivers"] == 2


@pytest.mark.asyncio
async def test_xlsx_upload_async(db_session):
    import io
    import httpx
    import openpyxl

    wb = openpyxl.Workbook()
    wb.active.append(["Cédula", "Placa", "Tipo de vehículo"])
    wb.active.append(["111", "moto01", "motocicleta"])
    buf = io.BytesIO()
    wb.save(buf)

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
            resp = await ac.post("/api/v1/vehicles/import/file",
                                 files={"file": ("carga.xlsx", buf.getvalue())})
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 200
    vehicle = resp.json()["vehicles"][0]
    assert vehicle["placa"] == "MOTO01"
    assert vehicle["tipo_vehiculo"] == "MOTOCICLETA"
    assert vehicle["conductor_id"] == "111"
