"""
Export endpoint tests.

Tests cover:
  - GET /api/lista-chequeo/exportar/{id}: 200 with template and without it
  - Download headers (disposition, length, strategy)
  - 404 unknown record, 422 invalid id
  - POST /api/lista-chequeo/exportar-multiple: 200 and 400 unknown category
  - 503 / 500 with generic messages only
"""
import io
from datetime import date

import pytest
from fastapi.testclient import TestClient
from openpyxl import load_workbook
from sqlalchemy.exc import OperationalError

from app.database import get_db
from app.main import app
from app.routers.exportacion import get_locator
from app.services import exportacion_service
from app.utils.constants import MARCA_RESPUESTA, XLSX_MEDIA_TYPE


@pytest.fixture()
def client_factory(seeded):
    """Build a TestClient bound to the test session and a given locator."""

    def _crear(locator, db=None):
        sesion = db or seeded

        def _get_db():
            yield sesion

        app.dependency_overrides[get_db] = _get_db
        app.dependency_overrides[get_locator] = lambda: locator
        return TestClient(app)

    yield _crear
    app.dependency_overrides.clear()


@pytest.fixture()
def registro(crear_registro):
    return crear_registro("SAMC", {2: ("CUMPLE", None), 4: ("NO_APLICA", None)})


# ═════════════════════════════════════════════════════════════════════════
# GET /exportar/{registro_id}
# ═════════════════════════════════════════════════════════════════════════


class TestExportarRegistro:
    def test_with_template(self, client_factory, registro, locator_local):
        client = client_factory(locator_local)
        res = client.get(f"/api/lista-chequeo/exportar/{registro.id}")

        assert res.status_code == 200
        assert res.headers["content-type"] == XLSX_MEDIA_TYPE
        assert res.headers["x-export-strategy"] == "PLANTILLA"
        assert res.headers["content-disposition"] == (
            f'attachment; filename="Lista_Chequeo_CT-2025-001_{date.today().isoformat()}.xlsx"'
        )
        assert int(res.headers["content-length"]) == len(res.content)

        ws = load_workbook(io.BytesIO(res.content))["SAMC"]
        assert ws["C13"].value == MARCA_RESPUESTA
        assert ws["E15"].value == MARCA_RESPUESTA

    def test_without_template_still_200(self, client_factory, registro, locator_vacio):
        client = client_factory(locator_vacio)
        res = client.get(f"/api/lista-chequeo/exportar/{registro.id}")

        assert res.status_code == 200
        assert res.headers["x-export-strategy"] == "BASICO"
        assert load_workbook(io.BytesIO(res.content)).sheetnames[0] == "SAMC"

    def test_not_found(self, client_factory, locator_local):
        res = client_factory(locator_local).get("/api/lista-chequeo/exportar/9999")
        assert res.status_code == 404
        assert "9999" in res.json()["detail"]

    def test_invalid_id(self, client_factory, locator_local):
        res = client_factory(locator_local).get("/api/lista-chequeo/exportar/0")
        assert res.status_code == 422

    def test_store_failure_is_generic_503(self, client_factory, registro, locator_local, seeded, monkeypatch):
        def _falla(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("password authentication failed for user"))

        monkeypatch.setattr(seeded, "query", _falla)
        res = client_factory(locator_local).get(f"/api/lista-chequeo/exportar/{registro.id}")

        assert res.status_code == 503
        detalle = res.json()["detail"]
        assert "password" not in detalle
        assert "SELECT" not in detalle

    def test_export_failure_is_generic_500(self, client_factory, registro, locator_vacio, monkeypatch):
        def _falla(registro, max_longitud):
            raise RuntimeError("disk full at /tmp/xyz")

        monkeypatch.setattr(exportacion_service, "construir_libro_basico", _falla)
        res = client_factory(locator_vacio).get(f"/api/lista-chequeo/exportar/{registro.id}")

        assert res.status_code == 500
        assert res.json() == {"detail": "Error generando el archivo Excel."}


# ═════════════════════════════════════════════════════════════════════════
# POST /exportar-multiple
# ═════════════════════════════════════════════════════════════════════════


class TestExportarMultiple:
    def test_multiple_categories(self, client_factory, locator_local):
        body = {
            "contrato": {
                "numero_contrato": "MC-010",
                "contratista": "Ferretería El Tornillo",
                "valor_contrato": 8500000,
            },
            "apartados": {
                "MINIMA CUANTÍA": [{"numero_item": 53, "respuesta": "CUMPLE"}],
                "SAMC": [{"numero_item": 1, "respuesta": "NO_CUMPLE", "observaciones": "Sin firma"}],
            },
        }
        res = client_factory(locator_local).post("/api/lista-chequeo/exportar-multiple", json=body)

        assert res.status_code == 200
        assert res.headers["x-export-strategy"] == "PLANTILLA"
        wb = load_workbook(io.BytesIO(res.content))
        assert wb["MINIMA CUANTÍA"]["C12"].value == MARCA_RESPUESTA
        assert wb["SAMC"]["D12"].value == MARCA_RESPUESTA
        assert wb["SAMC"]["J12"].value == "Sin firma"
        assert wb["SAMC"]["D7"].value == 8500000

    def test_unknown_category(self, client_factory, locator_local):
        body = {
            "contrato": {"numero_contrato": "X-1", "contratista": "ACME"},
            "apartados": {"LICITACIÓN PÚBLICA": []},
        }
        res = client_factory(locator_local).post("/api/lista-chequeo/exportar-multiple", json=body)
        assert res.status_code == 400
        assert "LICITACIÓN PÚBLICA" in res.json()["detail"]

    def test_invalid_answer_value(self, client_factory, locator_local):
        body = {
            "contrato": {"numero_contrato": "X-1", "contratista": "ACME"},
            "apartados": {"SAMC": [{"numero_item": 1, "respuesta": "QUIZAS"}]},
        }
        res = client_factory(locator_local).post("/api/lista-chequeo/exportar-multiple", json=body)
        assert res.status_code == 422
