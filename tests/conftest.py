"""
Shared pytest fixtures for the checklist export test suite.

Provides:
    - engine / db: in-memory SQLite database, tables recreated per test
    - seeded: ``db`` with categories, stages and items provisioned
    - crear_registro: factory for a contract record with answers
    - plantilla_bytes / plantilla_path / plantilla_factory: template workbooks
    - locator_local / locator_vacio: template locators that do / do not find it
"""

import os

# Settings are read on first import of app.config; point them at SQLite.
os.environ["DATABASE_URL"] = "sqlite://"

import io  # noqa: E402

import pytest  # noqa: E402
from openpyxl import Workbook  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app import models  # noqa: E402,F401
from app.database import Base  # noqa: E402
from app.models import (  # noqa: E402
    ListaChequeoCategoria,
    ListaChequeoItem,
    ListaChequeoRegistro,
    ListaChequeoRespuesta,
)
from app.services.plantilla_locator import PlantillaConfig, PlantillaLocator  # noqa: E402
from app.utils.constants import CATEGORIAS, ETIQUETA_CONTRATISTA, ETIQUETA_NUMERO_CONTRATO  # noqa: E402
from seed_lista_chequeo import seed_all  # noqa: E402


# ── Database fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def engine():
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest.fixture()
def db(engine):
    """Fresh tables and a session for every test."""
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = TestingSession()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def seeded(db):
    """Database with the four categories and all their items."""
    seed_all(db)
    db.commit()
    return db


@pytest.fixture()
def crear_registro(seeded):
    """Factory: create a contract record and its answers.

    ``respuestas`` maps item number → (respuesta, observaciones) within the
    record's category.
    """

    def _crear(categoria="SAMC", respuestas=None, numero_contrato="CT-2025-001"):
        cat = seeded.query(ListaChequeoCategoria).filter_by(nombre=categoria).one()
        registro = ListaChequeoRegistro(
            dependencia="planeacion",
            categoria_id=cat.id,
            numero_contrato=numero_contrato,
            contratista="Constructora Andina S.A.S.",
            valor_contrato=1500000,
            objeto="Obra de prueba",
        )
        seeded.add(registro)
        seeded.flush()

        items = {
            i.numero_item: i
            for i in seeded.query(ListaChequeoItem).filter_by(categoria_id=cat.id).all()
        }
        for numero, (respuesta, observaciones) in (respuestas or {}).items():
            seeded.add(
                ListaChequeoRespuesta(
                    registro_id=registro.id,
                    item_id=items[numero].id,
                    respuesta=respuesta,
                    observaciones=observaciones,
                )
            )
        seeded.commit()
        return registro

    return _crear


# ── Template fixtures ────────────────────────────────────────────────────


def _construir_plantilla(hojas=None) -> bytes:
    """Build a minimal template: header labels, column titles, item labels."""
    wb = Workbook()
    wb.remove(wb.active)
    for nombre in hojas or CATEGORIAS:
        ws = wb.create_sheet(nombre)
        ws["A1"] = "LISTA DE CHEQUEO"
        ws["A7"] = ETIQUETA_NUMERO_CONTRATO
        ws["A8"] = ETIQUETA_CONTRATISTA
        ws["A11"] = "No."
        ws["B11"] = "DOCUMENTO"
        ws["C11"] = "CUMPLE"
        ws["D11"] = "NO CUMPLE"
        ws["E11"] = "NO APLICA"
        ws["J11"] = "OBSERVACIONES"
        for fila in range(12, 80):
            ws.cell(row=fila, column=2, value=f"Documento fila {fila}")
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


@pytest.fixture()
def plantilla_bytes() -> bytes:
    return _construir_plantilla()


@pytest.fixture()
def plantilla_path(tmp_path, plantilla_bytes):
    ruta = tmp_path / "public" / "document" / "lista-chequeo.xlsx"
    ruta.parent.mkdir(parents=True)
    ruta.write_bytes(plantilla_bytes)
    return ruta


@pytest.fixture()
def locator_local(plantilla_path):
    return PlantillaLocator(PlantillaConfig(rutas_locales=(plantilla_path,)))


@pytest.fixture()
def locator_vacio(tmp_path):
    return PlantillaLocator(PlantillaConfig(rutas_locales=(tmp_path / "no-existe.xlsx",)))


@pytest.fixture()
def plantilla_factory():
    """Build a template holding only the given sheet names."""
    return _construir_plantilla
