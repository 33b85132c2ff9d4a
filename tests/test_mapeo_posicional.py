"""
Positional mapping table tests.

Tests cover:
  - Known rows of every category table
  - Tables are never mixed across categories
  - Rows are unique per category and start at the first item row
  - Answer → column lookup and typed coordinates
"""
import pytest

from app.utils.constants import (
    CATEGORIAS,
    COLUMNA_CUMPLE,
    COLUMNA_NO_APLICA,
    COLUMNA_NO_CUMPLE,
    COLUMNA_OBSERVACIONES,
    FILA_PRIMER_ITEM,
)
from app.utils.mapeo_posicional import (
    COLUMNAS_RESPUESTA,
    FILAS_POR_CATEGORIA,
    Coordenada,
    categorias_mapeadas,
    columna_para_respuesta,
    coordenada_observaciones,
    coordenada_respuesta,
    fila_para_item,
)


@pytest.mark.parametrize(
    "categoria, numero, fila",
    [
        ("SAMC", 1, 12),
        ("SAMC", 24, 35),
        ("SAMC", 52, 36),
        ("SAMC", 54, 38),
        ("SAMC", 25, 39),
        ("SAMC", 43, 57),
        ("SAMC", 82, 66),
        ("SAMC", 93, 77),
        ("MINIMA CUANTÍA", 53, 12),
        ("MINIMA CUANTÍA", 60, 19),
        ("MINIMA CUANTÍA", 25, 20),
        ("MINIMA CUANTÍA", 43, 38),
        ("MINIMA CUANTÍA", 82, 47),
        ("CONTRATO INTERADMINISTRATIVO", 53, 12),
        ("CONTRATO INTERADMINISTRATIVO", 3, 14),
        ("CONTRATO INTERADMINISTRATIVO", 93, 44),
        ("PRESTACIÓN DE SERVICIOS", 64, 12),
        ("PRESTACIÓN DE SERVICIOS", 80, 28),
        ("PRESTACIÓN DE SERVICIOS", 81, 31),
        ("PRESTACIÓN DE SERVICIOS", 82, 38),
    ],
)
def test_known_rows(categoria, numero, fila):
    assert fila_para_item(categoria, numero) == fila


def test_every_category_has_a_table():
    assert categorias_mapeadas() == CATEGORIAS


def test_tables_are_not_mixed():
    # Item 1 exists in SAMC only
    assert fila_para_item("SAMC", 1) == 12
    assert fila_para_item("CONTRATO INTERADMINISTRATIVO", 1) is None
    assert fila_para_item("MINIMA CUANTÍA", 1) is None


def test_unknown_category_or_number():
    assert fila_para_item("LICITACIÓN PÚBLICA", 1) is None
    assert fila_para_item("SAMC", 999) is None


@pytest.mark.parametrize("categoria", CATEGORIAS)
def test_rows_unique_and_below_header(categoria):
    filas = list(FILAS_POR_CATEGORIA[categoria].values())
    assert len(filas) == len(set(filas))
    assert min(filas) == FILA_PRIMER_ITEM


def test_tables_are_read_only():
    with pytest.raises(TypeError):
        FILAS_POR_CATEGORIA["SAMC"][1] = 99  # type: ignore[index]


class TestColumns:
    def test_answer_columns(self):
        assert columna_para_respuesta("CUMPLE") == COLUMNA_CUMPLE == 3
        assert columna_para_respuesta("NO_CUMPLE") == COLUMNA_NO_CUMPLE == 4
        assert columna_para_respuesta("NO_APLICA") == COLUMNA_NO_APLICA == 5
        assert COLUMNAS_RESPUESTA == (3, 4, 5)

    def test_unset_or_unknown_answer(self):
        assert columna_para_respuesta(None) is None
        assert columna_para_respuesta("TAL VEZ") is None
        assert coordenada_respuesta(13, None) is None

    def test_coordinates(self):
        coord = coordenada_respuesta(13, "CUMPLE")
        assert coord == Coordenada(13, 3)
        assert coord.a1 == "C13"
        assert coordenada_respuesta(15, "NO_APLICA").a1 == "E15"

        obs = coordenada_observaciones(20)
        assert obs == Coordenada(20, COLUMNA_OBSERVACIONES)
        assert obs.a1 == "J20"
