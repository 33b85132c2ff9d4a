"""
Positional mapping for the official checklist template.

Static lookup tables that place each checklist item of a category on its
template row, and each tri-state answer on its template column.  Rows come
from the per-item ``fila_excel`` column first; this table is only the
fallback for items provisioned without it.

Public API
----------
- ``Coordenada`` — typed ``(fila, columna)`` cell coordinate (1-based).
- ``FILAS_POR_CATEGORIA`` — category → {item number → row}.
- ``fila_para_item(categoria, numero)`` — row or ``None``.
- ``columna_para_respuesta(respuesta)`` — column or ``None``.
- ``coordenada_respuesta(fila, respuesta)`` / ``coordenada_observaciones(fila)``.
- ``categorias_mapeadas()`` — categories that have a row table; the seed
  script provisions items only for these.

Data notes
----------
Two historical row tables exist for the same category names.  This module is
the single source of truth and carries the table that agrees with the rows
stored in ``lista_chequeo_items.fila_excel`` (e.g. SAMC item 25 → row 39,
item 43 → row 57).  Reconciling legacy data against the other table is a
data-migration task, not something resolved at export time.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, NamedTuple

from openpyxl.utils import get_column_letter

from app.utils.constants import (
    CATEGORIA_INTERADMINISTRATIVO,
    CATEGORIA_MINIMA_CUANTIA,
    CATEGORIA_PRESTACION_SERVICIOS,
    CATEGORIA_SAMC,
    COLUMNA_CUMPLE,
    COLUMNA_NO_APLICA,
    COLUMNA_NO_CUMPLE,
    COLUMNA_OBSERVACIONES,
    RESPUESTA_CUMPLE,
    RESPUESTA_NO_APLICA,
    RESPUESTA_NO_CUMPLE,
)


class Coordenada(NamedTuple):
    """1-based worksheet coordinate."""

    fila: int
    columna: int

    @property
    def a1(self) -> str:
        """A1-style address, for log messages only."""
        return f"{get_column_letter(self.columna)}{self.fila}"


def _secuencia(numeros: range | list[int], fila_inicial: int) -> dict[int, int]:
    return {numero: fila_inicial + i for i, numero in enumerate(numeros)}


# ---------------------------------------------------------------------------
# Row tables
# ---------------------------------------------------------------------------

_FILAS_SAMC: dict[int, int] = {
    # Precontractuales
    **_secuencia(range(1, 25), 12),
    # Resolución de adjudicación y certificados
    52: 36, 53: 37, 54: 38,
    # Contractuales
    **_secuencia(range(25, 43), 39),
    # Ejecución
    **_secuencia(range(43, 52), 57),
    # Adición
    **_secuencia(range(82, 94), 66),
}

_FILAS_MINIMA_CUANTIA: dict[int, int] = {
    **_secuencia(range(53, 61), 12),
    **_secuencia(range(25, 43), 20),
    **_secuencia(range(43, 52), 38),
    **_secuencia(range(82, 94), 47),
}

_FILAS_INTERADMINISTRATIVO: dict[int, int] = _secuencia(
    [53, 54, 3, 61, 62, 63, 75, 76, 77, 78, 79, 80, 43, 45, 81, 46, 47, 48,
     49, 50, 51, *range(82, 94)],
    12,
)

_FILAS_PRESTACION_SERVICIOS: dict[int, int] = _secuencia(
    [*range(64, 81), 43, 45, 81, 46, 47, 48, 49, 50, 51, *range(82, 94)],
    12,
)

FILAS_POR_CATEGORIA: Mapping[str, Mapping[int, int]] = MappingProxyType({
    CATEGORIA_SAMC: MappingProxyType(_FILAS_SAMC),
    CATEGORIA_MINIMA_CUANTIA: MappingProxyType(_FILAS_MINIMA_CUANTIA),
    CATEGORIA_INTERADMINISTRATIVO: MappingProxyType(_FILAS_INTERADMINISTRATIVO),
    CATEGORIA_PRESTACION_SERVICIOS: MappingProxyType(_FILAS_PRESTACION_SERVICIOS),
})

# ---------------------------------------------------------------------------
# Column table
# ---------------------------------------------------------------------------

COLUMNAS_POR_RESPUESTA: Mapping[str, int] = MappingProxyType({
    RESPUESTA_CUMPLE: COLUMNA_CUMPLE,
    RESPUESTA_NO_CUMPLE: COLUMNA_NO_CUMPLE,
    RESPUESTA_NO_APLICA: COLUMNA_NO_APLICA,
})

COLUMNAS_RESPUESTA: tuple[int, ...] = tuple(sorted(COLUMNAS_POR_RESPUESTA.values()))


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def categorias_mapeadas() -> list[str]:
    return list(FILAS_POR_CATEGORIA.keys())


def fila_para_item(categoria: str, numero_item: int) -> int | None:
    """Return the template row for ``numero_item`` in ``categoria``.

    Tables are never mixed: a number known only to another category's table
    yields ``None`` here.
    """
    tabla = FILAS_POR_CATEGORIA.get(categoria)
    if tabla is None:
        return None
    return tabla.get(numero_item)


def columna_para_respuesta(respuesta: str | None) -> int | None:
    if respuesta is None:
        return None
    return COLUMNAS_POR_RESPUESTA.get(respuesta)


def coordenada_respuesta(fila: int, respuesta: str | None) -> Coordenada | None:
    columna = columna_para_respuesta(respuesta)
    if columna is None:
        return None
    return Coordenada(fila, columna)


def coordenada_observaciones(fila: int) -> Coordenada:
    return Coordenada(fila, COLUMNA_OBSERVACIONES)
