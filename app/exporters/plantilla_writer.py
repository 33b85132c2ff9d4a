"""
Template cell writer built on ``openpyxl``.

Fills the official checklist template in memory: the contract header block
and one answer mark (plus optional observations) per answered item.  Nothing
outside those cells is modified, so the regulator's layout, merged ranges
and print settings survive untouched.

Usage example::

    wb, resumen = llenar_plantilla(plantilla_bytes, registro_exportado)
    buffer = io.BytesIO()
    wb.save(buffer)

Design notes
------------
- Coordinates are ``Coordenada`` values from ``app.utils.mapeo_posicional``;
  cells are addressed with ``ws.cell(row=..., column=...)`` only.
- A failing row (bad coordinate, read-only merged cell, ...) is logged with
  its item number and recorded in ``ResumenEscritura.fallidos``; the rest of
  the sheet is still written.
- Writing is idempotent: the marker replaces any earlier marker in the
  sibling answer columns of the same row, and the header labels are only
  extended once.
"""

from __future__ import annotations

import io
import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from openpyxl import Workbook, load_workbook
from openpyxl.cell.cell import Cell
from openpyxl.worksheet.worksheet import Worksheet

from app.schemas.lista_chequeo import ContratoInfo
from app.services.lista_chequeo_service import ItemExportado, RegistroExportado
from app.utils.constants import (
    CELDA_CONTRATISTA,
    CELDA_NUMERO_CONTRATO,
    CELDA_VALOR,
    ETIQUETA_CONTRATISTA,
    ETIQUETA_NUMERO_CONTRATO,
    FORMATO_MONEDA,
    MARCA_RESPUESTA,
    OBSERVACIONES_MAX_LONGITUD,
)
from app.utils.mapeo_posicional import (
    COLUMNAS_RESPUESTA,
    coordenada_observaciones,
    coordenada_respuesta,
)

logger = logging.getLogger(__name__)

# Whitespace controls become spaces before the remaining controls are dropped
_CONTROL_ESPACIO = re.compile(r"[\t\n\r\x0b\x0c\x85]")
_CONTROL = re.compile(r"[\x00-\x1f\x7f-\x9f]")
_ESPACIO_UNICODE = re.compile(r"[\u00a0\u1680\u2000-\u200a\u2028\u2029\u202f\u205f\u3000]")
_ANCHO_CERO = re.compile(r"[\u200b-\u200f\u2060-\u2064\ufeff]")
_ESPACIOS = re.compile(r"\s+")


@dataclass
class ResumenEscritura:
    """Per-sheet outcome of ``escribir_respuestas``.

    Attributes:
        escritos: Item numbers whose answer marker was written.
        sin_fila: Item numbers skipped because no row is known.
        sin_respuesta: Count of items with neither answer nor observations.
        fallidos: Item numbers whose write raised.
    """

    escritos: list[int] = field(default_factory=list)
    sin_fila: list[int] = field(default_factory=list)
    sin_respuesta: int = 0
    fallidos: list[int] = field(default_factory=list)

    def summary(self) -> str:
        return (
            f"escritos={len(self.escritos)} sin_fila={len(self.sin_fila)} "
            f"sin_respuesta={self.sin_respuesta} fallidos={len(self.fallidos)}"
        )


def normalizar_observaciones(texto: str | None, max_longitud: int = OBSERVACIONES_MAX_LONGITUD) -> str:
    """Clean free text so it fits the template's observations cell.

    Control characters are removed, Unicode spaces are folded into plain
    spaces, runs of whitespace collapse to one space, and the result is cut
    to ``max_longitud`` characters.  Over-long text is truncated, never
    rejected.
    """
    if not texto:
        return ""
    limpio = _CONTROL_ESPACIO.sub(" ", texto)
    limpio = _CONTROL.sub("", limpio)
    limpio = _ESPACIO_UNICODE.sub(" ", limpio)
    limpio = _ANCHO_CERO.sub("", limpio)
    limpio = _ESPACIOS.sub(" ", limpio).strip()
    return limpio[:max_longitud].rstrip()


def _escribir_texto(celda: Cell, texto: str) -> None:
    # openpyxl types "=..." strings as formulas; user text stays a string cell
    celda.value = texto
    celda.data_type = "s"


def _escribir_item(ws: Worksheet, item: ItemExportado, max_longitud: int) -> bool:
    """Write one item's marker and observations. Returns True if a mark was written."""
    fila = item.fila
    marcado = False

    coord = coordenada_respuesta(fila, item.respuesta)
    if coord is not None:
        for columna in COLUMNAS_RESPUESTA:
            if columna == coord.columna:
                continue
            vecina = ws.cell(row=fila, column=columna)
            if vecina.value == MARCA_RESPUESTA:
                vecina.value = None
        ws.cell(row=coord.fila, column=coord.columna).value = MARCA_RESPUESTA
        marcado = True

    observaciones = normalizar_observaciones(item.observaciones, max_longitud)
    if observaciones:
        obs = coordenada_observaciones(fila)
        _escribir_texto(ws.cell(row=obs.fila, column=obs.columna), observaciones)

    return marcado


def escribir_respuestas(
    ws: Worksheet,
    items: Iterable[ItemExportado],
    max_longitud: int = OBSERVACIONES_MAX_LONGITUD,
) -> ResumenEscritura:
    """Place every answered item's marker on its template row.

    Args:
        ws: Worksheet of the item's category.
        items: Aggregated items, in any order.
        max_longitud: Maximum observations length.

    Returns:
        A ``ResumenEscritura`` with written, skipped and failed item numbers.
    """
    resumen = ResumenEscritura()
    for item in items:
        if item.fila is None:
            logger.warning(
                "escribir_respuestas: sheet '%s' item %s skipped, no template row",
                ws.title, item.numero_item,
            )
            resumen.sin_fila.append(item.numero_item)
            continue
        if not item.respondido and not item.observaciones:
            resumen.sin_respuesta += 1
            continue
        try:
            if _escribir_item(ws, item, max_longitud):
                resumen.escritos.append(item.numero_item)
        except Exception as exc:
            logger.error(
                "escribir_respuestas: sheet '%s' item %s row %s failed: %s",
                ws.title, item.numero_item, item.fila, exc,
            )
            resumen.fallidos.append(item.numero_item)

    logger.info("escribir_respuestas: sheet '%s' %s", ws.title, resumen.summary())
    return resumen


def _texto_celda(valor: Any, etiqueta: str) -> str:
    if valor is None or str(valor).strip() == "":
        return etiqueta
    return str(valor)


def _anexar_valor(celda: Cell, etiqueta: str, valor: str) -> None:
    texto = _texto_celda(celda.value, etiqueta)
    # already filled when the label ends with exactly ": <valor>"
    if texto.rstrip().endswith(f": {valor}"):
        return
    _escribir_texto(celda, f"{texto.rstrip()} {valor}")


def llenar_encabezado_contrato(ws: Worksheet, contrato: ContratoInfo) -> None:
    """Fill contract number, contractor and value in the header block.

    The label text already printed in the template is kept and the value is
    appended to it, once.
    """
    fila, columna = CELDA_NUMERO_CONTRATO
    _anexar_valor(ws.cell(row=fila, column=columna), ETIQUETA_NUMERO_CONTRATO, contrato.numero_contrato)

    fila, columna = CELDA_CONTRATISTA
    _anexar_valor(ws.cell(row=fila, column=columna), ETIQUETA_CONTRATISTA, contrato.contratista)

    if contrato.valor_contrato is not None:
        fila, columna = CELDA_VALOR
        celda = ws.cell(row=fila, column=columna)
        celda.value = contrato.valor_contrato
        celda.number_format = FORMATO_MONEDA


def llenar_plantilla(
    contenido: bytes,
    registro: RegistroExportado,
    max_longitud: int = OBSERVACIONES_MAX_LONGITUD,
) -> tuple[Workbook, dict[str, ResumenEscritura]]:
    """Load the template from bytes and fill every category sheet.

    Args:
        contenido: Raw ``.xlsx`` template bytes.
        registro: Aggregated contract data.
        max_longitud: Maximum observations length.

    Returns:
        The filled workbook and a per-category ``ResumenEscritura``.

    Raises:
        ValueError: If the template holds none of the requested category
            sheets.
        Exception: Any ``openpyxl`` load error propagates to the caller,
            which decides on the fallback.
    """
    wb = load_workbook(io.BytesIO(contenido))
    resumenes: dict[str, ResumenEscritura] = {}

    for categoria in registro.categorias:
        if categoria.hoja_excel not in wb.sheetnames:
            logger.warning(
                "llenar_plantilla: sheet '%s' missing from template (sheets: %s)",
                categoria.hoja_excel, wb.sheetnames,
            )
            continue
        ws = wb[categoria.hoja_excel]
        llenar_encabezado_contrato(ws, registro.contrato)
        resumenes[categoria.categoria] = escribir_respuestas(ws, categoria.items, max_longitud)

    if registro.categorias and not resumenes:
        raise ValueError("La plantilla no contiene ninguna hoja de las categorías solicitadas.")

    return wb, resumenes
