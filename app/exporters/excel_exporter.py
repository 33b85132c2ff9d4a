"""
Synthetic checklist workbook built with xlsxwriter.

Provides ``ExcelExporter`` — a stateful builder that renders a checklist
export from scratch, one worksheet per category, when the official template
is not available or could not be filled.  Layout fidelity is lower than the
template's, but the document carries the same answers.

Usage example::

    exporter = ExcelExporter(title="Lista de Chequeo", header={"Contrato": "CT-001"})
    exporter.add_sheet("SAMC")
    exporter.add_header()
    exporter.add_data_table(headers, rows)
    file_bytes = exporter.finalize()

or, for an aggregated record, ``construir_libro_basico(registro)``.

Design notes
------------
- Uses ``xlsxwriter`` in in-memory mode (``BytesIO``).
- Column widths are auto-sized based on the maximum content length in each
  column (capped at 60 characters to avoid excessively wide columns).
- Alternating row shading uses light-grey every other data row.
- Answer cells are tinted by tri-state value so the basic sheet stays
  readable without the template's check columns.
"""

from __future__ import annotations

import io
import logging
from datetime import datetime, timezone
from typing import Any, Sequence

import xlsxwriter
from xlsxwriter.workbook import Workbook
from xlsxwriter.worksheet import Worksheet

from app.exporters.plantilla_writer import normalizar_observaciones
from app.services.lista_chequeo_service import CategoriaExportada, RegistroExportado
from app.utils.constants import (
    OBSERVACIONES_MAX_LONGITUD,
    RESPUESTA_CUMPLE,
    RESPUESTA_LABELS,
    RESPUESTA_NO_APLICA,
    RESPUESTA_NO_CUMPLE,
    SIN_RESPUESTA_LABEL,
)

logger = logging.getLogger(__name__)


# Design token colours
_COLOR_PRIMARY = "#1E3A5F"   # navy
_COLOR_SUCCESS = "#D1FAE5"   # green tint
_COLOR_DANGER = "#FEE2E2"    # red tint
_COLOR_NEUTRAL = "#E5E7EB"   # grey tint
_COLOR_WHITE = "#FFFFFF"
_COLOR_LIGHT_GREY = "#F3F4F6"

_MAX_COL_WIDTH = 60
_MIN_COL_WIDTH = 8

COLUMNAS_TABLA: list[str] = ["No.", "Etapa", "Descripción", "Respuesta", "Observaciones"]
_COL_RESPUESTA = 3

_FORMATO_POR_RESPUESTA: dict[str, str] = {
    RESPUESTA_LABELS[RESPUESTA_CUMPLE]: "answer_ok",
    RESPUESTA_LABELS[RESPUESTA_NO_CUMPLE]: "answer_fail",
    RESPUESTA_LABELS[RESPUESTA_NO_APLICA]: "answer_na",
}


class ExcelExporter:
    """Stateful Excel workbook builder for basic checklist exports.

    Each call to ``add_sheet`` starts a new worksheet; ``add_header`` and
    ``add_data_table`` write into the current one.

    Args:
        title: Title printed on every sheet, e.g. ``"Lista de Chequeo"``.
        header: Ordered dict of contract fields shown under the title,
                e.g. ``{"Contrato": "CT-001", "Contratista": "ACME"}``.
    """

    def __init__(
        self,
        title: str,
        header: dict[str, str] | None = None,
    ) -> None:
        self._title = title
        self._header = header or {}

        self._buffer = io.BytesIO()
        self._workbook: Workbook = xlsxwriter.Workbook(
            self._buffer,
            # user text such as "=sin firma" must stay a string cell
            {"in_memory": True, "strings_to_formulas": False},
        )
        self._worksheet: Worksheet | None = None
        self._sheet_title: str = title

        # Track current write row
        self._current_row: int = 0
        self._num_cols: int = len(COLUMNAS_TABLA)

        # Pre-build common formats
        self._formats: dict[str, Any] = self._build_formats()

    # -----------------------------------------------------------------------
    # Format factory
    # -----------------------------------------------------------------------

    def _build_formats(self) -> dict[str, Any]:
        """Create and register all cell formats used by the workbook.

        Returns:
            Dict mapping format name to ``xlsxwriter`` format object.
        """
        wb = self._workbook
        formats: dict[str, Any] = {}

        # Sheet title: large bold white text on navy
        formats["header_main"] = wb.add_format({
            "bold": True,
            "font_size": 14,
            "font_color": _COLOR_WHITE,
            "bg_color": _COLOR_PRIMARY,
            "align": "center",
            "valign": "vcenter",
        })

        # Generation timestamp
        formats["header_sub"] = wb.add_format({
            "font_size": 9,
            "italic": True,
            "font_color": "#374151",
            "align": "center",
            "valign": "vcenter",
        })

        # Contract field label
        formats["field_key"] = wb.add_format({
            "bold": True,
            "font_size": 10,
            "font_color": "#374151",
            "bg_color": _COLOR_NEUTRAL,
            "align": "right",
            "valign": "vcenter",
        })

        # Contract field value
        formats["field_value"] = wb.add_format({
            "font_size": 10,
            "font_color": "#111827",
            "align": "left",
            "valign": "vcenter",
        })

        # Table column headers: bold on grey, as in the paper form
        formats["col_header"] = wb.add_format({
            "bold": True,
            "font_size": 10,
            "bg_color": "#E0E0E0",
            "align": "center",
            "valign": "vcenter",
            "border": 1,
            "text_wrap": True,
        })

        base_cell = {
            "font_size": 9,
            "font_color": "#111827",
            "valign": "vcenter",
            "border": 1,
            "border_color": "#CBD5E1",
            "text_wrap": True,
        }
        formats["data_plain"] = wb.add_format({**base_cell, "bg_color": _COLOR_WHITE})
        formats["data_alt"] = wb.add_format({**base_cell, "bg_color": _COLOR_LIGHT_GREY})
        formats["answer_ok"] = wb.add_format({**base_cell, "bg_color": _COLOR_SUCCESS, "align": "center"})
        formats["answer_fail"] = wb.add_format({**base_cell, "bg_color": _COLOR_DANGER, "align": "center"})
        formats["answer_na"] = wb.add_format({**base_cell, "bg_color": _COLOR_NEUTRAL, "align": "center"})

        formats["empty"] = wb.add_format({"italic": True, "font_color": "#6B7280"})

        return formats

    # -----------------------------------------------------------------------
    # Public builder methods
    # -----------------------------------------------------------------------

    def add_sheet(self, name: str) -> "ExcelExporter":
        """Start a new worksheet and reset the write cursor."""
        self._worksheet = self._workbook.add_worksheet(name)
        self._sheet_title = name
        self._current_row = 0
        return self

    def _ws(self) -> Worksheet:
        if self._worksheet is None:
            self.add_sheet("Lista de Chequeo")
        return self._worksheet  # type: ignore[return-value]

    def add_header(self) -> "ExcelExporter":
        """Write the title block and contract fields to the current sheet.

        Adds:
        1. A merged title row spanning the table width.
        2. A generation-date subtitle row.
        3. One row per header key/value pair.

        Returns:
            ``self`` for method chaining.
        """
        ws = self._ws()
        num_cols = self._num_cols

        ws.set_row(self._current_row, 28)
        ws.merge_range(
            self._current_row, 0,
            self._current_row, num_cols - 1,
            f"{self._title.upper()} - {self._sheet_title}",
            self._formats["header_main"],
        )
        self._current_row += 1

        gen_ts = datetime.now(timezone.utc).strftime("%d/%m/%Y %H:%M UTC")
        ws.merge_range(
            self._current_row, 0,
            self._current_row, num_cols - 1,
            f"Generado: {gen_ts}",
            self._formats["header_sub"],
        )
        self._current_row += 2

        for key, value in self._header.items():
            ws.write_string(self._current_row, 0, key, self._formats["field_key"])
            ws.merge_range(
                self._current_row, 1,
                self._current_row, num_cols - 1,
                "",
                self._formats["field_value"],
            )
            ws.write_string(self._current_row, 1, value, self._formats["field_value"])
            self._current_row += 1

        # Blank separator row
        self._current_row += 1
        return self

    def add_data_table(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[Any]],
    ) -> "ExcelExporter":
        """Write a styled data table with alternating row shading.

        Args:
            headers: Column header strings.
            rows: Data rows — each inner sequence must match the length of
                  ``headers``.

        Returns:
            ``self`` for method chaining.
        """
        ws = self._ws()
        fmt_col_hdr = self._formats["col_header"]

        col_widths: list[int] = [len(str(h)) for h in headers]

        ws.set_row(self._current_row, 20)
        for ci, hdr in enumerate(headers):
            ws.write(self._current_row, ci, hdr, fmt_col_hdr)
        self._current_row += 1

        if not rows:
            ws.merge_range(
                self._current_row, 0,
                self._current_row, len(headers) - 1,
                "Sin datos disponibles",
                self._formats["empty"],
            )
            self._current_row += 1

        for ri, data_row in enumerate(rows):
            is_alt = ri % 2 == 1
            for ci, cell_val in enumerate(data_row):
                fmt_name = "data_alt" if is_alt else "data_plain"
                if ci == _COL_RESPUESTA:
                    fmt_name = _FORMATO_POR_RESPUESTA.get(cell_val, fmt_name)
                if isinstance(cell_val, str):
                    ws.write_string(self._current_row, ci, cell_val, self._formats[fmt_name])
                else:
                    ws.write(self._current_row, ci, cell_val, self._formats[fmt_name])

                cell_str = str(cell_val) if cell_val is not None else ""
                col_widths[ci] = min(
                    _MAX_COL_WIDTH,
                    max(col_widths[ci], len(cell_str)),
                )
            self._current_row += 1

        for ci, width in enumerate(col_widths):
            ws.set_column(ci, ci, max(width + 2, _MIN_COL_WIDTH))

        return self

    def finalize(self) -> bytes:
        """Close the workbook and return its bytes content.

        After calling ``finalize`` the exporter instance should not be reused.

        Returns:
            Raw bytes of the ``.xlsx`` file ready for streaming.
        """
        if self._worksheet is None:
            self.add_sheet("Lista de Chequeo")
        self._workbook.close()
        self._buffer.seek(0)
        return self._buffer.read()


# ---------------------------------------------------------------------------
# Checklist rendering
# ---------------------------------------------------------------------------


def _filas_categoria(categoria: CategoriaExportada, max_longitud: int) -> list[list[Any]]:
    return [
        [
            item.numero_item,
            item.etapa or "",
            item.titulo,
            RESPUESTA_LABELS.get(item.respuesta, SIN_RESPUESTA_LABEL),
            normalizar_observaciones(item.observaciones, max_longitud),
        ]
        for item in categoria.items
    ]


def _valor_moneda(valor: float | None) -> str:
    if valor is None:
        return "N/A"
    return f"${valor:,.2f}"


def construir_libro_basico(
    registro: RegistroExportado,
    max_longitud: int = OBSERVACIONES_MAX_LONGITUD,
) -> bytes:
    """Render an aggregated record as a basic workbook, one sheet per category.

    Args:
        registro: Aggregated contract data.
        max_longitud: Maximum observations length, as on the template path.

    Returns:
        Raw bytes of the ``.xlsx`` file.
    """
    contrato = registro.contrato
    exporter = ExcelExporter(
        title="Lista de Chequeo",
        header={
            "Contrato": contrato.numero_contrato,
            "Contratista": contrato.contratista,
            "Valor": _valor_moneda(contrato.valor_contrato),
            "Objeto": contrato.objeto or "N/A",
        },
    )

    for categoria in registro.categorias:
        exporter.add_sheet(categoria.hoja_excel)
        exporter.add_header()
        exporter.add_data_table(COLUMNAS_TABLA, _filas_categoria(categoria, max_longitud))

    contenido = exporter.finalize()
    logger.info(
        "construir_libro_basico: contrato=%s sheets=%d bytes=%d",
        contrato.numero_contrato, len(registro.categorias), len(contenido),
    )
    return contenido
