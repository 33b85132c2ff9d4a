"""
Export service layer.

Coordinates aggregation, template resolution and workbook generation for the
checklist export endpoints, and owns the single fallback state machine that
decides between the official template and the synthetic basic workbook.

States
------
``TEMPLATE_AVAILABLE``          the locator returned template bytes.
``TEMPLATE_UNAVAILABLE``        every template source failed.
``TEMPLATE_FAILED_AT_RUNTIME``  loading, filling or saving the template raised.
``EXPORTED_WITH_TEMPLATE``      terminal, filled template returned.
``EXPORTED_BASIC``              terminal, synthetic workbook returned.

Design notes
------------
- The template path is attempted at most once per request.  Any exception
  while loading, filling or serialising it moves the machine to
  ``TEMPLATE_FAILED_AT_RUNTIME`` and the synthetic path runs once.
- The workbook is serialised completely into memory before a result is
  built, so callers never stream a half-written file.
- If the synthetic path also fails, ``ExportacionError`` propagates.
"""

from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from openpyxl import Workbook
from sqlalchemy.orm import Session

from app.exporters.excel_exporter import construir_libro_basico
from app.exporters.plantilla_writer import ResumenEscritura, llenar_plantilla
from app.schemas.lista_chequeo import ExportMultipleRequest
from app.services import lista_chequeo_service
from app.services.errores import ExportacionError
from app.services.lista_chequeo_service import RegistroExportado
from app.services.plantilla_locator import PlantillaDisponible, PlantillaLocator
from app.utils.constants import OBSERVACIONES_MAX_LONGITUD, XLSX_MEDIA_TYPE

logger = logging.getLogger(__name__)

_NOMBRE_INSEGURO = re.compile(r"[^\w\-]+")


class EstadoExportacion(str, Enum):
    TEMPLATE_AVAILABLE = "TEMPLATE_AVAILABLE"
    TEMPLATE_UNAVAILABLE = "TEMPLATE_UNAVAILABLE"
    TEMPLATE_FAILED_AT_RUNTIME = "TEMPLATE_FAILED_AT_RUNTIME"
    EXPORTED_WITH_TEMPLATE = "EXPORTED_WITH_TEMPLATE"
    EXPORTED_BASIC = "EXPORTED_BASIC"


class EstrategiaExportacion(str, Enum):
    PLANTILLA = "PLANTILLA"
    BASICO = "BASICO"


@dataclass
class ResultadoExportacion:
    """Finished export, ready to be streamed.

    Attributes:
        contenido: Complete ``.xlsx`` bytes.
        nombre_archivo: Download filename.
        estrategia: Which path produced ``contenido``.
        items_respondidos: Category → answered item numbers in the document.
        transiciones: Every state the selector went through, in order.
        resumenes: Per-category write summary (template path only).
        content_type: Media type of ``contenido``.
    """

    contenido: bytes
    nombre_archivo: str
    estrategia: EstrategiaExportacion
    items_respondidos: dict[str, set[int]] = field(default_factory=dict)
    transiciones: list[EstadoExportacion] = field(default_factory=list)
    resumenes: dict[str, ResumenEscritura] = field(default_factory=dict)
    content_type: str = XLSX_MEDIA_TYPE

    @property
    def content_length(self) -> int:
        return len(self.contenido)

    @property
    def estado_final(self) -> EstadoExportacion:
        return self.transiciones[-1]


# ---------------------------------------------------------------------------
# Boundary helpers
# ---------------------------------------------------------------------------


def serializar_workbook(wb: Workbook) -> bytes:
    """Save an openpyxl workbook into a byte string."""
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def generar_nombre_archivo(numero_contrato: str, fecha: date | None = None) -> str:
    """Build a deterministic download filename.

    Args:
        numero_contrato: Contract number; characters outside ``[A-Za-z0-9_-]``
            are replaced by ``_``.
        fecha: Export date, today when omitted.

    Returns:
        Filename string, e.g. ``"Lista_Chequeo_CT-2025-001_2025-03-14.xlsx"``.
    """
    fecha = fecha or date.today()
    seguro = _NOMBRE_INSEGURO.sub("_", numero_contrato.strip()).strip("_") or "CONTRATO"
    return f"Lista_Chequeo_{seguro}_{fecha.isoformat()}.xlsx"


# ---------------------------------------------------------------------------
# Strategy selector
# ---------------------------------------------------------------------------


class SelectorEstrategia:
    """Template-first export with one synthetic fallback.

    Args:
        locator: Template source resolver.
        max_longitud_observaciones: Observations cut-off for the template path.
    """

    def __init__(
        self,
        locator: PlantillaLocator,
        max_longitud_observaciones: int = OBSERVACIONES_MAX_LONGITUD,
    ) -> None:
        self._locator = locator
        self._max_longitud = max_longitud_observaciones

    def exportar(self, registro: RegistroExportado, fecha: date | None = None) -> ResultadoExportacion:
        """Produce the workbook for ``registro``.

        Raises:
            ExportacionError: If the synthetic fallback fails as well.
        """
        transiciones: list[EstadoExportacion] = []
        nombre = generar_nombre_archivo(registro.contrato.numero_contrato, fecha)

        plantilla = self._locator.localizar()
        if isinstance(plantilla, PlantillaDisponible):
            self._transicion(transiciones, EstadoExportacion.TEMPLATE_AVAILABLE, registro)
            try:
                wb, resumenes = llenar_plantilla(plantilla.contenido, registro, self._max_longitud)
                contenido = serializar_workbook(wb)
            except Exception as exc:
                logger.exception(
                    "exportar: template fill failed (source=%s %s): %s",
                    plantilla.fuente.value, plantilla.ubicacion, exc,
                )
                self._transicion(transiciones, EstadoExportacion.TEMPLATE_FAILED_AT_RUNTIME, registro)
            else:
                self._transicion(transiciones, EstadoExportacion.EXPORTED_WITH_TEMPLATE, registro)
                return ResultadoExportacion(
                    contenido=contenido,
                    nombre_archivo=nombre,
                    estrategia=EstrategiaExportacion.PLANTILLA,
                    items_respondidos=_respondidos_escritos(registro, resumenes),
                    transiciones=transiciones,
                    resumenes=resumenes,
                )
        else:
            self._transicion(transiciones, EstadoExportacion.TEMPLATE_UNAVAILABLE, registro)

        try:
            contenido = construir_libro_basico(registro, self._max_longitud)
        except Exception as exc:
            logger.exception("exportar: basic workbook failed: %s", exc)
            raise ExportacionError("No fue posible generar el archivo Excel.") from exc

        self._transicion(transiciones, EstadoExportacion.EXPORTED_BASIC, registro)
        return ResultadoExportacion(
            contenido=contenido,
            nombre_archivo=nombre,
            estrategia=EstrategiaExportacion.BASICO,
            items_respondidos=registro.items_respondidos,
            transiciones=transiciones,
        )

    @staticmethod
    def _transicion(
        transiciones: list[EstadoExportacion],
        estado: EstadoExportacion,
        registro: RegistroExportado,
    ) -> None:
        transiciones.append(estado)
        log = logger.warning if estado in (
            EstadoExportacion.TEMPLATE_UNAVAILABLE,
            EstadoExportacion.TEMPLATE_FAILED_AT_RUNTIME,
        ) else logger.info
        log("exportar: contrato=%s -> %s", registro.contrato.numero_contrato, estado.value)


def _respondidos_escritos(
    registro: RegistroExportado,
    resumenes: dict[str, ResumenEscritura],
) -> dict[str, set[int]]:
    return {
        categoria: set(resumen.escritos)
        for categoria, resumen in resumenes.items()
    } | {
        c.categoria: set() for c in registro.categorias if c.categoria not in resumenes
    }


# ---------------------------------------------------------------------------
# Public export functions
# ---------------------------------------------------------------------------


def exportar_registro(
    db: Session,
    registro_id: int,
    selector: SelectorEstrategia,
) -> ResultadoExportacion:
    """Export a stored contract record.

    Raises:
        RegistroNoEncontradoError: If the record does not exist.
        AlmacenDatosError: If the data store cannot be read.
        ExportacionError: If no workbook could be produced.
    """
    registro = lista_chequeo_service.agregar_registro(db, registro_id)
    return selector.exportar(registro)


def exportar_solicitud(
    db: Session,
    solicitud: ExportMultipleRequest,
    selector: SelectorEstrategia,
) -> ResultadoExportacion:
    """Export answers supplied in a multi-category request body.

    Raises:
        CategoriaDesconocidaError: If the body names an unknown category.
        AlmacenDatosError: If the data store cannot be read.
        ExportacionError: If no workbook could be produced.
    """
    registro = lista_chequeo_service.agregar_desde_solicitud(db, solicitud)
    return selector.exportar(registro)
